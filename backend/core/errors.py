class InvalidInput(ValueError):
    """Raised when a core operation receives arguments it cannot work with."""


class DuplicateItem(Exception):
    """An item with the same name (ignoring case) is already stored."""


class CellTaken(Exception):
    """The storage already holds an item in the chosen box."""
