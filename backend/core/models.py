from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, NamedTuple, Optional


class SizeClass(str, Enum):
    SMALL = "Small"
    LARGE = "Large"


class Cell(NamedTuple):
    """A (row, col) address in the unified 14-row coordinate space."""
    row: int
    col: int


@dataclass(frozen=True)
class Item:
    name: str
    quantity: int
    location: Cell
    size_class: SizeClass
    tags: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def key(self) -> str:
        # Names are unique case-insensitively
        return self.name.lower()


@dataclass(frozen=True)
class ParsedCommand:
    """Item name, optional box size and tags extracted from one info string."""
    item_name: str
    size_class: Optional[SizeClass]
    tags: FrozenSet[str]

    @property
    def resolved_size_class(self) -> SizeClass:
        return self.size_class or SizeClass.SMALL


@dataclass(frozen=True)
class RankedMatch:
    item: Item
    matched_tag_count: int
    confidence: float
