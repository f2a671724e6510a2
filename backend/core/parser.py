"""
Free-text insert command parsing.

An info string looks like one of:
- "<item name>"
- "<item name> into a <small box|big box> with tags <tag0 tag1 ...>"
- "<item name> with tags <tag0 tag1 ...> into a <small box|big box>"

Markers are searched in the lower-cased string; the item name is cut from the
original string so its casing survives.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterator, Optional, Tuple

from core.models import ParsedCommand, SizeClass

BOX_PREFIXES = ("into a", "in a")
BOX_SIZES = (
    ("big", SizeClass.LARGE),
    ("large", SizeClass.LARGE),
    ("small", SizeClass.SMALL),
    ("little", SizeClass.SMALL),
)
BOX_NAMES = ("box", "container")

TAGS_MARKER = " with tags "


@dataclass(frozen=True)
class BoxMarker:
    start: int
    size_class: SizeClass


def box_marker_templates() -> Iterator[Tuple[str, SizeClass]]:
    """Yield every box phrase in priority order."""
    for prefix in BOX_PREFIXES:
        for size_word, size_class in BOX_SIZES:
            for box_name in BOX_NAMES:
                yield f" {prefix} {size_word} {box_name}", size_class


class TextSpanFinder:
    """Locates the fixed marker phrases inside a lower-cased info string."""

    def __init__(self, text: str):
        self.text = text

    def find_box_marker(self) -> Optional[BoxMarker]:
        # The first template found anywhere wins, even if a lower-priority
        # template occurs earlier in the string.
        for phrase, size_class in box_marker_templates():
            index = self.text.find(phrase)
            if index != -1:
                return BoxMarker(start=index, size_class=size_class)
        return None

    def find_tags_marker(self) -> Optional[int]:
        index = self.text.find(TAGS_MARKER)
        return index if index != -1 else None

    def tag_span(self, tags_start: int, box: Optional[BoxMarker]) -> str:
        span_start = tags_start + len(TAGS_MARKER)
        if box is not None and tags_start < box.start:
            return self.text[span_start:box.start]
        return self.text[span_start:]


def fold_case(text: str) -> str:
    """Lower-case without changing the length, so indices map back onto the input."""
    return "".join(c.lower() if len(c.lower()) == 1 else c for c in text)


def split_words(text: str) -> FrozenSet[str]:
    return frozenset(word.lower() for word in text.split())


def _name_end(length: int, box: Optional[BoxMarker], tags_start: Optional[int]) -> int:
    if box is not None and tags_start is not None:
        return tags_start if tags_start < box.start else box.start
    if box is not None:
        return box.start
    if tags_start is not None:
        return tags_start
    return length


def parse_command(info: str) -> ParsedCommand:
    """Split an insert info string into item name, box size and tags.

    Never fails on free text: missing markers simply mean "not specified".
    The returned tags always include every word of the item name.
    """
    finder = TextSpanFinder(fold_case(info))

    box = finder.find_box_marker()
    tags_start = finder.find_tags_marker()

    explicit_tags: FrozenSet[str] = frozenset()
    if tags_start is not None:
        explicit_tags = split_words(finder.tag_span(tags_start, box))

    item_name = info[:_name_end(len(info), box, tags_start)].strip()

    return ParsedCommand(
        item_name=item_name,
        size_class=box.size_class if box else None,
        tags=explicit_tags | split_words(item_name),
    )
