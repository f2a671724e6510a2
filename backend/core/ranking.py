"""Tag and name lookups over a snapshot of stored items."""

from typing import Iterable, List, Sequence

from core.errors import InvalidInput
from core.models import Item, RankedMatch


def split_query(text: str) -> List[str]:
    # "Green motor driver" -> ["green", "motor", "driver"]
    return [word.lower() for word in text.split()]


def rank_by_tags(query_words: Sequence[str], candidates: Iterable[Item]) -> List[RankedMatch]:
    """Rank items by how many of the query words they are tagged with.

    A word counts once per item even if the query repeats it, while the
    confidence denominator is the literal number of query words. Items with
    no matching tag are left out. Ties are ordered by name.
    """
    if not query_words:
        raise InvalidInput("query_words must contain at least one word")
    for word in query_words:
        if not isinstance(word, str) or not word.strip():
            raise InvalidInput(f"invalid query word: {word!r}")

    wanted = {word.strip().lower() for word in query_words}
    total = len(query_words)

    matches = []
    for item in candidates:
        matched = len(wanted & item.tags)
        if matched:
            matches.append(RankedMatch(item=item, matched_tag_count=matched, confidence=matched / total))

    matches.sort(key=lambda m: (-m.matched_tag_count, m.item.key))
    return matches


def match_by_name(query: str, items: Iterable[Item]) -> List[Item]:
    """Case-insensitive starts-with match; exact hits come first."""
    needle = query.strip().lower()
    if not needle:
        return []
    hits = [item for item in items if item.key.startswith(needle)]
    hits.sort(key=lambda item: (item.key != needle, item.key))
    return hits

