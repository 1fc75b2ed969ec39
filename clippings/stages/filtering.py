from __future__ import annotations

from typing import List, Sequence, Tuple

from clippings.models import Clipping
from clippings.utils import get_logger, normalize_title

logger = get_logger(__name__)


def _title_matches(title: str, books: Sequence[str]) -> bool:
    t = normalize_title(title)
    return any(normalize_title(b) in t for b in books)


def filter_clippings(
    clippings: List[Clipping],
    *,
    exclude_types: Sequence[str] = (),
    exclude_books: Sequence[str] = (),
    only_books: Sequence[str] = (),
    min_content_length: int = 0,
) -> Tuple[List[Clipping], int]:
    """Apply type, book and length filters; bookmarks ignore the length filter."""

    def keep(c: Clipping) -> bool:
        if c.type in exclude_types:
            return False
        if min_content_length and c.type != "bookmark" and len(c.content) < min_content_length:
            return False
        if exclude_books and _title_matches(c.title, exclude_books):
            return False
        if only_books and not _title_matches(c.title, only_books):
            return False
        return True

    out = [c for c in clippings if keep(c)]
    logger.info("filter.criteria: kept=%d from=%d", len(out), len(clippings))
    return out, len(clippings) - len(out)


def remove_empty(clippings: List[Clipping]) -> Tuple[List[Clipping], int]:
    out = [c for c in clippings if c.type == "bookmark" or c.content.strip()]
    logger.info("filter.empty: kept=%d from=%d", len(out), len(clippings))
    return out, len(clippings) - len(out)


def remove_linked_notes(clippings: List[Clipping], *, remove_unlinked: bool = False) -> Tuple[List[Clipping], int]:
    """Drop notes whose text is already embedded in a highlight.

    With ``remove_unlinked`` the notes no highlight claimed are dropped too.
    """

    def consumed(c: Clipping) -> bool:
        return c.type == "note" and (remove_unlinked or bool(c.linked_highlight_id))

    out = [c for c in clippings if not consumed(c)]
    logger.info("filter.linked_notes: kept=%d from=%d unlinked=%s", len(out), len(clippings), remove_unlinked)
    return out, len(clippings) - len(out)


def filter_to_highlights_only(clippings: List[Clipping]) -> Tuple[List[Clipping], int]:
    out = [c for c in clippings if c.type == "highlight"]
    logger.info("filter.highlights_only: kept=%d from=%d", len(out), len(clippings))
    return out, len(clippings) - len(out)
