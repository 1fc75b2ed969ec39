"""Overlap-aware merging of extended or reselected highlights.

Extending a highlight on a Kindle appends a *new* record instead of updating
the old one, so one evolving highlight shows up as several overlapping
entries. Within a book, highlights are scanned in location order and each one
is compared against a running accumulator; related neighbours are fused (merge
mode) or the shorter one is flagged as ``overlapping`` (flag mode).
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from clippings.models import Clipping, Location
from clippings.rules import MERGE_GAP_TOLERANCE, MERGE_WORD_OVERLAP
from clippings.stages.grouping import group_by_book, location_order
from clippings.utils import get_logger, normalize_title, ordered_union, whitespace_words

logger = get_logger(__name__)


def can_merge(a: Clipping, b: Clipping) -> bool:
    """True when ``b`` (sorted after ``a``) looks like a reselection of ``a``."""
    if not (a.has_location and b.has_location):
        return False
    if normalize_title(a.title) != normalize_title(b.title):
        return False
    if b.location.start > a.location.stop + MERGE_GAP_TOLERANCE:
        return False

    a_text = a.content.lower()
    b_text = b.content.lower()
    if a_text in b_text or b_text in a_text:
        return True

    a_words = whitespace_words(a_text)
    b_words = whitespace_words(b_text)
    min_size = min(len(a_words), len(b_words))
    return min_size > 0 and len(a_words & b_words) >= min_size * MERGE_WORD_OVERLAP


def _later(a: Clipping, b: Clipping) -> Optional[Clipping]:
    if a.date is None and b.date is None:
        return None
    if b.date is None or (a.date is not None and a.date >= b.date):
        return a
    return b


def merge_pair(a: Clipping, b: Clipping) -> Clipping:
    """Fuse two highlights; the longer content (``a`` on ties) is the base."""
    base, other = (a, b) if len(a.content) >= len(b.content) else (b, a)

    start = min(a.location.start, b.location.start)
    end = max(a.location.stop, b.location.stop)
    dated = _later(a, b) or base
    tags = ordered_union(a.tags, b.tags) if (a.tags or b.tags) else base.tags

    return base.model_copy(
        update={
            "location": Location(raw=f"{start}-{end}", start=start, end=end),
            "date": dated.date,
            "date_raw": dated.date_raw,
            "block_index": min(a.block_index, b.block_index),
            "tags": tags,
            "note": base.note or other.note,
        }
    )


def _flag_redundant(redundant: Clipping, keeper: Clipping) -> Clipping:
    return redundant.model_copy(
        update={
            "is_suspicious_highlight": True,
            "suspicious_reason": "overlapping",
            "possible_duplicate_of": keeper.id,
        }
    )


def _scan_book(highlights: List[Clipping], merge: bool) -> Tuple[List[Clipping], int]:
    out: List[Clipping] = []
    count = 0
    current: Optional[Clipping] = None

    for nxt in location_order(highlights):
        if current is None:
            current = nxt
            continue
        if not can_merge(current, nxt):
            out.append(current)
            current = nxt
            continue

        if merge:
            count += 1
            current = merge_pair(current, nxt)
            continue

        keep_current = len(current.content) >= len(nxt.content)
        keeper, redundant = (current, nxt) if keep_current else (nxt, current)
        if redundant.possible_duplicate_of == keeper.id:
            out.append(redundant)
        else:
            count += 1
            out.append(_flag_redundant(redundant, keeper))
        current = keeper

    if current is not None:
        out.append(current)
    return out, count


def merge_overlapping(clippings: List[Clipping], *, merge: bool = True) -> Tuple[List[Clipping], int]:
    """Merge (or flag) overlapping highlights per book.

    Non-highlights pass through untouched. Merge mode rescans each book until
    a pass merges nothing, so the output is stable under a second run. The
    result is ordered by ``block_index``; the count is merges performed or
    pairs newly flagged.
    """
    highlights = [c for c in clippings if c.type == "highlight"]
    others = [c for c in clippings if c.type != "highlight"]

    scanned: List[Clipping] = []
    total = 0
    for _, book in group_by_book(highlights).items():
        out, count = _scan_book(book, merge)
        total += count
        # a grown accumulator can now absorb a record emitted before it
        while merge and count:
            out, count = _scan_book(out, merge)
            total += count
        scanned.extend(out)

    result = sorted(scanned + others, key=lambda c: c.block_index)
    logger.info(
        "merge.overlapping: mode=%s %s=%d highlights=%d",
        "merge" if merge else "flag",
        "merged" if merge else "flagged",
        total,
        len(highlights),
    )
    return result, total
