"""Link Kindle notes to the highlight they annotate.

Notes are stored as separate entries next to their highlight. A note belongs
to the highlight whose range covers the note's location; failing that, to the
nearest highlight within ``LINK_MAX_DISTANCE`` units. Notes are resolved in
``block_index`` order and a highlight keeps the first note that claims it.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple

from clippings.models import Clipping
from clippings.rules import LINK_MAX_DISTANCE
from clippings.utils import get_logger, normalize_title

logger = get_logger(__name__)

Indexed = Tuple[int, Clipping]


def _covers(highlight: Clipping, position: int) -> bool:
    return highlight.location.start <= position <= highlight.location.stop


def find_highlight_for_note(position: int, candidates: Sequence[Indexed]) -> Optional[Indexed]:
    """Pick the highlight for a note at ``position``.

    ``candidates`` must already be in location order; the first of equally
    good matches wins.
    """
    best: Optional[Indexed] = None
    for cand in candidates:
        h = cand[1]
        if not _covers(h, position):
            continue
        if best is None or abs(h.location.start - position) < abs(best[1].location.start - position):
            best = cand
    if best is not None:
        return best

    best_distance = LINK_MAX_DISTANCE + 1
    for cand in candidates:
        distance = abs(cand[1].location.start - position)
        if distance < best_distance:
            best, best_distance = cand, distance
    return best


def link_notes(clippings: List[Clipping]) -> Tuple[List[Clipping], int]:
    """Cross-reference notes and highlights and embed note text in the highlight.

    Already linked notes and highlights are left alone, so running this twice
    links nothing new.
    """
    by_book: Dict[str, List[Indexed]] = {}
    for idx, c in enumerate(clippings):
        if c.type == "highlight" and c.has_location:
            by_book.setdefault(normalize_title(c.title), []).append((idx, c))
    for entries in by_book.values():
        entries.sort(key=lambda e: (e[1].location.start, e[1].block_index))

    claimed: Set[int] = {idx for entries in by_book.values() for idx, h in entries if h.linked_note_id}
    notes = sorted(
        ((idx, c) for idx, c in enumerate(clippings) if c.type == "note"),
        key=lambda pair: pair[1].block_index,
    )

    updates: Dict[int, dict] = {}
    for note_idx, note in notes:
        if note.linked_highlight_id or not note.has_location:
            continue
        entries = by_book.get(normalize_title(note.title))
        if not entries:
            continue
        free = [e for e in entries if e[0] not in claimed]
        match = find_highlight_for_note(note.location.start, free)
        if match is None:
            continue

        h_idx, highlight = match
        claimed.add(h_idx)
        updates[note_idx] = {"linked_highlight_id": highlight.id}
        updates[h_idx] = {"linked_note_id": note.id, "note": note.content}

    out = [c.model_copy(update=updates[i]) if i in updates else c for i, c in enumerate(clippings)]
    linked = len(updates) // 2
    logger.info("link.notes: linked=%d notes=%d", linked, len(notes))
    return out, linked
