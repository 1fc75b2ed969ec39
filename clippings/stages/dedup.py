from __future__ import annotations

from typing import Dict, List, Tuple

from clippings.models import Clipping
from clippings.utils import duplicate_hash, get_logger, ordered_union

logger = get_logger(__name__)


def _rescue_tags(keeper: Clipping, dropped: Clipping) -> Clipping:
    if not dropped.tags:
        return keeper
    tags = ordered_union(keeper.tags, dropped.tags)
    if tags == (keeper.tags or []):
        return keeper
    return keeper.model_copy(update={"tags": tags})


def remove_duplicates(clippings: List[Clipping]) -> Tuple[List[Clipping], int]:
    """Drop exact duplicates of (title, location, content); first seen wins.

    Tags carried by a dropped duplicate are merged into the survivor.
    """
    if not clippings:
        return [], 0

    slot_for: Dict[str, int] = {}
    out: List[Clipping] = []

    for c in clippings:
        h = duplicate_hash(c.title, c.location.raw, c.content)
        slot = slot_for.get(h)
        if slot is None:
            slot_for[h] = len(out)
            out.append(c)
        else:
            out[slot] = _rescue_tags(out[slot], c)

    removed = len(clippings) - len(out)
    logger.info("dedup.exact: kept=%d from=%d", len(out), len(clippings))
    return out, removed
