from __future__ import annotations

from typing import Dict, List, Set, Tuple

from clippings.models import Clipping
from clippings.rules import DEFAULT_SIMILARITY_THRESHOLD, FUZZY_WINDOW
from clippings.stages.grouping import group_by_book, location_order
from clippings.utils import get_logger, jaccard_similarity

logger = get_logger(__name__)


def flag_fuzzy_duplicates(
    clippings: List[Clipping],
    *,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> Tuple[List[Clipping], int]:
    """Flag near-duplicate highlights within a sliding location window.

    Exact matches (score 1.0) are left to the exact dedup stage. A flagged
    clipping is never used as the source for another flag.
    """
    candidates = [c for c in clippings if c.type == "highlight" and c.has_location]
    flagged: Set[int] = {id(c) for c in candidates if c.possible_duplicate_of}
    flag_map: Dict[int, Tuple[float, str]] = {}
    compared = 0

    for _, book in group_by_book(candidates).items():
        ordered = location_order(book)
        for i, cur in enumerate(ordered):
            if id(cur) in flagged:
                continue
            for other in ordered[i + 1:]:
                # sorted by start, nothing further can be in range
                if other.location.start - cur.location.stop > FUZZY_WINDOW:
                    break
                if id(other) in flagged:
                    continue
                compared += 1
                score = jaccard_similarity(cur.content, other.content)
                if threshold <= score < 1.0:
                    flagged.add(id(other))
                    flag_map[id(other)] = (score, cur.id)

    out: List[Clipping] = []
    for c in clippings:
        hit = flag_map.get(id(c))
        if hit is None:
            out.append(c)
        else:
            out.append(c.model_copy(update={"similarity_score": hit[0], "possible_duplicate_of": hit[1]}))

    logger.info(
        "dedup.fuzzy: flagged=%d compared=%d (thr=%.2f)", len(flag_map), compared, threshold
    )
    return out, len(flag_map)
