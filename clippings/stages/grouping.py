from __future__ import annotations

from typing import Dict, Iterable, List

from clippings.models import Clipping
from clippings.utils import normalize_title


def group_by_book(clippings: Iterable[Clipping]) -> Dict[str, List[Clipping]]:
    """Partition clippings by lowercased title, keeping input order in each group."""
    groups: Dict[str, List[Clipping]] = {}
    for c in clippings:
        groups.setdefault(normalize_title(c.title), []).append(c)
    return groups


def location_order(clippings: Iterable[Clipping]) -> List[Clipping]:
    return sorted(clippings, key=lambda c: (c.location.start, c.block_index))
