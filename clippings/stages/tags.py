"""Turn tag-list notes ("productivity, habits; psychology") into highlight tags."""

from __future__ import annotations

import re
from typing import List, Tuple

from clippings.models import Clipping
from clippings.rules import MAX_TAG_LENGTH, MAX_TAG_SPACES, MIN_TAG_LENGTH
from clippings.utils import get_logger, ordered_union

logger = get_logger(__name__)

_SEPARATORS = re.compile(r"[,;.\n\r]+")
_SENTENCE_WORDS = re.compile(
    r"\b(the|is|are|was|were|have|has|will|would|could|should|does|did)\b", re.IGNORECASE
)


def _clean_tag(part: str, tag_case: str) -> str:
    tag = part.strip().lstrip("#@")
    tag = re.sub(r"[.,;:!?]+$", "", tag)
    tag = re.sub(r"\s+", " ", tag).strip()
    if tag_case == "uppercase":
        return tag.upper()
    if tag_case == "lowercase":
        return tag.lower()
    return tag


def _is_valid_tag(tag: str) -> bool:
    if not MIN_TAG_LENGTH <= len(tag) <= MAX_TAG_LENGTH:
        return False
    if not tag[0].isalpha():
        return False
    if tag.count(" ") > MAX_TAG_SPACES:
        return False
    return not _SENTENCE_WORDS.search(tag)


def extract_tags(note: str, tag_case: str = "lowercase") -> List[str]:
    if not note or not note.strip():
        return []
    seen = set()
    tags: List[str] = []
    for part in _SEPARATORS.split(note.strip()):
        tag = _clean_tag(part, tag_case)
        if _is_valid_tag(tag) and tag.lower() not in seen:
            seen.add(tag.lower())
            tags.append(tag)
    return tags


def extract_tags_from_linked_notes(
    clippings: List[Clipping], *, tag_case: str = "uppercase"
) -> Tuple[List[Clipping], int]:
    extracted = 0
    out: List[Clipping] = []
    for c in clippings:
        if c.type != "highlight" or not c.note:
            out.append(c)
            continue
        found = extract_tags(c.note, tag_case)
        if not found:
            out.append(c)
            continue
        extracted += 1
        out.append(c.model_copy(update={"tags": ordered_union(c.tags, found)}))

    logger.info("tags.extract: highlights_tagged=%d", extracted)
    return out, extracted
