from __future__ import annotations

from typing import List, Optional, Tuple

from clippings.models import Clipping
from clippings.rules import GARBAGE_LENGTH, SHORT_LENGTH, VALID_ENDINGS
from clippings.utils import get_logger

logger = get_logger(__name__)


def suspicious_reason(content: str) -> Optional[str]:
    """Classify highlight text; first matching rule wins.

    - too_short: fewer than GARBAGE_LENGTH characters (accidental tap)
    - fragment: short and starts with a lowercase letter (mid-sentence)
    - incomplete: short and lacks closing punctuation
    """
    text = (content or "").strip()
    if len(text) < GARBAGE_LENGTH:
        return "too_short"
    if len(text) >= SHORT_LENGTH:
        return None
    first = text[0]
    if first.isalpha() and first.islower():
        return "fragment"
    if not text.endswith(VALID_ENDINGS):
        return "incomplete"
    return None


def flag_suspicious(clippings: List[Clipping]) -> Tuple[List[Clipping], int]:
    """Mark likely accidental highlights for review; nothing is removed.

    Highlights already flagged (e.g. ``overlapping``) keep their reason.
    """
    flagged = 0
    out: List[Clipping] = []
    for c in clippings:
        reason = None
        if c.type == "highlight" and not c.is_suspicious_highlight:
            reason = suspicious_reason(c.content)
        if reason is None:
            out.append(c)
            continue
        flagged += 1
        out.append(c.model_copy(update={"is_suspicious_highlight": True, "suspicious_reason": reason}))

    logger.info("quality.suspicious: flagged=%d from=%d", flagged, len(clippings))
    return out, flagged
