"""Heuristic thresholds shared by the processing stages.

The values are empirical tuning constants for Kindle exports.
"""

# Identity
IDENTITY_CONTENT_PREFIX_LENGTH = 50
IDENTITY_ID_LENGTH = 12

# Merger: max gap between current.end and next.start, in location units
MERGE_GAP_TOLERANCE = 5
# Merger: shared words as a fraction of the smaller word set
MERGE_WORD_OVERLAP = 0.5

# Linker: max |highlight.start - note.start| for the proximity fallback
LINK_MAX_DISTANCE = 10

# Suspicious highlights
GARBAGE_LENGTH = 5
SHORT_LENGTH = 75
VALID_ENDINGS = (".", "!", "?", '"', "”", ")", "]")

# Fuzzy duplicates
DEFAULT_SIMILARITY_THRESHOLD = 0.8
FUZZY_WINDOW = 50

# Tag extraction
MIN_TAG_LENGTH = 2
MAX_TAG_LENGTH = 50
MAX_TAG_SPACES = 3
