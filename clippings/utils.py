import os
import re
import json
import hashlib
import datetime as dt
import logging
from logging.handlers import TimedRotatingFileHandler
from jsonschema import validate, Draft202012Validator
from jsonschema.exceptions import ValidationError
from email.utils import parsedate_to_datetime
from typing import Optional, Iterable, Set

from clippings.rules import IDENTITY_CONTENT_PREFIX_LENGTH, IDENTITY_ID_LENGTH

# ---------- Time helpers ----------

def parse_datetime_safe(raw: str) -> Optional[dt.datetime]:
    """Best-effort parsing for clipping timestamps.

    Returns a timezone-aware UTC datetime on success, otherwise ``None``.
    """

    if not raw:
        return None

    raw = raw.strip()

    # Fast path: ISO 8601 (with optional trailing Z and fractional seconds)
    iso_candidate = raw
    if raw.endswith("Z"):
        iso_candidate = raw[:-1] + "+00:00"

    try:
        dt_obj = dt.datetime.fromisoformat(iso_candidate)
        if dt_obj.tzinfo is None:
            dt_obj = dt_obj.replace(tzinfo=dt.timezone.utc)
        return dt_obj.astimezone(dt.timezone.utc)
    except ValueError:
        pass

    # Kindle export formats (English locale)
    for fmt in ("%A, %B %d, %Y %I:%M:%S %p", "%A, %d %B %Y %H:%M:%S", "%Y-%m-%d %H:%M:%S"):
        try:
            dt_obj = dt.datetime.strptime(raw, fmt)
            return dt_obj.replace(tzinfo=dt.timezone.utc)
        except ValueError:
            continue

    # RFC 2822 / email style timestamps
    try:
        dt_obj = parsedate_to_datetime(raw)
        if dt_obj:
            if dt_obj.tzinfo is None:
                dt_obj = dt_obj.replace(tzinfo=dt.timezone.utc)
            return dt_obj.astimezone(dt.timezone.utc)
    except (TypeError, ValueError):
        pass

    return None

# ---------- Text helpers ----------

_PUNCT_RE = re.compile(r"[^\w\s]")

def normalize_title(title: str) -> str:
    return (title or "").strip().lower()

def whitespace_words(text: str) -> Set[str]:
    """Lowercased whitespace-separated words, punctuation kept."""
    return set((text or "").lower().split())

def word_set(text: str) -> Set[str]:
    """Lowercased words with punctuation treated as a separator."""
    return set(_PUNCT_RE.sub(" ", (text or "").lower()).split())

def jaccard_similarity(text1: str, text2: str) -> float:
    """Word-set Jaccard similarity in [0, 1].

    Identical non-empty strings score 1.0; an empty side scores 0.0.
    """
    if not text1 or not text2:
        return 0.0
    if text1 == text2:
        return 1.0

    words1 = word_set(text1)
    words2 = word_set(text2)
    if not words1 or not words2:
        return 0.0

    inter = len(words1 & words2)
    union = len(words1) + len(words2) - inter
    return inter / union if union else 0.0

def ordered_union(*groups: Optional[Iterable[str]]) -> list:
    return list(dict.fromkeys(x for g in groups if g for x in g))

# ---------- Identity ----------

def _sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()

def generate_clipping_id(title: str, location: str, kind: str, content: str) -> str:
    """Deterministic 12-char id: same title/location/type/content prefix, same id."""
    prefix = (content or "")[:IDENTITY_CONTENT_PREFIX_LENGTH].lower().strip()
    key = f"{normalize_title(title)}|{(location or '').strip()}|{kind}|{prefix}"
    return _sha256(key)[:IDENTITY_ID_LENGTH]

def duplicate_hash(title: str, location: str, content: str) -> str:
    key = f"{normalize_title(title)}|{(location or '').strip()}|{(content or '').lower().strip()}"
    return _sha256(key)

# ---------- Config validation ----------

def load_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

def validate_config(cfg: dict):
    here = os.path.dirname(os.path.abspath(__file__))
    schema_path = os.path.join(here, "schemas", "config.schema.json")
    schema = json.loads(load_file(schema_path))
    try:
        validate(instance=cfg, schema=schema, cls=Draft202012Validator)
    except ValidationError as e:
        raise ValueError(f"Config validation error: {e.message} at {list(e.path)}") from e

# ---------- Output writer ----------

def write_output(json_obj: dict, path: str) -> str:
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(json_obj, f, ensure_ascii=False, indent=2)
    return path

# ---------- Logging ----------

_LOGGER_INITIALIZED = False

class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": dt.datetime.fromtimestamp(record.created, dt.timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _build_logger():
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    # File logging only when a directory is configured
    log_dir = os.getenv("LOG_DIR")
    json_mode = os.getenv("LOG_JSON", "false").lower() == "true"

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level, logging.INFO))

    if json_mode:
        fmt = JsonFormatter()
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    ch = logging.StreamHandler()
    ch.setLevel(logger.level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        fh = TimedRotatingFileHandler(os.path.join(log_dir, "clippings.log"), when="D", backupCount=7, encoding="utf-8")
        fh.setLevel(logger.level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    _LOGGER_INITIALIZED = True

def get_logger(name: str = None) -> logging.Logger:
    _build_logger()
    return logging.getLogger(name if name else __name__)
