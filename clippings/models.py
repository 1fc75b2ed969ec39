"""Clipping records, processing options and the pipeline result.

Clippings are pydantic models so parsed exports (camelCase JSON) validate at
the boundary; stages treat them as values and return updated copies via
``model_copy``. Options and results are plain dataclasses.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from clippings.rules import DEFAULT_SIMILARITY_THRESHOLD
from clippings.utils import generate_clipping_id, parse_datetime_safe

ClippingType = Literal["highlight", "note", "bookmark", "clip", "article"]
SuspiciousReason = Literal["too_short", "fragment", "incomplete", "overlapping"]

CLIPPING_TYPES: Tuple[str, ...] = ("highlight", "note", "bookmark", "clip", "article")
MERGE_MODES: Tuple[str, ...] = ("merge", "flag")
TAG_CASES: Tuple[str, ...] = ("original", "uppercase", "lowercase")


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(_Model):
    raw: str = ""
    start: int = 0
    end: Optional[int] = None

    @model_validator(mode="after")
    def _check_range(self) -> "Location":
        if self.end is not None and self.end < self.start:
            raise ValueError(f"location end {self.end} precedes start {self.start}")
        return self

    @property
    def stop(self) -> int:
        """End of the range, or the start for single-point locations."""
        return self.end if self.end is not None else self.start


class Clipping(_Model):
    id: str = ""
    title: str
    author: str = ""
    content: str = ""
    type: ClippingType
    page: Optional[int] = None
    location: Location = Field(default_factory=Location)
    date: Optional[dt.datetime] = None
    date_raw: str = ""
    block_index: int = 0

    # Annotations written by the pipeline
    note: Optional[str] = None
    linked_note_id: Optional[str] = None
    linked_highlight_id: Optional[str] = None
    tags: Optional[List[str]] = None
    is_suspicious_highlight: bool = False
    suspicious_reason: Optional[SuspiciousReason] = None
    similarity_score: Optional[float] = None
    possible_duplicate_of: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _keep_raw_date(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("date"), str):
            if not (data.get("dateRaw") or data.get("date_raw")):
                data = {**data, "date_raw": data["date"]}
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[dt.datetime]:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            return parse_datetime_safe(value)
        if isinstance(value, dt.datetime) and value.tzinfo is None:
            return value.replace(tzinfo=dt.timezone.utc)
        return value

    @field_validator("similarity_score")
    @classmethod
    def _check_score(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not 0.0 <= value <= 1.0:
            raise ValueError("similarity_score must be within [0, 1]")
        return value

    @model_validator(mode="after")
    def _fill_id(self) -> "Clipping":
        if not self.id:
            self.id = generate_clipping_id(self.title, self.location.raw, self.type, self.content)
        return self

    @property
    def has_location(self) -> bool:
        return self.location.start > 0

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DateRange(_Model):
    earliest: Optional[dt.datetime] = None
    latest: Optional[dt.datetime] = None

    def widen(self, when: Optional[dt.datetime]) -> None:
        if when is None:
            return
        if self.earliest is None or when < self.earliest:
            self.earliest = when
        if self.latest is None or when > self.latest:
            self.latest = when


class BookStats(_Model):
    title: str
    author: str = ""
    highlights: int = 0
    notes: int = 0
    bookmarks: int = 0
    word_count: int = 0
    date_range: DateRange = Field(default_factory=DateRange)


class ClippingStats(_Model):
    """Library-level summary of a processed clipping set."""

    total: int = 0
    total_highlights: int = 0
    total_notes: int = 0
    total_bookmarks: int = 0
    total_clips: int = 0
    total_books: int = 0
    total_authors: int = 0
    total_words: int = 0
    avg_words_per_highlight: int = 0
    avg_highlights_per_book: int = 0
    date_range: DateRange = Field(default_factory=DateRange)
    books: List[BookStats] = Field(default_factory=list)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class ProcessOptions:
    """Immutable switches and thresholds passed into every stage."""

    remove_duplicates: bool = True
    merge_overlapping: bool = True
    merge_mode: str = "merge"
    merge_notes: bool = True
    extract_tags: bool = False
    tag_case: str = "uppercase"
    consume_linked_notes: bool = False
    remove_unlinked_notes: bool = False
    highlights_only: bool = False
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    exclude_types: Tuple[str, ...] = ()
    exclude_books: Tuple[str, ...] = ()
    only_books: Tuple[str, ...] = ()
    min_content_length: int = 0

    def __post_init__(self):
        if not 0.0 <= float(self.similarity_threshold) <= 1.0:
            raise ValueError(f"similarity_threshold must be within [0, 1], got {self.similarity_threshold}")
        if self.merge_mode not in MERGE_MODES:
            raise ValueError(f"Unknown merge mode: {self.merge_mode}")
        if self.tag_case not in TAG_CASES:
            raise ValueError(f"Unknown tag case: {self.tag_case}")
        unknown = [t for t in self.exclude_types if t not in CLIPPING_TYPES]
        if unknown:
            raise ValueError(f"Unknown clipping types: {unknown}")
        if self.min_content_length < 0:
            raise ValueError("min_content_length must be non-negative")

    @classmethod
    def from_config(cls, processing: Optional[Dict[str, Any]]) -> "ProcessOptions":
        """Build options from the ``processing`` mapping of a config file.

        Unknown keys are ignored; list values become tuples.
        """
        processing = processing or {}
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in processing or processing[f.name] is None:
                continue
            value = processing[f.name]
            if isinstance(value, list):
                value = tuple(value)
            kwargs[f.name] = value
        return cls(**kwargs)


@dataclass
class ProcessResult:
    clippings: List[Clipping] = field(default_factory=list)
    duplicates_removed: int = 0
    merged_highlights: int = 0
    linked_notes: int = 0
    empty_removed: int = 0
    suspicious_flagged: int = 0
    fuzzy_duplicates_flagged: int = 0
    filtered_out: int = 0
    tags_extracted: int = 0
    notes_consumed: int = 0
    stats: Optional[ClippingStats] = None

    def counts(self) -> Dict[str, int]:
        return {
            to_camel(f.name): getattr(self, f.name)
            for f in fields(self)
            if f.name not in ("clippings", "stats")
        }

    def to_dict(self) -> dict:
        out: Dict[str, Any] = {"clippings": [c.to_json() for c in self.clippings]}
        out.update(self.counts())
        if self.stats is not None:
            out["stats"] = self.stats.to_json()
        return out
