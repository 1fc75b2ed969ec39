import os
import time
import uuid
import json
from pathlib import Path
from typing import Dict, Any, List, Optional, Sequence

import yaml
from pydantic import TypeAdapter

from clippings.models import Clipping, ProcessOptions, ProcessResult
from clippings.stages.dedup import remove_duplicates
from clippings.stages.filtering import (
    filter_clippings,
    filter_to_highlights_only,
    remove_empty,
    remove_linked_notes,
)
from clippings.stages.fuzzy import flag_fuzzy_duplicates
from clippings.stages.linker import link_notes
from clippings.stages.merger import merge_overlapping
from clippings.stages.quality import flag_suspicious
from clippings.stages.stats import calculate_stats
from clippings.stages.tags import extract_tags_from_linked_notes
from clippings.utils import write_output, validate_config, get_logger

logger = get_logger(__name__)

_CLIPPINGS_ADAPTER = TypeAdapter(List[Clipping])


def process(clippings: Sequence[Clipping], options: Optional[ProcessOptions] = None) -> ProcessResult:
    """Run the post-parse pipeline over already parsed clippings.

    Disabled stages are pass-throughs with a zero count. The suspicious and
    fuzzy-duplicate flaggers always run, and stats are computed on the final
    clipping set.
    """
    opts = options or ProcessOptions()
    result = ProcessResult()
    items = list(clippings)
    t0 = time.monotonic()

    items, result.filtered_out = filter_clippings(
        items,
        exclude_types=opts.exclude_types,
        exclude_books=opts.exclude_books,
        only_books=opts.only_books,
        min_content_length=opts.min_content_length,
    )
    items, result.empty_removed = remove_empty(items)

    if opts.remove_duplicates:
        items, result.duplicates_removed = remove_duplicates(items)

    if opts.merge_overlapping:
        items, result.merged_highlights = merge_overlapping(items, merge=opts.merge_mode == "merge")

    if opts.merge_notes:
        items, result.linked_notes = link_notes(items)

    if opts.extract_tags:
        items, result.tags_extracted = extract_tags_from_linked_notes(items, tag_case=opts.tag_case)

    items, result.suspicious_flagged = flag_suspicious(items)
    items, result.fuzzy_duplicates_flagged = flag_fuzzy_duplicates(items, threshold=opts.similarity_threshold)

    if opts.consume_linked_notes:
        items, result.notes_consumed = remove_linked_notes(items, remove_unlinked=opts.remove_unlinked_notes)

    if opts.highlights_only:
        items, dropped = filter_to_highlights_only(items)
        result.filtered_out += dropped

    result.clippings = items
    result.stats = calculate_stats(items)
    logger.info(
        "processed clippings=%d from=%d took_ms=%d counts=%s",
        len(items),
        len(clippings),
        int((time.monotonic() - t0) * 1000),
        result.counts(),
    )
    return result


def load_clippings(path: str) -> List[Clipping]:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if isinstance(raw, dict):
        raw = raw.get("clippings", [])
    return _CLIPPINGS_ADAPTER.validate_python(raw)


def _apply_overrides(cfg: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> None:
    if not overrides:
        return
    processing = cfg.setdefault("processing", {})
    for key, value in overrides.items():
        if value is not None:
            processing[key] = value


def _default_output(input_path: str) -> str:
    p = Path(input_path)
    return str(p.with_name(f"{p.stem}.processed.json"))


def run_once(
    input_path: str,
    *,
    config_path: Optional[str] = None,
    output_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ProcessResult:
    """Load clippings and config, process, and write the JSON result."""
    run_id = uuid.uuid4().hex[:8]
    logger.info("=== run start id=%s ===", run_id)

    try:
        cfg: Dict[str, Any] = {}
        if config_path:
            with open(config_path, "r", encoding="utf-8") as f:
                cfg = yaml.safe_load(f) or {}
        _apply_overrides(cfg, overrides)
        validate_config(cfg)
        options = ProcessOptions.from_config(cfg.get("processing"))
        logger.info("config loaded path=%s options=%s", config_path or "-", options)

        t0 = time.monotonic()
        clippings = load_clippings(input_path)
        logger.info("loaded clippings=%d took_ms=%d", len(clippings), int((time.monotonic() - t0) * 1000))

        result = process(clippings, options)

        out_path = output_path or cfg.get("output", {}).get("path") or _default_output(input_path)
        write_output(result.to_dict(), out_path)
        logger.info("output written path=%s", os.path.abspath(out_path))
        return result

    except Exception as e:
        logger.error("Pipeline execution failed: %s", e)
        raise
    finally:
        logger.info("=== run end id=%s ===", run_id)
