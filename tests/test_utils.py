import datetime as dt
import json
import logging

import pytest

from clippings.utils import JsonFormatter, duplicate_hash, parse_datetime_safe, validate_config

UTC = dt.timezone.utc


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2024-03-01T10:00:00Z", dt.datetime(2024, 3, 1, 10, tzinfo=UTC)),
        ("Fri, 01 Mar 2024 10:00:00 +0000", dt.datetime(2024, 3, 1, 10, tzinfo=UTC)),
        ("Friday, March 1, 2024 10:00:00 AM", dt.datetime(2024, 3, 1, 10, tzinfo=UTC)),
        ("Friday, March 1, 2024 10:00:00 PM", dt.datetime(2024, 3, 1, 22, tzinfo=UTC)),
        ("", None),
        ("not a date", None),
    ],
)
def test_parse_datetime_safe(raw, expected):
    assert parse_datetime_safe(raw) == expected


def test_duplicate_hash_normalizes_case_and_whitespace():
    assert duplicate_hash(" Book ", "10-12", "Text. ") == duplicate_hash("book", "10-12", "text.")
    assert duplicate_hash("book", "10-12", "text") != duplicate_hash("book", "10-13", "text")


def test_json_formatter_emits_one_json_object():
    record = logging.LogRecord("clippings.test", logging.INFO, __file__, 1, "kept=%d", (3,), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "INFO"
    assert payload["msg"] == "kept=3"
    assert payload["ts"].endswith("Z")


def test_validate_config():
    validate_config({"processing": {"merge_mode": "flag", "exclude_types": ["bookmark"]}})
    with pytest.raises(ValueError, match="Config validation error"):
        validate_config({"processing": {"merge_mode": "squash"}})
    with pytest.raises(ValueError):
        validate_config({"processing": {"no_such_option": True}})
