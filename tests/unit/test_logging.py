from __future__ import annotations

import json
import logging

from layoffs.utils.logging import _json_formatter

EXPECTED_ROWS_IN = 2361
EXPECTED_UNRESOLVED = 3


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_extra_fields() -> None:
    record = _record("[STAGE START] dedup")
    record.rows_in = EXPECTED_ROWS_IN
    record.stage = "dedup"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "[STAGE START] dedup"
    assert payload["rows_in"] == EXPECTED_ROWS_IN
    assert payload["stage"] == "dedup"
    assert "lineno" not in payload


def test_json_formatter_supports_nested_extra_field() -> None:
    record = _record()
    record.extra = {"unresolved": EXPECTED_UNRESOLVED}

    payload = json.loads(_json_formatter(record))

    assert payload["unresolved"] == EXPECTED_UNRESOLVED


def test_json_formatter_stringifies_non_json_values() -> None:
    record = _record()
    record.path = __import__("pathlib").Path("/tmp/x.csv")

    payload = json.loads(_json_formatter(record))

    assert payload["path"] == "/tmp/x.csv"
