from __future__ import annotations

import json
import logging
import sys

from user_service.utils.logging import _json_formatter

EXPECTED_ROWS = 10
EXPECTED_BATCH_SIZE = 1000
EXPECTED_INSERTED = 3000


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )
    record.rows = EXPECTED_ROWS
    record.operation = "seed"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["rows"] == EXPECTED_ROWS
    assert payload["operation"] == "seed"


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )
    record.extra = {"batch_size": EXPECTED_BATCH_SIZE, "inserted": EXPECTED_INSERTED}

    payload = json.loads(_json_formatter(record))

    assert payload["batch_size"] == EXPECTED_BATCH_SIZE
    assert payload["inserted"] == EXPECTED_INSERTED
    assert "extra" not in payload


def test_json_formatter_includes_exception_text() -> None:
    try:
        raise RuntimeError("disk full")
    except RuntimeError:
        record = logging.LogRecord(
            name="test.logger",
            level=logging.ERROR,
            pathname=__file__,
            lineno=1,
            msg="Seed batch failed",
            args=(),
            exc_info=sys.exc_info(),
        )

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "ERROR"
    assert "RuntimeError: disk full" in payload["exc_info"]
