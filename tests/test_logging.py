import json
import logging
import sys

from linksaver.logging import _JsonFormatter


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("ingest", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_line_carries_extras() -> None:
    formatter = _JsonFormatter("linksaver", "test")
    line = formatter.format(_record("ingest_failed", stage="validated", reason="bad"))
    payload = json.loads(line)

    assert payload["message"] == "ingest_failed"
    assert payload["logger"] == "ingest"
    assert payload["service"] == "linksaver"
    assert payload["environment"] == "test"
    assert payload["stage"] == "validated"
    assert payload["reason"] == "bad"
    assert payload["timestamp"].endswith("Z")
    assert "args" not in payload


def test_exception_details_and_unserializable_extras() -> None:
    formatter = _JsonFormatter("linksaver", "test")
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "linksaver", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )
    record.path = object()

    payload = json.loads(formatter.format(record))
    assert payload["error"]["class"] == "ValueError"
    assert payload["error"]["message"] == "boom"
    assert "Traceback" in payload["error"]["traceback"]
    assert payload["path"].startswith("<object object")
