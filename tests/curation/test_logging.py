import json
import logging
import sys

from curation.settings import reset_settings_cache
from curation.utils.logging import JsonFormatter, configure_logging, configure_logging_from_settings


def test_json_formatter_merges_extra_fields():
    record = logging.LogRecord("curation.test", logging.INFO, __file__, 1, "aggregate.done", None, None)
    record.trace_id = "t-1"
    record.returned = 3

    payload = json.loads(JsonFormatter().format(record))

    assert payload["event"] == "aggregate.done"
    assert payload["level"] == "INFO"
    assert payload["trace_id"] == "t-1"
    assert payload["returned"] == 3
    assert "levelno" not in payload


def test_configure_logging_replaces_handlers():
    configure_logging("DEBUG", json_enabled=True)
    configure_logging("WARNING", json_enabled=True)

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)


def test_configure_logging_from_settings(monkeypatch):
    monkeypatch.setenv("STRUCTLOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "false")
    reset_settings_cache()

    configure_logging_from_settings()

    root = logging.getLogger()
    assert root.level == logging.ERROR
    assert not isinstance(root.handlers[0].formatter, JsonFormatter)
    configure_logging("INFO")


def test_unknown_level_falls_back_to_info():
    configure_logging("chatty")

    assert logging.getLogger().level == logging.INFO


def test_json_formatter_includes_exception_text():
    try:
        raise ValueError("bad row")
    except ValueError:
        record = logging.LogRecord(
            "curation.test", logging.ERROR, __file__, 1, "aggregate.aborted", None, sys.exc_info()
        )
    record.registered = ("a", "b")

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: bad row" in payload["exc_info"]
    assert payload["registered"] == ["a", "b"]
