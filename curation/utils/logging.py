"""Root logger setup: plain text by default, one JSON object per line when enabled.

Aggregation events are logged as ``logger.info("aggregate.done", extra={...})``;
the JSON formatter lifts those ``extra`` fields to top-level keys.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Tuple

from curation.settings import Settings, get_settings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})

# Attributes every LogRecord carries; anything else arrived through ``extra``
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    for key, value in vars(record).items():
        if key not in _STANDARD_ATTRS and not key.startswith("_"):
            yield key, value


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for key, value in _extra_fields(record):
            payload.setdefault(key, value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_handler(json_enabled: bool) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_enabled else logging.Formatter(TEXT_FORMAT))
    return handler


def configure_logging(level_name: str = "INFO", json_enabled: bool = False) -> None:
    """Install a single stream handler on the root logger.

    Calling this again replaces the previous handler instead of stacking a
    second one. Unknown level names fall back to INFO.
    """
    name = level_name.upper()
    root = logging.getLogger()
    root.setLevel(name if name in _LEVELS else logging.INFO)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(_build_handler(json_enabled))


def configure_logging_from_settings(settings: Settings | None = None) -> None:
    """Apply STRUCTLOG_LEVEL / LOG_JSON from settings to the root logger."""
    config = settings or get_settings()
    configure_logging(config.structlog_level, json_enabled=config.log_json)
