from __future__ import annotations

import json
import logging
import os

# LogRecord ``extra`` fields the registry attaches to its records
EVENT_FIELDS = (
    "event_name",
    "instructions_total",
    "instruction",
    "outcome",
    "error_category",
    "latency_ms",
)

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class JsonFormatter(logging.Formatter):
    """Very small JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - short
        payload = {
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
        }
        for field in EVENT_FIELDS:
            value = getattr(record, field, None)
            # ErrorCategory members serialize as their plain value
            payload[field] = getattr(value, "value", value)
        return json.dumps(payload, default=str)


def configure_logging(level: str | int | None = None, fmt: str | None = None) -> None:
    """Configure root logging for the registry and its host.

    ``level`` falls back to ``LOG_LEVEL`` and ``fmt`` to ``LOG_FORMAT``.
    ``fmt="json"`` emits one JSON object per record carrying the event
    fields above; anything else gives the plain human readable line.
    """

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = level.upper()
    fmt = (fmt or os.getenv("LOG_FORMAT", "plain")).lower()

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%H:%M:%S"))
    logging.basicConfig(level=level, handlers=[handler], force=True)
