"""Logging configuration helpers.

Updates:
    v0.1.0 - 2026-09-14 - Structured JSON logging for enrichment events.
    v0.1.1 - 2026-10-02 - Serialise enum and mapping extras such as artifact origins.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

_configured = False
_handler: logging.Handler | None = None

_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    }
)


class JsonFormatter(logging.Formatter):
    """Formatter that emits one JSON object per log record."""

    def __init__(self, *, service: str | None = None) -> None:
        super().__init__()
        self._service = service

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self._service:
            payload["service"] = self._service

        payload.update(_extract_extra_fields(record))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=_json_default)


def configure_logging(config: dict[str, Any] | None = None, *, service: str | None = None) -> None:
    """Configure application-wide logging with structured JSON output.

    Args:
        config (dict[str, Any] | None): Logging section from ``settings.yaml``.
            Supports ``level`` and ``quiet_loggers`` (names raised to WARNING).
        service (str | None): Application name added to every record.
    """

    global _configured, _handler
    if _configured:
        return

    config = config or {}
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(service=service))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in config.get("quiet_loggers", ["LiteLLM", "httpx"]):
        logging.getLogger(str(name)).setLevel(logging.WARNING)

    _handler = handler
    _configured = True


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if not key.startswith("_") and key not in _RESERVED_ATTRS
    }


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return str(value)


def set_runtime_level(level_name: str) -> None:
    """Adjust logging level at runtime.

    Args:
        level_name (str): Desired logging level name (e.g., ``DEBUG``, ``INFO``).

    Raises:
        ValueError: If the level name is not recognized by the logging module.
    """

    if not level_name:
        return
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {level_name}")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if _handler:
        _handler.setLevel(level)
