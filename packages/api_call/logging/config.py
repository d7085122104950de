"""Log handler setup for api-call.

Records go to stderr so the envelope printed on stdout stays machine-readable.
Each record carries the bound call fields plus any ``extra={"call": {...}}``
fields passed at the log site.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

from . import fields
from .context import bind_context, get_context

# Third-party loggers that narrate every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")

_HANDLER_NAME = "api-call"


def _call_fields(record: logging.LogRecord) -> dict[str, str]:
    return getattr(record, "call_fields", {})


class CallContextFilter(logging.Filter):
    """Attach bound call fields and per-record ``call`` extras as ``call_fields``."""

    def filter(self, record: logging.LogRecord) -> bool:
        merged = get_context()
        extra = getattr(record, "call", None)
        if isinstance(extra, dict):
            merged.update({key: str(value) for key, value in extra.items()})
        record.call_fields = merged
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; call fields sit beside the core keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
            **_call_fields(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Single-line text followed by sorted ``key=value`` call fields."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        call = _call_fields(record)
        if not call:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(call.items()))
        return f"{line} {pairs}"


def configure_logging(
    *,
    level: str = "WARNING",
    json_output: bool = False,
    service: str | None = None,
    environment: str | None = None,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install the api-call handler on the root logger and return it.

    A handler installed by an earlier call is replaced; handlers added by
    anything else are left alone. ``httpx`` and ``httpcore`` are held at
    WARNING unless ``level`` is DEBUG.
    """
    level = level.upper()
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler(stream=stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.addFilter(CallContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())
    root.addHandler(handler)
    root.setLevel(level)

    chatty_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)

    bind_context(**{fields.SERVICE: service, fields.ENVIRONMENT: environment})
    return handler
