"""Logging for api-call: stderr handler plus per-call correlation fields."""

from .config import CallContextFilter, JsonFormatter, PlainFormatter, configure_logging
from .context import bind_context, clear_context, get_context, log_context

__all__ = [
    "CallContextFilter",
    "JsonFormatter",
    "PlainFormatter",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_context",
    "log_context",
]
