"""Call correlation fields carried by every log record.

The fields live in a ``ContextVar`` holding a read-only mapping, so a call's
operation id follows it into asyncio tasks and never bleeds into a sibling
call running concurrently.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Iterator, Mapping

_EMPTY: Mapping[str, str] = MappingProxyType({})
_CALL_FIELDS: ContextVar[Mapping[str, str]] = ContextVar(
    "api_call_log_context", default=_EMPTY
)


def _with(
    current: Mapping[str, str], values: Mapping[str, object]
) -> Mapping[str, str]:
    """Return ``current`` extended by the non-empty ``values``, stringified."""
    merged = dict(current)
    for key, value in values.items():
        if value is None or value == "":
            continue
        merged[str(key)] = str(value)
    return MappingProxyType(merged)


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound for the current call."""
    return dict(_CALL_FIELDS.get())


def bind_context(**values: object) -> None:
    """Bind fields for the rest of the current context. Empty values are skipped."""
    _CALL_FIELDS.set(_with(_CALL_FIELDS.get(), values))


def clear_context() -> None:
    _CALL_FIELDS.set(_EMPTY)


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind fields for the duration of one block, then restore the previous set."""
    token = _CALL_FIELDS.set(_with(_CALL_FIELDS.get(), values))
    try:
        yield
    finally:
        _CALL_FIELDS.reset(token)
