"""Typed errors for outbound API calls.

Only configuration and decode problems surface as exceptions. Transport
failures are absorbed into the response envelope by the executors.

The dataclasses are left mutable: context managers built on
``contextlib.contextmanager`` assign ``__traceback__`` while an error
propagates through them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .envelope import ResponseEnvelope


@dataclass(eq=False)
class ApiCallError(Exception):
    """Base error type for API call failures."""

    message: str

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(eq=False)
class RequestConfigurationError(ApiCallError):
    """Request could not be built from the call configuration."""

    method: str = ""
    url: str = ""


@dataclass(eq=False)
class EnvelopeDecodeError(ApiCallError):
    """Successful transport response is not a well-formed envelope."""

    status_code: int = 0
    body: bytes = b""
    offset: int | None = None
    envelope: ResponseEnvelope | None = None


@dataclass(eq=False)
class ItemsDecodeError(ApiCallError):
    """Items region cannot be decoded into the requested shape."""

    target: Any = None


@dataclass(eq=False)
class SelfIdentificationError(ApiCallError):
    """No outbound-facing IPv4 address could be discovered."""
