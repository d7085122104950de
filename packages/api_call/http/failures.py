"""Classification of transport failures into synthetic error items."""

from __future__ import annotations

import asyncio

import httpx

from packages.api_call.envelope import Meta

TIMEOUT = Meta(code="1", description="Timeout")
CANCELED = Meta(code="2", description="Canceled")
UNREACHABLE = Meta(code="3", description="Unreachable")
TRANSPORT_ERROR = Meta(code="4", description="Transport error")


class CallCanceled(Exception):
    """Raised internally when the caller's cancel signal fires."""


def classify_failure(exc: BaseException) -> Meta:
    """Map one transport failure to the error item recorded on the envelope."""
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return TIMEOUT
    if isinstance(exc, CallCanceled):
        return CANCELED
    if isinstance(exc, (httpx.NetworkError, ConnectionError)):
        return UNREACHABLE
    return TRANSPORT_ERROR


# Exceptions the executors absorb into the envelope instead of raising.
TRANSPORT_FAILURES: tuple[type[BaseException], ...] = (
    httpx.RequestError,
    asyncio.TimeoutError,
    TimeoutError,
    ConnectionError,
    CallCanceled,
)
