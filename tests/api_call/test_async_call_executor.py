"""Tests for the asynchronous call executor."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from packages.api_call.errors import EnvelopeDecodeError
from packages.api_call.http import AsyncCallExecutor, CallConfig
from packages.api_call.identity import Identity

ECHO_BODY = '{"auditInfo":{},"items":[{"echo":"Hello World"}],"interfaceSettings":{}}'


def _slow(delay: float):
    """Return an async handler that answers only after ``delay`` seconds."""

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(delay)
        return httpx.Response(200, text=ECHO_BODY, request=request)

    return handler


def test_async_send_returns_ok_envelope(identity: Identity, fixed_clock) -> None:
    """A fast 200 with items yields an ok envelope."""

    async def run():
        transport = httpx.MockTransport(_slow(0))
        executor = AsyncCallExecutor(
            identity=identity, transport=transport, clock=fixed_clock
        )
        async with executor:
            return await executor.send(
                CallConfig(url="http://api.test/echo", timeout_seconds=5)
            )

    envelope = asyncio.run(run())

    assert envelope.ok is True
    assert envelope.operation_id == "0b00fff8ca0e86cb772c7ef037c6713d"
    assert envelope.get_items(list[dict[str, str]]) == [{"echo": "Hello World"}]


def test_async_deadline_covers_whole_exchange(identity: Identity) -> None:
    """A server slower than the deadline yields a Timeout item."""

    async def run():
        transport = httpx.MockTransport(_slow(5))
        executor = AsyncCallExecutor(identity=identity, transport=transport)
        async with executor:
            return await executor.send(
                CallConfig(url="http://api.test/slow", timeout_seconds=0.05)
            )

    envelope = asyncio.run(run())

    assert envelope.ok is False
    assert envelope.status_code == 0
    assert str(envelope.errors) == "[1]: Timeout"
    assert envelope.audit.duration < 5


def test_async_cancel_event_interrupts_in_flight_call(identity: Identity) -> None:
    """Setting the cancel event mid-flight yields a Canceled item."""

    async def run():
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, cancel.set)
        transport = httpx.MockTransport(_slow(5))
        executor = AsyncCallExecutor(identity=identity, transport=transport)
        async with executor:
            return await executor.send(
                CallConfig(url="http://api.test/slow"), cancel=cancel
            )

    envelope = asyncio.run(run())

    assert envelope.ok is False
    assert str(envelope.errors) == "[2]: Canceled"
    assert envelope.audit.duration < 5


def test_async_unset_cancel_event_does_not_interfere(identity: Identity) -> None:
    """An event that never fires leaves the response untouched."""

    async def run():
        transport = httpx.MockTransport(_slow(0))
        executor = AsyncCallExecutor(identity=identity, transport=transport)
        async with executor:
            return await executor.send(
                CallConfig(url="http://api.test/echo"), cancel=asyncio.Event()
            )

    envelope = asyncio.run(run())

    assert envelope.ok is True


def test_async_decode_failure_raises(identity: Identity) -> None:
    """Malformed bodies raise just like the synchronous executor."""

    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html/>", request=request)

    async def run():
        transport = httpx.MockTransport(handler)
        executor = AsyncCallExecutor(identity=identity, transport=transport)
        async with executor:
            return await executor.send(CallConfig(url="http://api.test/echo"))

    with pytest.raises(EnvelopeDecodeError) as exc_info:
        asyncio.run(run())

    assert exc_info.value.envelope is not None
    assert exc_info.value.envelope.status_code == 200
