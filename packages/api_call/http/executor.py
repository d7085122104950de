"""Single-request executors that always answer with a response envelope.

Transport failures (timeouts, cancellation, unreachable hosts) never
propagate: they are recorded as error items on the returned envelope.
Only request-building problems and malformed successful responses raise.
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import UTC, datetime

import httpx

from packages.api_call.envelope import (
    ResponseEnvelope,
    skeleton,
    with_duration,
    with_error,
    with_response,
)
from packages.api_call.errors import EnvelopeDecodeError, RequestConfigurationError
from packages.api_call.identity import Identity
from packages.api_call.logging import fields, log_context

from .call_config import CallConfig
from .decode import decode_envelope
from .failures import TRANSPORT_FAILURES, CallCanceled, classify_failure

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_METHOD_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_SUPPORTED_SCHEMES = frozenset({"http", "https"})


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_skeleton(identity: Identity, clock: Clock) -> ResponseEnvelope:
    """Stamp audit fields and the operation id before dispatch."""
    return skeleton(
        host=identity.resolve_hostname(),
        client_ip=identity.resolve_client_ip(),
        timestamp=clock(),
    )


def _call_context(envelope: ResponseEnvelope) -> dict[str, str]:
    return {
        fields.OPERATION_ID: envelope.operation_id,
        fields.HOST: envelope.audit.host,
        fields.CLIENT_IP: envelope.audit.client_ip,
    }


def _request_timeout(config: CallConfig) -> httpx.Timeout:
    """Return the httpx timeout, unbounded when no deadline is configured."""
    if config.has_deadline:
        return httpx.Timeout(config.timeout_seconds)
    return httpx.Timeout(None)


def build_request(
    client: httpx.Client | httpx.AsyncClient, config: CallConfig
) -> httpx.Request:
    """Build the outbound request or raise ``RequestConfigurationError``."""
    method = config.method.strip().upper()
    target = config.target_url
    if not _METHOD_TOKEN.match(method):
        raise RequestConfigurationError(
            message=f"invalid method {config.method!r}",
            method=config.method,
            url=target,
        )
    try:
        url = httpx.URL(target)
    except httpx.InvalidURL as exc:
        raise RequestConfigurationError(
            message=f"invalid url {target!r}: {exc}",
            method=method,
            url=target,
        ) from exc
    if url.scheme not in _SUPPORTED_SCHEMES or not url.host:
        raise RequestConfigurationError(
            message=f"unsupported protocol scheme or missing host in {target!r}",
            method=method,
            url=target,
        )
    return client.build_request(
        method,
        url,
        content=config.body,
        headers=config.request_headers(),
        timeout=_request_timeout(config),
    )


def _check_progress(deadline: float | None, cancel: threading.Event | None) -> None:
    """Raise when cancellation was requested or the call deadline has passed."""
    if cancel is not None and cancel.is_set():
        raise CallCanceled()
    if deadline is not None and time.monotonic() >= deadline:
        raise TimeoutError("call deadline exceeded")


def _read_within(
    response: httpx.Response,
    deadline: float | None,
    cancel: threading.Event | None,
) -> bytes:
    """Read a streamed body, checking deadline and cancellation per chunk."""
    chunks: list[bytes] = []
    _check_progress(deadline, cancel)
    for chunk in response.iter_bytes():
        chunks.append(chunk)
        _check_progress(deadline, cancel)
    return b"".join(chunks)


def _absorb_failure(
    envelope: ResponseEnvelope,
    exc: BaseException,
    config: CallConfig,
    started: float,
) -> ResponseEnvelope:
    """Record a transport failure as an error item and return the envelope."""
    error = classify_failure(exc)
    result = with_duration(
        envelope=with_error(envelope=envelope, error=error),
        duration=time.monotonic() - started,
    )
    logger.info(
        "api call transport failure absorbed: %s",
        error.description,
        extra={
            "call": {
                fields.EVENT: fields.CALL_ABSORBED_FAILURE_EVENT,
                fields.METHOD: config.method.upper(),
                fields.URL: config.target_url,
                fields.ERRORS: str(result.errors),
                "exception_type": type(exc).__name__,
            }
        },
    )
    return result


def _complete(
    envelope: ResponseEnvelope,
    status_code: int,
    body: bytes,
    config: CallConfig,
    started: float,
) -> ResponseEnvelope:
    """Decode a transport-successful response into the envelope."""
    duration = time.monotonic() - started
    try:
        decoded = decode_envelope(body, status_code=status_code)
    except EnvelopeDecodeError as exc:
        partial = envelope.model_copy(
            update={
                "audit": envelope.audit.model_copy(
                    update={"status_code": status_code, "duration": duration}
                )
            }
        )
        logger.warning(
            "api call response could not be decoded: %s",
            exc,
            extra={
                "call": {
                    fields.STATUS_CODE: status_code,
                    fields.URL: config.target_url,
                }
            },
        )
        raise replace(exc, envelope=partial) from exc

    result = with_response(
        envelope=envelope,
        decoded=decoded,
        status_code=status_code,
        duration=duration,
    )
    logger.info(
        "api call completed",
        extra={
            "call": {
                fields.EVENT: fields.CALL_COMPLETED_EVENT,
                fields.METHOD: config.method.upper(),
                fields.URL: config.target_url,
                fields.STATUS_CODE: status_code,
                fields.DURATION_MS: round(duration * 1000, 3),
                fields.OUTCOME: "ok" if result.ok else "not_ok",
            }
        },
    )
    return result


class CallExecutor:
    """Synchronous executor over ``httpx.Client``.

    The configured timeout is a deadline over the whole exchange. The body is
    streamed and the deadline and the optional ``threading.Event`` are checked
    before dispatch and after every chunk read. A connect or a single read
    that blocks is bounded only by the httpx per-phase timeout, which is set
    to the same value, and cannot be interrupted by the event.
    """

    def __init__(
        self,
        *,
        identity: Identity | None = None,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
        clock: Clock = _utc_now,
    ) -> None:
        """Create an executor that owns its client unless one is injected."""
        self._identity = identity or Identity()
        self._clock = clock
        self._owns_client = client is None
        self._client = client or httpx.Client(
            transport=transport, follow_redirects=True
        )

    def close(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> CallExecutor:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def send(
        self, config: CallConfig, *, cancel: threading.Event | None = None
    ) -> ResponseEnvelope:
        """Issue one request and return its envelope.

        Raises ``RequestConfigurationError`` before any network activity when
        the request cannot be built, and ``EnvelopeDecodeError`` when a
        response arrives but is not a well-formed envelope.
        """
        started = time.monotonic()
        envelope = _new_skeleton(self._identity, self._clock)
        request = build_request(self._client, config)
        deadline = started + config.timeout_seconds if config.has_deadline else None

        with log_context(_call_context(envelope)):
            try:
                _check_progress(deadline, cancel)
                response = self._client.send(request, stream=True)
                try:
                    body = _read_within(response, deadline, cancel)
                finally:
                    response.close()
            except TRANSPORT_FAILURES as exc:
                return _absorb_failure(envelope, exc, config, started)
            return _complete(envelope, response.status_code, body, config, started)


class AsyncCallExecutor:
    """Asynchronous executor over ``httpx.AsyncClient``.

    The configured timeout is a deadline over the whole exchange, headers
    and body included. An optional ``asyncio.Event`` cancels the in-flight
    request as soon as it is set.
    """

    def __init__(
        self,
        *,
        identity: Identity | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
        clock: Clock = _utc_now,
    ) -> None:
        """Create an executor that owns its client unless one is injected."""
        self._identity = identity or Identity()
        self._clock = clock
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=transport, follow_redirects=True
        )

    async def aclose(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncCallExecutor:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def send(
        self, config: CallConfig, *, cancel: asyncio.Event | None = None
    ) -> ResponseEnvelope:
        """Issue one request and return its envelope.

        Raises ``RequestConfigurationError`` before any network activity when
        the request cannot be built, and ``EnvelopeDecodeError`` when a
        response arrives but is not a well-formed envelope.
        """
        started = time.monotonic()
        envelope = _new_skeleton(self._identity, self._clock)
        request = build_request(self._client, config)

        with log_context(_call_context(envelope)):
            try:
                if cancel is not None and cancel.is_set():
                    raise CallCanceled()
                exchange: Awaitable[tuple[int, bytes]] = self._exchange(request)
                if config.has_deadline:
                    exchange = asyncio.wait_for(
                        exchange, timeout=config.timeout_seconds
                    )
                if cancel is not None:
                    exchange = _until_canceled(exchange, cancel)
                status_code, body = await exchange
            except TRANSPORT_FAILURES as exc:
                return _absorb_failure(envelope, exc, config, started)
            return _complete(envelope, status_code, body, config, started)

    async def _exchange(self, request: httpx.Request) -> tuple[int, bytes]:
        """Send the request and read the full body."""
        response = await self._client.send(request)
        return response.status_code, response.content


async def _until_canceled(
    exchange: Awaitable[tuple[int, bytes]], cancel: asyncio.Event
) -> tuple[int, bytes]:
    """Await ``exchange`` unless ``cancel`` fires first."""
    task = asyncio.ensure_future(exchange)
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait(
            {task, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise CallCanceled()
