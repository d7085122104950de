"""Per-call request configuration with fluent ``with_*`` setters."""

from __future__ import annotations

import base64
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

CONTENT_TYPE_HEADER = "Content-Type"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


def basic_auth_header(username: str, password: str) -> str:
    """Return a ``Basic`` authorization value for ``username:password``."""
    token = base64.urlsafe_b64encode(f"{username}:{password}".encode("utf-8"))
    return "Basic " + token.decode("ascii")


def _freeze(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(headers or {}))


@dataclass(frozen=True)
class CallConfig:
    """Everything needed to issue one outbound request.

    ``timeout_seconds`` of ``None`` or ``<= 0`` means the call has no
    deadline. ``base_url`` and ``url`` are concatenated as-is.
    """

    url: str = ""
    method: str = "GET"
    base_url: str = ""
    headers: Mapping[str, str] = field(default_factory=lambda: _freeze(None))
    body: bytes | str | None = None
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze(self.headers))

    @property
    def target_url(self) -> str:
        """Return ``base_url + url``."""
        return self.base_url + self.url

    @property
    def has_deadline(self) -> bool:
        """Return ``True`` when a positive timeout is configured."""
        return self.timeout_seconds is not None and self.timeout_seconds > 0

    def with_url(self, url: str) -> CallConfig:
        return replace(self, url=url)

    def with_method(self, method: str) -> CallConfig:
        return replace(self, method=method)

    def with_base_url(self, base_url: str) -> CallConfig:
        return replace(self, base_url=base_url)

    def with_timeout(self, seconds: float | None) -> CallConfig:
        return replace(self, timeout_seconds=seconds)

    def with_body(self, body: bytes | str | None) -> CallConfig:
        return replace(self, body=body)

    def with_header(self, name: str, value: str) -> CallConfig:
        """Return a copy with one header set, replacing any same-named header."""
        headers = {
            key: item
            for key, item in self.headers.items()
            if key.lower() != name.lower()
        }
        headers[name] = value
        return replace(self, headers=headers)

    def with_headers(self, headers: Mapping[str, str]) -> CallConfig:
        """Return a copy with every header in ``headers`` set."""
        config = self
        for name, value in headers.items():
            config = config.with_header(name, value)
        return config

    def with_authentication(self, username: str, password: str) -> CallConfig:
        """Return a copy carrying a basic ``Authorization`` header."""
        return self.with_header("Authorization", basic_auth_header(username, password))

    def request_headers(self) -> dict[str, str]:
        """Return the outbound header set, JSON content type first."""
        headers = {CONTENT_TYPE_HEADER: JSON_CONTENT_TYPE}
        for name, value in self.headers.items():
            if name.lower() == CONTENT_TYPE_HEADER.lower():
                headers.pop(CONTENT_TYPE_HEADER, None)
            headers[name] = value
        return headers
