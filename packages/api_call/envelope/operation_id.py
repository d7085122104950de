"""Deterministic operation identifiers for call correlation.

The identifier is an MD5 hex digest over ``client_ip + host + timestamp``.
It is a correlation handle for logs, not a secret and not unguessable.
"""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime


def canonical_timestamp(value: datetime) -> str:
    """Render ``value`` as ``YYYY-MM-DD HH:MM:SS[.fraction] +0000 UTC``.

    Naive datetimes are treated as UTC. Trailing zeros of the fractional
    part are trimmed and the fraction is omitted when zero.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    else:
        value = value.astimezone(UTC)

    rendered = value.strftime("%Y-%m-%d %H:%M:%S")
    if value.microsecond:
        rendered += "." + f"{value.microsecond:06d}".rstrip("0")
    return f"{rendered} +0000 UTC"


def new_operation_id(client_ip: str, host: str, timestamp: datetime) -> str:
    """Return the operation id for one ``(client_ip, host, timestamp)`` triple."""
    digest = hashlib.md5(usedforsecurity=False)
    digest.update(client_ip.encode("utf-8"))
    digest.update(host.encode("utf-8"))
    digest.update(canonical_timestamp(timestamp).encode("utf-8"))
    return digest.hexdigest()
