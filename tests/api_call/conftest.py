"""Shared fixtures for API call tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from packages.api_call.identity import Identity, static_identity

FIXED_TIMESTAMP = datetime(2020, 1, 1, 0, 0, 0, tzinfo=UTC)


@pytest.fixture
def identity() -> Identity:
    """Return a deterministic hostname/client-ip identity."""
    return static_identity(hostname="localhost", client_ip="127.0.0.1")


@pytest.fixture
def fixed_clock():
    """Return a clock pinned to 2020-01-01T00:00:00Z."""
    return lambda: FIXED_TIMESTAMP
