"""Tests for decoding response bodies into envelopes."""

from __future__ import annotations

import json

import pytest

from packages.api_call.errors import EnvelopeDecodeError
from packages.api_call.http import decode_envelope


def test_decode_keeps_items_as_raw_json() -> None:
    """Items should stay undecoded until a shape is requested."""
    body = (
        b'{"auditInfo":{},"items":[{"echo":"Hello World"}],"interfaceSettings":{}}'
    )

    envelope = decode_envelope(body)

    assert json.loads(envelope.items) == [{"echo": "Hello World"}]
    assert envelope.interface_settings == {}


def test_decode_reads_server_message_lists_and_total() -> None:
    """Server-side errors, info, warning and total are decoded."""
    body = json.dumps(
        {
            "items": [1],
            "auditInfo": {
                "errors": {
                    "items": [{"code": "200", "description": "An error happen!"}]
                },
                "info": {"items": None},
                "warning": {"items": [{"code": "w", "description": "slow"}]},
                "total": 12,
            },
        }
    ).encode()

    envelope = decode_envelope(body)

    assert str(envelope.audit.errors) == "[200]: An error happen!"
    assert len(envelope.audit.info) == 0
    assert str(envelope.audit.warning) == "[w]: slow"
    assert envelope.audit.total == 12


def test_decode_ignores_caller_owned_audit_fields() -> None:
    """Server values for identity and timing keys do not validate or leak."""
    body = json.dumps(
        {
            "items": [1],
            "auditInfo": {
                "host": "server",
                "statusCode": "not-a-number",
                "timestamp": "garbage",
                "ok": True,
            },
        }
    ).encode()

    envelope = decode_envelope(body)

    assert envelope.audit.host == ""
    assert envelope.audit.status_code == 0


def test_decode_null_items_and_missing_audit() -> None:
    """Null items and a missing audit block decode to defaults."""
    envelope = decode_envelope(b'{"items": null}')

    assert envelope.items is None
    assert len(envelope.audit.errors) == 0


def test_decode_html_body_names_character_and_offset() -> None:
    """Non-JSON bodies should report the unexpected character and offset."""
    with pytest.raises(EnvelopeDecodeError) as exc_info:
        decode_envelope(b"<html><body>oops</body></html>", status_code=200)

    error = exc_info.value
    assert str(error) == (
        "invalid character '<' looking for beginning of value at offset 0"
    )
    assert error.offset == 0
    assert error.status_code == 200


def test_decode_empty_body_reports_end_of_input() -> None:
    """An empty body is an unexpected end of input."""
    with pytest.raises(EnvelopeDecodeError) as exc_info:
        decode_envelope(b"")

    assert str(exc_info.value) == "unexpected end of JSON input"


def test_decode_rejects_non_object_documents() -> None:
    """Top-level arrays are not envelopes."""
    with pytest.raises(EnvelopeDecodeError) as exc_info:
        decode_envelope(b"[1, 2, 3]")

    assert str(exc_info.value) == "cannot decode array into response envelope"


def test_decode_rejects_malformed_message_lists() -> None:
    """Shape errors inside the audit block surface as decode errors."""
    with pytest.raises(EnvelopeDecodeError) as exc_info:
        decode_envelope(b'{"auditInfo": {"errors": {"items": "oops"}}}')

    assert str(exc_info.value).startswith(
        "cannot decode response envelope: auditInfo.errors.items"
    )


def test_decode_null_message_lists_as_empty() -> None:
    """A null errors, info or warning block counts as an empty list."""
    body = (
        b'{"items": [1], '
        b'"auditInfo": {"errors": null, "info": null, "warning": null}}'
    )

    envelope = decode_envelope(body, status_code=200)

    assert len(envelope.audit.errors) == 0
    assert len(envelope.audit.info) == 0
    assert len(envelope.audit.warning) == 0


def test_decode_keeps_items_bytes_verbatim() -> None:
    """Number precision and spacing in items survive decoding untouched."""
    body = b'{"items": [1.0000000000000000001, 1e400], "auditInfo": {}}'

    envelope = decode_envelope(body)

    assert envelope.items == b"[1.0000000000000000001, 1e400]"


def test_decode_keeps_non_ascii_items_as_utf8() -> None:
    body = '{"items": ["café"]}'.encode()

    envelope = decode_envelope(body)

    assert envelope.items == '["café"]'.encode()


def test_decode_error_offset_counts_bytes() -> None:
    """Offsets after multi-byte characters are byte positions."""
    with pytest.raises(EnvelopeDecodeError) as exc_info:
        decode_envelope(b'{"a":"\xc3\xa9" x}')

    assert exc_info.value.offset == 10
    assert str(exc_info.value) == (
        "invalid character 'x' at offset 10: Expecting ',' delimiter"
    )


@pytest.mark.parametrize(
    ("body", "char", "offset"),
    [
        (b'{"items":[NaN]}', "N", 10),
        (b'{"items":[Infinity]}', "I", 10),
        (b'{"note":"NaN", "items":[-Infinity]}', "-", 24),
    ],
)
def test_decode_rejects_non_standard_constants(
    body: bytes, char: str, offset: int
) -> None:
    """NaN and Infinity are not JSON and fail like any other bad value."""
    with pytest.raises(EnvelopeDecodeError) as exc_info:
        decode_envelope(body)

    assert exc_info.value.offset == offset
    assert str(exc_info.value) == (
        f"invalid character '{char}' looking for beginning of value at offset {offset}"
    )
