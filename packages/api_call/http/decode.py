"""Decoding of response bodies into the envelope shape."""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError

from packages.api_call.envelope import ResponseEnvelope
from packages.api_call.errors import EnvelopeDecodeError

# Audit keys owned by the caller side; server values for these are ignored.
_LOCAL_AUDIT_KEYS = frozenset(
    {"host", "clientIP", "timestamp", "operationId", "statusCode", "duration", "ok"}
)

_WHITESPACE = re.compile(r"[ \t\n\r]*")
# Strings are matched first so constants inside them are skipped.
_NON_STANDARD = re.compile(r'"(?:[^"\\]|\\.)*"|(-?Infinity|NaN)')
_SCANNER = json.JSONDecoder()


class _NonStandardConstant(ValueError):
    """Raised for ``NaN`` and ``Infinity`` literals."""


def _reject_constant(name: str) -> Any:
    raise _NonStandardConstant(name)


def decode_envelope(body: bytes, *, status_code: int = 0) -> ResponseEnvelope:
    """Decode one response body, keeping ``items`` as raw JSON bytes.

    The items region is sliced verbatim out of the body, so number precision
    and formatting survive until a shape is requested. Raises
    ``EnvelopeDecodeError`` when the body is not strict JSON or not an
    envelope-shaped object. Error offsets count bytes.
    """
    text = body.decode("utf-8", errors="replace")
    try:
        document = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        offset = _byte_offset(text, exc.pos)
        raise EnvelopeDecodeError(
            message=_syntax_message(exc, offset),
            status_code=status_code,
            body=body,
            offset=offset,
        ) from exc
    except _NonStandardConstant as exc:
        position = _constant_position(text)
        offset = _byte_offset(text, position)
        raise EnvelopeDecodeError(
            message=(
                f"invalid character '{text[position]}' looking for beginning "
                f"of value at offset {offset}"
            ),
            status_code=status_code,
            body=body,
            offset=offset,
        ) from exc

    if not isinstance(document, dict):
        raise EnvelopeDecodeError(
            message=f"cannot decode {_json_type(document)} into response envelope",
            status_code=status_code,
            body=body,
        )

    audit = document.get("auditInfo")
    if audit is None:
        audit = {}
    if isinstance(audit, dict):
        audit = {
            key: value for key, value in audit.items() if key not in _LOCAL_AUDIT_KEYS
        }

    items = None
    if document.get("items") is not None:
        start, end = _member_spans(text)["items"]
        items = text[start:end].encode("utf-8")

    try:
        return ResponseEnvelope.model_validate(
            {
                "items": items,
                "auditInfo": audit,
                "interfaceSettings": document.get("interfaceSettings"),
            }
        )
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        reason = first.get("msg", "invalid value")
        raise EnvelopeDecodeError(
            message=f"cannot decode response envelope: {location}: {reason}",
            status_code=status_code,
            body=body,
        ) from exc


def _member_spans(text: str) -> dict[str, tuple[int, int]]:
    """Return the character span of each top-level member value.

    Only called on text already known to hold a JSON object. Duplicate keys
    keep the last span, matching what ``json.loads`` keeps.
    """
    spans: dict[str, tuple[int, int]] = {}
    index = _skip(text, 0) + 1
    while True:
        index = _skip(text, index)
        if text[index] == "}":
            return spans
        key, index = _SCANNER.raw_decode(text, index)
        start = _skip(text, _skip(text, index) + 1)
        _, end = _SCANNER.raw_decode(text, start)
        spans[key] = (start, end)
        index = _skip(text, end)
        if text[index] == ",":
            index += 1


def _skip(text: str, index: int) -> int:
    match = _WHITESPACE.match(text, index)
    return match.end() if match else index


def _byte_offset(text: str, position: int) -> int:
    """Convert a character position into a UTF-8 byte offset."""
    return len(text[:position].encode("utf-8"))


def _constant_position(text: str) -> int:
    for match in _NON_STANDARD.finditer(text):
        if match.group(1):
            return match.start(1)
    return 0


def _syntax_message(exc: json.JSONDecodeError, offset: int) -> str:
    """Describe a JSON syntax error by offending character and offset."""
    if exc.pos >= len(exc.doc) or not exc.doc.strip():
        return "unexpected end of JSON input"
    char = exc.doc[exc.pos]
    if exc.msg == "Expecting value":
        return (
            f"invalid character '{char}' looking for beginning of value "
            f"at offset {offset}"
        )
    return f"invalid character '{char}' at offset {offset}: {exc.msg}"


def _json_type(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    return "null"
