"""Public HTTP execution API."""

from .call_config import (
    CONTENT_TYPE_HEADER,
    JSON_CONTENT_TYPE,
    CallConfig,
    basic_auth_header,
)
from .decode import decode_envelope
from .executor import AsyncCallExecutor, CallExecutor, build_request
from .failures import CANCELED, TIMEOUT, TRANSPORT_ERROR, UNREACHABLE, classify_failure

__all__ = [
    "AsyncCallExecutor",
    "CANCELED",
    "CONTENT_TYPE_HEADER",
    "CallConfig",
    "CallExecutor",
    "JSON_CONTENT_TYPE",
    "TIMEOUT",
    "TRANSPORT_ERROR",
    "UNREACHABLE",
    "basic_auth_header",
    "build_request",
    "classify_failure",
    "decode_envelope",
]
