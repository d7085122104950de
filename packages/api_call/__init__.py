"""Single outbound HTTP calls answered with uniform response envelopes."""

from .envelope import AuditInfo, Meta, MetaItems, ResponseEnvelope, new_operation_id
from .errors import (
    ApiCallError,
    EnvelopeDecodeError,
    ItemsDecodeError,
    RequestConfigurationError,
    SelfIdentificationError,
)
from .http import AsyncCallExecutor, CallConfig, CallExecutor, basic_auth_header
from .identity import Identity, local_hostname, outbound_ipv4, static_identity

__all__ = [
    "ApiCallError",
    "AsyncCallExecutor",
    "AuditInfo",
    "CallConfig",
    "CallExecutor",
    "EnvelopeDecodeError",
    "Identity",
    "ItemsDecodeError",
    "Meta",
    "MetaItems",
    "RequestConfigurationError",
    "ResponseEnvelope",
    "SelfIdentificationError",
    "basic_auth_header",
    "local_hostname",
    "new_operation_id",
    "outbound_ipv4",
    "static_identity",
]
