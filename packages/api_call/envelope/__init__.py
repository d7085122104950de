"""Public response envelope API."""

from .audit import AuditInfo
from .builders import skeleton, with_duration, with_error, with_response
from .envelope import ResponseEnvelope
from .meta import Meta, MetaItems
from .operation_id import canonical_timestamp, new_operation_id

__all__ = [
    "AuditInfo",
    "Meta",
    "MetaItems",
    "ResponseEnvelope",
    "canonical_timestamp",
    "new_operation_id",
    "skeleton",
    "with_duration",
    "with_error",
    "with_response",
]
