"""Convenience constructors and immutable updates for response envelopes."""

from __future__ import annotations

from datetime import datetime

from .audit import AuditInfo
from .envelope import ResponseEnvelope
from .meta import Meta
from .operation_id import new_operation_id


def skeleton(*, host: str, client_ip: str, timestamp: datetime) -> ResponseEnvelope:
    """Build the pre-dispatch envelope with audit fields and operation id."""
    audit = AuditInfo(
        host=host,
        client_ip=client_ip,
        timestamp=timestamp,
        operation_id=new_operation_id(client_ip, host, timestamp),
    )
    return ResponseEnvelope(audit=audit)


def with_error(*, envelope: ResponseEnvelope, error: Meta) -> ResponseEnvelope:
    """Return a new envelope with one additional error item appended."""
    audit = envelope.audit.model_copy(
        update={"errors": envelope.audit.errors.append(error)}
    )
    return envelope.model_copy(update={"audit": audit})


def with_duration(*, envelope: ResponseEnvelope, duration: float) -> ResponseEnvelope:
    """Return a new envelope with the elapsed duration recorded."""
    audit = envelope.audit.model_copy(update={"duration": duration})
    return envelope.model_copy(update={"audit": audit})


def with_response(
    *,
    envelope: ResponseEnvelope,
    decoded: ResponseEnvelope,
    status_code: int,
    duration: float,
) -> ResponseEnvelope:
    """Merge a decoded server envelope into the local skeleton.

    Payload, passthrough settings, message lists and ``total`` come from the
    server. Identity fields stay local, and the status code and duration are
    the ones measured for this call.
    """
    remote = decoded.audit
    audit = envelope.audit.model_copy(
        update={
            "status_code": status_code,
            "duration": duration,
            "errors": remote.errors,
            "info": remote.info,
            "warning": remote.warning,
            "total": remote.total,
        }
    )
    return ResponseEnvelope(
        items=decoded.items,
        audit=audit,
        interface_settings=decoded.interface_settings,
    )
