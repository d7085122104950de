"""Uniform response envelope returned for every outbound call."""

from __future__ import annotations

import json
from collections.abc import Sized
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from packages.api_call.errors import ItemsDecodeError

from .audit import AuditInfo
from .meta import MetaItems

T = TypeVar("T")

_STATUS_OK_MIN = 200
_STATUS_OK_MAX = 300


class ResponseEnvelope(BaseModel):
    """Audit metadata plus a lazily-typed payload region.

    ``items`` holds the raw, undecoded JSON of the payload so callers can pick
    the target shape later with :meth:`get_items`.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    items: bytes | None = None
    audit: AuditInfo = Field(default_factory=AuditInfo, alias="auditInfo")
    interface_settings: Any = Field(default=None, alias="interfaceSettings")

    @property
    def ok(self) -> bool:
        """Return the business-level success verdict.

        Requires a 2xx status code, a non-empty items collection, and no
        error items. Derived on every access.
        """
        status = self.audit.status_code
        if status < _STATUS_OK_MIN or status >= _STATUS_OK_MAX:
            return False
        if not self.has_items:
            return False
        return len(self.audit.errors) == 0

    @property
    def has_items(self) -> bool:
        """Return ``True`` when items decode to a collection with elements."""
        if self.items is None:
            return False
        try:
            value = json.loads(self.items)
        except ValueError:
            return False
        return isinstance(value, Sized) and len(value) > 0

    @property
    def status_code(self) -> int:
        return self.audit.status_code

    @property
    def operation_id(self) -> str:
        return self.audit.operation_id

    @property
    def errors(self) -> MetaItems:
        return self.audit.errors

    def get_items(self, shape: Any) -> Any:
        """Decode the items region into ``shape``.

        ``shape`` is any type pydantic can validate against, for example
        ``list[MyModel]`` or ``dict[str, int]``.
        """
        if self.items is None:
            raise ItemsDecodeError(
                message="response envelope has no items", target=shape
            )
        try:
            return TypeAdapter(shape).validate_json(self.items)
        except ValidationError as exc:
            raise ItemsDecodeError(
                message=(
                    f"cannot decode items into {_shape_name(shape)}: "
                    f"{exc.error_count()} error(s)"
                ),
                target=shape,
            ) from exc

    def set_items(self, value: Any, shape: Any | None = None) -> ResponseEnvelope:
        """Return a copy whose items region holds ``value`` encoded as JSON."""
        adapter = TypeAdapter(type(value) if shape is None else shape)
        return self.model_copy(
            update={"items": adapter.dump_json(value, by_alias=True)}
        )

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-compatible wire object, with ``ok`` filled in."""
        audit = self.audit.model_dump(mode="json", by_alias=True)
        audit["ok"] = self.ok
        return {
            "items": None if self.items is None else json.loads(self.items),
            "auditInfo": audit,
            "interfaceSettings": self.interface_settings,
        }

    def to_json(self) -> str:
        """Serialize the wire object to compact JSON."""
        return json.dumps(self.to_wire(), separators=(",", ":"), default=str)


def _shape_name(shape: Any) -> str:
    """Return a readable name for a target shape."""
    return getattr(shape, "__name__", None) or repr(shape)
