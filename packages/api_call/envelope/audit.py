"""Audit metadata attached to every response envelope."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .meta import MetaItems


def _epoch() -> datetime:
    return datetime(1970, 1, 1, tzinfo=UTC)


class AuditInfo(BaseModel):
    """Who made the call, when, how long it took, and what was reported.

    ``errors`` is the only message list that affects the success verdict;
    ``info`` and ``warning`` are informational. ``ok`` is not a field: it is
    derived on the envelope, and an inbound ``ok`` key is ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    host: str = ""
    client_ip: str = Field(default="", alias="clientIP")
    timestamp: datetime = Field(default_factory=_epoch)
    duration: float = 0.0
    status_code: int = Field(default=0, alias="statusCode")
    operation_id: str = Field(default="", alias="operationId")
    errors: MetaItems = Field(default_factory=MetaItems)
    info: MetaItems = Field(default_factory=MetaItems)
    warning: MetaItems = Field(default_factory=MetaItems)
    total: int | None = None

    @field_validator("errors", "info", "warning", mode="before")
    @classmethod
    def _null_list_as_empty(cls, value: object) -> object:
        """Treat a JSON ``null`` message list as an empty one."""
        if value is None:
            return MetaItems()
        return value

    @property
    def transport_completed(self) -> bool:
        """Return ``True`` when a status code was received."""
        return self.status_code != 0
