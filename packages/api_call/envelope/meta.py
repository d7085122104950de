"""Audit message records carried in the errors/info/warning lists."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Meta(BaseModel):
    """One ``{code, description}`` audit message."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    code: str = ""
    description: str = ""

    def __str__(self) -> str:
        """Render as ``[code]: description``."""
        return f"[{self.code}]: {self.description}"


class MetaItems(BaseModel):
    """Ordered list of audit messages, wire shape ``{"items": [...]}``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    items: tuple[Meta, ...] = Field(default_factory=tuple)

    @field_validator("items", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        """Treat a JSON ``null`` list as empty."""
        if value is None:
            return ()
        return value

    def __str__(self) -> str:
        """Comma-join every message in list order."""
        return ", ".join(str(item) for item in self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return len(self.items) > 0

    def append(self, meta: Meta) -> MetaItems:
        """Return a copy with ``meta`` appended."""
        return MetaItems(items=(*self.items, meta))
