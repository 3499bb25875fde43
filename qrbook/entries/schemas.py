"""
Entry schemas.

`Entry` is the validated shape of one record returned by the contacts
service; raw dicts never leave the repository.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from qrbook.core.config import PALETTE

QrId = int | str


class Entry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    mobile: str
    qr: QrId | None = Field(default=None, validation_alias=AliasChoices("qr", "qrid"))

    @field_validator("name", "mobile", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        # Phone numbers sometimes arrive as JSON numbers.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if value is None:
            return ""
        return value

    @field_validator("qr", mode="before")
    @classmethod
    def _normalize_qr(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("qr must be a string or integer")
        if isinstance(value, str):
            value = value.strip()
            return value or None
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


class InsertEntryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    mobile: str = Field(..., min_length=1, max_length=50)
    qrid: int | None = None

    @field_validator("name", "mobile", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


@dataclass(frozen=True)
class EntryGroup:
    key: QrId | None
    color_index: int
    entries: tuple[Entry, ...]

    @property
    def is_ungrouped(self) -> bool:
        return self.key is None

    @property
    def color(self) -> str:
        return PALETTE[self.color_index % len(PALETTE)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "qr": self.key,
            "color_index": self.color_index,
            "color": self.color,
            "entries": [entry.model_dump() for entry in self.entries],
            "count": len(self.entries),
        }
