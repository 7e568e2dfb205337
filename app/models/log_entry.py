"""
Pydantic Models for Log Entries
===============================
Defines the persisted shape of a daily greenhouse log entry.

The wire format uses camelCase timestamp keys (``createdAt``/``updatedAt``);
models expose snake_case attributes and dump back with aliases so an entry
round-trips unchanged through every store backend.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.constants import BUSINESS_DATE_FIELD, META_FIELDS
from app.domain.exceptions import ValidationError
from app.domain.log_record import create_entry_id, normalize_payload
from app.utils.time import coerce_datetime, iso_now


def _text(value: Any) -> str:
    if value is None or value == "" or value is False:
        return ""
    return value if isinstance(value, str) else str(value)


class EntryMeta(BaseModel):
    """Header fields copied out of the payload for listing and ordering."""

    date: str = ""
    zone: str = ""
    responsible: str = ""
    shift: str = ""
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class LogEntry(BaseModel):
    """Pydantic model for one persisted daily log entry."""

    id: str = Field(..., min_length=1)
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")
    data: dict[str, Any] = Field(default_factory=dict)
    meta: EntryMeta

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @model_validator(mode="after")
    def _check_timestamps(self) -> "LogEntry":
        created = coerce_datetime(self.created_at)
        updated = coerce_datetime(self.updated_at)
        if created is not None and updated is not None and updated < created:
            raise ValueError("updatedAt must not be earlier than createdAt")
        return self

    @property
    def business_date(self) -> str:
        """Canonical business date: meta first, then the raw payload."""
        return self.meta.date or _text(self.data.get(BUSINESS_DATE_FIELD))

    @classmethod
    def from_record(cls, raw: dict[str, Any]) -> "LogEntry":
        return cls.model_validate(raw)

    def to_record(self) -> dict[str, Any]:
        """Plain dict in wire format; values are passed through unchanged for strict JSON encoding."""
        return self.model_dump(by_alias=True)


def build_entry(
    payload: dict[str, Any],
    *,
    entry_id: str | None = None,
    created_at: str | None = None,
    now: str | None = None,
) -> LogEntry:
    """
    Build an entry from a form payload.

    Args:
        payload: Structured record from the form layer
        entry_id: Existing id when updating; a new id is minted otherwise
        created_at: Original creation timestamp carried forward on update
        now: Save timestamp, defaults to the current UTC time

    Raises:
        ValidationError: The payload has no business date
    """
    data = normalize_payload(payload)
    business_date = _text(data.get(BUSINESS_DATE_FIELD))
    if not business_date:
        raise ValidationError("Business date is required", detail={"field": BUSINESS_DATE_FIELD})

    now = now or iso_now()
    created_at = created_at or now
    meta = {name: _text(data.get(key)) for name, key in META_FIELDS.items()}

    return LogEntry(
        id=entry_id or create_entry_id(business_date),
        created_at=created_at,
        updated_at=now,
        data=data,
        meta=EntryMeta(created_at=created_at, updated_at=now, **meta),
    )
