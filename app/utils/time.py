"""Utility functions for time handling.

All timestamps should be UTC and timezone-aware. Persist UTC timestamps as
ISO-8601 strings with timezone offsets (e.g., "+00:00") via iso_now().
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any

_PLAIN_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()


def today_iso() -> str:
    """Return today's UTC date as ``YYYY-MM-DD``."""
    return utc_now().date().isoformat()


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Args:
        value: String or datetime to coerce

    Returns:
        Datetime in timezone.utc or None if invalid
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    else:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed


def to_utc_instant(dt: datetime) -> str:
    """Format an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def normalize_date_for_sort(value: Any) -> str:
    """
    Build a lexically sortable key for a business date or timestamp.

    A plain ``YYYY-MM-DD`` date becomes midnight of that day, other parseable
    values become their UTC instant, and anything else is returned as-is so
    it still sorts deterministically.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        return to_utc_instant(coerce_datetime(value))
    if isinstance(value, date):
        return f"{value.isoformat()}T00:00:00"
    if isinstance(value, str):
        if _PLAIN_DATE.match(value):
            return f"{value}T00:00:00"
        parsed = coerce_datetime(value)
        if parsed is not None:
            return to_utc_instant(parsed)
        return value
    return str(value)


def format_display_date(value: Any) -> str:
    """German short date (``DD.MM.YYYY``) for notifications; raw text when unparseable."""
    if not value:
        return ""
    if isinstance(value, str) and _PLAIN_DATE.match(value):
        year, month, day = value.split("-")
        return f"{day}.{month}.{year}"
    parsed = coerce_datetime(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%d.%m.%Y")
