"""
Entry Chronology
================
Ordering rules for stored entries.

Analytics read entries oldest-first by business date; the history listing
shows the most recently saved entry first.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.models.log_entry import LogEntry
from app.utils.time import normalize_date_for_sort


def entry_date(entry: LogEntry) -> str:
    """Business date, falling back to the creation then update timestamp."""
    return entry.business_date or entry.created_at or entry.updated_at or ""


def entry_sort_key(entry: LogEntry) -> str:
    primary = normalize_date_for_sort(entry.business_date)
    if primary:
        return primary
    return normalize_date_for_sort(entry.created_at or entry.updated_at or "")


def sort_chronologically(entries: Iterable[LogEntry]) -> list[LogEntry]:
    """Oldest first; entries with equal keys keep their input order."""
    return sorted(entries, key=entry_sort_key)


def sort_history(entries: Iterable[LogEntry]) -> list[LogEntry]:
    """Most recently saved first."""

    def _saved_at(entry: LogEntry) -> str:
        return entry.updated_at or entry.meta.updated_at or entry.created_at or ""

    return sorted(entries, key=_saved_at, reverse=True)
