"""
Entry Store Protocol
====================

Defines the asynchronous contract every entry store backend implements.
Uses ``typing.Protocol`` (structural subtyping) so the SQLite store and the
flat-list fallback satisfy it without a shared base class, and services can
be typed against the contract alone.

Usage in service type hints::

    from infrastructure.database.repositories.base import EntryStore


    class MyService:
        def __init__(self, store: EntryStore) -> None: ...

Every call except ``ready`` requires a prior ``await store.ready()``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from app.models.log_entry import LogEntry


@runtime_checkable
class EntryStore(Protocol):
    """Durable CRUD over log entries, identical across backends."""

    backend_name: str

    async def ready(self) -> None:
        """Initialize the backend.

        Raises ``StorageInitError`` when the medium cannot be prepared.
        """
        ...

    async def save(self, entry: LogEntry) -> LogEntry:
        """Insert or replace the entry with the same id.

        Raises ``StorageWriteError`` when the write is rejected.
        """
        ...

    async def get_all(self) -> list[LogEntry]:
        """Every stored entry in no particular order.

        Raises ``StorageReadError`` when the history cannot be read.
        """
        ...

    async def get(self, entry_id: str) -> LogEntry | None:
        """The entry with this id, or ``None`` when absent."""
        ...

    async def delete(self, entry_id: str) -> bool:
        """Remove the entry; succeeds for unknown ids as well."""
        ...


__all__ = ["EntryStore"]
