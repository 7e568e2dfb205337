"""
Shared test fixtures for the greenhouse log test suite.

Provides:
- Temporary key-value store and SQLite database per test
- Both entry store backends (parametrized ``entry_store`` fixture)
- Draft repository and a fully wired LogBookService
- Helper for building log entries with explicit timestamps

Usage:
    @pytest.mark.asyncio
    async def test_example(entry_store, make_entry):
        await entry_store.ready()
        await entry_store.save(make_entry("2024-03-01", {"pest_traps_count": 3}))
"""

from __future__ import annotations

import logging
from typing import Any

import pytest

from app.models.log_entry import EntryMeta, LogEntry
from app.services.application.log_book_service import EditingContext, LogBookService
from app.utils.persistent_store import LocalKeyValueStore
from infrastructure.database.repositories.drafts import DraftRepository
from infrastructure.database.repositories.flat_list import FlatListEntryStore
from infrastructure.database.repositories.log_entries import SQLiteEntryStore
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)


# ========================== Storage Fixtures ===============================


@pytest.fixture()
def kv_store(tmp_path):
    """Key-value store rooted in a per-test temporary directory."""
    return LocalKeyValueStore(str(tmp_path / "var"))


@pytest.fixture()
def db_handler(tmp_path):
    """File-backed SQLite handler in a temporary directory."""
    handler = SQLiteDatabaseHandler(str(tmp_path / "database" / "greenhouse_log.db"))
    yield handler
    handler.close_db()


@pytest.fixture()
def sqlite_store(db_handler):
    return SQLiteEntryStore(db_handler)


@pytest.fixture()
def flat_store(kv_store):
    return FlatListEntryStore(kv_store)


@pytest.fixture(params=["sqlite", "json"])
def entry_store(request, tmp_path):
    """Each backend in turn; tests must ``await entry_store.ready()``."""
    if request.param == "sqlite":
        handler = SQLiteDatabaseHandler(str(tmp_path / "store.db"))
        yield SQLiteEntryStore(handler)
        handler.close_db()
    else:
        yield FlatListEntryStore(LocalKeyValueStore(str(tmp_path / "kv")))


@pytest.fixture()
def draft_repo(kv_store):
    return DraftRepository(kv_store)


# ========================== Service Fixtures ===============================


@pytest.fixture()
def log_book(sqlite_store, draft_repo):
    """LogBookService over a SQLite store that still needs initializing."""
    return LogBookService(store=sqlite_store, drafts=draft_repo)


@pytest.fixture()
def context():
    return EditingContext()


# ========================== Helpers ========================================


@pytest.fixture()
def make_entry():
    """Factory for LogEntry objects with deterministic timestamps."""

    def _make(
        date: str,
        data: dict[str, Any] | None = None,
        *,
        entry_id: str | None = None,
        created_at: str = "2024-03-01T08:00:00.000Z",
        updated_at: str | None = None,
    ) -> LogEntry:
        payload = {"meta_date": date, **(data or {})}
        updated_at = updated_at or created_at
        return LogEntry(
            id=entry_id or f"{date or 'eintrag'}-test",
            created_at=created_at,
            updated_at=updated_at,
            data=payload,
            meta=EntryMeta(date=date, created_at=created_at, updated_at=updated_at),
        )

    return _make
