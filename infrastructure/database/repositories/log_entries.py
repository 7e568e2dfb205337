"""
Log Entry Repository (SQLite)
=============================
Transactional entry store on a single ``entries`` table keyed by ``id``.

The full wire record is kept as JSON in ``payload``; ``business_date`` and
``updated_at`` are copied into indexed columns. The schema version lives in
``PRAGMA user_version`` and a version bump creates the table and indexes.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from pydantic import ValidationError as ModelValidationError

from app.constants import EntrySchema
from app.domain.exceptions import StorageInitError, StorageReadError, StorageWriteError
from app.models.log_entry import LogEntry
from app.utils.concurrency import run_blocking
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.utils.structured_fields import dump_json_field, parse_json_object

logger = logging.getLogger(__name__)


class SQLiteEntryStore:
    """Entry store backed by SQLite; one transaction per operation."""

    backend_name = "sqlite"

    def __init__(self, database_handler: SQLiteDatabaseHandler):
        """
        Initialize repository.

        Args:
            database_handler: Database handler instance
        """
        self.db = database_handler
        self._ready = False

    # ========================================================================
    # Schema
    # ========================================================================

    async def ready(self) -> None:
        if self._ready:
            return
        try:
            await run_blocking(self._ensure_schema)
        except sqlite3.Error as e:
            logger.error("Failed to initialize entry store at %s: %s", self.db.database_path, e)
            raise StorageInitError(
                "Entry store could not be initialized", detail={"path": self.db.database_path, "error": str(e)}
            ) from e
        self._ready = True

    def _ensure_schema(self) -> None:
        current = self.db.schema_version()
        if current >= EntrySchema.VERSION:
            return

        with self.db.transaction() as conn:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {EntrySchema.TABLE} (
                    id TEXT PRIMARY KEY,
                    business_date TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    payload TEXT NOT NULL    -- full entry record as JSON
                )
            """)
            conn.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_entries_business_date
                ON {EntrySchema.TABLE}(business_date)
            """)
            conn.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_entries_updated
                ON {EntrySchema.TABLE}(updated_at DESC)
            """)
            self.db.set_schema_version(conn, EntrySchema.VERSION)
        logger.info("Entry schema upgraded from v%s to v%s", current, EntrySchema.VERSION)

    def _require_ready(self) -> None:
        if not self._ready:
            raise StorageInitError("Entry store used before ready()", detail={"backend": self.backend_name})

    # ========================================================================
    # Operations
    # ========================================================================

    async def save(self, entry: LogEntry) -> LogEntry:
        self._require_ready()
        try:
            await run_blocking(self._upsert, entry)
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error("Failed to save entry %s: %s", entry.id, e)
            raise StorageWriteError("Entry could not be saved", detail={"id": entry.id, "error": str(e)}) from e
        logger.debug("Saved entry %s", entry.id)
        return entry

    def _upsert(self, entry: LogEntry) -> None:
        payload = dump_json_field(entry.to_record())
        with self.db.transaction() as conn:
            conn.execute(
                f"""
                INSERT INTO {EntrySchema.TABLE} (id, business_date, created_at, updated_at, payload)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    business_date = excluded.business_date,
                    created_at = excluded.created_at,
                    updated_at = excluded.updated_at,
                    payload = excluded.payload
                """,
                (entry.id, entry.business_date, entry.created_at, entry.updated_at, payload),
            )

    async def get_all(self) -> list[LogEntry]:
        self._require_ready()
        try:
            rows = await run_blocking(self._fetch_all)
            return [self._row_to_entry(row) for row in rows]
        except (sqlite3.Error, ValueError, ModelValidationError) as e:
            logger.error("Failed to load entries: %s", e)
            raise StorageReadError("Entry history unavailable", detail={"error": str(e)}) from e

    def _fetch_all(self) -> list[sqlite3.Row]:
        with self.db.connection() as conn:
            return conn.execute(f"SELECT id, payload FROM {EntrySchema.TABLE}").fetchall()

    async def get(self, entry_id: str) -> LogEntry | None:
        self._require_ready()
        try:
            row = await run_blocking(self._fetch_one, entry_id)
            return self._row_to_entry(row) if row is not None else None
        except (sqlite3.Error, ValueError, ModelValidationError) as e:
            logger.error("Failed to load entry %s: %s", entry_id, e)
            raise StorageReadError("Entry could not be loaded", detail={"id": entry_id, "error": str(e)}) from e

    def _fetch_one(self, entry_id: str) -> sqlite3.Row | None:
        with self.db.connection() as conn:
            return conn.execute(
                f"SELECT id, payload FROM {EntrySchema.TABLE} WHERE id = ?", (entry_id,)
            ).fetchone()

    async def delete(self, entry_id: str) -> bool:
        self._require_ready()
        try:
            removed = await run_blocking(self._delete, entry_id)
        except sqlite3.Error as e:
            logger.error("Failed to delete entry %s: %s", entry_id, e)
            raise StorageWriteError("Entry could not be deleted", detail={"id": entry_id, "error": str(e)}) from e
        if removed:
            logger.debug("Deleted entry %s", entry_id)
        return True

    def _delete(self, entry_id: str) -> int:
        with self.db.transaction() as conn:
            cursor = conn.execute(f"DELETE FROM {EntrySchema.TABLE} WHERE id = ?", (entry_id,))
            return cursor.rowcount

    @staticmethod
    def _row_to_entry(row: Any) -> LogEntry:
        return LogEntry.from_record(parse_json_object(row["payload"]))
