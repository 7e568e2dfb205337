"""
Flat-List Entry Repository
==========================
Fallback entry store for devices without a usable SQLite.

The whole collection lives as one JSON array under a single key of a
``LocalKeyValueStore`` and is read, modified and written back on every
operation. A blob that cannot be parsed is reported as a read failure,
never as an empty history.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from pydantic import ValidationError as ModelValidationError

from app.constants import StorageKeys
from app.domain.exceptions import StorageError, StorageInitError, StorageReadError, StorageWriteError
from app.models.log_entry import LogEntry
from app.utils.concurrency import run_blocking, synchronized
from app.utils.persistent_store import LocalKeyValueStore
from infrastructure.utils.structured_fields import dump_json_field, parse_json_array

logger = logging.getLogger(__name__)


class FlatListEntryStore:
    """Entry store keeping every record in one JSON array."""

    backend_name = "json"

    def __init__(self, kv_store: LocalKeyValueStore, key: str = StorageKeys.ENTRIES):
        self.kv = kv_store
        self.key = key
        self._lock = threading.Lock()
        self._ready = False

    async def ready(self) -> None:
        if self._ready:
            return
        try:
            await run_blocking(self.kv.ensure_directory)
        except OSError as e:
            logger.error("Failed to prepare flat-list store in %s: %s", self.kv.directory, e)
            raise StorageInitError(
                "Entry store could not be initialized", detail={"directory": self.kv.directory, "error": str(e)}
            ) from e
        self._ready = True

    def _require_ready(self) -> None:
        if not self._ready:
            raise StorageInitError("Entry store used before ready()", detail={"backend": self.backend_name})

    # --- Raw collection -------------------------------------------------------
    def _read_records(self) -> list[dict[str, Any]]:
        raw = self.kv.get_item(self.key)
        if raw is None or raw == "":
            return []
        try:
            records = parse_json_array(raw)
        except ValueError as e:
            logger.error("Stored entry list under %s is unreadable: %s", self.key, e)
            raise StorageReadError("Stored entry list is malformed", detail={"key": self.key, "error": str(e)}) from e
        invalid = [index for index, record in enumerate(records) if not isinstance(record, dict)]
        if invalid:
            logger.error("Stored entry list under %s has non-object items at %s", self.key, invalid)
            raise StorageReadError(
                "Stored entry list holds non-object items", detail={"key": self.key, "positions": invalid}
            )
        return records

    def _write_records(self, records: list[dict[str, Any]]) -> None:
        try:
            blob = dump_json_field(records)
        except (TypeError, ValueError) as e:
            raise StorageWriteError("Entry list could not be serialized", detail={"error": str(e)}) from e
        self.kv.set_item(self.key, blob)

    @synchronized
    def _upsert(self, entry: LogEntry) -> None:
        records = self._read_records()
        record = entry.to_record()
        for index, existing in enumerate(records):
            if existing.get("id") == entry.id:
                records[index] = record
                break
        else:
            records.append(record)
        self._write_records(records)

    @synchronized
    def _remove(self, entry_id: str) -> int:
        records = self._read_records()
        remaining = [record for record in records if record.get("id") != entry_id]
        if len(remaining) != len(records):
            self._write_records(remaining)
        return len(records) - len(remaining)

    @synchronized
    def _load_all(self) -> list[LogEntry]:
        records = self._read_records()
        try:
            return [LogEntry.from_record(record) for record in records]
        except ModelValidationError as e:
            raise StorageReadError("Stored entry is invalid", detail={"key": self.key, "error": str(e)}) from e

    # --- Operations -----------------------------------------------------------
    async def save(self, entry: LogEntry) -> LogEntry:
        self._require_ready()
        try:
            await run_blocking(self._upsert, entry)
        except StorageWriteError:
            logger.error("Failed to save entry %s", entry.id)
            raise
        except StorageError as e:
            # An unreadable list cannot be extended without losing history
            raise StorageWriteError("Entry could not be saved", detail={"id": entry.id, **e.detail}) from e
        logger.debug("Saved entry %s", entry.id)
        return entry

    async def get_all(self) -> list[LogEntry]:
        self._require_ready()
        return await run_blocking(self._load_all)

    async def get(self, entry_id: str) -> LogEntry | None:
        self._require_ready()
        entries = await run_blocking(self._load_all)
        return next((entry for entry in entries if entry.id == entry_id), None)

    async def delete(self, entry_id: str) -> bool:
        self._require_ready()
        try:
            removed = await run_blocking(self._remove, entry_id)
        except StorageWriteError:
            logger.error("Failed to delete entry %s", entry_id)
            raise
        except StorageError as e:
            raise StorageWriteError("Entry could not be deleted", detail={"id": entry_id, **e.detail}) from e
        if removed:
            logger.debug("Deleted entry %s", entry_id)
        return True
