"""
Entry Store Factory
===================
Selects the entry store backend once at startup.

``auto`` checks that SQLite works on this platform and that the database
directory is writable, and falls back to the flat-list store otherwise. A
corrupt database file is not a reason to fall back. ``sqlite`` and
``json`` force a backend without probing.
"""

from __future__ import annotations

import logging
import os
import sqlite3

from app.config import AppConfig
from app.enums.common import StoreBackend
from app.utils.persistent_store import LocalKeyValueStore
from infrastructure.database.repositories.base import EntryStore
from infrastructure.database.repositories.flat_list import FlatListEntryStore
from infrastructure.database.repositories.log_entries import SQLiteEntryStore
from infrastructure.database.sqlite_handler import MEMORY_DATABASE, SQLiteDatabaseHandler

logger = logging.getLogger(__name__)


def sqlite_available(database_path: str) -> bool:
    """Return True when this platform can host the SQLite store.

    Checks that an in-memory connection works and that the database
    directory can be created. The database file itself is never opened, so
    a damaged file surfaces later as a ``StorageInitError`` from ``ready()``.
    """
    try:
        conn = sqlite3.connect(MEMORY_DATABASE)
        try:
            conn.execute("SELECT 1").fetchone()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.warning("SQLite is not usable on this platform: %s", e)
        return False

    if database_path == MEMORY_DATABASE:
        return True
    parent = os.path.dirname(database_path)
    try:
        if parent:
            os.makedirs(parent, exist_ok=True)
    except OSError as e:
        logger.warning("Database directory %s cannot be created: %s", parent, e)
        return False
    return os.access(parent or ".", os.W_OK)


def create_entry_store(config: AppConfig, kv_store: LocalKeyValueStore | None = None) -> EntryStore:
    """
    Build the entry store configured for this process.

    Args:
        config: Application configuration
        kv_store: Key-value store for the flat-list backend, built from
            ``config.data_dir`` when omitted

    Returns:
        An entry store; callers must await ``ready()`` before use
    """
    backend = config.store_backend
    if backend == StoreBackend.AUTO:
        if sqlite_available(config.database_path):
            backend = StoreBackend.SQLITE
        else:
            logger.warning("SQLite unavailable, falling back to flat-list entry store in %s", config.data_dir)
            backend = StoreBackend.JSON

    if backend == StoreBackend.SQLITE:
        handler = SQLiteDatabaseHandler(
            config.database_path,
            cache_size_kb=config.db_cache_size_kb,
            quarantine_corrupt=config.db_quarantine_corrupt,
        )
        logger.info("Using SQLite entry store at %s", config.database_path)
        return SQLiteEntryStore(handler)

    logger.info("Using flat-list entry store in %s", config.data_dir)
    return FlatListEntryStore(kv_store or LocalKeyValueStore(config.data_dir))
