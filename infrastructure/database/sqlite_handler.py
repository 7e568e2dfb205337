import logging
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from app.utils.concurrency import synchronized

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class SQLiteDatabaseHandler:
    """Lock-guarded SQLite handler sharing one connection across worker threads.

    Statements run in autocommit mode; `transaction()` opens an explicit
    `BEGIN IMMEDIATE` ... `COMMIT` block so each store operation is its own
    transaction and is only reported successful after the commit.

    An unreadable database file raises `sqlite3.DatabaseError` on first use.
    With `quarantine_corrupt=True` the file is moved to `corrupt/` and a fresh
    database is created instead.
    """

    def __init__(self, database_path: str, cache_size_kb: int = 8_000, quarantine_corrupt: bool = False) -> None:
        self._database_path = database_path
        self._cache_size_kb = cache_size_kb
        self._quarantine_corrupt = quarantine_corrupt
        self._lock = threading.RLock()
        self._connection: Optional[sqlite3.Connection] = None

        if database_path != MEMORY_DATABASE:
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    @property
    def database_path(self) -> str:
        return self._database_path

    # --- Lifecycle ------------------------------------------------------------
    @synchronized
    def get_db(self) -> sqlite3.Connection:
        if self._connection is None:
            try:
                self._connection = self._open_connection()
            except sqlite3.DatabaseError as exc:
                if self._quarantine_corrupt and self._is_corruption_error(exc):
                    logger.error("Database appears corrupt (%s). Recreating a fresh database.", exc)
                    self._quarantine_corrupt_db()
                    self._connection = self._open_connection()
                else:
                    raise
        return self._connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._database_path, check_same_thread=False, isolation_level=None)
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _is_corruption_error(self, exc: sqlite3.Error) -> bool:
        message = str(exc).lower()
        return (
            "database disk image is malformed" in message
            or "file is not a database" in message
            or "file is encrypted or is not a database" in message
            or "malformed" in message
        )

    def _quarantine_corrupt_db(self) -> Optional[Path]:
        if self._database_path == MEMORY_DATABASE:
            return None
        db_path = Path(self._database_path)
        if not db_path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        quarantine_dir = db_path.parent / "corrupt"
        quarantine_dir.mkdir(parents=True, exist_ok=True)

        suffix = db_path.suffix or ".db"
        quarantined = quarantine_dir / f"{db_path.stem}_corrupt_{timestamp}{suffix}"
        try:
            shutil.move(str(db_path), str(quarantined))
            for sidecar_suffix in ("-wal", "-shm"):
                sidecar = Path(f"{db_path}{sidecar_suffix}")
                if sidecar.exists():
                    shutil.move(str(sidecar), str(quarantine_dir / f"{sidecar.name}_{timestamp}"))
            logger.warning("Quarantined corrupt database to %s", quarantined)
            return quarantined
        except OSError as exc:
            logger.error("Failed to quarantine corrupt database %s: %s", db_path, exc)
            return None

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """Configure the connection for a small single-writer store.

        - WAL mode: readers do not block the writer (file databases only)
        - NORMAL synchronous: safe with WAL, fewer fsyncs
        - bounded page cache
        """
        if self._database_path != MEMORY_DATABASE:
            connection.execute("PRAGMA journal_mode=WAL")
            connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute(f"PRAGMA cache_size=-{int(self._cache_size_kb)}")
        connection.execute("PRAGMA temp_store=MEMORY")

    @synchronized
    def close_db(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    # --- Transactions ---------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements as one transaction.

        Commits on normal exit and rolls back on any exception, which is
        re-raised to the caller.
        """
        with self._lock:
            conn = self.get_db()
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Lock-guarded access for read-only statements."""
        with self._lock:
            yield self.get_db()

    # --- Schema version -------------------------------------------------------
    @synchronized
    def schema_version(self) -> int:
        row = self.get_db().execute("PRAGMA user_version").fetchone()
        return int(row[0]) if row else 0

    def set_schema_version(self, conn: sqlite3.Connection, version: int) -> None:
        """Record the schema version inside the caller's transaction."""
        conn.execute(f"PRAGMA user_version = {int(version)}")
