"""
Unit tests for infrastructure.database.sqlite_handler.

Transaction boundaries on the shared connection.
"""

import sqlite3

import pytest

from infrastructure.database.sqlite_handler import MEMORY_DATABASE, SQLiteDatabaseHandler


def _create_tables(handler):
    with handler.transaction() as conn:
        conn.execute("CREATE TABLE beds (id TEXT PRIMARY KEY)")
        conn.execute(
            "CREATE TABLE plantings ("
            " id TEXT PRIMARY KEY,"
            " bed_id TEXT REFERENCES beds(id) DEFERRABLE INITIALLY DEFERRED)"
        )
        conn.execute("INSERT INTO beds (id) VALUES ('north')")


def _bed_ids(handler):
    with handler.connection() as conn:
        return [row["id"] for row in conn.execute("SELECT id FROM beds ORDER BY id")]


def test_error_inside_transaction_restores_prior_state(db_handler):
    _create_tables(db_handler)

    with pytest.raises(RuntimeError):
        with db_handler.transaction() as conn:
            conn.execute("INSERT INTO beds (id) VALUES ('south')")
            conn.execute("DELETE FROM beds WHERE id = 'north'")
            raise RuntimeError("abort")

    assert _bed_ids(db_handler) == ["north"]
    assert not db_handler.get_db().in_transaction


def test_failed_commit_is_rolled_back(db_handler):
    _create_tables(db_handler)
    with db_handler.connection() as conn:
        conn.execute("PRAGMA foreign_keys = ON")

    # The dangling reference is only checked when COMMIT runs
    with pytest.raises(sqlite3.IntegrityError):
        with db_handler.transaction() as conn:
            conn.execute("INSERT INTO beds (id) VALUES ('south')")
            conn.execute("INSERT INTO plantings (id, bed_id) VALUES ('p1', 'missing')")

    assert not db_handler.get_db().in_transaction
    assert _bed_ids(db_handler) == ["north"]

    with db_handler.transaction() as conn:
        conn.execute("INSERT INTO beds (id) VALUES ('east')")
    assert _bed_ids(db_handler) == ["east", "north"]


def test_memory_database_skips_file_pragmas():
    handler = SQLiteDatabaseHandler(MEMORY_DATABASE)
    try:
        mode = handler.get_db().execute("PRAGMA journal_mode").fetchone()[0]
        assert mode.lower() == "memory"
        assert handler.schema_version() == 0
    finally:
        handler.close_db()
