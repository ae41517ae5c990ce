"""SQLite connection, transaction helper + schema initialisation."""
from __future__ import annotations
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from registrar.core import config


def get_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """
    Autocommit connection; callers that write open an explicit transaction
    with `transaction()` so the version predicate and the write are one unit.
    """
    conn = sqlite3.connect(
        db_path or config.DATABASE_PATH,
        timeout=config.DB_BUSY_TIMEOUT_SECONDS,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """BEGIN IMMEDIATE takes the write lock up front, serialising concurrent writers."""
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def init_db(db_path: Optional[str] = None) -> None:
    """Run all migration SQL files against the database."""
    path = db_path or config.DATABASE_PATH
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    conn = get_connection(path)
    try:
        for name in sorted(os.listdir(config.MIGRATIONS_DIR)):
            if not name.endswith(".sql"):
                continue
            with open(os.path.join(config.MIGRATIONS_DIR, name), "r", encoding="utf-8") as f:
                conn.executescript(f.read())
    finally:
        conn.close()
