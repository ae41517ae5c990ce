"""
Compare-and-swap primitives for any table with an integer `version` column.

Each helper runs on the caller's connection so it can share the caller's
transaction. The version predicate sits in the WHERE clause of the write
itself; there is no separate read-then-write.
"""
from __future__ import annotations
import sqlite3
from typing import Any, Mapping

VERSION_COLUMN = "version"


def checked_identifier(name: str) -> str:
    if not name.isidentifier():
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def cas_update(
    conn: sqlite3.Connection,
    table: str,
    key_column: str,
    record_id: int,
    expected_version: int,
    values: Mapping[str, Any],
) -> bool:
    """Apply `values` and bump the version iff the stored version is `expected_version`."""
    if VERSION_COLUMN in values or key_column in values:
        raise ValueError("Identity and version columns cannot be written by a patch.")
    assignments = [f"{checked_identifier(col)} = :{col}" for col in values]
    assignments.append(f"{VERSION_COLUMN} = {VERSION_COLUMN} + 1")
    sql = (
        f"UPDATE {checked_identifier(table)} SET {', '.join(assignments)} "
        f"WHERE {checked_identifier(key_column)} = :_record_id AND {VERSION_COLUMN} = :_expected_version"
    )
    params = dict(values, _record_id=record_id, _expected_version=expected_version)
    return conn.execute(sql, params).rowcount == 1


def cas_delete(
    conn: sqlite3.Connection,
    table: str,
    key_column: str,
    record_id: int,
    expected_version: int,
) -> bool:
    cur = conn.execute(
        f"DELETE FROM {checked_identifier(table)} "
        f"WHERE {checked_identifier(key_column)} = ? AND {VERSION_COLUMN} = ?",
        (record_id, expected_version),
    )
    return cur.rowcount == 1


def was_issued(conn: sqlite3.Connection, table: str, record_id: int) -> bool:
    """True if an AUTOINCREMENT table ever handed out `record_id`."""
    row = conn.execute(
        "SELECT seq FROM sqlite_sequence WHERE name = ?", (table,)
    ).fetchone()
    return row is not None and 1 <= record_id <= row["seq"]
