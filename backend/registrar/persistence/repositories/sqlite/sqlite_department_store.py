"""SQLite implementation of DepartmentStore — compare-and-swap writes on the version column."""
from __future__ import annotations
import sqlite3
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

from registrar.core.logging_utils import get_logger
from registrar.domain.common.result import Allowed, Blocked, Deleted, Gone, NotFound, Stale, Updated
from registrar.domain.department.conflicts import build_report
from registrar.domain.department.models import MUTABLE_FIELDS, Department
from registrar.domain.department.rules import parse_budget, parse_date
from registrar.persistence.db import get_connection, transaction
from registrar.persistence.interfaces.department_store import DepartmentStore
from registrar.persistence.repositories.sqlite.referential_guard import (
    COURSES_OF_DEPARTMENT,
    ReferentialGuard,
)
from registrar.persistence.repositories.sqlite.versioned import cas_delete, cas_update, was_issued

logger = get_logger(__name__)

TABLE = "departments"
KEY = "department_id"


def _row_to_department(row) -> Department:
    return Department(
        department_id=row["department_id"],
        name=row["name"],
        budget=Decimal(row["budget"]),
        start_date=date.fromisoformat(row["start_date"]),
        instructor_id=row["instructor_id"],
        version=row["version"],
    )


def _to_columns(values: Mapping[str, Any]) -> Dict[str, Any]:
    columns = dict(values)
    if "budget" in columns:
        columns["budget"] = str(parse_budget(columns["budget"]))
    if "start_date" in columns:
        columns["start_date"] = parse_date(columns["start_date"]).isoformat()
    return columns


def _check_expected_version(expected_version: Any) -> None:
    if isinstance(expected_version, bool) or not isinstance(expected_version, int) or expected_version < 1:
        raise ValueError(f"expected_version must be a positive integer, got {expected_version!r}")


def _check_patch(patch: Mapping[str, Any]) -> None:
    unknown = set(patch) - set(MUTABLE_FIELDS)
    if unknown:
        raise ValueError(f"Patch may only carry mutable fields; got {sorted(unknown)}")


class SqliteDepartmentStore(DepartmentStore):
    def __init__(self, db_path: Optional[str] = None, guard: Optional[ReferentialGuard] = None):
        self._db_path = db_path
        self._guard = guard or ReferentialGuard([COURSES_OF_DEPARTMENT])

    def _connect(self) -> sqlite3.Connection:
        return get_connection(self._db_path)

    @staticmethod
    def _select(conn: sqlite3.Connection, department_id: int) -> Optional[Department]:
        row = conn.execute(
            f"SELECT * FROM {TABLE} WHERE {KEY} = ?", (department_id,)
        ).fetchone()
        return _row_to_department(row) if row else None

    def _classify_miss(
        self, conn: sqlite3.Connection, department_id: int, patch: Mapping[str, Any]
    ) -> Union[Stale, Gone, NotFound]:
        """The conditional write matched nothing: moved, deleted, or never existed."""
        current = self._select(conn, department_id)
        if current is not None:
            return Stale(build_report(patch, current))
        if was_issued(conn, TABLE, department_id):
            return Gone(department_id)
        return NotFound(department_id)

    # ------------------------------------------------------------------
    # CREATE / READ
    # ------------------------------------------------------------------
    def create(self, values: Mapping[str, Any]) -> Department:
        _check_patch(values)
        columns = {"instructor_id": None}
        columns.update(_to_columns(values))
        conn = self._connect()
        try:
            with transaction(conn):
                cur = conn.execute(
                    f"""
                    INSERT INTO {TABLE} (name, budget, start_date, instructor_id, version)
                    VALUES (:name, :budget, :start_date, :instructor_id, 1)
                    """,
                    columns,
                )
                created = self._select(conn, cur.lastrowid)
        finally:
            conn.close()
        logger.info("department created id=%s version=%s", created.department_id, created.version)
        return created

    def read(self, department_id: int) -> Optional[Department]:
        conn = self._connect()
        try:
            return self._select(conn, department_id)
        finally:
            conn.close()

    def list_all(self) -> List[Department]:
        conn = self._connect()
        try:
            rows = conn.execute(f"SELECT * FROM {TABLE} ORDER BY name, {KEY}").fetchall()
        finally:
            conn.close()
        return [_row_to_department(r) for r in rows]

    # ------------------------------------------------------------------
    # UPDATE
    # ------------------------------------------------------------------
    def update(
        self, department_id: int, patch: Mapping[str, Any], expected_version: int
    ) -> Union[Updated, Stale, Gone, NotFound]:
        _check_expected_version(expected_version)
        _check_patch(patch)
        conn = self._connect()
        try:
            with transaction(conn):
                if cas_update(conn, TABLE, KEY, department_id, expected_version, _to_columns(patch)):
                    outcome = Updated(self._select(conn, department_id))
                else:
                    outcome = self._classify_miss(conn, department_id, patch)
        finally:
            conn.close()

        if isinstance(outcome, Updated):
            logger.info(
                "department updated id=%s version %s -> %s",
                department_id, expected_version, outcome.record.version,
            )
        elif isinstance(outcome, Stale):
            logger.warning(
                "stale update id=%s expected=%s current=%s conflicts=%s",
                department_id, expected_version, outcome.report.current_version,
                list(outcome.report.conflicting_fields),
            )
        else:
            logger.warning("update of missing department id=%s (%s)", department_id, type(outcome).__name__)
        return outcome

    # ------------------------------------------------------------------
    # DELETE
    # ------------------------------------------------------------------
    def delete(
        self, department_id: int, expected_version: int
    ) -> Union[Deleted, Stale, Gone, NotFound, Blocked]:
        _check_expected_version(expected_version)
        conn = self._connect()
        try:
            try:
                with transaction(conn):
                    verdict = self._guard.can_delete(conn, department_id)
                    if isinstance(verdict, Blocked):
                        outcome = verdict
                    elif cas_delete(conn, TABLE, KEY, department_id, expected_version):
                        outcome = Deleted(department_id)
                    else:
                        outcome = self._classify_miss(conn, department_id, {})
            except sqlite3.IntegrityError:
                # A dependent was committed after the guard ran;
                # the foreign key refused the delete.
                outcome = self._guard.can_delete(conn, department_id)
                if isinstance(outcome, Allowed):
                    raise
        finally:
            conn.close()

        if isinstance(outcome, Deleted):
            logger.info("department deleted id=%s at version %s", department_id, expected_version)
        elif isinstance(outcome, Blocked):
            logger.warning(
                "delete of department id=%s blocked by %s dependent(s)",
                department_id, outcome.block.dependent_count,
            )
        else:
            logger.warning("delete of department id=%s rejected (%s)", department_id, type(outcome).__name__)
        return outcome

    def check_delete(self, department_id: int) -> Union[Allowed, Blocked, NotFound]:
        conn = self._connect()
        try:
            if self._select(conn, department_id) is None:
                return NotFound(department_id)
            return self._guard.can_delete(conn, department_id)
        finally:
            conn.close()
