"""Pre-delete check refusing removal of a record other rows still point at."""
from __future__ import annotations
import sqlite3
from dataclasses import dataclass
from typing import List, Optional, Sequence

from registrar.core import config
from registrar.domain.common.concurrency import Dependent, DependencyBlock
from registrar.domain.common.result import Allowed, Blocked, GuardOutcome
from registrar.persistence.repositories.sqlite.versioned import checked_identifier


@dataclass(frozen=True)
class DependentSpec:
    """A table whose `foreign_key` column references the guarded record."""
    kind: str
    table: str
    foreign_key: str
    key_column: str
    label_column: Optional[str] = None


COURSES_OF_DEPARTMENT = DependentSpec(
    kind="course",
    table="courses",
    foreign_key="department_id",
    key_column="course_id",
    label_column="title",
)


class ReferentialGuard:
    """
    Counts dependents and samples the first few for display.

    `can_delete` runs on the caller's connection so it lives in the same
    transaction as the conditional delete that follows. The schema's foreign
    keys remain the final authority.
    """

    def __init__(self, dependents: Sequence[DependentSpec], sample_size: Optional[int] = None):
        self._dependents = tuple(dependents)
        self._sample_size = sample_size if sample_size is not None else config.DEPENDENT_SAMPLE_SIZE

    def can_delete(self, conn: sqlite3.Connection, record_id: int) -> GuardOutcome:
        total = 0
        sample: List[Dependent] = []
        for spec in self._dependents:
            table = checked_identifier(spec.table)
            fk = checked_identifier(spec.foreign_key)
            count = conn.execute(
                f"SELECT COUNT(*) FROM {table} WHERE {fk} = ?", (record_id,)
            ).fetchone()[0]
            if not count:
                continue
            total += count
            remaining = self._sample_size - len(sample)
            if remaining > 0:
                sample.extend(self._sample(conn, spec, record_id, remaining))

        if total:
            return Blocked(DependencyBlock(record_id=record_id, dependent_count=total, dependents=tuple(sample)))
        return Allowed(record_id)

    @staticmethod
    def _sample(conn: sqlite3.Connection, spec: DependentSpec, record_id: int, limit: int) -> List[Dependent]:
        key = checked_identifier(spec.key_column)
        label = checked_identifier(spec.label_column) if spec.label_column else "NULL"
        rows = conn.execute(
            f"SELECT {key} AS key, {label} AS label FROM {checked_identifier(spec.table)} "
            f"WHERE {checked_identifier(spec.foreign_key)} = ? ORDER BY {key} LIMIT ?",
            (record_id, limit),
        ).fetchall()
        return [Dependent(kind=spec.kind, key=r["key"], label=r["label"]) for r in rows]
