"""
Client-side edit session for a versioned department.

Tracks a single edit attempt through submission, conflict discovery and
resolution. The version the client last observed travels inside an immutable
`EditSnapshot` that is replaced, never mutated, at each step.

    Clean → Submitting → Committed | Conflicted | Gone | Blocked
    Conflicted → Submitting (retry on the authoritative version) | Discarded
    Blocked | Gone → Discarded
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, Set, Tuple

from registrar.domain.common.concurrency import ConflictReport, DependencyBlock
from registrar.domain.common.result import (
    Blocked,
    Deleted,
    Gone,
    Invalid,
    NotFound,
    Stale,
    Updated,
)
from registrar.domain.department.conflicts import values_equal
from registrar.domain.department.models import Department


class SessionState(str, Enum):
    CLEAN = "clean"
    SUBMITTING = "submitting"
    COMMITTED = "committed"
    CONFLICTED = "conflicted"
    GONE = "gone"
    BLOCKED = "blocked"
    DISCARDED = "discarded"


class InvalidTransition(Exception):
    """A session method was called from a state that does not allow it."""


class RecordService(Protocol):
    def get_record(self, department_id: int) -> Any: ...
    def update_record(self, department_id: int, patch: Mapping[str, Any], expected_version: Any) -> Any: ...
    def delete_record(self, department_id: int, expected_version: Any) -> Any: ...


@dataclass(frozen=True)
class EditSnapshot:
    record_id: int
    base_version: int
    base_values: Mapping[str, Any]
    intended: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldComparison:
    field: str
    attempted: Any
    current: Any
    differs: bool


class ConflictResolutionSession:
    def __init__(self, service: RecordService, record: Department):
        self._service = service
        self.state = SessionState.CLEAN
        self.snapshot = EditSnapshot(
            record_id=record.department_id,
            base_version=record.version,
            base_values=record.values(),
        )
        self.record: Optional[Department] = record
        self.report: Optional[ConflictReport] = None
        self.block: Optional[DependencyBlock] = None
        self.errors: Tuple[str, ...] = ()
        self._operation = "update"
        self._rejected_versions: Set[int] = set()

    @classmethod
    def open(cls, service: RecordService, department_id: int) -> "ConflictResolutionSession":
        found = service.get_record(department_id)
        if isinstance(found, NotFound):
            raise LookupError(f"Department '{department_id}' not found.")
        return cls(service, found)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvalidTransition(f"Session is '{self.state.value}'; expected one of: {allowed}.")

    @property
    def expected_version(self) -> int:
        return self.snapshot.base_version

    @property
    def current_values(self) -> Dict[str, Any]:
        if self.report is not None:
            return dict(self.report.current_values)
        return dict(self.snapshot.base_values)

    @property
    def is_terminal(self) -> bool:
        return self.state in (SessionState.COMMITTED, SessionState.GONE, SessionState.DISCARDED)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def edit(self, **changes: Any) -> EditSnapshot:
        self._require(SessionState.CLEAN, SessionState.CONFLICTED)
        intended = dict(self.snapshot.intended)
        intended.update(changes)
        self.snapshot = replace(self.snapshot, intended=intended)
        return self.snapshot

    def submit(self) -> Any:
        self._require(SessionState.CLEAN)
        self._operation = "update"
        return self._send()

    def submit_delete(self) -> Any:
        self._require(SessionState.CLEAN)
        self._operation = "delete"
        return self._send()

    def _send(self) -> Any:
        version = self.snapshot.base_version
        if version in self._rejected_versions:
            raise InvalidTransition(f"Version {version} was already rejected as stale.")

        self.state = SessionState.SUBMITTING
        self.errors = ()
        if self._operation == "delete":
            outcome = self._service.delete_record(self.snapshot.record_id, version)
        else:
            outcome = self._service.update_record(
                self.snapshot.record_id, dict(self.snapshot.intended), version
            )
        self._absorb(outcome)
        return outcome

    def _absorb(self, outcome: Any) -> None:
        if isinstance(outcome, Updated):
            self.record = outcome.record
            self.report = None
            self.snapshot = EditSnapshot(
                record_id=outcome.record.department_id,
                base_version=outcome.record.version,
                base_values=outcome.record.values(),
            )
            self.state = SessionState.COMMITTED
        elif isinstance(outcome, Deleted):
            self.record = None
            self.state = SessionState.COMMITTED
        elif isinstance(outcome, Stale):
            self._rejected_versions.add(self.snapshot.base_version)
            self.report = outcome.report
            self.state = SessionState.CONFLICTED
        elif isinstance(outcome, (Gone, NotFound)):
            self.record = None
            self.report = None
            self.state = SessionState.GONE
        elif isinstance(outcome, Blocked):
            self.block = outcome.block
            self.state = SessionState.BLOCKED
        elif isinstance(outcome, Invalid):
            # rejected before the store; the user corrects and resubmits
            self.errors = outcome.errors
            self.state = SessionState.CLEAN
        else:
            raise TypeError(f"Unexpected outcome: {outcome!r}")

    # ------------------------------------------------------------------
    # Conflict resolution
    # ------------------------------------------------------------------
    def comparison(self) -> List[FieldComparison]:
        """Per field: what this session tried to save next to what is stored now."""
        self._require(SessionState.CONFLICTED)
        current = self.report.current_values
        fields = self.report.attempted or current
        rows = []
        for name in fields:
            attempted = self.report.attempted.get(name, current.get(name))
            rows.append(FieldComparison(
                field=name,
                attempted=attempted,
                current=current.get(name),
                differs=not values_equal(name, attempted, current.get(name)),
            ))
        return rows

    def retry(self, reapply: bool = True) -> Any:
        """
        Rebase onto the authoritative version from the conflict report.

        With `reapply` the intended values are resubmitted on top of the fresh
        snapshot straight away. Without it the session returns to CLEAN on the
        fresh snapshot with nothing pending, so the user can edit again.
        """
        self._require(SessionState.CONFLICTED)
        fresh_version = self.report.current_version
        if fresh_version in self._rejected_versions:
            raise InvalidTransition(f"Version {fresh_version} was already rejected as stale.")

        self.snapshot = EditSnapshot(
            record_id=self.snapshot.record_id,
            base_version=fresh_version,
            base_values=dict(self.report.current_values),
            intended=dict(self.snapshot.intended) if reapply else {},
        )
        self.report = None
        if not reapply:
            self.state = SessionState.CLEAN
            return None
        return self._send()

    def discard(self) -> None:
        self._require(
            SessionState.CLEAN,
            SessionState.CONFLICTED,
            SessionState.GONE,
            SessionState.BLOCKED,
        )
        self.snapshot = replace(self.snapshot, intended={})
        self.state = SessionState.DISCARDED
