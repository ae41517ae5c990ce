"""Transient values produced by the optimistic-concurrency protocol. Never persisted."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class FieldConflict:
    """One attempted field whose value differs from what is stored now."""
    field: str
    attempted: Any
    current: Any


@dataclass(frozen=True)
class ConflictReport:
    """
    Built inside a rejected update/delete and handed back to the caller.

    `current_version` is the version a retry must present. For a stale delete
    `attempted` is empty and `conflicts` is empty; the current values are
    informational so the client can re-confirm.
    """
    record_id: int
    attempted: Dict[str, Any]
    current_values: Dict[str, Any]
    conflicts: Tuple[FieldConflict, ...]
    current_version: int

    @property
    def conflicting_fields(self) -> Tuple[str, ...]:
        return tuple(c.field for c in self.conflicts)

    def conflict_for(self, field_name: str) -> Optional[FieldConflict]:
        for c in self.conflicts:
            if c.field == field_name:
                return c
        return None


@dataclass(frozen=True)
class Dependent:
    kind: str
    key: Any
    label: Optional[str] = None


@dataclass(frozen=True)
class DependencyBlock:
    record_id: int
    dependent_count: int
    dependents: Tuple[Dependent, ...] = field(default_factory=tuple)
