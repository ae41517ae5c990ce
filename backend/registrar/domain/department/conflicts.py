"""Field-level conflict detection between a rejected patch and the stored record."""
from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping

from registrar.domain.common.concurrency import ConflictReport, FieldConflict
from registrar.domain.department.models import Department
from registrar.domain.department.rules import parse_budget, parse_date


def _same_name(a: Any, b: Any) -> bool:
    if isinstance(a, str) and isinstance(b, str):
        return a.strip() == b.strip()
    return a == b


def _same_budget(a: Any, b: Any) -> bool:
    try:
        return parse_budget(a) == parse_budget(b)
    except ValueError:
        return a == b


def _same_date(a: Any, b: Any) -> bool:
    try:
        return parse_date(a) == parse_date(b)
    except ValueError:
        return a == b


def _same_instructor(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return a is None and b is None
    try:
        return int(a) == int(b)
    except (TypeError, ValueError):
        return a == b


_COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "name": _same_name,
    "budget": _same_budget,
    "start_date": _same_date,
    "instructor_id": _same_instructor,
}


def values_equal(field_name: str, attempted: Any, current: Any) -> bool:
    compare = _COMPARATORS.get(field_name)
    if compare is None:
        return attempted == current
    return compare(attempted, current)


def diff(attempted_patch: Mapping[str, Any], current_values: Mapping[str, Any]) -> List[FieldConflict]:
    """
    Compare only the fields the writer tried to change. A field the writer left
    alone is never reported, even if someone else changed it.
    """
    conflicts = []
    for field_name, attempted in attempted_patch.items():
        current = current_values.get(field_name)
        if not values_equal(field_name, attempted, current):
            conflicts.append(FieldConflict(field=field_name, attempted=attempted, current=current))
    return conflicts


def build_report(attempted_patch: Mapping[str, Any], current: Department) -> ConflictReport:
    current_values = current.values()
    return ConflictReport(
        record_id=current.department_id,
        attempted=dict(attempted_patch),
        current_values=current_values,
        conflicts=tuple(diff(attempted_patch, current_values)),
        current_version=current.version,
    )
