"""Department domain models — pure Python, no DB or HTTP dependencies."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

# Fields a patch may carry. Identity and version are never patchable.
MUTABLE_FIELDS = ("name", "budget", "start_date", "instructor_id")


@dataclass(frozen=True)
class Department:
    department_id: int
    name: str
    budget: Decimal
    start_date: date
    instructor_id: Optional[int] = None  # administrator
    version: int = 1

    def values(self) -> Dict[str, Any]:
        return {f: getattr(self, f) for f in MUTABLE_FIELDS}


@dataclass(frozen=True)
class Instructor:
    instructor_id: int
    last_name: str
    first_mid_name: str
    hire_date: date

    @property
    def full_name(self) -> str:
        return f"{self.first_mid_name} {self.last_name}"


@dataclass(frozen=True)
class Course:
    course_id: int  # assigned by the registrar, not generated
    title: Optional[str]
    credits: int
    department_id: int


@dataclass(frozen=True)
class DepartmentDetail:
    """A department with its administrator and courses, for the detail view."""
    department: Department
    administrator: Optional[Instructor] = None
    courses: Tuple[Course, ...] = ()
