"""Abstract repository interfaces for the records a department relates to."""
from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from registrar.domain.department.models import Course, Instructor


class CourseRepository(ABC):

    @abstractmethod
    def create(self, course: Course) -> Course:
        """Insert a course under its caller-assigned id."""
        ...

    @abstractmethod
    def get_by_id(self, course_id: int) -> Optional[Course]:
        ...

    @abstractmethod
    def list_by_department(self, department_id: int) -> List[Course]:
        ...

    @abstractmethod
    def delete(self, course_id: int) -> bool:
        """Returns True if a row was removed."""
        ...


class InstructorRepository(ABC):

    @abstractmethod
    def create(self, last_name: str, first_mid_name: str, hire_date: date) -> Instructor:
        ...

    @abstractmethod
    def get_by_id(self, instructor_id: int) -> Optional[Instructor]:
        ...
