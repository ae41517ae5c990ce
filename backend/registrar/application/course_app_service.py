"""Application service for the records departments relate to: courses and instructors."""
from __future__ import annotations
import sqlite3
from datetime import date
from typing import Any, List, Mapping, Union

from registrar.domain.common.result import Created, Invalid, NotFound, Result
from registrar.domain.department.models import Course, Instructor
from registrar.domain.department.rules import parse_date
from registrar.persistence.interfaces.course_repository import CourseRepository, InstructorRepository
from registrar.persistence.interfaces.department_store import DepartmentStore


def validate_course(data: Mapping[str, Any]) -> Result[Course]:
    errors = []
    course_id = data.get("course_id")
    if isinstance(course_id, bool) or not isinstance(course_id, int) or course_id < 1:
        errors.append("'course_id' must be a positive integer.")
    credits = data.get("credits")
    if isinstance(credits, bool) or not isinstance(credits, int) or not 0 <= credits <= 5:
        errors.append("'credits' must be between 0 and 5.")
    title = data.get("title")
    if title is not None and (not isinstance(title, str) or not 1 <= len(title.strip()) <= 100):
        errors.append("'title' must be between 1 and 100 characters.")
    department_id = data.get("department_id")
    if isinstance(department_id, bool) or not isinstance(department_id, int) or department_id < 1:
        errors.append("'department_id' must be a positive integer.")
    if errors:
        return Result.fail(*errors)
    return Result.ok(Course(
        course_id=course_id,
        title=title.strip() if title else None,
        credits=credits,
        department_id=department_id,
    ))


class CourseAppService:
    def __init__(self, courses: CourseRepository, instructors: InstructorRepository, departments: DepartmentStore):
        self._courses = courses
        self._instructors = instructors
        self._departments = departments

    def add_course(self, data: Mapping[str, Any]) -> Union[Created, NotFound, Invalid]:
        validation = validate_course(data)
        if not validation.is_success:
            return Invalid(validation.errors)
        course = validation.value
        if self._departments.read(course.department_id) is None:
            return NotFound(course.department_id)
        if self._courses.get_by_id(course.course_id) is not None:
            return Invalid((f"Course '{course.course_id}' already exists.",))
        try:
            return Created(self._courses.create(course))
        except sqlite3.IntegrityError as e:
            # department deleted or id taken after the checks above
            return Invalid((f"Course could not be saved: {e}",))

    def remove_course(self, course_id: int) -> bool:
        return self._courses.delete(course_id)

    def list_courses(self, department_id: int) -> List[Course]:
        return self._courses.list_by_department(department_id)

    def add_instructor(self, data: Mapping[str, Any]) -> Union[Created, Invalid]:
        last_name = (data.get("last_name") or "").strip()
        first_mid_name = (data.get("first_mid_name") or "").strip()
        if not last_name or not first_mid_name:
            return Invalid(("'last_name' and 'first_mid_name' are required.",))
        try:
            hire_date = parse_date(data.get("hire_date") or date.today())
        except ValueError:
            return Invalid(("'hire_date' must be a valid date (YYYY-MM-DD).",))
        instructor: Instructor = self._instructors.create(last_name, first_mid_name, hire_date)
        return Created(instructor)
