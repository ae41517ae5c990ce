"""Application service — orchestrates validate → compare-and-swap store call."""
from __future__ import annotations
from typing import Any, List, Mapping, Union

from registrar.core.logging_utils import get_logger
from registrar.domain.common.result import (
    Allowed,
    Blocked,
    Created,
    DeleteOutcome,
    Invalid,
    NotFound,
    Result,
    UpdateOutcome,
)
from registrar.domain.department.models import Department, DepartmentDetail
from registrar.domain.department.rules import (
    validate_department_content,
    validate_expected_version,
    validate_patch,
)
from registrar.persistence.interfaces.course_repository import CourseRepository, InstructorRepository
from registrar.persistence.interfaces.department_store import DepartmentStore

logger = get_logger(__name__)


class DepartmentAppService:
    def __init__(self, store: DepartmentStore, instructors: InstructorRepository, courses: CourseRepository):
        self._store = store
        self._instructors = instructors
        self._courses = courses

    def _check_administrator(self, values: Mapping[str, Any]) -> Result[Mapping[str, Any]]:
        instructor_id = values.get("instructor_id")
        if instructor_id is not None and self._instructors.get_by_id(instructor_id) is None:
            return Result.fail(f"Instructor '{instructor_id}' does not exist.")
        return Result.ok(values)

    def _invalid(self, operation: str, department_id: Any, result: Result) -> Invalid:
        logger.info("%s rejected for department id=%s: %s", operation, department_id, result.error)
        return Invalid(result.errors)

    # ------------------------------------------------------------------
    # CREATE
    # ------------------------------------------------------------------
    def create_record(self, data: Mapping[str, Any]) -> Union[Created, Invalid]:
        validation = validate_department_content(data)
        if validation.is_success:
            validation = self._check_administrator(validation.value)
        if not validation.is_success:
            return self._invalid("create", None, validation)
        return Created(self._store.create(validation.value))

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    def get_record(self, department_id: int) -> Union[Department, NotFound]:
        department = self._store.read(department_id)
        if department is None:
            return NotFound(department_id)
        return department

    def get_detail(self, department_id: int) -> Union[DepartmentDetail, NotFound]:
        department = self._store.read(department_id)
        if department is None:
            return NotFound(department_id)
        administrator = None
        if department.instructor_id is not None:
            administrator = self._instructors.get_by_id(department.instructor_id)
        return DepartmentDetail(
            department=department,
            administrator=administrator,
            courses=tuple(self._courses.list_by_department(department_id)),
        )

    def list_records(self) -> List[Department]:
        return self._store.list_all()

    # ------------------------------------------------------------------
    # UPDATE
    # ------------------------------------------------------------------
    def update_record(self, department_id: int, patch: Mapping[str, Any], expected_version: Any) -> UpdateOutcome:
        version_check = validate_expected_version(expected_version)
        if not version_check.is_success:
            return self._invalid("update", department_id, version_check)

        validation = validate_patch(patch)
        if validation.is_success:
            validation = self._check_administrator(validation.value)
        if not validation.is_success:
            return self._invalid("update", department_id, validation)

        return self._store.update(department_id, validation.value, version_check.value)

    # ------------------------------------------------------------------
    # DELETE
    # ------------------------------------------------------------------
    def delete_record(self, department_id: int, expected_version: Any) -> DeleteOutcome:
        version_check = validate_expected_version(expected_version)
        if not version_check.is_success:
            return self._invalid("delete", department_id, version_check)
        return self._store.delete(department_id, version_check.value)

    def check_delete(self, department_id: int) -> Union[Allowed, Blocked, NotFound]:
        return self._store.check_delete(department_id)
