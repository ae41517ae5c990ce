"""Dependency injection container — wires implementations to interfaces."""
from __future__ import annotations
from functools import lru_cache

from registrar.application.course_app_service import CourseAppService
from registrar.application.department_app_service import DepartmentAppService
from registrar.persistence.repositories.sqlite.sqlite_course_repository import (
    SqliteCourseRepository,
    SqliteInstructorRepository,
)
from registrar.persistence.repositories.sqlite.sqlite_department_store import SqliteDepartmentStore


@lru_cache(maxsize=1)
def get_department_store() -> SqliteDepartmentStore:
    return SqliteDepartmentStore()


@lru_cache(maxsize=1)
def get_course_repo() -> SqliteCourseRepository:
    return SqliteCourseRepository()


@lru_cache(maxsize=1)
def get_instructor_repo() -> SqliteInstructorRepository:
    return SqliteInstructorRepository()


@lru_cache(maxsize=1)
def get_department_app_service() -> DepartmentAppService:
    return DepartmentAppService(
        store=get_department_store(),
        instructors=get_instructor_repo(),
        courses=get_course_repo(),
    )


@lru_cache(maxsize=1)
def get_course_app_service() -> CourseAppService:
    return CourseAppService(
        courses=get_course_repo(),
        instructors=get_instructor_repo(),
        departments=get_department_store(),
    )
