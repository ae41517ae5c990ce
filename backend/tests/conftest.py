"""Shared fixtures: every test gets its own on-disk SQLite database."""
from datetime import date
from decimal import Decimal

import pytest

from registrar.application.course_app_service import CourseAppService
from registrar.application.department_app_service import DepartmentAppService
from registrar.persistence.db import init_db
from registrar.persistence.repositories.sqlite.sqlite_course_repository import (
    SqliteCourseRepository,
    SqliteInstructorRepository,
)
from registrar.persistence.repositories.sqlite.sqlite_department_store import SqliteDepartmentStore


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "registrar.db")
    init_db(path)
    return path


@pytest.fixture
def store(db_path):
    return SqliteDepartmentStore(db_path)


@pytest.fixture
def course_repo(db_path):
    return SqliteCourseRepository(db_path)


@pytest.fixture
def instructor_repo(db_path):
    return SqliteInstructorRepository(db_path)


@pytest.fixture
def service(store, instructor_repo, course_repo):
    return DepartmentAppService(store=store, instructors=instructor_repo, courses=course_repo)


@pytest.fixture
def course_service(store, course_repo, instructor_repo):
    return CourseAppService(courses=course_repo, instructors=instructor_repo, departments=store)


@pytest.fixture
def economics(store):
    return store.create({
        "name": "Economics",
        "budget": Decimal("350000"),
        "start_date": date(2007, 9, 1),
    })
