"""SQLite implementations of CourseRepository and InstructorRepository."""
from __future__ import annotations
from datetime import date
from typing import List, Optional

from registrar.domain.department.models import Course, Instructor
from registrar.persistence.db import get_connection
from registrar.persistence.interfaces.course_repository import CourseRepository, InstructorRepository


def _row_to_course(row) -> Course:
    return Course(
        course_id=row["course_id"],
        title=row["title"],
        credits=row["credits"],
        department_id=row["department_id"],
    )


def _row_to_instructor(row) -> Instructor:
    return Instructor(
        instructor_id=row["instructor_id"],
        last_name=row["last_name"],
        first_mid_name=row["first_mid_name"],
        hire_date=date.fromisoformat(row["hire_date"]),
    )


class SqliteCourseRepository(CourseRepository):
    def __init__(self, db_path: Optional[str] = None):
        self._db_path = db_path

    def create(self, course: Course) -> Course:
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                """
                INSERT INTO courses (course_id, title, credits, department_id)
                VALUES (:course_id, :title, :credits, :department_id)
                """,
                {
                    "course_id": course.course_id,
                    "title": course.title,
                    "credits": course.credits,
                    "department_id": course.department_id,
                },
            )
        finally:
            conn.close()
        return course

    def get_by_id(self, course_id: int) -> Optional[Course]:
        conn = get_connection(self._db_path)
        try:
            row = conn.execute("SELECT * FROM courses WHERE course_id = ?", (course_id,)).fetchone()
        finally:
            conn.close()
        return _row_to_course(row) if row else None

    def list_by_department(self, department_id: int) -> List[Course]:
        conn = get_connection(self._db_path)
        try:
            rows = conn.execute(
                "SELECT * FROM courses WHERE department_id = ? ORDER BY course_id",
                (department_id,),
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_course(r) for r in rows]

    def delete(self, course_id: int) -> bool:
        conn = get_connection(self._db_path)
        try:
            cur = conn.execute("DELETE FROM courses WHERE course_id = ?", (course_id,))
        finally:
            conn.close()
        return cur.rowcount > 0


class SqliteInstructorRepository(InstructorRepository):
    def __init__(self, db_path: Optional[str] = None):
        self._db_path = db_path

    def create(self, last_name: str, first_mid_name: str, hire_date: date) -> Instructor:
        conn = get_connection(self._db_path)
        try:
            cur = conn.execute(
                "INSERT INTO instructors (last_name, first_mid_name, hire_date) VALUES (?, ?, ?)",
                (last_name, first_mid_name, hire_date.isoformat()),
            )
            instructor_id = cur.lastrowid
        finally:
            conn.close()
        return Instructor(
            instructor_id=instructor_id,
            last_name=last_name,
            first_mid_name=first_mid_name,
            hire_date=hire_date,
        )

    def get_by_id(self, instructor_id: int) -> Optional[Instructor]:
        conn = get_connection(self._db_path)
        try:
            row = conn.execute(
                "SELECT * FROM instructors WHERE instructor_id = ?", (instructor_id,)
            ).fetchone()
        finally:
            conn.close()
        return _row_to_instructor(row) if row else None
