"""Course and instructor endpoints — the records departments depend on."""
from __future__ import annotations
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from registrar.application.course_app_service import CourseAppService
from registrar.container import get_course_app_service
from registrar.domain.common.result import Created, Invalid, NotFound
from registrar.domain.department.models import Course, Instructor

router = APIRouter(tags=["courses"])


class CourseBody(BaseModel):
    course_id: int
    title: Optional[str] = None
    credits: int
    department_id: int


class InstructorBody(BaseModel):
    last_name: str
    first_mid_name: str
    hire_date: Optional[date] = None


def serialize_course(c: Course) -> dict:
    return {
        "course_id": c.course_id,
        "title": c.title,
        "credits": c.credits,
        "department_id": c.department_id,
    }


def serialize_instructor(i: Instructor) -> dict:
    return {
        "instructor_id": i.instructor_id,
        "last_name": i.last_name,
        "first_mid_name": i.first_mid_name,
        "full_name": i.full_name,
        "hire_date": i.hire_date.isoformat(),
    }


@router.post("/courses/", status_code=status.HTTP_201_CREATED)
def create_course(body: CourseBody, svc: CourseAppService = Depends(get_course_app_service)):
    result = svc.add_course(body.model_dump())
    if isinstance(result, NotFound):
        raise HTTPException(status_code=404, detail=f"Department '{result.record_id}' not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.error)
    return serialize_course(result.record)


@router.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: int, svc: CourseAppService = Depends(get_course_app_service)):
    if not svc.remove_course(course_id):
        raise HTTPException(status_code=404, detail=f"Course '{course_id}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/departments/{department_id}/courses")
def list_department_courses(department_id: int, svc: CourseAppService = Depends(get_course_app_service)):
    return [serialize_course(c) for c in svc.list_courses(department_id)]


@router.post("/instructors/", status_code=status.HTTP_201_CREATED)
def create_instructor(body: InstructorBody, svc: CourseAppService = Depends(get_course_app_service)):
    result = svc.add_instructor(body.model_dump())
    if not isinstance(result, Created):
        raise HTTPException(status_code=400, detail=result.error)
    return serialize_instructor(result.record)
