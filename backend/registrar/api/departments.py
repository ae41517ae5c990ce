"""Department API endpoints — maps concurrency outcomes onto HTTP statuses."""
from __future__ import annotations
from datetime import date
from decimal import Decimal
import re
from typing import Any, Mapping, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status
from pydantic import BaseModel, StrictInt

from registrar.api.courses import serialize_course, serialize_instructor
from registrar.application.department_app_service import DepartmentAppService
from registrar.container import get_department_app_service
from registrar.domain.common.concurrency import ConflictReport, DependencyBlock
from registrar.domain.common.result import (
    Blocked,
    Created,
    Deleted,
    Gone,
    Invalid,
    NotFound,
    Stale,
    Updated,
)
from registrar.domain.department.models import Department, DepartmentDetail

router = APIRouter(tags=["departments"])


# ------------------------------------------------------------------
# Pydantic schemas
# ------------------------------------------------------------------
class DepartmentCreateBody(BaseModel):
    name: str
    budget: Decimal
    start_date: date
    instructor_id: Optional[int] = None


class DepartmentUpdateBody(BaseModel):
    name: Optional[str] = None
    budget: Optional[Decimal] = None
    start_date: Optional[date] = None
    instructor_id: Optional[int] = None
    version: StrictInt


# ------------------------------------------------------------------
# Serializers
# ------------------------------------------------------------------
def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def _serialize_values(values: Mapping[str, Any]) -> dict:
    return {k: _json_value(v) for k, v in values.items()}


def _serialize_department(d: Department) -> dict:
    return {
        "department_id": d.department_id,
        "name": d.name,
        "budget": _json_value(d.budget),
        "start_date": _json_value(d.start_date),
        "instructor_id": d.instructor_id,
        "version": d.version,
    }


def _serialize_detail(detail: DepartmentDetail) -> dict:
    data = _serialize_department(detail.department)
    data["administrator"] = serialize_instructor(detail.administrator) if detail.administrator else None
    data["courses"] = [serialize_course(c) for c in detail.courses]
    return data


def _serialize_report(r: ConflictReport) -> dict:
    return {
        "record_id": r.record_id,
        "current_version": r.current_version,
        "attempted": _serialize_values(r.attempted),
        "current_values": _serialize_values(r.current_values),
        "conflicts": [
            {"field": c.field, "attempted": _json_value(c.attempted), "current": _json_value(c.current)}
            for c in r.conflicts
        ],
    }


def _serialize_block(b: DependencyBlock) -> dict:
    return {
        "record_id": b.record_id,
        "dependent_count": b.dependent_count,
        "dependents": [{"kind": d.kind, "key": d.key, "label": d.label} for d in b.dependents],
    }


def _raise_for(outcome: Any, department_id: int) -> None:
    """Turn every non-success outcome into the matching HTTP error."""
    if isinstance(outcome, Invalid):
        raise HTTPException(status_code=400, detail={"error": "invalid", "messages": list(outcome.errors)})
    if isinstance(outcome, Stale):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "conflict",
                "message": "The department was modified by another user after you loaded it.",
                "report": _serialize_report(outcome.report),
            },
        )
    if isinstance(outcome, Blocked):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "blocked",
                "message": "The department still has courses assigned to it.",
                "block": _serialize_block(outcome.block),
            },
        )
    if isinstance(outcome, Gone):
        raise HTTPException(
            status_code=404,
            detail={"error": "gone", "message": f"Department '{department_id}' was deleted by another user."},
        )
    if isinstance(outcome, NotFound):
        raise HTTPException(
            status_code=404,
            detail={"error": "not_found", "message": f"Department '{department_id}' not found."},
        )


# An ETag-style token: 3 or "3"
_VERSION_TOKEN = re.compile(r'^"?(\d+)"?$')


def _expected_version(query_version: Optional[str], if_match: Optional[str]) -> int:
    """Version from `?version=` or an `If-Match` header; one of them is required."""
    tokens = [t.strip() for t in (query_version, if_match) if t is not None]
    if not tokens:
        raise HTTPException(
            status_code=422,
            detail="The version last observed is required as ?version= or an If-Match header.",
        )
    versions = set()
    for token in tokens:
        match = _VERSION_TOKEN.match(token)
        if not match:
            raise HTTPException(status_code=422, detail=f"Malformed version token: {token!r}")
        versions.add(int(match.group(1)))
    if len(versions) > 1:
        raise HTTPException(status_code=400, detail="?version= and If-Match disagree.")
    return versions.pop()


# ------------------------------------------------------------------
# Health check
# ------------------------------------------------------------------
@router.get("/health")
def health():
    return {"status": "ok"}


# ------------------------------------------------------------------
# Department endpoints
# ------------------------------------------------------------------
@router.get("/departments/")
def list_departments(svc: DepartmentAppService = Depends(get_department_app_service)):
    return [_serialize_department(d) for d in svc.list_records()]


@router.post("/departments/", status_code=status.HTTP_201_CREATED)
def create_department(
    body: DepartmentCreateBody,
    svc: DepartmentAppService = Depends(get_department_app_service),
):
    result = svc.create_record(body.model_dump())
    if not isinstance(result, Created):
        _raise_for(result, 0)
    return _serialize_department(result.record)


@router.get("/departments/{department_id}")
def get_department(
    department_id: int,
    response: Response,
    svc: DepartmentAppService = Depends(get_department_app_service),
):
    result = svc.get_detail(department_id)
    _raise_for(result, department_id)
    response.headers["ETag"] = f'"{result.department.version}"'
    return _serialize_detail(result)


@router.put("/departments/{department_id}")
def update_department(
    department_id: int,
    body: DepartmentUpdateBody,
    svc: DepartmentAppService = Depends(get_department_app_service),
):
    patch = body.model_dump(exclude_unset=True, exclude={"version"})
    result = svc.update_record(department_id, patch, body.version)
    if not isinstance(result, Updated):
        _raise_for(result, department_id)
    return _serialize_department(result.record)


@router.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(
    department_id: int,
    version: Optional[str] = Query(None, description="Version the client last observed"),
    if_match: Optional[str] = Header(None),
    svc: DepartmentAppService = Depends(get_department_app_service),
):
    result = svc.delete_record(department_id, _expected_version(version, if_match))
    if not isinstance(result, Deleted):
        _raise_for(result, department_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/departments/{department_id}/delete-check")
def check_delete(
    department_id: int,
    svc: DepartmentAppService = Depends(get_department_app_service),
):
    result = svc.check_delete(department_id)
    if isinstance(result, NotFound):
        _raise_for(result, department_id)
    if isinstance(result, Blocked):
        return {"allowed": False, "block": _serialize_block(result.block)}
    return {"allowed": True, "block": None}
