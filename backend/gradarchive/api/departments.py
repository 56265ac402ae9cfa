"""Departments API router."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.api.pipeline import PipelineRoute, guarded, public
from gradarchive.db.engine import get_db
from gradarchive.db.models import DocType, PermissionType
from gradarchive.schemas.departments import DepartmentIn, DepartmentListResponse, DepartmentResponse
from gradarchive.services import department_service

router = APIRouter(route_class=PipelineRoute, tags=["departments"])

_DOC = DocType.DEPARTMENT


@router.get("", response_model=DepartmentListResponse, dependencies=[Depends(public())])
async def list_departments(db: AsyncSession = Depends(get_db)):
    return {"success": True, "departments": await department_service.list_departments(db)}


@router.get("/{department_id}", response_model=DepartmentResponse, dependencies=[Depends(public())])
async def get_department(department_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    department = await department_service.get_department(db, str(department_id))
    return {"success": True, "department": department}


@router.post(
    "",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_department(body: DepartmentIn, db: AsyncSession = Depends(get_db)):
    department = await department_service.create_department(db, body.name, str(body.college_id))
    await db.commit()
    return {"success": True, "department": department}


@router.put(
    "/{department_id}",
    response_model=DepartmentResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.UPDATE))],
)
async def update_department(
    department_id: uuid.UUID, body: DepartmentIn, db: AsyncSession = Depends(get_db)
):
    department = await department_service.update_department(
        db, str(department_id), body.name, str(body.college_id)
    )
    await db.commit()
    return {"success": True, "department": department}


@router.delete(
    "/{department_id}",
    response_model=DepartmentResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.DELETE))],
)
async def delete_department(department_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    department = await department_service.delete_department(db, str(department_id))
    await db.commit()
    return {"success": True, "department": department}
