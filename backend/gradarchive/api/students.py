"""Students API router."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.api.pipeline import PipelineRoute, guarded, public
from gradarchive.db.engine import get_db
from gradarchive.db.models import DocType, PermissionType
from gradarchive.schemas.students import StudentIn, StudentListResponse, StudentResponse
from gradarchive.services import student_service

router = APIRouter(route_class=PipelineRoute, tags=["students"])

_DOC = DocType.STUDENT


@router.get("", response_model=StudentListResponse, dependencies=[Depends(public())])
async def list_students(db: AsyncSession = Depends(get_db)):
    return {"success": True, "students": await student_service.list_students(db)}


@router.get("/{student_id}", response_model=StudentResponse, dependencies=[Depends(public())])
async def get_student(student_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    student = await student_service.get_student(db, str(student_id))
    return {"success": True, "student": student}


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_student(body: StudentIn, db: AsyncSession = Depends(get_db)):
    student = await student_service.create_student(db, body)
    await db.commit()
    return {"success": True, "student": student}


@router.post(
    "/many",
    response_model=StudentListResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_students(body: list[StudentIn], db: AsyncSession = Depends(get_db)):
    students = await student_service.create_students(db, body)
    await db.commit()
    return {"success": True, "students": students}


@router.put(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.UPDATE))],
)
async def update_student(student_id: uuid.UUID, body: StudentIn, db: AsyncSession = Depends(get_db)):
    student = await student_service.update_student(db, str(student_id), body)
    await db.commit()
    return {"success": True, "student": student}


@router.delete(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.DELETE))],
)
async def delete_student(student_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    student = await student_service.delete_student(db, str(student_id))
    await db.commit()
    return {"success": True, "student": student}
