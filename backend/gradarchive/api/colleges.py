"""Colleges API router.

Endpoints
---------
GET    /colleges          list with departments (public)
GET    /colleges/{id}     one college with departments (public)
POST   /colleges          create (CREATE COLLEGE)
PUT    /colleges/{id}     rename (UPDATE COLLEGE)
DELETE /colleges/{id}     delete; 409 while departments remain (DELETE COLLEGE)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.api.pipeline import PipelineRoute, guarded, public
from gradarchive.db.engine import get_db
from gradarchive.db.models import DocType, PermissionType
from gradarchive.schemas.colleges import (
    CollegeDetailResponse,
    CollegeIn,
    CollegeListResponse,
    CollegeResponse,
)
from gradarchive.services import college_service

router = APIRouter(route_class=PipelineRoute, tags=["colleges"])

_DOC = DocType.COLLEGE


@router.get("", response_model=CollegeListResponse, dependencies=[Depends(public())])
async def list_colleges(db: AsyncSession = Depends(get_db)):
    return {"success": True, "colleges": await college_service.list_colleges(db)}


@router.get("/{college_id}", response_model=CollegeDetailResponse, dependencies=[Depends(public())])
async def get_college(college_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    college = await college_service.get_college(db, str(college_id))
    return {"success": True, "college": college}


@router.post(
    "",
    response_model=CollegeResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_college(body: CollegeIn, db: AsyncSession = Depends(get_db)):
    college = await college_service.create_college(db, body.name)
    await db.commit()
    return {"success": True, "college": college}


@router.put(
    "/{college_id}",
    response_model=CollegeResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.UPDATE))],
)
async def update_college(college_id: uuid.UUID, body: CollegeIn, db: AsyncSession = Depends(get_db)):
    college = await college_service.update_college(db, str(college_id), body.name)
    await db.commit()
    return {"success": True, "college": college}


@router.delete(
    "/{college_id}",
    response_model=CollegeResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.DELETE))],
)
async def delete_college(college_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    college = await college_service.delete_college(db, str(college_id))
    await db.commit()
    return {"success": True, "college": college}
