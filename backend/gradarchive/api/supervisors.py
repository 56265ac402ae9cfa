"""Supervisors API router."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.api.pipeline import PipelineRoute, guarded, public
from gradarchive.db.engine import get_db
from gradarchive.db.models import DocType, PermissionType
from gradarchive.schemas.supervisors import SupervisorIn, SupervisorListResponse, SupervisorResponse
from gradarchive.services import supervisor_service

router = APIRouter(route_class=PipelineRoute, tags=["supervisors"])

_DOC = DocType.SUPERVISOR


@router.get("", response_model=SupervisorListResponse, dependencies=[Depends(public())])
async def list_supervisors(db: AsyncSession = Depends(get_db)):
    return {"success": True, "supervisors": await supervisor_service.list_supervisors(db)}


@router.get("/{supervisor_id}", response_model=SupervisorResponse, dependencies=[Depends(public())])
async def get_supervisor(supervisor_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    supervisor = await supervisor_service.get_supervisor(db, str(supervisor_id))
    return {"success": True, "supervisor": supervisor}


@router.post(
    "",
    response_model=SupervisorResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_supervisor(body: SupervisorIn, db: AsyncSession = Depends(get_db)):
    supervisor = await supervisor_service.create_supervisor(db, body)
    await db.commit()
    return {"success": True, "supervisor": supervisor}


@router.post(
    "/many",
    response_model=SupervisorListResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_supervisors(body: list[SupervisorIn], db: AsyncSession = Depends(get_db)):
    supervisors = await supervisor_service.create_supervisors(db, body)
    await db.commit()
    return {"success": True, "supervisors": supervisors}


@router.put(
    "/{supervisor_id}",
    response_model=SupervisorResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.UPDATE))],
)
async def update_supervisor(
    supervisor_id: uuid.UUID, body: SupervisorIn, db: AsyncSession = Depends(get_db)
):
    supervisor = await supervisor_service.update_supervisor(db, str(supervisor_id), body)
    await db.commit()
    return {"success": True, "supervisor": supervisor}


@router.delete(
    "/{supervisor_id}",
    response_model=SupervisorResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.DELETE))],
)
async def delete_supervisor(supervisor_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    supervisor = await supervisor_service.delete_supervisor(db, str(supervisor_id))
    await db.commit()
    return {"success": True, "supervisor": supervisor}
