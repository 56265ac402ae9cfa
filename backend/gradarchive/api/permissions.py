"""Grants API router.  Every endpoint, reads included, needs a PERMISSION grant."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.api.pipeline import PipelineRoute, guarded
from gradarchive.db.engine import get_db
from gradarchive.db.models import DocType, PermissionType
from gradarchive.schemas.permissions import PermissionIn, PermissionListResponse, PermissionResponse
from gradarchive.services import permission_service

router = APIRouter(route_class=PipelineRoute, tags=["permissions"])

_DOC = DocType.PERMISSION


@router.get(
    "",
    response_model=PermissionListResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.READ))],
)
async def list_permissions(db: AsyncSession = Depends(get_db)):
    return {"success": True, "permissions": await permission_service.list_permissions(db)}


@router.get(
    "/{permission_id}",
    response_model=PermissionResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.READ))],
)
async def get_permission(permission_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    permission = await permission_service.get_permission(db, str(permission_id))
    return {"success": True, "permission": permission}


@router.post(
    "",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_permission(body: PermissionIn, db: AsyncSession = Depends(get_db)):
    permission = await permission_service.create_permission(db, body)
    await db.commit()
    return {"success": True, "permission": permission}


@router.post(
    "/many",
    response_model=PermissionListResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_permissions(body: list[PermissionIn], db: AsyncSession = Depends(get_db)):
    permissions = await permission_service.create_permissions(db, body)
    await db.commit()
    return {"success": True, "permissions": permissions}


@router.put(
    "/{permission_id}",
    response_model=PermissionResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.UPDATE))],
)
async def update_permission(
    permission_id: uuid.UUID, body: PermissionIn, db: AsyncSession = Depends(get_db)
):
    permission = await permission_service.update_permission(db, str(permission_id), body)
    await db.commit()
    return {"success": True, "permission": permission}


@router.delete(
    "/{permission_id}",
    response_model=PermissionResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.DELETE))],
)
async def delete_permission(permission_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    permission = await permission_service.delete_permission(db, str(permission_id))
    await db.commit()
    return {"success": True, "permission": permission}
