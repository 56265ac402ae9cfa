"""Users API router.

Endpoints
---------
POST   /users/login                  username + password -> token (public)
POST   /users/{id}/logout            store an expired token (caller's own user)
POST   /users/{id}/refreshtoken      issue a fresh token (caller's own user)
GET    /users                        list (READ USER)
GET    /users/{id}                   one user (READ USER)
GET    /users/{id}/permissions       the user's grants (READ USER)
POST   /users                        create (CREATE USER)
PUT    /users/{id}                   update, token untouched (UPDATE USER)
DELETE /users/{id}                   delete with person and grants (DELETE USER)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.api.pipeline import PipelineRoute, acting_username, authenticated, guarded, public
from gradarchive.db.engine import get_db
from gradarchive.db.models import DocType, PermissionType
from gradarchive.schemas.permissions import PermissionListResponse
from gradarchive.schemas.users import (
    LoginIn,
    LoginResponse,
    TokenResponse,
    UserIn,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from gradarchive.services import permission_service, user_service

router = APIRouter(route_class=PipelineRoute, tags=["users"])

_DOC = DocType.USER


# ── Login & tokens ──────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(public())])
async def login(body: LoginIn, db: AsyncSession = Depends(get_db)):
    user, token = await user_service.login(db, body.username, body.password)
    await db.commit()
    return {"success": True, "user": user, "token": token}


@router.post("/{user_id}/logout", response_model=TokenResponse, dependencies=[Depends(authenticated())])
async def logout(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    username: str | None = Depends(acting_username),
):
    token = await user_service.logout(db, str(user_id), username)
    await db.commit()
    return {"success": True, "token": token}


@router.post(
    "/{user_id}/refreshtoken",
    response_model=TokenResponse,
    dependencies=[Depends(authenticated())],
)
async def refresh_token(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    username: str | None = Depends(acting_username),
):
    token = await user_service.refresh_token(db, str(user_id), username)
    await db.commit()
    return {"success": True, "token": token}


# ── CRUD ────────────────────────────────────────────────────────


@router.get("", response_model=UserListResponse, dependencies=[Depends(guarded(_DOC, PermissionType.READ))])
async def list_users(db: AsyncSession = Depends(get_db)):
    return {"success": True, "users": await user_service.list_users(db)}


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.READ))],
)
async def get_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return {"success": True, "user": await user_service.get_user(db, str(user_id))}


@router.get(
    "/{user_id}/permissions",
    response_model=PermissionListResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.READ))],
)
async def list_user_permissions(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    user = await user_service.get_user(db, str(user_id))
    permissions = await permission_service.list_permissions(db, user_id=user.id)
    return {"success": True, "permissions": permissions}


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_user(body: UserIn, db: AsyncSession = Depends(get_db)):
    user = await user_service.create_user(db, body)
    await db.commit()
    return {"success": True, "user": user}


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.UPDATE))],
)
async def update_user(user_id: uuid.UUID, body: UserUpdate, db: AsyncSession = Depends(get_db)):
    user = await user_service.update_user(db, str(user_id), body)
    await db.commit()
    return {"success": True, "user": user}


@router.delete(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.DELETE))],
)
async def delete_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    user = await user_service.delete_user(db, str(user_id))
    await db.commit()
    return {"success": True, "user": user}
