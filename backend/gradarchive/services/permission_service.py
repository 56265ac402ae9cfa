"""Grant CRUD service.

Grants are not unique: the same (user, doc_type, permission_type) may be
stored more than once, and any one of them is enough to allow a request.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.db.models import Permission, User
from gradarchive.errors import store_call
from gradarchive.schemas.permissions import PermissionIn
from gradarchive.services.lookups import require


@store_call
async def list_permissions(db: AsyncSession, user_id: str | None = None) -> list[Permission]:
    stmt = select(Permission).order_by(Permission.created_at, Permission.id)
    if user_id is not None:
        stmt = stmt.where(Permission.user_id == user_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


@store_call
async def get_permission(db: AsyncSession, permission_id: str) -> Permission:
    return await require(db, Permission, permission_id, "permission")


async def _add(db: AsyncSession, data: PermissionIn) -> Permission:
    await require(db, User, data.user_id, "user")
    permission = Permission(
        user_id=str(data.user_id),
        doc_type=data.doc_type,
        permission_type=data.permission_type,
    )
    db.add(permission)
    await db.flush()
    return permission


@store_call
async def create_permission(db: AsyncSession, data: PermissionIn) -> Permission:
    return await _add(db, data)


@store_call
async def create_permissions(db: AsyncSession, items: list[PermissionIn]) -> list[Permission]:
    """Create every grant in *items* or none of them."""
    return [await _add(db, data) for data in items]


@store_call
async def update_permission(db: AsyncSession, permission_id: str, data: PermissionIn) -> Permission:
    permission = await require(db, Permission, permission_id, "permission")
    await require(db, User, data.user_id, "user")
    permission.user_id = str(data.user_id)
    permission.doc_type = data.doc_type
    permission.permission_type = data.permission_type
    await db.flush()
    return permission


@store_call
async def delete_permission(db: AsyncSession, permission_id: str) -> Permission:
    permission = await require(db, Permission, permission_id, "permission")
    await db.delete(permission)
    await db.flush()
    return permission
