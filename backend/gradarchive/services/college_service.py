"""College CRUD service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gradarchive.db.models import College, Department
from gradarchive.errors import ConflictError, store_call
from gradarchive.services.lookups import conflict, flush_unique, not_found, require, row_exists


def _with_departments():
    return select(College).options(selectinload(College.departments))


@store_call
async def list_colleges(db: AsyncSession) -> list[College]:
    result = await db.execute(_with_departments().order_by(College.name))
    return list(result.scalars().all())


@store_call
async def get_college(db: AsyncSession, college_id: str) -> College:
    result = await db.execute(
        _with_departments()
        .where(College.id == college_id)
        .execution_options(populate_existing=True)
    )
    college = result.scalar_one_or_none()
    if college is None:
        raise not_found("college", college_id)
    return college


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: str | None = None) -> None:
    criteria = [College.name == name]
    if exclude_id is not None:
        criteria.append(College.id != exclude_id)
    if await row_exists(db, *criteria):
        raise conflict("college", "name", name)


@store_call
async def create_college(db: AsyncSession, name: str) -> College:
    await _ensure_name_free(db, name)
    college = College(name=name)
    db.add(college)
    await flush_unique(db, ("name", conflict("college", "name", name)))
    return college


@store_call
async def update_college(db: AsyncSession, college_id: str, name: str) -> College:
    college = await require(db, College, college_id, "college")
    await _ensure_name_free(db, name, exclude_id=college.id)
    college.name = name
    await flush_unique(db, ("name", conflict("college", "name", name)))
    return college


@store_call
async def delete_college(db: AsyncSession, college_id: str) -> College:
    college = await require(db, College, college_id, "college")
    if await row_exists(db, Department.college_id == college.id):
        raise ConflictError(f'The college "{college.name}" still has departments')
    await db.delete(college)
    await db.flush()
    return college
