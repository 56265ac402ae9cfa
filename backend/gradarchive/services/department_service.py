"""Department CRUD service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gradarchive.db.models import College, Department, Person, Project
from gradarchive.errors import ConflictError, store_call
from gradarchive.services.lookups import conflict, flush_unique, not_found, require, row_exists


def _with_college():
    return select(Department).options(selectinload(Department.college))


@store_call
async def list_departments(db: AsyncSession) -> list[Department]:
    result = await db.execute(_with_college().order_by(Department.name))
    return list(result.scalars().all())


@store_call
async def get_department(db: AsyncSession, department_id: str) -> Department:
    result = await db.execute(
        _with_college()
        .where(Department.id == department_id)
        .execution_options(populate_existing=True)
    )
    department = result.scalar_one_or_none()
    if department is None:
        raise not_found("department", department_id)
    return department


async def _ensure_name_free(
    db: AsyncSession, college_id: str, name: str, exclude_id: str | None = None
) -> None:
    criteria = [Department.college_id == college_id, Department.name == name]
    if exclude_id is not None:
        criteria.append(Department.id != exclude_id)
    if await row_exists(db, *criteria):
        raise conflict("department", "name", name)


@store_call
async def create_department(db: AsyncSession, name: str, college_id: str) -> Department:
    await require(db, College, college_id, "college")
    await _ensure_name_free(db, college_id, name)
    department = Department(name=name, college_id=college_id)
    db.add(department)
    await flush_unique(db, ("name", conflict("department", "name", name)))
    return await get_department(db, department.id)


@store_call
async def update_department(
    db: AsyncSession, department_id: str, name: str, college_id: str
) -> Department:
    department = await require(db, Department, department_id, "department")
    await require(db, College, college_id, "college")
    await _ensure_name_free(db, college_id, name, exclude_id=department.id)
    department.name = name
    department.college_id = college_id
    await flush_unique(db, ("name", conflict("department", "name", name)))
    return await get_department(db, department.id)


@store_call
async def delete_department(db: AsyncSession, department_id: str) -> Department:
    department = await get_department(db, department_id)
    if await row_exists(db, Person.department_id == department.id) or await row_exists(
        db, Project.department_id == department.id
    ):
        raise ConflictError(f'The department "{department.name}" still has people or projects')
    await db.delete(department)
    await db.flush()
    return department
