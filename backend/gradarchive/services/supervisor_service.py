"""Supervisor CRUD service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gradarchive.db.models import Person, Project, Supervisor
from gradarchive.errors import ConflictError, store_call
from gradarchive.schemas.supervisors import SupervisorIn
from gradarchive.services import person_service
from gradarchive.services.lookups import flush_unique, not_found, row_exists


def _with_person():
    return select(Supervisor).options(selectinload(Supervisor.person))


@store_call
async def list_supervisors(db: AsyncSession) -> list[Supervisor]:
    result = await db.execute(
        _with_person().join(Supervisor.person).order_by(Person.full_name)
    )
    return list(result.scalars().all())


@store_call
async def get_supervisor(db: AsyncSession, supervisor_id: str) -> Supervisor:
    result = await db.execute(
        _with_person()
        .where(Supervisor.id == supervisor_id)
        .execution_options(populate_existing=True)
    )
    supervisor = result.scalar_one_or_none()
    if supervisor is None:
        raise not_found("supervisor", supervisor_id)
    return supervisor


async def _add(db: AsyncSession, data: SupervisorIn) -> Supervisor:
    person = await person_service.build_person(db, data.person)
    supervisor = Supervisor(person=person)
    db.add(supervisor)
    await flush_unique(db, person_service.unique_key(data.person))
    return supervisor


@store_call
async def create_supervisor(db: AsyncSession, data: SupervisorIn) -> Supervisor:
    supervisor = await _add(db, data)
    return await get_supervisor(db, supervisor.id)


@store_call
async def create_supervisors(db: AsyncSession, items: list[SupervisorIn]) -> list[Supervisor]:
    """Create every supervisor in *items* or none of them."""
    created = [await _add(db, data) for data in items]
    return [await get_supervisor(db, s.id) for s in created]


@store_call
async def update_supervisor(db: AsyncSession, supervisor_id: str, data: SupervisorIn) -> Supervisor:
    supervisor = await get_supervisor(db, supervisor_id)
    await person_service.apply_person(db, supervisor.person, data.person)
    await flush_unique(db, person_service.unique_key(data.person))
    return await get_supervisor(db, supervisor.id)


@store_call
async def delete_supervisor(db: AsyncSession, supervisor_id: str) -> Supervisor:
    supervisor = await get_supervisor(db, supervisor_id)
    if await row_exists(db, Project.supervisor_id == supervisor.id):
        raise ConflictError(
            f'The supervisor "{supervisor.person.full_name}" still supervises projects'
        )
    await db.delete(supervisor)
    await db.flush()
    return supervisor
