"""Personal details owned by supervisors, students and users.

A person never exists on its own: it is created, updated and deleted through
its owner, so these helpers are not exposed as endpoints.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.db.models import Department, Person
from gradarchive.errors import ConflictError
from gradarchive.schemas.people import PersonIn
from gradarchive.services.lookups import conflict, require, row_exists


async def _check(db: AsyncSession, data: PersonIn, exclude_id: str | None = None) -> None:
    await require(db, Department, data.department_id, "department")
    criteria = [Person.college_email == data.college_email]
    if exclude_id is not None:
        criteria.append(Person.id != exclude_id)
    if await row_exists(db, *criteria):
        raise conflict("person", "college email", data.college_email)


def unique_key(data: PersonIn) -> tuple[str, ConflictError]:
    """The person's unique column and the conflict reported when it is taken."""
    return "college_email", conflict("person", "college email", data.college_email)


async def build_person(db: AsyncSession, data: PersonIn) -> Person:
    """Return a new, unsaved :class:`Person` after checking its references."""
    await _check(db, data)
    return Person(
        full_name=data.full_name,
        date_of_birth=data.date_of_birth,
        college_email=data.college_email,
        gender=data.gender,
        department_id=str(data.department_id),
    )


async def apply_person(db: AsyncSession, person: Person, data: PersonIn) -> Person:
    """Overwrite *person* in place with *data*."""
    await _check(db, data, exclude_id=person.id)
    person.full_name = data.full_name
    person.date_of_birth = data.date_of_birth
    person.college_email = data.college_email
    person.gender = data.gender
    person.department_id = str(data.department_id)
    return person
