"""Student CRUD service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gradarchive.auth.passwords import hash_password
from gradarchive.db.models import Person, Project, Student
from gradarchive.errors import ConflictError, store_call
from gradarchive.schemas.students import StudentIn
from gradarchive.services import person_service
from gradarchive.services.lookups import conflict, flush_unique, not_found, require, row_exists


def _with_person():
    return select(Student).options(selectinload(Student.person))


@store_call
async def list_students(db: AsyncSession) -> list[Student]:
    result = await db.execute(_with_person().join(Student.person).order_by(Person.full_name))
    return list(result.scalars().all())


@store_call
async def get_student(db: AsyncSession, student_id: str) -> Student:
    result = await db.execute(
        _with_person()
        .where(Student.id == student_id)
        .execution_options(populate_existing=True)
    )
    student = result.scalar_one_or_none()
    if student is None:
        raise not_found("student", student_id)
    return student


async def _check(db: AsyncSession, data: StudentIn, exclude_id: str | None = None) -> None:
    if data.project_id is not None:
        await require(db, Project, data.project_id, "project")
    for column, field, value in (
        (Student.personal_email, "personal email", data.personal_email),
        (Student.username, "username", data.username),
    ):
        criteria = [column == value]
        if exclude_id is not None:
            criteria.append(Student.id != exclude_id)
        if await row_exists(db, *criteria):
            raise conflict("student", field, value)


def _unique_keys(data: StudentIn) -> tuple[tuple[str, ConflictError], ...]:
    return (
        ("personal_email", conflict("student", "personal email", data.personal_email)),
        ("username", conflict("student", "username", data.username)),
        person_service.unique_key(data.person),
    )


async def _add(db: AsyncSession, data: StudentIn) -> Student:
    await _check(db, data)
    person = await person_service.build_person(db, data.person)
    student = Student(
        person=person,
        personal_email=data.personal_email,
        username=data.username,
        hashed_password=await hash_password(data.password),
        project_id=str(data.project_id) if data.project_id else None,
    )
    db.add(student)
    await flush_unique(db, *_unique_keys(data))
    return student


@store_call
async def create_student(db: AsyncSession, data: StudentIn) -> Student:
    student = await _add(db, data)
    return await get_student(db, student.id)


@store_call
async def create_students(db: AsyncSession, items: list[StudentIn]) -> list[Student]:
    """Create every student in *items* or none of them."""
    created = [await _add(db, data) for data in items]
    return [await get_student(db, s.id) for s in created]


@store_call
async def update_student(db: AsyncSession, student_id: str, data: StudentIn) -> Student:
    student = await get_student(db, student_id)
    await _check(db, data, exclude_id=student.id)
    await person_service.apply_person(db, student.person, data.person)
    student.personal_email = data.personal_email
    student.username = data.username
    student.hashed_password = await hash_password(data.password)
    student.project_id = str(data.project_id) if data.project_id else None
    await flush_unique(db, *_unique_keys(data))
    return await get_student(db, student.id)


@store_call
async def delete_student(db: AsyncSession, student_id: str) -> Student:
    student = await get_student(db, student_id)
    await db.delete(student)
    await db.flush()
    return student
