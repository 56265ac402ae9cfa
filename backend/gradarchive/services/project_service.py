"""Project service: filtered listing plus the document upload saga.

Row changes and document objects live in two stores that cannot share a
transaction, so writes that touch both follow a fixed order:

* create   insert row (flushed), upload object, commit.  A failed upload
           rolls the row back.
* update   upload the new object under a fresh key, update the row, commit.
           A failed commit deletes the new object; after a successful commit
           the old object is deleted.
* delete   delete row, commit, delete object.

Cleanup deletions that fail are logged and leave an orphaned object behind;
they never fail the request.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gradarchive.config import settings
from gradarchive.db.models import Department, Person, Project, Student, Supervisor
from gradarchive.errors import BadRequestError, store_call
from gradarchive.schemas.projects import ProjectFilters, ProjectIn
from gradarchive.services.lookups import not_found, require
from gradarchive.storage.base import DocumentStorage

logger = logging.getLogger("gradarchive.services.projects")

NO_FILE = "No file attached"


def _detailed():
    return select(Project).options(
        selectinload(Project.department).selectinload(Department.college),
        selectinload(Project.supervisor).selectinload(Supervisor.person),
        selectinload(Project.students).selectinload(Student.person),
    )


@store_call
async def list_projects(db: AsyncSession, filters: ProjectFilters) -> list[Project]:
    stmt = _detailed()
    if filters.id is not None:
        stmt = stmt.where(Project.id == str(filters.id))
    if filters.name:
        stmt = stmt.where(Project.name.icontains(filters.name, autoescape=True))
    if filters.year is not None:
        stmt = stmt.where(Project.year == filters.year)
    if filters.department is not None:
        stmt = stmt.where(Project.department_id == str(filters.department))
    if filters.college is not None:
        stmt = stmt.where(Project.department.has(Department.college_id == str(filters.college)))
    if filters.supervisor:
        stmt = stmt.where(
            Project.supervisor.has(
                Supervisor.person.has(Person.full_name.icontains(filters.supervisor, autoescape=True))
            )
        )
    if filters.student:
        stmt = stmt.where(
            Project.students.any(
                Student.person.has(Person.full_name.icontains(filters.student, autoescape=True))
            )
        )
    stmt = (
        stmt.order_by(Project.year.desc(), Project.name.asc())
        .offset(filters.offset)
        .limit(filters.page_size)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


@store_call
async def get_project(db: AsyncSession, project_id: str) -> Project:
    result = await db.execute(
        _detailed().where(Project.id == project_id).execution_options(populate_existing=True)
    )
    project = result.scalar_one_or_none()
    if project is None:
        raise not_found("project", project_id)
    return project


@store_call
async def document_url(storage: DocumentStorage, project: Project) -> str:
    return await storage.signed_url(project.document_path, settings.DOCUMENT_URL_EXPIRES_SECONDS)


async def _check_references(db: AsyncSession, data: ProjectIn) -> None:
    await require(db, Department, data.department_id, "department")
    await require(db, Supervisor, data.supervisor_id, "supervisor")


def _apply(project: Project, data: ProjectIn) -> None:
    project.name = data.name
    project.rate = data.rate
    project.year = data.year
    project.description = data.description
    project.document_caption = data.document_caption
    project.department_id = str(data.department_id)
    project.supervisor_id = str(data.supervisor_id)


async def _discard(storage: DocumentStorage, document_path: str) -> None:
    try:
        await storage.delete(document_path)
    except Exception:
        logger.warning("Could not delete document %s; object left orphaned", document_path, exc_info=True)


@store_call
async def create_project(
    db: AsyncSession,
    storage: DocumentStorage,
    data: ProjectIn,
    document: bytes | None,
    content_type: str | None = None,
) -> Project:
    if not document:
        raise BadRequestError(NO_FILE)
    await _check_references(db, data)

    project = Project(document_path=str(uuid.uuid4()))
    _apply(project, data)
    db.add(project)
    await db.flush()

    await storage.put(project.document_path, document, content_type)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        await _discard(storage, project.document_path)
        raise
    logger.info("Created project %s with document %s", project.id, project.document_path)
    return project


@store_call
async def update_project(
    db: AsyncSession,
    storage: DocumentStorage,
    project_id: str,
    data: ProjectIn,
    document: bytes | None = None,
    content_type: str | None = None,
) -> Project:
    project = await require(db, Project, project_id, "project")
    await _check_references(db, data)

    old_path = project.document_path
    new_path: str | None = None
    if document:
        new_path = str(uuid.uuid4())
        await storage.put(new_path, document, content_type)

    try:
        _apply(project, data)
        if new_path is not None:
            project.document_path = new_path
        await db.commit()
    except Exception:
        await db.rollback()
        if new_path is not None:
            await _discard(storage, new_path)
        raise

    if new_path is not None:
        logger.info("Project %s document replaced: %s -> %s", project.id, old_path, new_path)
        await _discard(storage, old_path)
    return project


@store_call
async def delete_project(db: AsyncSession, storage: DocumentStorage, project_id: str) -> Project:
    project = await require(db, Project, project_id, "project")
    await db.delete(project)
    await db.commit()
    await _discard(storage, project.document_path)
    return project
