"""Projects API router.

Writes are ``multipart/form-data``: the project fields plus a PDF in the
``document`` part.  Reading one project also returns a time-limited signed
URL for its document.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.api.pipeline import PipelineRoute, guarded, public
from gradarchive.db.engine import get_db
from gradarchive.db.models import DocType, PermissionType
from gradarchive.schemas.common import parse_or_reject
from gradarchive.schemas.projects import (
    ProjectDocumentResponse,
    ProjectFilters,
    ProjectIn,
    ProjectListResponse,
    ProjectResponse,
)
from gradarchive.services import project_service
from gradarchive.storage.base import DocumentStorage
from gradarchive.storage.s3 import get_storage

router = APIRouter(route_class=PipelineRoute, tags=["projects"])

_DOC = DocType.PROJECT


def project_filters(
    id: str | None = Query(default=None),
    name: str | None = Query(default=None),
    college: str | None = Query(default=None),
    department: str | None = Query(default=None),
    supervisor: str | None = Query(default=None),
    student: str | None = Query(default=None),
    year: str | None = Query(default=None),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
) -> ProjectFilters:
    raw = {
        "id": id,
        "name": name,
        "college": college,
        "department": department,
        "supervisor": supervisor,
        "student": student,
        "year": year,
        "page": page,
        "pageSize": page_size,
    }
    return parse_or_reject(ProjectFilters, {k: v for k, v in raw.items() if v is not None}, "query")


def project_form(
    name: str | None = Form(default=None),
    rate: str | None = Form(default=None),
    year: str | None = Form(default=None),
    description: str | None = Form(default=None),
    document_caption: str | None = Form(default=None, alias="documentCaption"),
    department_id: str | None = Form(default=None, alias="departmentId"),
    supervisor_id: str | None = Form(default=None, alias="supervisorId"),
) -> ProjectIn:
    raw = {
        "name": name,
        "rate": rate,
        "year": year,
        "description": description,
        "documentCaption": document_caption,
        "departmentId": department_id,
        "supervisorId": supervisor_id,
    }
    return parse_or_reject(ProjectIn, {k: v for k, v in raw.items() if v is not None}, "body")


async def _read(document: UploadFile | None) -> tuple[bytes | None, str | None]:
    if document is None:
        return None, None
    return await document.read(), document.content_type


@router.get("", response_model=ProjectListResponse, dependencies=[Depends(public())])
async def list_projects(
    filters: ProjectFilters = Depends(project_filters),
    db: AsyncSession = Depends(get_db),
):
    return {"success": True, "projects": await project_service.list_projects(db, filters)}


@router.get("/{project_id}", response_model=ProjectDocumentResponse, dependencies=[Depends(public())])
async def get_project(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage),
):
    project = await project_service.get_project(db, str(project_id))
    url = await project_service.document_url(storage, project)
    return {"success": True, "project": project, "url": url}


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(guarded(_DOC, PermissionType.CREATE))],
)
async def create_project(
    data: ProjectIn = Depends(project_form),
    document: UploadFile | None = File(default=None),
    db: AsyncSession = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage),
):
    content, content_type = await _read(document)
    project = await project_service.create_project(db, storage, data, content, content_type)
    return {"success": True, "project": project}


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.UPDATE))],
)
async def update_project(
    project_id: uuid.UUID,
    data: ProjectIn = Depends(project_form),
    document: UploadFile | None = File(default=None),
    db: AsyncSession = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage),
):
    content, content_type = await _read(document)
    project = await project_service.update_project(
        db, storage, str(project_id), data, content, content_type
    )
    return {"success": True, "project": project}


@router.delete(
    "/{project_id}",
    response_model=ProjectResponse,
    dependencies=[Depends(guarded(_DOC, PermissionType.DELETE))],
)
async def delete_project(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage),
):
    project = await project_service.delete_project(db, storage, str(project_id))
    return {"success": True, "project": project}
