"""Pydantic models for projects and the project list filters."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Annotated

from pydantic import AfterValidator, Field, field_validator

from gradarchive.config import settings
from gradarchive.schemas.common import ApiModel
from gradarchive.schemas.departments import DepartmentDetail
from gradarchive.schemas.students import StudentOut
from gradarchive.schemas.supervisors import SupervisorOut


def _check_year(value: int) -> int:
    # Upper bound moves with the calendar, so it cannot be a static ``le=``.
    if value > date.today().year:
        raise ValueError(f"Year must be at most {date.today().year}")
    return value


Year = Annotated[int, Field(ge=1), AfterValidator(_check_year)]


class ProjectIn(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    rate: int = Field(ge=0, le=100)
    year: Year
    description: str = Field(default="", max_length=500)
    document_caption: str = Field(default="", max_length=255)
    department_id: uuid.UUID
    supervisor_id: uuid.UUID


class ProjectFilters(ApiModel):
    """Query filters for ``GET /projects``.  All given filters must match."""

    id: uuid.UUID | None = None
    name: str | None = None
    college: uuid.UUID | None = None
    department: uuid.UUID | None = None
    supervisor: str | None = None
    student: str | None = None
    year: Year | None = None
    page: int = Field(default_factory=lambda: settings.API_DEFAULT_PAGE, ge=0)
    page_size: int | None = Field(default=None, ge=1, validate_default=True)

    @field_validator("page_size")
    @classmethod
    def clamp_page_size(cls, value: int | None) -> int:
        # Out-of-range sizes are clamped, never rejected.
        if value is None:
            return settings.API_MIN_PAGE_SIZE
        return max(settings.API_MIN_PAGE_SIZE, min(value, settings.API_MAX_PAGE_SIZE))

    @property
    def offset(self) -> int:
        return self.page * (self.page_size or settings.API_MIN_PAGE_SIZE)


class ProjectOut(ApiModel):
    id: str
    name: str
    rate: int
    year: int
    description: str
    document_caption: str
    document_path: str
    department_id: str
    supervisor_id: str
    created_at: datetime
    updated_at: datetime


class ProjectDetail(ProjectOut):
    department: DepartmentDetail
    supervisor: SupervisorOut
    students: list[StudentOut] = []


class ProjectResponse(ApiModel):
    success: bool = True
    project: ProjectOut


class ProjectDocumentResponse(ApiModel):
    success: bool = True
    project: ProjectDetail
    url: str


class ProjectListResponse(ApiModel):
    success: bool = True
    projects: list[ProjectDetail]
