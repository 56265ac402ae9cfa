"""Pydantic models for departments."""

from __future__ import annotations

import uuid

from pydantic import Field

from gradarchive.schemas.common import ApiModel, CollegeOut, DepartmentOut


class DepartmentIn(ApiModel):
    name: str = Field(min_length=1, max_length=45)
    college_id: uuid.UUID


class DepartmentDetail(DepartmentOut):
    college: CollegeOut


class DepartmentResponse(ApiModel):
    success: bool = True
    department: DepartmentDetail


class DepartmentListResponse(ApiModel):
    success: bool = True
    departments: list[DepartmentDetail]
