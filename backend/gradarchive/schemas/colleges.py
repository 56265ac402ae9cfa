"""Pydantic models for colleges."""

from __future__ import annotations

from pydantic import Field

from gradarchive.schemas.common import ApiModel, CollegeOut, DepartmentOut


class CollegeIn(ApiModel):
    name: str = Field(min_length=1, max_length=35)


class CollegeDetail(CollegeOut):
    departments: list[DepartmentOut] = []


class CollegeResponse(ApiModel):
    success: bool = True
    college: CollegeOut


class CollegeDetailResponse(ApiModel):
    success: bool = True
    college: CollegeDetail


class CollegeListResponse(ApiModel):
    success: bool = True
    colleges: list[CollegeDetail]
