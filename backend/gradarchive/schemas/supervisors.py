"""Pydantic models for supervisors."""

from __future__ import annotations

from gradarchive.schemas.common import ApiModel, PersonOut
from gradarchive.schemas.people import PersonIn


class SupervisorIn(ApiModel):
    person: PersonIn


class SupervisorOut(ApiModel):
    id: str
    person: PersonOut


class SupervisorResponse(ApiModel):
    success: bool = True
    supervisor: SupervisorOut


class SupervisorListResponse(ApiModel):
    success: bool = True
    supervisors: list[SupervisorOut]
