"""Pydantic models for students."""

from __future__ import annotations

import uuid

from pydantic import EmailStr

from gradarchive.schemas.common import ApiModel, Password, PersonOut, Username
from gradarchive.schemas.people import PersonIn


class StudentIn(ApiModel):
    person: PersonIn
    personal_email: EmailStr
    username: Username
    password: Password
    project_id: uuid.UUID | None = None


class StudentOut(ApiModel):
    id: str
    personal_email: str
    username: str
    project_id: str | None = None
    person: PersonOut


class StudentResponse(ApiModel):
    success: bool = True
    student: StudentOut


class StudentListResponse(ApiModel):
    success: bool = True
    students: list[StudentOut]
