"""Personal details shared by supervisors, students and users."""

from __future__ import annotations

import uuid
from datetime import date

from pydantic import EmailStr, Field

from gradarchive.db.models import Gender
from gradarchive.schemas.common import ApiModel


class PersonIn(ApiModel):
    full_name: str = Field(min_length=1, max_length=50)
    date_of_birth: date
    college_email: EmailStr
    gender: Gender = Gender.MALE
    department_id: uuid.UUID
