"""Shared pydantic building blocks.

JSON on the wire is camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any, TypeVar

from fastapi.exceptions import RequestValidationError
from pydantic import AfterValidator, BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from gradarchive.auth.passwords import MAX_PASSWORD_BYTES
from gradarchive.db.models import Gender


class ApiModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


M = TypeVar("M", bound=ApiModel)


def _check_password_bytes(value: str) -> str:
    if len(value.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=4), AfterValidator(_check_password_bytes)]
Username = Annotated[str, Field(min_length=4, max_length=30)]


# ── Brief output models shared by several resources ────────────


class CollegeOut(ApiModel):
    id: str
    name: str


class DepartmentOut(ApiModel):
    id: str
    name: str
    college_id: str


class PersonOut(ApiModel):
    id: str
    full_name: str
    date_of_birth: date
    college_email: str
    gender: Gender
    department_id: str


def parse_or_reject(model: type[M], data: dict[str, Any], location: str) -> M:
    """Validate *data* against *model*; report failures like FastAPI's own validation."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        errors = [
            {**err, "loc": (location, *err["loc"])} for err in exc.errors(include_url=False)
        ]
        raise RequestValidationError(errors) from exc
