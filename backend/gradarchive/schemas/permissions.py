"""Pydantic models for grants."""

from __future__ import annotations

import uuid
from datetime import datetime

from gradarchive.db.models import DocType, PermissionType
from gradarchive.schemas.common import ApiModel


class PermissionIn(ApiModel):
    user_id: uuid.UUID
    doc_type: DocType
    permission_type: PermissionType


class PermissionOut(ApiModel):
    id: str
    user_id: str
    doc_type: DocType
    permission_type: PermissionType
    created_at: datetime


class PermissionResponse(ApiModel):
    success: bool = True
    permission: PermissionOut


class PermissionListResponse(ApiModel):
    success: bool = True
    permissions: list[PermissionOut]
