"""Permission schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from access_core.models.permission import PermissionModule


class PermissionCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=120)
    code: str = Field(..., min_length=3, max_length=120, pattern=r"^[a-z0-9_]+(\.[a-z0-9_]+)+$")
    description: str = Field(default="", max_length=512)
    module: PermissionModule


class PermissionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=120)
    code: Optional[str] = Field(default=None, min_length=3, max_length=120, pattern=r"^[a-z0-9_]+(\.[a-z0-9_]+)+$")
    description: Optional[str] = Field(default=None, max_length=512)
    module: Optional[PermissionModule] = None
    is_active: Optional[bool] = None


class PermissionResponse(PermissionCreate):
    id: UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
