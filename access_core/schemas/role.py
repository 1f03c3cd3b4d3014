"""Role schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from access_core.schemas.permission import PermissionResponse


class RoleBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=120)
    description: str = Field(default="", max_length=512)


class RoleCreate(RoleBase):
    permissions: List[UUID] = Field(default_factory=list, description="Permission ids granted by the role.")


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=120)
    description: Optional[str] = Field(default=None, max_length=512)
    permissions: Optional[List[UUID]] = None
    is_active: Optional[bool] = None


class RolePermissionsUpdate(BaseModel):
    permissions: List[UUID]


class RoleResponse(RoleBase):
    id: UUID
    is_active: bool
    is_system: bool
    permissions: List[PermissionResponse]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
