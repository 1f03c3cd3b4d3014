"""User schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from access_core.models.user import AgentStatus, UserStatus


class RoleSummary(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=320)
    roles: List[UUID] = Field(default_factory=list)
    status: UserStatus = UserStatus.ACTIVE
    agent_status: Optional[AgentStatus] = None


class UserStatusUpdate(BaseModel):
    status: Optional[UserStatus] = None
    agent_status: Optional[AgentStatus] = None

    @model_validator(mode="after")
    def require_one_status(self) -> "UserStatusUpdate":
        if self.status is None and self.agent_status is None:
            raise ValueError("status or agent_status is required")
        return self


class UserRolesUpdate(BaseModel):
    roles: List[UUID]


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    status: UserStatus
    agent_status: AgentStatus
    roles: List[RoleSummary]
    activated_by: str
    activated_at: Optional[datetime]
    deactivated_by: str
    deactivated_at: Optional[datetime]
    agent_activated_by: str
    agent_activated_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class ProfileResponse(BaseModel):
    id: UUID
    name: str
    email: str
    status: UserStatus
    agent_status: AgentStatus
    roles: List[RoleSummary]
    active_role: Optional[RoleSummary] = None
    permissions: List[str]
