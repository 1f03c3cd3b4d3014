"""User account model."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_core.models.base import Base, TimestampMixin
from access_core.models.types import GUID


class UserStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    SUSPENDED = "Suspended"


class AgentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    SUSPENDED = "Suspended"
    PENDING = "Pending"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(TimestampMixin, Base):
    """Platform account for internal staff and travel agents alike."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(length=255), nullable=False)
    email: Mapped[str] = mapped_column(String(length=320), nullable=False)
    status: Mapped[UserStatus] = mapped_column(
        SqlEnum(UserStatus, name="user_status", native_enum=False, values_callable=_enum_values),
        default=UserStatus.ACTIVE,
        nullable=False,
    )
    agent_status: Mapped[AgentStatus] = mapped_column(
        SqlEnum(AgentStatus, name="agent_status", native_enum=False, values_callable=_enum_values),
        default=AgentStatus.PENDING,
        nullable=False,
    )
    activated_by: Mapped[str] = mapped_column(String(length=255), default="", nullable=False)
    activated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    deactivated_by: Mapped[str] = mapped_column(String(length=255), default="", nullable=False)
    deactivated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    agent_activated_by: Mapped[str] = mapped_column(String(length=255), default="", nullable=False)
    agent_activated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    role_links: Mapped[List["UserRole"]] = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserRole.position",
    )
