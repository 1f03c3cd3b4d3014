"""Permission model representing one grantable capability."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import List

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_core.models.base import Base, TimestampMixin
from access_core.models.types import GUID


class PermissionModule(str, Enum):
    DASHBOARD = "Dashboard"
    BOOKINGS = "Bookings"
    PAYMENTS = "Payments"
    AIRLINES = "Airlines"
    BANKS = "Banks"
    SECTORS = "Sectors"
    USERS = "Users"
    REPORTS = "Reports"
    SETTINGS = "Settings"


class Permission(TimestampMixin, Base):
    """Capability identified by a stable code such as ``bookings.view``."""

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("code", name="uq_permissions_code"),
        UniqueConstraint("name", name="uq_permissions_name"),
        Index("ix_permissions_module", "module"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(length=120), nullable=False)
    code: Mapped[str] = mapped_column(String(length=120), nullable=False)
    description: Mapped[str] = mapped_column(String(length=512), default="", nullable=False)
    module: Mapped[PermissionModule] = mapped_column(
        SqlEnum(
            PermissionModule,
            name="permission_module",
            native_enum=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    roles: Mapped[List["Role"]] = relationship(
        "Role",
        secondary="role_permissions",
        back_populates="permissions",
    )
