"""Grants of permissions to roles."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from access_core.models.base import Base
from access_core.models.types import GUID


class RolePermission(Base):
    """One permission granted to one role.

    Rows are written through ``Role.permissions``; ``granted_at`` is filled by
    the database.
    """

    __tablename__ = "role_permissions"
    __table_args__ = (Index("ix_role_permissions_permission", "permission_id"),)

    role_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    permission_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
