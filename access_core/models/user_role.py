"""Ordered role references held by a user."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_core.models.base import Base
from access_core.models.types import GUID


class UserRole(Base):
    """One entry of a user's role list.

    ``role_id`` carries no foreign key so a deleted role leaves a dangling
    reference behind instead of rewriting users; readers skip such entries.
    """

    __tablename__ = "user_roles"
    __table_args__ = (
        Index("ix_user_roles_user", "user_id"),
        Index("ix_user_roles_role", "role_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    role_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="role_links")
    role: Mapped[Optional["Role"]] = relationship(
        "Role",
        primaryjoin="foreign(UserRole.role_id) == Role.id",
        viewonly=True,
    )
