"""Data access for authorization: builds UserAuthView snapshots."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from access_core.models.role import Role
from access_core.models.user import User
from access_core.models.user_role import UserRole
from access_core.services.authorization import (
    InternalLookupFailure,
    PermissionView,
    RoleView,
    UserAuthView,
)


class AuthContextGateway(Protocol):
    """Contract for loading a user's roles and permissions in one call."""

    def load_auth_context(self, user_id: UUID) -> Optional[UserAuthView]:
        ...


class SqlAlchemyAuthContextGateway(AuthContextGateway):
    """Reads users, role links and roles with their permissions."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger("access_core.services.auth_context")

    def load_auth_context(self, user_id: UUID) -> Optional[UserAuthView]:
        try:
            return self._load(user_id)
        except SQLAlchemyError as exc:
            self._logger.exception("auth_context_lookup_failed", extra={"user_id": str(user_id)})
            raise InternalLookupFailure("Error checking permissions") from exc

    def _load(self, user_id: UUID) -> Optional[UserAuthView]:
        user = self._session.get(User, user_id)
        if user is None:
            return None

        role_ids = list(
            self._session.scalars(
                select(UserRole.role_id)
                .where(UserRole.user_id == user.id)
                .order_by(UserRole.position, UserRole.id)
            )
        )
        roles_by_id: Dict[UUID, RoleView] = {}
        if role_ids:
            stmt = (
                select(Role)
                .where(Role.id.in_(set(role_ids)))
                .options(selectinload(Role.permissions))
            )
            for role in self._session.scalars(stmt):
                roles_by_id[role.id] = _to_role_view(role)

        dangling = [str(role_id) for role_id in role_ids if role_id not in roles_by_id]
        if dangling:
            self._logger.warning(
                "auth_context_dangling_roles",
                extra={"user_id": str(user.id), "role_ids": dangling},
            )

        return UserAuthView(
            id=user.id,
            email=user.email,
            status=user.status.value,
            agent_status=user.agent_status.value,
            roles=tuple(roles_by_id.get(role_id) for role_id in role_ids),
            name=user.name,
        )


def _to_role_view(role: Role) -> RoleView:
    return RoleView(
        id=role.id,
        name=role.name,
        permissions=tuple(
            PermissionView(id=perm.id, code=perm.code, is_active=perm.is_active)
            for perm in role.permissions
        ),
    )
