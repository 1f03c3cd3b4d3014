"""Idempotent seeding of the default permission catalog and roles."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from access_core.models.catalog import (
    DEFAULT_PERMISSIONS,
    DEFAULT_ROLES,
    SUPER_ADMIN_ROLE,
    get_role_permission_map,
)
from access_core.models.permission import Permission
from access_core.models.role import Role
from access_core.models.user import AgentStatus, User, UserStatus
from access_core.models.user_role import UserRole


@dataclass
class SeedResult:
    permissions_created: int = 0
    roles_created: int = 0
    roles_updated: int = 0
    role_ids: Dict[str, str] = field(default_factory=dict)


class SeedService:
    """Creates missing defaults and re-syncs default role permission sets."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger("access_core.services.seed")

    def seed_defaults(self) -> SeedResult:
        result = SeedResult()
        permissions = self._seed_permissions(result)

        role_permissions = get_role_permission_map()
        for spec in DEFAULT_ROLES:
            role_name = spec.name
            codes = role_permissions[role_name]
            granted = [permissions[code] for code in codes if code in permissions]
            role = self._session.scalar(select(Role).where(Role.name == role_name))
            if role is None:
                role = Role(name=role_name, description=spec.description, is_system=True)
                role.permissions = granted
                self._session.add(role)
                result.roles_created += 1
                self._logger.info("seed_role_created", extra={"role": role_name, "permission_count": len(granted)})
            else:
                role.permissions = granted
                role.description = spec.description
                role.is_system = True
                result.roles_updated += 1
            self._session.flush()
            result.role_ids[role_name] = str(role.id)

        self._logger.info(
            "seed_completed",
            extra={
                "permissions_created": result.permissions_created,
                "roles_created": result.roles_created,
                "roles_updated": result.roles_updated,
            },
        )
        return result

    def ensure_super_admin(self, email: str, name: str) -> Optional[User]:
        """Create the bootstrap administrator if no account uses ``email`` yet."""

        email = email.lower()
        if self._session.scalar(select(User.id).where(User.email == email)):
            return None
        role = self._session.scalar(select(Role).where(Role.name == SUPER_ADMIN_ROLE))
        if role is None:
            raise LookupError("Super Admin role missing; run seed_defaults() first")

        user = User(name=name, email=email, status=UserStatus.ACTIVE, agent_status=AgentStatus.PENDING)
        user.role_links = [UserRole(role_id=role.id, position=0)]
        self._session.add(user)
        self._session.flush()
        self._logger.info("seed_super_admin_created", extra={"user_id": str(user.id), "email": email})
        return user

    def _seed_permissions(self, result: SeedResult) -> Dict[str, Permission]:
        existing = {
            permission.code: permission
            for permission in self._session.scalars(
                select(Permission).where(Permission.code.in_([spec.code for spec in DEFAULT_PERMISSIONS]))
            )
        }
        for spec in DEFAULT_PERMISSIONS:
            if spec.code in existing:
                continue
            permission = Permission(
                name=spec.name,
                code=spec.code,
                description=spec.description,
                module=spec.module,
            )
            self._session.add(permission)
            existing[spec.code] = permission
            result.permissions_created += 1
        self._session.flush()
        return existing

