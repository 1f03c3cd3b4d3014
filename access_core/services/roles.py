"""Role and permission management."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from access_core.models.catalog import PROTECTED_ROLE_NAMES, SUPER_ADMIN_ROLE
from access_core.models.permission import Permission
from access_core.models.role import Role
from access_core.models.user_role import UserRole
from access_core.schemas.permission import PermissionCreate, PermissionUpdate
from access_core.schemas.role import RoleCreate, RoleUpdate


class RoleServiceError(Exception):
    """Base class for role service errors."""


class RoleNotFoundError(RoleServiceError):
    """Raised when a role cannot be found."""


class PermissionNotFoundError(RoleServiceError):
    """Raised when a permission cannot be found."""


class RoleConflictError(RoleServiceError):
    """Raised when a role name is already taken."""


class PermissionConflictError(RoleServiceError):
    """Raised when a permission code or name is already taken."""


class SystemRoleProtectedError(RoleServiceError):
    """Raised on attempts to modify the Super Admin role."""


class RoleInUseError(RoleServiceError):
    """Raised when deleting a role that users still hold."""


class RoleService:
    """Coordinates role and permission administration."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger("access_core.services.roles")

    # Roles

    def list_roles(self) -> List[Role]:
        stmt = select(Role).options(selectinload(Role.permissions)).order_by(Role.name)
        return list(self._session.scalars(stmt))

    def get_role(self, role_id: UUID) -> Role:
        role = self._session.get(Role, role_id)
        if not role:
            raise RoleNotFoundError(f"Role {role_id} not found")
        return role

    def create_role(self, payload: RoleCreate, *, actor_id: Optional[UUID]) -> Role:
        if self._session.scalar(select(Role.id).where(Role.name == payload.name)):
            raise RoleConflictError(f"Role '{payload.name}' already exists")

        role = Role(name=payload.name, description=payload.description, is_system=False)
        role.permissions = self._load_permissions(payload.permissions)
        self._session.add(role)
        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise RoleConflictError(f"Role '{payload.name}' already exists") from exc

        self._logger.info(
            "role_created",
            extra={"role_id": str(role.id), "actor_id": str(actor_id) if actor_id else None},
        )
        return role

    def update_role(self, role_id: UUID, payload: RoleUpdate, *, actor_id: Optional[UUID]) -> Role:
        role = self.get_role(role_id)
        if role.name == SUPER_ADMIN_ROLE:
            raise SystemRoleProtectedError("Cannot modify Super Admin role - it is system protected")

        updates = payload.model_dump(exclude_unset=True)
        new_name = updates.get("name")
        if new_name and new_name != role.name:
            if role.name in PROTECTED_ROLE_NAMES:
                raise RoleServiceError("Cannot change name of default roles")
            if self._session.scalar(select(Role.id).where(Role.name == new_name)):
                raise RoleConflictError(f"Role '{new_name}' already exists")
            role.name = new_name
        if updates.get("description") is not None:
            role.description = updates["description"]
        if updates.get("permissions") is not None:
            role.permissions = self._load_permissions(payload.permissions or [])
        if updates.get("is_active") is not None:
            role.is_active = updates["is_active"]

        self._session.add(role)
        self._session.flush()

        self._logger.info(
            "role_updated",
            extra={
                "role_id": str(role.id),
                "actor_id": str(actor_id) if actor_id else None,
                "fields": sorted(updates),
            },
        )
        return role

    def assign_permissions(self, role_id: UUID, permission_ids: Sequence[UUID], *, actor_id: Optional[UUID]) -> Role:
        role = self.get_role(role_id)
        if role.name == SUPER_ADMIN_ROLE:
            raise SystemRoleProtectedError("Cannot modify Super Admin permissions - it has full system access")

        role.permissions = self._load_permissions(permission_ids)
        self._session.flush()
        self._logger.info(
            "role_permissions_assigned",
            extra={
                "role_id": str(role.id),
                "actor_id": str(actor_id) if actor_id else None,
                "permission_count": len(role.permissions),
            },
        )
        return role

    def delete_role(self, role_id: UUID, *, actor_id: Optional[UUID]) -> None:
        role = self.get_role(role_id)
        if role.name == SUPER_ADMIN_ROLE:
            raise SystemRoleProtectedError("Cannot delete Super Admin role - it is system protected")
        if role.name in PROTECTED_ROLE_NAMES:
            raise RoleServiceError("Cannot delete default roles")

        holders = self._session.scalar(
            select(func.count(func.distinct(UserRole.user_id))).where(UserRole.role_id == role.id)
        )
        if holders:
            raise RoleInUseError(
                f"Cannot delete role - {holders} user(s) are assigned to this role. "
                "Please reassign them first."
            )

        self._session.delete(role)
        self._session.flush()
        self._logger.info(
            "role_deleted",
            extra={"role_id": str(role_id), "actor_id": str(actor_id) if actor_id else None},
        )

    # Permissions

    def list_permissions(self) -> List[Permission]:
        stmt = select(Permission).order_by(Permission.module, Permission.code)
        return list(self._session.scalars(stmt))

    def get_permission(self, permission_id: UUID) -> Permission:
        permission = self._session.get(Permission, permission_id)
        if not permission:
            raise PermissionNotFoundError(f"Permission {permission_id} not found")
        return permission

    def create_permission(self, payload: PermissionCreate, *, actor_id: Optional[UUID]) -> Permission:
        self._ensure_permission_unique(code=payload.code, name=payload.name)
        permission = Permission(
            name=payload.name,
            code=payload.code,
            description=payload.description,
            module=payload.module,
        )
        self._session.add(permission)
        self._session.flush()
        self._logger.info(
            "permission_created",
            extra={"permission_code": permission.code, "actor_id": str(actor_id) if actor_id else None},
        )
        return permission

    def update_permission(
        self,
        permission_id: UUID,
        payload: PermissionUpdate,
        *,
        actor_id: Optional[UUID],
    ) -> Permission:
        permission = self.get_permission(permission_id)
        updates = payload.model_dump(exclude_unset=True, exclude_none=True)
        self._ensure_permission_unique(
            code=updates.get("code"),
            name=updates.get("name"),
            exclude_id=permission.id,
        )
        for field_name, value in updates.items():
            setattr(permission, field_name, value)

        self._session.flush()
        self._logger.info(
            "permission_updated",
            extra={
                "permission_code": permission.code,
                "actor_id": str(actor_id) if actor_id else None,
                "fields": sorted(updates),
            },
        )
        return permission

    def delete_permission(self, permission_id: UUID, *, actor_id: Optional[UUID]) -> None:
        permission = self.get_permission(permission_id)
        # Detach from every role before the row goes away.
        for role in list(permission.roles):
            role.permissions.remove(permission)
        self._session.delete(permission)
        self._session.flush()
        self._logger.info(
            "permission_deleted",
            extra={"permission_code": permission.code, "actor_id": str(actor_id) if actor_id else None},
        )

    def _ensure_permission_unique(
        self,
        *,
        code: Optional[str],
        name: Optional[str],
        exclude_id: Optional[UUID] = None,
    ) -> None:
        clauses = []
        if code:
            clauses.append(Permission.code == code)
        if name:
            clauses.append(Permission.name == name)
        if not clauses:
            return
        stmt = select(Permission.id).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(Permission.id != exclude_id)
        if self._session.scalar(stmt):
            raise PermissionConflictError("Permission with this code or name already exists")

    def _load_permissions(self, permission_ids: Iterable[UUID]) -> List[Permission]:
        wanted = list(dict.fromkeys(permission_ids))
        if not wanted:
            return []
        stmt = select(Permission).where(Permission.id.in_(wanted)).order_by(Permission.code)
        found = list(self._session.scalars(stmt))
        missing = set(wanted) - {permission.id for permission in found}
        if missing:
            raise PermissionNotFoundError(
                "Permission(s) not found: " + ", ".join(sorted(str(item) for item in missing))
            )
        return found
