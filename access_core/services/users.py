"""User account management and role assignment."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from access_core.models.catalog import AGENT_ROLE
from access_core.models.role import Role
from access_core.models.user import AgentStatus, User, UserStatus
from access_core.models.user_role import UserRole
from access_core.schemas.user import UserCreate, UserStatusUpdate
from access_core.services.roles import RoleNotFoundError


class UserServiceError(Exception):
    """Base class for user service errors."""


class UserNotFoundError(UserServiceError):
    """Raised when a user record does not exist."""


class UserConflictError(UserServiceError):
    """Raised when an email is already registered."""


class AgentLimitReachedError(UserServiceError):
    """Raised when activating one more agent would exceed the configured cap."""


class UserService:
    """Creates users, edits their role lists and drives status transitions."""

    def __init__(self, session: Session, *, max_active_agents: int = 1000) -> None:
        self._session = session
        self._max_active_agents = max_active_agents
        self._logger = logging.getLogger("access_core.services.users")

    def list_users(
        self,
        *,
        status: Optional[UserStatus] = None,
        role_id: Optional[UUID] = None,
    ) -> List[User]:
        stmt = select(User).options(selectinload(User.role_links).selectinload(UserRole.role))
        if status:
            stmt = stmt.where(User.status == status)
        if role_id:
            stmt = stmt.where(User.id.in_(select(UserRole.user_id).where(UserRole.role_id == role_id)))
        stmt = stmt.order_by(User.created_at.desc(), User.email)
        return list(self._session.scalars(stmt))

    def get_user(self, user_id: UUID) -> User:
        user = self._session.get(User, user_id)
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        return self._session.scalar(select(User).where(User.email == email.lower()))

    def create_user(self, payload: UserCreate, *, actor_id: Optional[UUID]) -> User:
        email = payload.email.lower()
        if self.find_by_email(email):
            raise UserConflictError(f"User with email {email} already exists")

        roles = self._load_roles(payload.roles)
        has_agent_role = any(role.name == AGENT_ROLE for role in roles)
        # New agents wait for approval unless a status was chosen explicitly.
        agent_status = payload.agent_status or (AgentStatus.INACTIVE if has_agent_role else AgentStatus.PENDING)

        user = User(name=payload.name, email=email, status=payload.status, agent_status=agent_status)
        user.role_links = [UserRole(role_id=role.id, position=index) for index, role in enumerate(roles)]
        self._session.add(user)
        self._session.flush()

        self._logger.info(
            "user_created",
            extra={
                "user_id": str(user.id),
                "actor_id": str(actor_id) if actor_id else None,
                "roles": [role.name for role in roles],
            },
        )
        return user

    def set_roles(self, user_id: UUID, role_ids: Sequence[UUID], *, actor_id: Optional[UUID]) -> User:
        """Replace the user's role list, keeping the given order."""

        user = self.get_user(user_id)
        roles = self._load_roles(role_ids)
        user.role_links.clear()
        self._session.flush()
        user.role_links.extend(UserRole(role_id=role.id, position=index) for index, role in enumerate(roles))
        self._session.flush()

        self._logger.info(
            "user_roles_updated",
            extra={
                "user_id": str(user.id),
                "actor_id": str(actor_id) if actor_id else None,
                "roles": [role.name for role in roles],
            },
        )
        return user

    def update_status(self, user_id: UUID, payload: UserStatusUpdate, *, actor_label: str) -> User:
        user = self.get_user(user_id)
        now = datetime.now(timezone.utc)

        if payload.status is not None:
            user.status = payload.status
            if payload.status == UserStatus.ACTIVE:
                user.activated_by = actor_label
                user.activated_at = now
                user.deactivated_by = ""
                user.deactivated_at = None
            else:
                user.deactivated_by = actor_label
                user.deactivated_at = now
                if payload.status == UserStatus.INACTIVE:
                    user.activated_at = None

        if payload.agent_status is not None:
            if payload.agent_status == AgentStatus.ACTIVE and self._holds_agent_role(user):
                self._ensure_agent_capacity(exclude_user_id=user.id)
            user.agent_status = payload.agent_status
            if payload.agent_status == AgentStatus.ACTIVE:
                user.agent_activated_by = actor_label
                user.agent_activated_at = now

        self._session.flush()
        self._logger.info(
            "user_status_updated",
            extra={
                "user_id": str(user.id),
                "status": user.status.value,
                "agent_status": user.agent_status.value,
                "actor": actor_label,
            },
        )
        return user

    def delete_user(self, user_id: UUID, *, actor_id: Optional[UUID]) -> None:
        user = self.get_user(user_id)
        self._session.delete(user)
        self._session.flush()
        self._logger.info(
            "user_deleted",
            extra={"user_id": str(user_id), "actor_id": str(actor_id) if actor_id else None},
        )

    def _holds_agent_role(self, user: User) -> bool:
        return any(link.role is not None and link.role.name == AGENT_ROLE for link in user.role_links)

    def _ensure_agent_capacity(self, *, exclude_user_id: UUID) -> None:
        agent_role_id = self._session.scalar(select(Role.id).where(Role.name == AGENT_ROLE))
        if agent_role_id is None:
            return
        active_agents = self._session.scalar(
            select(func.count(func.distinct(User.id)))
            .join(UserRole, UserRole.user_id == User.id)
            .where(UserRole.role_id == agent_role_id)
            .where(User.agent_status == AgentStatus.ACTIVE)
            .where(User.id != exclude_user_id)
        )
        if active_agents >= self._max_active_agents:
            raise AgentLimitReachedError(
                f"Maximum limit of {self._max_active_agents} active agents reached. "
                "Please deactivate another agent first."
            )

    def _load_roles(self, role_ids: Sequence[UUID]) -> List[Role]:
        wanted = list(dict.fromkeys(role_ids))
        if not wanted:
            return []
        found = {role.id: role for role in self._session.scalars(select(Role).where(Role.id.in_(wanted)))}
        missing = [str(role_id) for role_id in wanted if role_id not in found]
        if missing:
            raise RoleNotFoundError("Role(s) not found: " + ", ".join(missing))
        return [found[role_id] for role_id in wanted]
