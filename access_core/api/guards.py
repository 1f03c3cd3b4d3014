"""Route guards wrapping the authorization resolvers."""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends

from access_core.api.dependencies import (
    get_active_role_id,
    get_auth_context,
    get_authorization_service,
    get_current_user,
)
from access_core.models.catalog import AGENT_ROLE
from access_core.models.user import AgentStatus, UserStatus
from access_core.services.authorization import (
    AccountInactive,
    AuthorizationService,
    InsufficientPrivilege,
    UserAuthView,
    denial_for,
)

Guard = Callable[..., UserAuthView]


def require_permission(permission_code: str) -> Guard:
    """Admit callers holding ``permission_code`` through the active role or any role."""

    def permission_guard(
        user: Optional[UserAuthView] = Depends(get_auth_context),
        active_role_id: Optional[str] = Depends(get_active_role_id),
        service: AuthorizationService = Depends(get_authorization_service),
    ) -> UserAuthView:
        decision = service.check_permission(user, permission_code, active_role_id)
        if not decision.allowed:
            raise denial_for(decision)
        return user

    permission_guard.__name__ = f"require_permission[{permission_code}]"
    return permission_guard


def require_role(*role_names: str) -> Guard:
    """Admit callers acting as one of ``role_names`` (exact match, no bypass)."""

    if not role_names:
        raise ValueError("require_role() needs at least one role name")

    def role_guard(
        user: Optional[UserAuthView] = Depends(get_auth_context),
        active_role_id: Optional[str] = Depends(get_active_role_id),
        service: AuthorizationService = Depends(get_authorization_service),
    ) -> UserAuthView:
        decision = service.check_role(user, role_names, active_role_id)
        if not decision.allowed:
            raise denial_for(decision, "Access denied. Insufficient role privileges")
        return user

    role_guard.__name__ = f"require_role[{','.join(role_names)}]"
    return role_guard


def require_all_roles(*role_names: str) -> Guard:
    """Admit callers holding every one of ``role_names`` among the roles in play."""

    if not role_names:
        raise ValueError("require_all_roles() needs at least one role name")

    def all_roles_guard(
        user: Optional[UserAuthView] = Depends(get_auth_context),
        active_role_id: Optional[str] = Depends(get_active_role_id),
        service: AuthorizationService = Depends(get_authorization_service),
    ) -> UserAuthView:
        decision = service.check_all_roles(user, role_names, active_role_id)
        if not decision.allowed:
            raise denial_for(decision, f"Access denied. Required all roles: {', '.join(role_names)}")
        return user

    all_roles_guard.__name__ = f"require_all_roles[{','.join(role_names)}]"
    return all_roles_guard


def require_active_user(user: UserAuthView = Depends(get_current_user)) -> UserAuthView:
    if user.status != UserStatus.ACTIVE.value:
        raise AccountInactive()
    return user


def require_active_agent(user: UserAuthView = Depends(get_current_user)) -> UserAuthView:
    if not any(role.name == AGENT_ROLE for role in user.resolved_roles()):
        raise InsufficientPrivilege("Agent role required")
    if user.agent_status != AgentStatus.ACTIVE.value:
        raise AccountInactive("Your agent account is not active. Please contact administrator.")
    return user
