"""Authorization evaluation: permission and role resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING
from uuid import UUID

from access_core.models.catalog import SUPER_ADMIN_ROLE

if TYPE_CHECKING:  # pragma: no cover
    from access_core.services.auth_context import AuthContextGateway


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    USER_NOT_FOUND = "user_not_found"
    INVALID_ACTIVE_ROLE = "invalid_active_role"
    INSUFFICIENT_PRIVILEGE = "insufficient_privilege"


@dataclass(frozen=True)
class PermissionView:
    id: UUID
    code: str
    is_active: bool


@dataclass(frozen=True)
class RoleView:
    id: UUID
    name: str
    permissions: Tuple[PermissionView, ...] = ()


@dataclass(frozen=True)
class UserAuthView:
    """Fully materialized user with roles and permissions.

    ``roles`` may contain ``None`` for references that no longer resolve and
    may repeat the same role.
    """

    id: UUID
    email: str
    status: str
    agent_status: str
    roles: Tuple[Optional[RoleView], ...] = field(default_factory=tuple)
    name: str = ""

    def resolved_roles(self) -> List[RoleView]:
        return [role for role in self.roles if role is not None]


@dataclass(frozen=True)
class AuthorizationDecision:
    allowed: bool
    reason: Optional[DenyReason] = None

    @classmethod
    def allow(cls) -> "AuthorizationDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "AuthorizationDecision":
        return cls(allowed=False, reason=reason)


class AuthorizationError(Exception):
    """Base class for authorization failures."""


class AuthorizationDenied(AuthorizationError):
    """Expected, non-retriable refusal carrying a machine-checkable reason."""

    status_code = 403
    code = DenyReason.INSUFFICIENT_PRIVILEGE.value
    default_message = "Access denied"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class Unauthenticated(AuthorizationDenied):
    status_code = 401
    code = DenyReason.UNAUTHENTICATED.value
    default_message = "Not authorized. Please login."


class UserNotFound(AuthorizationDenied):
    status_code = 404
    code = DenyReason.USER_NOT_FOUND.value
    default_message = "User not found"


class InvalidActiveRole(AuthorizationDenied):
    code = DenyReason.INVALID_ACTIVE_ROLE.value
    default_message = "Invalid active role"


class InsufficientPrivilege(AuthorizationDenied):
    code = DenyReason.INSUFFICIENT_PRIVILEGE.value
    default_message = "Access denied. You don't have permission to perform this action"


class AccountInactive(AuthorizationDenied):
    """Raised by the status guards; not a resolver outcome."""

    code = "account_inactive"
    default_message = "Your account is not active. Please contact administrator."


class InternalLookupFailure(AuthorizationError):
    """Raised when the auth context cannot be read from the data store."""


_DENIALS = {
    DenyReason.UNAUTHENTICATED: Unauthenticated,
    DenyReason.USER_NOT_FOUND: UserNotFound,
    DenyReason.INVALID_ACTIVE_ROLE: InvalidActiveRole,
    DenyReason.INSUFFICIENT_PRIVILEGE: InsufficientPrivilege,
}


def denial_for(decision: AuthorizationDecision, message: Optional[str] = None) -> AuthorizationDenied:
    """Build the exception matching a deny decision.

    ``message`` only overrides the insufficient-privilege wording.
    """

    if decision.allowed or decision.reason is None:
        raise ValueError("denial_for() called with an allow decision")
    exc_cls = _DENIALS[decision.reason]
    if exc_cls is InsufficientPrivilege:
        return exc_cls(message)
    return exc_cls()


def _normalize_active_role(active_role_id: Optional[str]) -> Optional[str]:
    # A blank header counts as no header.
    if active_role_id is None:
        return None
    active_role_id = str(active_role_id)
    return active_role_id or None


def _select_roles(user: UserAuthView, active_role_id: Optional[str]) -> Optional[List[RoleView]]:
    """Roles in play for this request, or None if the active role is not held."""

    roles = user.resolved_roles()
    if active_role_id is None:
        return roles
    for role in roles:
        if str(role.id) == active_role_id:
            return [role]
    return None


def _grants(role: RoleView, permission_code: str) -> bool:
    return any(perm.code == permission_code and perm.is_active for perm in role.permissions)


def resolve_permission(
    user: Optional[UserAuthView],
    permission_code: str,
    active_role_id: Optional[str] = None,
) -> AuthorizationDecision:
    """Decide whether ``user`` holds an active ``permission_code``.

    Without an active role the check is the union over all held roles. A held
    ``Super Admin`` role in play allows every code.
    """

    if user is None:
        return AuthorizationDecision.deny(DenyReason.USER_NOT_FOUND)

    roles = _select_roles(user, _normalize_active_role(active_role_id))
    if roles is None:
        return AuthorizationDecision.deny(DenyReason.INVALID_ACTIVE_ROLE)

    if any(role.name == SUPER_ADMIN_ROLE for role in roles):
        return AuthorizationDecision.allow()

    if any(_grants(role, permission_code) for role in roles):
        return AuthorizationDecision.allow()
    return AuthorizationDecision.deny(DenyReason.INSUFFICIENT_PRIVILEGE)


def resolve_role(
    user: Optional[UserAuthView],
    allowed_role_names: AbstractSet[str] | Iterable[str],
    active_role_id: Optional[str] = None,
) -> AuthorizationDecision:
    """Decide whether ``user`` acts as one of ``allowed_role_names``.

    Names match exactly. There is no super-admin bypass here; list
    ``Super Admin`` explicitly to admit it.
    """

    if user is None:
        return AuthorizationDecision.deny(DenyReason.USER_NOT_FOUND)

    allowed = frozenset(allowed_role_names)
    roles = _select_roles(user, _normalize_active_role(active_role_id))
    if roles is None:
        return AuthorizationDecision.deny(DenyReason.INVALID_ACTIVE_ROLE)

    if any(role.name in allowed for role in roles):
        return AuthorizationDecision.allow()
    return AuthorizationDecision.deny(DenyReason.INSUFFICIENT_PRIVILEGE)


def resolve_all_roles(
    user: Optional[UserAuthView],
    required_role_names: Iterable[str],
    active_role_id: Optional[str] = None,
) -> AuthorizationDecision:
    """Decide whether the roles in play cover every name in ``required_role_names``.

    With an active role only that role is in play, so more than one distinct
    required name can never be satisfied.
    """

    if user is None:
        return AuthorizationDecision.deny(DenyReason.USER_NOT_FOUND)

    roles = _select_roles(user, _normalize_active_role(active_role_id))
    if roles is None:
        return AuthorizationDecision.deny(DenyReason.INVALID_ACTIVE_ROLE)

    required = frozenset(required_role_names)
    held = {role.name for role in roles}
    if roles and required and required <= held:
        return AuthorizationDecision.allow()
    return AuthorizationDecision.deny(DenyReason.INSUFFICIENT_PRIVILEGE)


def effective_permission_codes(
    user: UserAuthView,
    active_role_id: Optional[str],
    catalog_codes: Sequence[str],
) -> List[str]:
    """Sorted active permission codes the request may exercise.

    Raises InvalidActiveRole when the active role is not held by the user.
    """

    roles = _select_roles(user, _normalize_active_role(active_role_id))
    if roles is None:
        raise InvalidActiveRole()
    if any(role.name == SUPER_ADMIN_ROLE for role in roles):
        return sorted(set(catalog_codes))
    return sorted(
        {perm.code for role in roles for perm in role.permissions if perm.is_active}
    )


class AuthorizationService:
    """Loads a user's auth context and evaluates permission or role checks."""

    def __init__(self, gateway: "AuthContextGateway") -> None:
        self._gateway = gateway
        self._logger = logging.getLogger("access_core.services.authorization")

    def load(self, user_id: UUID) -> Optional[UserAuthView]:
        return self._gateway.load_auth_context(user_id)

    def check_permission(
        self,
        user: Optional[UserAuthView],
        permission_code: str,
        active_role_id: Optional[str] = None,
    ) -> AuthorizationDecision:
        decision = resolve_permission(user, permission_code, active_role_id)
        self._log_decision(user, decision, permission=permission_code, active_role_id=active_role_id)
        return decision

    def check_role(
        self,
        user: Optional[UserAuthView],
        allowed_role_names: Iterable[str],
        active_role_id: Optional[str] = None,
    ) -> AuthorizationDecision:
        allowed = sorted(set(allowed_role_names))
        decision = resolve_role(user, allowed, active_role_id)
        self._log_decision(user, decision, roles=allowed, active_role_id=active_role_id)
        return decision

    def check_all_roles(
        self,
        user: Optional[UserAuthView],
        required_role_names: Iterable[str],
        active_role_id: Optional[str] = None,
    ) -> AuthorizationDecision:
        required = sorted(set(required_role_names))
        decision = resolve_all_roles(user, required, active_role_id)
        self._log_decision(user, decision, roles=required, require_all=True, active_role_id=active_role_id)
        return decision

    def _log_decision(self, user: Optional[UserAuthView], decision: AuthorizationDecision, **context) -> None:
        extra = {
            "user_id": str(user.id) if user else None,
            **{key: value for key, value in context.items() if value is not None},
        }
        if decision.allowed:
            self._logger.debug("authorization_granted", extra=extra)
        else:
            extra["reason"] = decision.reason.value if decision.reason else None
            self._logger.info("authorization_denied", extra=extra)
