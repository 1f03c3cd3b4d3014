"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from typing import Iterator, Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from access_core.core.config import AppSettings, get_settings
from access_core.core.database import get_session
from access_core.core.security import TokenError, decode_access_token
from access_core.services.auth_context import SqlAlchemyAuthContextGateway
from access_core.services.authorization import (
    AuthorizationService,
    Unauthenticated,
    UserAuthView,
    UserNotFound,
)
from access_core.services.partner_token import PartnerTokenProvider
from access_core.services.roles import RoleService
from access_core.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_db_session() -> Iterator[Session]:
    yield from get_session()


def get_role_service(session: Session = Depends(get_db_session)) -> RoleService:
    return RoleService(session)


def get_user_service(
    session: Session = Depends(get_db_session),
    settings: AppSettings = Depends(get_settings),
) -> UserService:
    return UserService(session, max_active_agents=settings.max_active_agents)


def get_authorization_service(session: Session = Depends(get_db_session)) -> AuthorizationService:
    return AuthorizationService(SqlAlchemyAuthContextGateway(session))


def get_principal_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: AppSettings = Depends(get_settings),
) -> Optional[UUID]:
    """User id from a verified bearer token, or None when no token was sent."""

    if credentials is None:
        return None
    try:
        claims = decode_access_token(credentials.credentials, settings=settings)
    except TokenError as exc:
        raise Unauthenticated(str(exc)) from exc
    return UUID(str(claims["sub"]))


def get_active_role_id(request: Request, settings: AppSettings = Depends(get_settings)) -> Optional[str]:
    return request.headers.get(settings.active_role_header) or None


def get_auth_context(
    principal_id: Optional[UUID] = Depends(get_principal_id),
    service: AuthorizationService = Depends(get_authorization_service),
) -> Optional[UserAuthView]:
    """Load the caller's roles and permissions; None if the account is gone.

    FastAPI caches this per request, so stacked guards share one lookup.
    """

    if principal_id is None:
        raise Unauthenticated()
    return service.load(principal_id)


def get_current_user(user: Optional[UserAuthView] = Depends(get_auth_context)) -> UserAuthView:
    if user is None:
        raise UserNotFound()
    return user


def get_partner_token_provider(request: Request) -> Optional[PartnerTokenProvider]:
    return getattr(request.app.state, "partner_tokens", None)


def get_partner_token(
    provider: Optional[PartnerTokenProvider] = Depends(get_partner_token_provider),
) -> Optional[str]:
    """Partner API bearer token for outbound calls.

    None when the partner API is not configured or its login is failing;
    callers degrade instead of failing the request.
    """

    if provider is None:
        return None
    return provider.get_token()
