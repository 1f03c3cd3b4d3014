"""Authorization check endpoint for portals pre-checking UI actions."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from access_core.api.dependencies import get_active_role_id, get_auth_context, get_authorization_service
from access_core.schemas.authorization import AuthorizationRequest, AuthorizationResponse
from access_core.services.authorization import AuthorizationService, UserAuthView

router = APIRouter()


@router.post(
    "/authorize",
    response_model=AuthorizationResponse,
)
def authorize(
    payload: AuthorizationRequest,
    user: Optional[UserAuthView] = Depends(get_auth_context),
    active_role_id: Optional[str] = Depends(get_active_role_id),
    service: AuthorizationService = Depends(get_authorization_service),
) -> AuthorizationResponse:
    if payload.permission is not None:
        decision = service.check_permission(user, payload.permission, active_role_id)
    elif payload.require_all:
        decision = service.check_all_roles(user, payload.roles or [], active_role_id)
    else:
        decision = service.check_role(user, payload.roles or [], active_role_id)
    return AuthorizationResponse(
        authorized=decision.allowed,
        reason=decision.reason.value if decision.reason else None,
    )
