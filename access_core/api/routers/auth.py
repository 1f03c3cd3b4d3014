"""Endpoints describing the authenticated caller."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from access_core.api.dependencies import get_active_role_id, get_role_service
from access_core.api.guards import require_active_agent, require_active_user, require_role
from access_core.models.catalog import AGENT_ROLE
from access_core.schemas.user import ProfileResponse, RoleSummary
from access_core.services.authorization import UserAuthView, effective_permission_codes
from access_core.services.roles import RoleService

router = APIRouter()


@router.get("/me", response_model=ProfileResponse)
def get_profile(
    user: UserAuthView = Depends(require_active_user),
    active_role_id: Optional[str] = Depends(get_active_role_id),
    role_service: RoleService = Depends(get_role_service),
) -> ProfileResponse:
    catalog = [permission.code for permission in role_service.list_permissions() if permission.is_active]
    permissions = effective_permission_codes(user, active_role_id, catalog)

    roles = []
    seen = set()
    for role in user.resolved_roles():
        if role.id not in seen:
            seen.add(role.id)
            roles.append(RoleSummary(id=role.id, name=role.name))
    active_role = next((role for role in roles if str(role.id) == active_role_id), None)

    return ProfileResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        status=user.status,
        agent_status=user.agent_status,
        roles=roles,
        active_role=active_role,
        permissions=permissions,
    )


@router.get(
    "/agent",
    dependencies=[Depends(require_role(AGENT_ROLE))],
)
def get_agent_workspace(user: UserAuthView = Depends(require_active_agent)) -> Dict[str, Any]:
    agent_roles = [role for role in user.resolved_roles() if role.name == AGENT_ROLE]
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "agent_status": user.agent_status,
        "permissions": sorted(
            {perm.code for role in agent_roles for perm in role.permissions if perm.is_active}
        ),
    }
