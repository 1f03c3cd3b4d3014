"""Role management endpoints."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from access_core.api.dependencies import get_role_service
from access_core.api.guards import require_permission
from access_core.models.role import Role
from access_core.schemas.permission import PermissionResponse
from access_core.schemas.role import RoleCreate, RolePermissionsUpdate, RoleResponse, RoleUpdate
from access_core.services.authorization import UserAuthView
from access_core.services.roles import RoleService

router = APIRouter()

manage_roles = require_permission("settings.roles")


@router.get(
    "",
    response_model=List[RoleResponse],
)
def list_roles(
    service: RoleService = Depends(get_role_service),
    _: UserAuthView = Depends(manage_roles),
) -> List[RoleResponse]:
    return [to_role_response(role) for role in service.list_roles()]


@router.get(
    "/{role_id}",
    response_model=RoleResponse,
)
def get_role(
    role_id: UUID,
    service: RoleService = Depends(get_role_service),
    _: UserAuthView = Depends(manage_roles),
) -> RoleResponse:
    return to_role_response(service.get_role(role_id))


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_role(
    payload: RoleCreate,
    service: RoleService = Depends(get_role_service),
    actor: UserAuthView = Depends(manage_roles),
) -> RoleResponse:
    role = service.create_role(payload, actor_id=actor.id)
    return to_role_response(role)


@router.patch(
    "/{role_id}",
    response_model=RoleResponse,
)
def update_role(
    role_id: UUID,
    payload: RoleUpdate,
    service: RoleService = Depends(get_role_service),
    actor: UserAuthView = Depends(manage_roles),
) -> RoleResponse:
    role = service.update_role(role_id, payload, actor_id=actor.id)
    return to_role_response(role)


@router.put(
    "/{role_id}/permissions",
    response_model=RoleResponse,
)
def assign_permissions(
    role_id: UUID,
    payload: RolePermissionsUpdate,
    service: RoleService = Depends(get_role_service),
    actor: UserAuthView = Depends(manage_roles),
) -> RoleResponse:
    role = service.assign_permissions(role_id, payload.permissions, actor_id=actor.id)
    return to_role_response(role)


@router.delete(
    "/{role_id}",
)
def delete_role(
    role_id: UUID,
    service: RoleService = Depends(get_role_service),
    actor: UserAuthView = Depends(manage_roles),
) -> dict[str, str]:
    service.delete_role(role_id, actor_id=actor.id)
    return {"status": "deleted"}


def to_role_response(role: Role) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        name=role.name,
        description=role.description,
        is_active=role.is_active,
        is_system=role.is_system,
        permissions=[PermissionResponse.model_validate(permission) for permission in role.permissions],
        created_at=role.created_at,
        updated_at=role.updated_at,
    )
