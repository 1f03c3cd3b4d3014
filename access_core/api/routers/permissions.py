"""Permission catalog endpoints."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from access_core.api.dependencies import get_role_service
from access_core.api.guards import require_permission
from access_core.schemas.permission import PermissionCreate, PermissionResponse, PermissionUpdate
from access_core.services.authorization import UserAuthView
from access_core.services.roles import RoleService

router = APIRouter()

manage_permissions = require_permission("settings.permissions")


@router.get("", response_model=List[PermissionResponse])
def list_permissions(
    service: RoleService = Depends(get_role_service),
    _: UserAuthView = Depends(manage_permissions),
) -> List[PermissionResponse]:
    return [PermissionResponse.model_validate(permission) for permission in service.list_permissions()]


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
def create_permission(
    payload: PermissionCreate,
    service: RoleService = Depends(get_role_service),
    actor: UserAuthView = Depends(manage_permissions),
) -> PermissionResponse:
    permission = service.create_permission(payload, actor_id=actor.id)
    return PermissionResponse.model_validate(permission)


@router.patch("/{permission_id}", response_model=PermissionResponse)
def update_permission(
    permission_id: UUID,
    payload: PermissionUpdate,
    service: RoleService = Depends(get_role_service),
    actor: UserAuthView = Depends(manage_permissions),
) -> PermissionResponse:
    permission = service.update_permission(permission_id, payload, actor_id=actor.id)
    return PermissionResponse.model_validate(permission)


@router.delete("/{permission_id}")
def delete_permission(
    permission_id: UUID,
    service: RoleService = Depends(get_role_service),
    actor: UserAuthView = Depends(manage_permissions),
) -> dict[str, str]:
    service.delete_permission(permission_id, actor_id=actor.id)
    return {"status": "deleted"}
