"""User administration endpoints."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from access_core.api.dependencies import get_user_service
from access_core.api.guards import require_active_user, require_permission
from access_core.models.user import User, UserStatus
from access_core.schemas.user import (
    RoleSummary,
    UserCreate,
    UserResponse,
    UserRolesUpdate,
    UserStatusUpdate,
)
from access_core.services.authorization import UserAuthView
from access_core.services.users import UserService

router = APIRouter(dependencies=[Depends(require_active_user)])


@router.get("", response_model=List[UserResponse])
def list_users(
    status_filter: Optional[UserStatus] = Query(default=None, alias="status"),
    role_id: Optional[UUID] = Query(default=None),
    service: UserService = Depends(get_user_service),
    _: UserAuthView = Depends(require_permission("agencies.view")),
) -> List[UserResponse]:
    users = service.list_users(status=status_filter, role_id=role_id)
    return [to_user_response(user) for user in users]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: UUID,
    service: UserService = Depends(get_user_service),
    _: UserAuthView = Depends(require_permission("agencies.details")),
) -> UserResponse:
    return to_user_response(service.get_user(user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
    actor: UserAuthView = Depends(require_permission("agencies.edit")),
) -> UserResponse:
    return to_user_response(service.create_user(payload, actor_id=actor.id))


@router.patch("/{user_id}/status", response_model=UserResponse)
def update_user_status(
    user_id: UUID,
    payload: UserStatusUpdate,
    service: UserService = Depends(get_user_service),
    actor: UserAuthView = Depends(require_permission("agencies.approve")),
) -> UserResponse:
    user = service.update_status(user_id, payload, actor_label=actor.name or actor.email or "Admin")
    return to_user_response(user)


@router.put("/{user_id}/roles", response_model=UserResponse)
def set_user_roles(
    user_id: UUID,
    payload: UserRolesUpdate,
    service: UserService = Depends(get_user_service),
    actor: UserAuthView = Depends(require_permission("settings.roles")),
) -> UserResponse:
    return to_user_response(service.set_roles(user_id, payload.roles, actor_id=actor.id))


@router.delete("/{user_id}")
def delete_user(
    user_id: UUID,
    service: UserService = Depends(get_user_service),
    actor: UserAuthView = Depends(require_permission("agencies.delete")),
) -> dict[str, str]:
    service.delete_user(user_id, actor_id=actor.id)
    return {"status": "deleted"}


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        status=user.status,
        agent_status=user.agent_status,
        roles=[RoleSummary.model_validate(link.role) for link in user.role_links if link.role is not None],
        activated_by=user.activated_by,
        activated_at=user.activated_at,
        deactivated_by=user.deactivated_by,
        deactivated_at=user.deactivated_at,
        agent_activated_by=user.agent_activated_by,
        agent_activated_at=user.agent_activated_at,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )
