"""Pydantic schemas for API payloads."""

from access_core.schemas.authorization import AuthorizationRequest, AuthorizationResponse
from access_core.schemas.permission import PermissionCreate, PermissionResponse, PermissionUpdate
from access_core.schemas.role import RoleCreate, RolePermissionsUpdate, RoleResponse, RoleUpdate
from access_core.schemas.user import (
    ProfileResponse,
    UserCreate,
    UserResponse,
    UserRolesUpdate,
    UserStatusUpdate,
)

__all__ = [
    "AuthorizationRequest",
    "AuthorizationResponse",
    "PermissionCreate",
    "PermissionResponse",
    "PermissionUpdate",
    "ProfileResponse",
    "RoleCreate",
    "RolePermissionsUpdate",
    "RoleResponse",
    "RoleUpdate",
    "UserCreate",
    "UserResponse",
    "UserRolesUpdate",
    "UserStatusUpdate",
]
