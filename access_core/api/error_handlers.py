"""Exception handlers for the FastAPI app."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from access_core.services.authorization import AuthorizationDenied, InternalLookupFailure
from access_core.services.roles import (
    PermissionConflictError,
    PermissionNotFoundError,
    RoleConflictError,
    RoleInUseError,
    RoleNotFoundError,
    RoleServiceError,
    SystemRoleProtectedError,
)
from access_core.services.users import (
    AgentLimitReachedError,
    UserConflictError,
    UserNotFoundError,
    UserServiceError,
)

logger = logging.getLogger("access_core.api.errors")


def _error(status_code: int, exc: Exception, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": code})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthorizationDenied)
    async def authorization_denied_handler(request: Request, exc: AuthorizationDenied) -> JSONResponse:  # noqa: WPS430
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.code},
            headers=headers,
        )

    @app.exception_handler(InternalLookupFailure)
    async def internal_lookup_handler(request: Request, exc: InternalLookupFailure) -> JSONResponse:  # noqa: WPS430
        logger.error("authorization_lookup_failed", extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={"detail": "Error checking permissions", "code": "internal_error"},
        )

    @app.exception_handler(RoleNotFoundError)
    async def role_not_found_handler(request: Request, exc: RoleNotFoundError) -> JSONResponse:  # noqa: WPS430
        return _error(404, exc, "role_not_found")

    @app.exception_handler(PermissionNotFoundError)
    async def permission_not_found_handler(request: Request, exc: PermissionNotFoundError) -> JSONResponse:  # noqa: WPS430
        return _error(404, exc, "permission_not_found")

    @app.exception_handler(UserNotFoundError)
    async def user_not_found_handler(request: Request, exc: UserNotFoundError) -> JSONResponse:  # noqa: WPS430
        return _error(404, exc, "user_not_found")

    @app.exception_handler(RoleConflictError)
    async def role_conflict_handler(request: Request, exc: RoleConflictError) -> JSONResponse:  # noqa: WPS430
        return _error(409, exc, "role_conflict")

    @app.exception_handler(PermissionConflictError)
    async def permission_conflict_handler(request: Request, exc: PermissionConflictError) -> JSONResponse:  # noqa: WPS430
        return _error(409, exc, "permission_conflict")

    @app.exception_handler(UserConflictError)
    async def user_conflict_handler(request: Request, exc: UserConflictError) -> JSONResponse:  # noqa: WPS430
        return _error(409, exc, "user_conflict")

    @app.exception_handler(SystemRoleProtectedError)
    async def system_role_handler(request: Request, exc: SystemRoleProtectedError) -> JSONResponse:  # noqa: WPS430
        return _error(403, exc, "system_role_protected")

    @app.exception_handler(AgentLimitReachedError)
    async def agent_limit_handler(request: Request, exc: AgentLimitReachedError) -> JSONResponse:  # noqa: WPS430
        return _error(403, exc, "agent_limit_reached")

    @app.exception_handler(RoleInUseError)
    async def role_in_use_handler(request: Request, exc: RoleInUseError) -> JSONResponse:  # noqa: WPS430
        return _error(400, exc, "role_in_use")

    @app.exception_handler(RoleServiceError)
    async def role_service_handler(request: Request, exc: RoleServiceError) -> JSONResponse:  # noqa: WPS430
        return _error(400, exc, "role_error")

    @app.exception_handler(UserServiceError)
    async def user_service_handler(request: Request, exc: UserServiceError) -> JSONResponse:  # noqa: WPS430
        return _error(400, exc, "user_error")
