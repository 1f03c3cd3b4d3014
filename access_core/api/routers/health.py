"""Liveness and readiness probes."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from access_core.api.dependencies import get_db_session
from access_core.models.catalog import SUPER_ADMIN_ROLE
from access_core.models.role import Role

router = APIRouter()


@router.get("/healthz", summary="Liveness probe")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", summary="Readiness probe")
def readiness_check(session: Session = Depends(get_db_session)) -> Any:
    """Ready once the database answers and the Super Admin role exists."""

    try:
        seeded = session.scalar(select(Role.id).where(Role.name == SUPER_ADMIN_ROLE)) is not None
    except SQLAlchemyError:
        session.rollback()
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": False})

    body: Dict[str, Any] = {"status": "ok" if seeded else "unseeded", "database": True, "seeded": seeded}
    if not seeded:
        return JSONResponse(status_code=503, content=body)
    return body
