"""Bearer token issuing and verification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional
from uuid import UUID

import jwt

from access_core.core.config import AppSettings, get_settings


class TokenError(Exception):
    """Base class for bearer token failures."""


class TokenExpiredError(TokenError):
    """Raised when a token is past its expiry."""


class InvalidTokenError(TokenError):
    """Raised when a token is malformed, tampered with or missing claims."""


def create_access_token(
    user_id: UUID | str,
    *,
    role_names: Iterable[str] = (),
    expires_delta: Optional[timedelta] = None,
    settings: Optional[AppSettings] = None,
) -> str:
    """Sign an access token whose subject is the user id.

    Role names are informational only; authorization always reloads roles.
    """

    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expiry_minutes)

    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_delta,
        "roles": list(role_names),
    }
    if settings.jwt_issuer:
        payload["iss"] = settings.jwt_issuer
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, *, settings: Optional[AppSettings] = None) -> Dict[str, Any]:
    """Verify signature, expiry and issuer and return the claims."""

    settings = settings or get_settings()
    decode_kwargs: Dict[str, Any] = {
        "algorithms": [settings.jwt_algorithm],
        "options": {"require": ["sub", "exp"]},
    }
    if settings.jwt_issuer:
        decode_kwargs["issuer"] = settings.jwt_issuer

    try:
        claims = jwt.decode(token, settings.jwt_secret, **decode_kwargs)
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token expired. Please login again.") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError("Invalid token") from exc

    try:
        UUID(str(claims["sub"]))
    except ValueError as exc:
        raise InvalidTokenError("Invalid token subject") from exc
    return claims
