"""Bearer token provider for the flight partner API."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

import httpx

from access_core.core.config import AppSettings

logger = logging.getLogger("access_core.services.partner_token")

Clock = Callable[[], float]

DEFAULT_TOKEN_LIFETIME_SECONDS = 3600


class PartnerAuthError(Exception):
    """Raised when the partner login call fails or returns no token."""


@dataclass(frozen=True)
class PartnerCredentials:
    agent_code: str
    email: str
    password: str


class SingleSlotTokenCache:
    """Holds at most one token together with its absolute expiry."""

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at: float = 0.0

    def get(self) -> Optional[str]:
        if self._token is not None and self._clock() < self._expires_at:
            return self._token
        return None

    def set(self, token: str, ttl_seconds: float) -> None:
        self._token = token
        self._expires_at = self._clock() + ttl_seconds

    def clear(self) -> None:
        self._token = None
        self._expires_at = 0.0


class PartnerTokenProvider:
    """
    Returns a valid partner bearer token, logging in lazily when the cached
    one has expired.

    Refreshes are serialized: concurrent callers that find the cache empty
    wait on the lock and reuse the token obtained by the first one.
    """

    def __init__(
        self,
        client: httpx.Client,
        credentials: PartnerCredentials,
        *,
        cache: Optional[SingleSlotTokenCache] = None,
        skew_seconds: int = 60,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._cache = cache or SingleSlotTokenCache()
        self._skew_seconds = skew_seconds
        self._refresh_lock = Lock()

    def get_token(self) -> Optional[str]:
        """Return a token, or None when the partner login fails.

        Partner outages must not block requests that can proceed without it.
        """

        token = self._cache.get()
        if token is not None:
            return token

        with self._refresh_lock:
            token = self._cache.get()
            if token is not None:
                return token
            try:
                return self._login()
            except PartnerAuthError:
                logger.exception("partner_auth_failed")
                return None

    def invalidate(self) -> None:
        self._cache.clear()

    def close(self) -> None:
        self._client.close()

    def _login(self) -> str:
        form = {
            "agent_code": self._credentials.agent_code,
            "email": self._credentials.email,
            "password": self._credentials.password,
        }
        try:
            response = self._client.post("/login", data=form)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise PartnerAuthError(f"Partner login failed: {exc.response.status_code}") from exc
        except (httpx.RequestError, ValueError) as exc:
            raise PartnerAuthError(f"Partner login request failed: {exc}") from exc

        token = payload.get("token") if isinstance(payload, dict) else None
        if not token:
            raise PartnerAuthError("Partner login response did not include a token")

        expires_in = payload.get("expires_in") or DEFAULT_TOKEN_LIFETIME_SECONDS
        try:
            ttl = max(float(expires_in) - self._skew_seconds, 0.0)
        except (TypeError, ValueError) as exc:
            raise PartnerAuthError(f"Partner login returned an invalid expires_in: {expires_in!r}") from exc
        self._cache.set(token, ttl)
        logger.info("partner_token_refreshed", extra={"expires_in": expires_in})
        return token


def build_partner_token_provider(settings: AppSettings) -> Optional[PartnerTokenProvider]:
    """Create a provider from settings, or None when the partner API is not configured."""

    if not (
        settings.partner_api_url
        and settings.partner_agent_code
        and settings.partner_api_email
        and settings.partner_api_password
    ):
        logger.warning("partner_api_not_configured")
        return None

    client = httpx.Client(
        base_url=settings.partner_api_url.rstrip("/"),
        timeout=settings.partner_timeout_seconds,
    )
    credentials = PartnerCredentials(
        agent_code=settings.partner_agent_code,
        email=settings.partner_api_email,
        password=settings.partner_api_password,
    )
    return PartnerTokenProvider(client, credentials, skew_seconds=settings.partner_token_skew_seconds)
