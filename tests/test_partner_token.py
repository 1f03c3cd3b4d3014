from __future__ import annotations

import threading
import time
from urllib.parse import parse_qs

import httpx

from access_core.core.config import AppSettings
from access_core.services.partner_token import (
    PartnerCredentials,
    PartnerTokenProvider,
    SingleSlotTokenCache,
    build_partner_token_provider,
)

CREDENTIALS = PartnerCredentials(agent_code="AG-7", email="ops@agency.test", password="s3cret")


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class LoginHandler:
    def __init__(self, expires_in: int = 3600, status_code: int = 200, delay: float = 0.0) -> None:
        self.calls = []
        self._expires_in = expires_in
        self._status_code = status_code
        self._delay = delay

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(parse_qs(request.content.decode()))
        if self._delay:
            time.sleep(self._delay)
        if self._status_code != 200:
            return httpx.Response(self._status_code, json={"message": "nope"})
        return httpx.Response(200, json={"token": f"token-{len(self.calls)}", "expires_in": self._expires_in})


def build_provider(handler: LoginHandler, clock: FakeClock | None = None) -> PartnerTokenProvider:
    client = httpx.Client(base_url="https://partner.test", transport=httpx.MockTransport(handler))
    cache = SingleSlotTokenCache(clock=clock or FakeClock())
    return PartnerTokenProvider(client, CREDENTIALS, cache=cache, skew_seconds=60)


def test_login_posts_form_credentials_and_caches_token() -> None:
    handler = LoginHandler()
    provider = build_provider(handler)

    assert provider.get_token() == "token-1"
    assert provider.get_token() == "token-1"
    assert len(handler.calls) == 1
    assert handler.calls[0] == {"agent_code": ["AG-7"], "email": ["ops@agency.test"], "password": ["s3cret"]}


def test_token_refreshes_before_expiry() -> None:
    clock = FakeClock()
    handler = LoginHandler(expires_in=600)
    provider = build_provider(handler, clock)

    assert provider.get_token() == "token-1"
    clock.now += 539
    assert provider.get_token() == "token-1"
    clock.now += 1
    assert provider.get_token() == "token-2"


def test_invalidate_forces_new_login() -> None:
    handler = LoginHandler()
    provider = build_provider(handler)
    provider.get_token()
    provider.invalidate()
    assert provider.get_token() == "token-2"


def test_failed_login_returns_none_and_retries_later() -> None:
    handler = LoginHandler(status_code=401)
    provider = build_provider(handler)
    assert provider.get_token() is None
    assert provider.get_token() is None
    assert len(handler.calls) == 2


def test_missing_token_in_response_returns_none() -> None:
    client = httpx.Client(
        base_url="https://partner.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"status": "ok"})),
    )
    provider = PartnerTokenProvider(client, CREDENTIALS, cache=SingleSlotTokenCache(clock=FakeClock()))
    assert provider.get_token() is None


def test_concurrent_callers_share_one_login() -> None:
    handler = LoginHandler(delay=0.05)
    provider = build_provider(handler)
    results = []
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        results.append(provider.get_token())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == ["token-1"] * 8
    assert len(handler.calls) == 1


def test_provider_requires_full_configuration() -> None:
    assert build_partner_token_provider(AppSettings(partner_api_url=None)) is None

    settings = AppSettings(
        partner_api_url="https://partner.test/api/",
        partner_agent_code="AG-7",
        partner_api_email="ops@agency.test",
        partner_api_password="s3cret",
    )
    provider = build_partner_token_provider(settings)
    assert isinstance(provider, PartnerTokenProvider)
    provider.close()


def test_app_starts_without_partner_configuration(client) -> None:
    assert client.app.state.partner_tokens is None


def test_unparseable_lifetime_returns_none_without_caching() -> None:
    responses = iter(
        [
            httpx.Response(200, json={"token": "t", "expires_in": "soon"}),
            httpx.Response(200, json={"token": "t2", "expires_in": 120}),
        ]
    )
    client = httpx.Client(
        base_url="https://partner.test",
        transport=httpx.MockTransport(lambda request: next(responses)),
    )
    provider = PartnerTokenProvider(client, CREDENTIALS, cache=SingleSlotTokenCache(clock=FakeClock()))

    assert provider.get_token() is None
    assert provider.get_token() == "t2"


def test_partner_status_reports_configuration(client, super_admin) -> None:
    unconfigured = client.get("/api/v1/partner/status", headers=super_admin)
    assert unconfigured.json() == {"configured": False, "authenticated": False}

    client.app.state.partner_tokens = build_provider(LoginHandler())
    connected = client.get("/api/v1/partner/status", headers=super_admin)
    assert connected.json() == {"configured": True, "authenticated": True}

    client.app.state.partner_tokens = build_provider(LoginHandler(status_code=503))
    failing = client.get("/api/v1/partner/status", headers=super_admin)
    assert failing.status_code == 200
    assert failing.json() == {"configured": True, "authenticated": False}


def test_partner_status_requires_system_settings(client, make_user, auth_headers) -> None:
    agent = make_user("agent@agency.test", ["Agent"])
    response = client.get("/api/v1/partner/status", headers=auth_headers(agent["id"]))
    assert response.status_code == 403
