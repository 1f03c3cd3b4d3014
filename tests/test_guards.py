from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import jwt
from fastapi import Depends
from fastapi.testclient import TestClient

from access_core.api.dependencies import get_authorization_service
from access_core.api.guards import require_all_roles
from access_core.core.config import get_settings
from access_core.core.security import create_access_token
from access_core.models import AgentStatus, UserStatus
from access_core.models.catalog import get_all_permission_codes
from access_core.services.authorization import AuthorizationService, InternalLookupFailure


def authorize(client: TestClient, headers: dict, **payload) -> dict:
    response = client.post("/api/v1/authorize", json=payload, headers=headers)
    response.raise_for_status()
    return response.json()


def test_missing_token_is_unauthenticated(client: TestClient) -> None:
    response = client.get("/api/v1/roles")
    assert response.status_code == 401
    assert response.json() == {"detail": "Not authorized. Please login.", "code": "unauthenticated"}
    assert response.headers["www-authenticate"] == "Bearer"


def test_expired_token_is_unauthenticated(client: TestClient, make_user) -> None:
    user = make_user("late@agency.test", ["Super Admin"])
    token = create_access_token(user["id"], expires_delta=timedelta(seconds=-5))
    response = client.get("/api/v1/roles", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired. Please login again."


def test_tampered_token_is_unauthenticated(client: TestClient, make_user) -> None:
    user = make_user("forger@agency.test", ["Super Admin"])
    claims = {"sub": user["id"], "exp": 9999999999, "iss": "agency-access-core"}
    token = jwt.encode(claims, "a-different-secret-of-sufficient-size", algorithm="HS256")
    response = client.get("/api/v1/roles", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["code"] == "unauthenticated"


def test_unknown_user_is_not_found(client: TestClient, auth_headers) -> None:
    response = client.get("/api/v1/roles", headers=auth_headers(str(uuid4())))
    assert response.status_code == 404
    assert response.json() == {"detail": "User not found", "code": "user_not_found"}


def test_missing_permission_is_forbidden(client: TestClient, make_user, auth_headers) -> None:
    agent = make_user("agent@agency.test", ["Agent"])
    response = client.get("/api/v1/roles", headers=auth_headers(agent["id"]))
    assert response.status_code == 403
    assert response.json() == {
        "detail": "Access denied. You don't have permission to perform this action",
        "code": "insufficient_privilege",
    }


def test_unowned_active_role_is_rejected(client: TestClient, make_user, auth_headers) -> None:
    agent = make_user("agent@agency.test", ["Agent"])
    other = make_user("admin@agency.test", ["Super Admin"])
    headers = auth_headers(agent["id"], active_role=other["role_ids"]["Super Admin"])
    response = client.get("/api/v1/roles", headers=headers)
    assert response.status_code == 403
    assert response.json() == {"detail": "Invalid active role", "code": "invalid_active_role"}


def test_super_admin_passes_permission_guard(client: TestClient, super_admin) -> None:
    response = client.get("/api/v1/roles", headers=super_admin)
    assert response.status_code == 200
    assert {role["name"] for role in response.json()} >= {"Super Admin", "Agent", "Admin"}


def test_active_role_narrows_guarded_routes(client: TestClient, make_user, auth_headers) -> None:
    user = make_user("dual@agency.test", ["Admin", "Super Admin"])
    as_admin = auth_headers(user["id"], active_role=user["role_ids"]["Admin"])
    as_root = auth_headers(user["id"], active_role=user["role_ids"]["Super Admin"])

    assert client.get("/api/v1/roles", headers=as_admin).status_code == 403
    assert client.get("/api/v1/roles", headers=as_root).status_code == 200
    assert client.get("/api/v1/roles", headers=auth_headers(user["id"])).status_code == 200


def test_blank_active_role_header_is_ignored(client: TestClient, make_user, auth_headers) -> None:
    user = make_user("root@agency.test", ["Super Admin"])
    response = client.get("/api/v1/roles", headers=auth_headers(user["id"], active_role=""))
    assert response.status_code == 200


def test_inactive_account_is_rejected(client: TestClient, make_user, auth_headers) -> None:
    user = make_user("gone@agency.test", ["Super Admin"], status=UserStatus.SUSPENDED)
    headers = auth_headers(user["id"])

    me = client.get("/api/v1/auth/me", headers=headers)
    assert me.status_code == 403
    assert me.json()["code"] == "account_inactive"

    listing = client.get("/api/v1/users", headers=headers)
    assert listing.status_code == 403
    assert listing.json()["code"] == "account_inactive"


def test_agent_route_requires_agent_role(client: TestClient, super_admin) -> None:
    response = client.get("/api/v1/auth/agent", headers=super_admin)
    assert response.status_code == 403
    assert response.json()["code"] == "insufficient_privilege"


def test_agent_route_requires_active_agent(client: TestClient, make_user, auth_headers) -> None:
    pending = make_user("pending@agency.test", ["Agent"], agent_status=AgentStatus.PENDING)
    response = client.get("/api/v1/auth/agent", headers=auth_headers(pending["id"]))
    assert response.status_code == 403
    assert response.json()["code"] == "account_inactive"

    active = make_user("active@agency.test", ["Agent"], agent_status=AgentStatus.ACTIVE)
    response = client.get("/api/v1/auth/agent", headers=auth_headers(active["id"]))
    assert response.status_code == 200
    body = response.json()
    assert body["agent_status"] == "Active"
    assert "bookings.view" in body["permissions"]
    assert "settings.roles" not in body["permissions"]


def test_profile_reports_effective_permissions(client: TestClient, make_user, auth_headers) -> None:
    user = make_user("multi@agency.test", ["Agent", "Finance Manager"])

    union = client.get("/api/v1/auth/me", headers=auth_headers(user["id"]))
    union.raise_for_status()
    body = union.json()
    assert [role["name"] for role in body["roles"]] == ["Agent", "Finance Manager"]
    assert body["active_role"] is None
    assert "payments.approve" in body["permissions"]
    assert "groups.view" in body["permissions"]

    narrowed = client.get("/api/v1/auth/me", headers=auth_headers(user["id"], active_role=user["role_ids"]["Agent"]))
    narrowed.raise_for_status()
    body = narrowed.json()
    assert body["active_role"]["name"] == "Agent"
    assert "payments.approve" not in body["permissions"]

    invalid = client.get("/api/v1/auth/me", headers=auth_headers(user["id"], active_role=str(uuid4())))
    assert invalid.status_code == 403
    assert invalid.json()["code"] == "invalid_active_role"


def test_profile_for_super_admin_lists_whole_catalog(client: TestClient, super_admin) -> None:
    response = client.get("/api/v1/auth/me", headers=super_admin)
    response.raise_for_status()
    assert response.json()["permissions"] == sorted(get_all_permission_codes())


def test_authorize_endpoint_reports_reasons(client: TestClient, make_user, auth_headers) -> None:
    agent = make_user("agent@agency.test", ["Agent"])
    headers = auth_headers(agent["id"])

    assert authorize(client, headers, permission="bookings.view") == {"authorized": True, "reason": None}
    assert authorize(client, headers, permission="bookings.delete") == {
        "authorized": False,
        "reason": "insufficient_privilege",
    }
    assert authorize(client, headers, roles=["Agent"]) == {"authorized": True, "reason": None}
    assert authorize(client, headers, roles=["Super Admin"])["authorized"] is False

    bogus = auth_headers(agent["id"], active_role=str(uuid4()))
    assert authorize(client, bogus, permission="bookings.view")["reason"] == "invalid_active_role"

    missing = auth_headers(str(uuid4()))
    assert authorize(client, missing, permission="bookings.view")["reason"] == "user_not_found"


def test_authorize_endpoint_validates_payload(client: TestClient, super_admin) -> None:
    both = client.post(
        "/api/v1/authorize",
        json={"permission": "bookings.view", "roles": ["Agent"]},
        headers=super_admin,
    )
    assert both.status_code == 422
    assert client.post("/api/v1/authorize", json={}, headers=super_admin).status_code == 422


def test_authorize_endpoint_requires_token(client: TestClient) -> None:
    response = client.post("/api/v1/authorize", json={"permission": "bookings.view"})
    assert response.status_code == 401


def test_lookup_failure_maps_to_internal_error(client: TestClient, make_user, auth_headers) -> None:
    class FailingGateway:
        def load_auth_context(self, user_id):
            raise InternalLookupFailure("database unavailable")

    user = make_user("root@agency.test", ["Super Admin"])
    client.app.dependency_overrides[get_authorization_service] = lambda: AuthorizationService(FailingGateway())
    try:
        response = client.get("/api/v1/roles", headers=auth_headers(user["id"]))
    finally:
        client.app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"detail": "Error checking permissions", "code": "internal_error"}


def test_custom_active_role_header(client: TestClient, make_user) -> None:
    user = make_user("dual@agency.test", ["Admin", "Super Admin"])
    settings = get_settings().model_copy(update={"active_role_header": "x-acting-as"})
    client.app.dependency_overrides[get_settings] = lambda: settings
    token = create_access_token(user["id"])
    try:
        response = client.get(
            "/api/v1/roles",
            headers={"Authorization": f"Bearer {token}", "x-acting-as": user["role_ids"]["Admin"]},
        )
    finally:
        client.app.dependency_overrides.clear()
    assert response.status_code == 403


def test_authorize_endpoint_can_require_all_roles(client: TestClient, make_user, auth_headers) -> None:
    user = make_user("dual@agency.test", ["Agent", "Finance Manager"])
    headers = auth_headers(user["id"])

    assert authorize(client, headers, roles=["Agent", "Finance Manager"], require_all=True)["authorized"] is True
    assert authorize(client, headers, roles=["Agent", "Admin"], require_all=True) == {
        "authorized": False,
        "reason": "insufficient_privilege",
    }
    assert authorize(client, headers, roles=["Agent", "Admin"])["authorized"] is True


def test_all_roles_guard_on_route(client: TestClient, make_user, auth_headers) -> None:
    @client.app.get("/dual-desk", dependencies=[Depends(require_all_roles("Agent", "Finance Manager"))])
    def dual_desk() -> dict:
        return {"ok": True}

    both = make_user("both@agency.test", ["Agent", "Finance Manager"])
    agent = make_user("agent@agency.test", ["Agent"])

    assert client.get("/dual-desk", headers=auth_headers(both["id"])).json() == {"ok": True}
    denied = client.get("/dual-desk", headers=auth_headers(agent["id"]))
    assert denied.status_code == 403
    assert denied.json() == {
        "detail": "Access denied. Required all roles: Agent, Finance Manager",
        "code": "insufficient_privilege",
    }
    narrowed = auth_headers(both["id"], active_role=both["role_ids"]["Agent"])
    assert client.get("/dual-desk", headers=narrowed).status_code == 403
