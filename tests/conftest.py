import os
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

os.environ.setdefault("ENV", "test")
os.environ.setdefault("ACR_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ACR_JWT_SECRET", "test-secret-key-with-enough-length")
os.environ.setdefault("ACR_LOG_JSON", "false")
os.environ.setdefault("ACR_SEED_DEFAULTS", "true")
os.environ.setdefault("ACR_BOOTSTRAP_ADMIN_EMAIL", "")
os.environ.setdefault("ACR_PARTNER_API_URL", "")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from access_core.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from access_core.core.database import engine, session_scope  # noqa: E402
from access_core.core.security import create_access_token  # noqa: E402
from access_core.main import create_app  # noqa: E402
from access_core.models import AgentStatus, Base, Role, User, UserRole, UserStatus  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client() -> TestClient:  # noqa: ANN001
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_user(client):
    """Create a user holding the named (seeded) roles; returns ids as strings."""

    def _make(
        email: str,
        role_names: Iterable[str] = (),
        *,
        status: UserStatus = UserStatus.ACTIVE,
        agent_status: AgentStatus = AgentStatus.PENDING,
    ) -> Dict[str, object]:
        with session_scope() as session:
            roles = []
            for name in role_names:
                role = session.scalar(select(Role).where(Role.name == name))
                assert role is not None, f"role {name} not seeded"
                roles.append(role)
            user = User(
                name=email.split("@")[0].title(),
                email=email,
                status=status,
                agent_status=agent_status,
            )
            user.role_links = [UserRole(role_id=role.id, position=index) for index, role in enumerate(roles)]
            session.add(user)
            session.flush()
            return {"id": str(user.id), "role_ids": {role.name: str(role.id) for role in roles}}

    return _make


@pytest.fixture()
def auth_headers():
    def _headers(user_id: str, active_role: Optional[str] = None) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {create_access_token(user_id)}"}
        if active_role is not None:
            headers["x-active-role"] = active_role
        return headers

    return _headers


@pytest.fixture()
def super_admin(make_user, auth_headers) -> Dict[str, str]:
    user = make_user("root@agency.test", ["Super Admin"])
    return auth_headers(user["id"])
