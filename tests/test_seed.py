from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from access_core.core.database import engine, session_scope
from access_core.models import Base, Permission, Role, User, UserRole
from access_core.models.catalog import DEFAULT_PERMISSIONS, DEFAULT_ROLES, get_role_permission_map
from access_core.services.auth_context import SqlAlchemyAuthContextGateway
from access_core.services.authorization import InternalLookupFailure, resolve_permission
from access_core.services.seed import SeedService


def test_catalog_is_consistent() -> None:
    codes = {spec.code for spec in DEFAULT_PERMISSIONS}
    assert len(codes) == len(DEFAULT_PERMISSIONS) == 41
    assert len(DEFAULT_ROLES) == 8
    role_map = get_role_permission_map()
    assert set(role_map["Super Admin"]) == codes
    for name, granted in role_map.items():
        assert set(granted) <= codes, name


def test_seed_defaults_is_idempotent() -> None:
    with session_scope() as session:
        first = SeedService(session).seed_defaults()
    assert first.permissions_created == 41
    assert first.roles_created == 8

    with session_scope() as session:
        second = SeedService(session).seed_defaults()
        assert session.scalar(select(func.count(Permission.id))) == 41
        assert session.scalar(select(func.count(Role.id))) == 8
    assert second.permissions_created == 0
    assert second.roles_created == 0
    assert second.roles_updated == 8
    assert second.role_ids == first.role_ids


def test_seed_resets_default_role_permissions() -> None:
    with session_scope() as session:
        SeedService(session).seed_defaults()
        agent = session.scalar(select(Role).where(Role.name == "Agent"))
        agent.permissions = []

    with session_scope() as session:
        SeedService(session).seed_defaults()
        agent = session.scalar(select(Role).where(Role.name == "Agent"))
        assert sorted(permission.code for permission in agent.permissions) == sorted(
            get_role_permission_map()["Agent"]
        )
        assert agent.is_system is True


def test_ensure_super_admin() -> None:
    with session_scope() as session:
        with pytest.raises(LookupError):
            SeedService(session).ensure_super_admin("root@agency.test", "Root")

    with session_scope() as session:
        seeder = SeedService(session)
        seeder.seed_defaults()
        created = seeder.ensure_super_admin("Root@Agency.test", "Root")
        assert created is not None
        assert created.email == "root@agency.test"
        assert [link.role.name for link in created.role_links] == ["Super Admin"]
        assert seeder.ensure_super_admin("root@agency.test", "Root") is None


def test_gateway_skips_dangling_role_references() -> None:
    with session_scope() as session:
        SeedService(session).seed_defaults()
        agent = session.scalar(select(Role).where(Role.name == "Agent"))
        user = User(name="Drifter", email="drifter@agency.test")
        user.role_links = [
            UserRole(role_id=uuid4(), position=0),
            UserRole(role_id=agent.id, position=1),
            UserRole(role_id=agent.id, position=2),
        ]
        session.add(user)
        session.flush()
        user_id = user.id

    with session_scope() as session:
        view = SqlAlchemyAuthContextGateway(session).load_auth_context(user_id)

    assert view is not None
    assert view.roles[0] is None
    assert [role.name for role in view.resolved_roles()] == ["Agent", "Agent"]
    assert view.name == "Drifter"
    assert view.status == "Active"
    assert resolve_permission(view, "bookings.view").allowed
    assert not resolve_permission(view, "settings.roles").allowed


def test_gateway_returns_none_for_unknown_user() -> None:
    with session_scope() as session:
        assert SqlAlchemyAuthContextGateway(session).load_auth_context(uuid4()) is None


def test_gateway_wraps_storage_errors() -> None:
    Base.metadata.drop_all(bind=engine)
    with pytest.raises(InternalLookupFailure):
        with session_scope() as session:
            SqlAlchemyAuthContextGateway(session).load_auth_context(uuid4())
