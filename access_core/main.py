"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from access_core.api.error_handlers import register_exception_handlers
from access_core.api.routers import get_api_router
from access_core.core.config import AppSettings, get_settings
from access_core.core.database import init_schema, session_scope
from access_core.core.logging import configure_logging
from access_core.services.partner_token import build_partner_token_provider
from access_core.services.seed import SeedService


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Seed the default catalog and bootstrap admin, and own the partner token provider."""

    settings: AppSettings = app.state.settings
    if settings.create_schema:
        init_schema()
    if settings.seed_defaults:
        with session_scope() as session:
            seeder = SeedService(session)
            seeder.seed_defaults()
            if settings.bootstrap_admin_email:
                seeder.ensure_super_admin(settings.bootstrap_admin_email, settings.bootstrap_admin_name)

    app.state.partner_tokens = build_partner_token_provider(settings)
    try:
        yield
    finally:
        if app.state.partner_tokens is not None:
            app.state.partner_tokens.close()


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Agency Access Core",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app


app = create_app()
