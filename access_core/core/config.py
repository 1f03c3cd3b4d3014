"""Application configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Service configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ACR_",
        extra="ignore",
    )

    environment: Literal["local", "test", "staging", "production"] = Field(
        default="local",
        validation_alias="env",
    )
    service_name: str = Field(default="agency-access-core")
    database_url: str = Field(default="sqlite:///./data/access.db")
    sql_echo: bool = Field(default=False)
    # Production runs the Alembic migrations instead.
    create_schema: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)
    cors_origins: List[str] | str = Field(default_factory=list)

    jwt_secret: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")
    jwt_issuer: str | None = Field(default="agency-access-core")
    jwt_expiry_minutes: int = Field(default=60 * 24)
    active_role_header: str = Field(default="x-active-role")

    seed_defaults: bool = Field(default=True)
    bootstrap_admin_email: str | None = Field(default=None)
    bootstrap_admin_name: str = Field(default="Super Admin")
    max_active_agents: int = Field(default=1000)

    partner_api_url: str | None = Field(default=None)
    partner_agent_code: str | None = Field(default=None)
    partner_api_email: str | None = Field(default=None)
    partner_api_password: str | None = Field(default=None)
    partner_token_skew_seconds: int = Field(default=60)
    partner_timeout_seconds: float = Field(default=10.0)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, value: str | List[str] | None) -> List[str]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator(
        "jwt_issuer",
        "bootstrap_admin_email",
        "partner_api_url",
        "partner_agent_code",
        "partner_api_email",
        "partner_api_password",
        mode="before",
    )
    @classmethod
    def empty_string_to_none(cls, value: str | None) -> str | None:
        if value == "":
            return None
        return value

    @field_validator("active_role_header")
    @classmethod
    def normalize_header_name(cls, value: str) -> str:
        return value.strip().lower()


@lru_cache
def get_settings() -> AppSettings:
    """Return cached application settings instance."""

    return AppSettings()
