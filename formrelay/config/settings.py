"""
Application settings using pydantic-settings for type-safe configuration.

All environment variables are centralized here with proper typing, validation,
and sensible defaults. Settings are loaded once at startup and cached.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import MissingKeyError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development.
    Production values should be set via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars not defined here
        case_sensitive=False,  # Allow CRM_API_TOKEN or crm_api_token
    )

    # === Remote CRM ===
    crm_api_url: str = Field(
        default="https://api.monday.com/v2",
        description="GraphQL endpoint of the remote CRM",
    )
    crm_file_api_url: str = Field(
        default="https://api.monday.com/v2/file",
        description="Multipart endpoint used for file uploads",
    )
    crm_api_token: str = Field(
        default="",
        description="API token sent in the Authorization header",
    )
    crm_api_version: str = Field(
        default="2024-10",
        description="API version header value",
    )
    crm_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for every remote CRM request",
    )

    # === PocketBase Configuration ===
    pocketbase_url: str = Field(
        default="http://127.0.0.1:8090",
        description="PocketBase server URL",
    )
    pocketbase_admin_email: str = Field(
        default="admin@formrelay.local",
        description="PocketBase admin email for API authentication",
    )
    pocketbase_admin_password: str = Field(
        default="",
        description="PocketBase admin password",
    )
    skip_pb_auth: bool = Field(
        default=False,
        description="Skip PocketBase authentication on startup (for testing)",
    )

    # === Debugging and local files ===
    debug_mode: bool = Field(
        default=False,
        description="Write audit dumps of outgoing payloads",
    )
    audit_dir: str = Field(
        default="data/audit",
        description="Directory receiving audit dumps",
    )
    upload_dir: str = Field(
        default="uploads",
        description="Directory holding files referenced by submissions",
    )
    log_level: str = Field(
        default="INFO",
        description="TRACE, DEBUG or INFO",
    )

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log_level."""
        v = v.upper()
        if v not in ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return v

    @field_validator("crm_timeout_seconds", mode="after")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("CRM_TIMEOUT_SECONDS must be positive")
        return v

    def require_crm_token(self) -> str:
        """Return the CRM token, failing fast when it is not configured."""
        if not self.crm_api_token:
            raise MissingKeyError("CRM_API_TOKEN is not set")
        return self.crm_api_token


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the application.
    """
    return Settings()
