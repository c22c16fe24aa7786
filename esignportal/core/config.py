from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment."""

    app_name: str = Field(default="eSign Portal", validation_alias="APP_NAME")
    environment: str = Field(default="local", validation_alias="APP_ENV")
    version: str = Field(default="0.1.0")
    jwt_secret: str = Field(default="replace-with-secure-secret", validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    access_token_ttl_seconds: int = Field(
        default=3600, validation_alias="ACCESS_TOKEN_TTL_SECONDS"
    )
    allowed_roles: tuple[str, ...] = Field(
        default=("employee", "hr"), validation_alias="ALLOWED_ROLES"
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///./esign_portal.db",
        validation_alias="DATABASE_URL",
    )

    @property
    def async_database_url(self) -> str:
        """Convert database URL to an async driver URL."""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("sqlite:///"):
            url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return url

    # Signing backend
    api_base_url: str = Field(
        default="https://your-backend-api.com/api",
        validation_alias="API_BASE_URL",
    )
    api_timeout_seconds: float = Field(default=10.0, validation_alias="API_TIMEOUT_SECONDS")
    use_mock_data_only: bool = Field(default=True, validation_alias="USE_MOCK_DATA_ONLY")

    # Request lifecycle
    request_ttl_days: int = Field(default=30, validation_alias="REQUEST_TTL_DAYS")
    expiring_soon_days: int = Field(default=3, validation_alias="EXPIRING_SOON_DAYS")

    # Upload limits
    max_document_bytes: int = Field(
        default=25 * 1024 * 1024, validation_alias="MAX_DOCUMENT_BYTES"
    )
    max_id_proof_bytes: int = Field(
        default=10 * 1024 * 1024, validation_alias="MAX_ID_PROOF_BYTES"
    )

    session_cookie_name: str = Field(default="esign_client", validation_alias="SESSION_COOKIE_NAME")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()
