"""Application configuration management."""
from pydantic import model_validator, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from sqlalchemy.engine.url import make_url, URL
from typing import Optional
import logging

SQLITE_LOCAL_URL = "sqlite+aiosqlite:///./editor_activity.db"
DEV_SECRET_KEY = "dev-secret-key-change-in-production"
DEV_STRUCTURE_KEY = "0f1e2d3c4b5a69788796a5b4c3d2e1f00f1e2d3c4b5a69788796a5b4c3d2e1f0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = SQLITE_LOCAL_URL
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Application
    environment: str = "development"
    allowed_origins: str = ""  # Comma-separated CORS origins

    # Identity collaborator (bearer tokens are issued elsewhere, verified here)
    secret_key: str = DEV_SECRET_KEY
    jwt_algorithm: str = "HS256"

    # Shared API key required on every request when set; empty disables the check
    api_key: str = ""

    # Project structure encryption (AES-256-CBC, 64 hex chars)
    structure_encryption_key: str = DEV_STRUCTURE_KEY

    # Liveness sweep
    liveness_sweep_enabled: bool = True
    liveness_sweep_interval_seconds: int = 10  # How often stale sessions are demoted
    liveness_stale_threshold_seconds: int = 30  # Heartbeat age after which a session is offline

    # Project creation
    project_create_max_attempts: int = 3  # Re-reads after a unique-key collision

    @field_validator("structure_encryption_key")
    @classmethod
    def validate_structure_encryption_key(cls, value: str) -> str:
        """The structure key must decode to exactly 32 bytes."""
        try:
            raw = bytes.fromhex(value)
        except ValueError as exc:
            raise ValueError("structure_encryption_key must be a hex string") from exc
        if len(raw) != 32:
            raise ValueError(
                f"structure_encryption_key must encode 32 bytes (got {len(raw)})"
            )
        return value.lower()

    @property
    def cors_origins(self) -> list[str]:
        """Return configured CORS origins as a list."""
        return [item.strip() for item in self.allowed_origins.split(",") if item.strip()]

    @property
    def structure_key_bytes(self) -> bytes:
        return bytes.fromhex(self.structure_encryption_key)

    @model_validator(mode="after")
    def validate_all_config(self):
        """Validate security configuration and normalize Postgres URLs."""
        logger = logging.getLogger(__name__)

        # Security validation
        if self.environment == "production":
            if self.secret_key == DEV_SECRET_KEY:
                raise ValueError("secret_key must be changed from default value in production")
            if self.structure_encryption_key == DEV_STRUCTURE_KEY:
                raise ValueError("structure_encryption_key must be changed from default value in production")

        # Validate JWT algorithm
        if self.jwt_algorithm not in ["HS256", "HS384", "HS512"]:
            raise ValueError(f"Unsupported JWT algorithm: {self.jwt_algorithm}. Use HS256, HS384, or HS512.")

        # Validate sweep timing
        if self.liveness_sweep_interval_seconds < 1:
            raise ValueError("liveness_sweep_interval_seconds must be at least 1 second")

        if self.liveness_stale_threshold_seconds < 1:
            raise ValueError("liveness_stale_threshold_seconds must be at least 1 second")

        if self.project_create_max_attempts < 1:
            raise ValueError("project_create_max_attempts must be at least 1")

        # Database URL normalization
        url = self.database_url
        if not url:
            logger.warning("Empty DATABASE_URL, using SQLite fallback")
            self.database_url = SQLITE_LOCAL_URL
            return self

        parsed: Optional[URL] = None
        try:
            parsed = make_url(url)
        except Exception as e:  # pragma: no cover - defensive fallback
            logger.error(f"Failed to parse DATABASE_URL: {e}")
            logger.warning("Invalid DATABASE_URL; falling back to default sqlite database.")
            self.database_url = SQLITE_LOCAL_URL
            return self

        drivername = parsed.drivername
        if drivername.startswith("postgres") and "+asyncpg" not in drivername:
            old_drivername = drivername
            parsed = parsed.set(drivername="postgresql+asyncpg")
            logger.info(f"Driver normalized: {old_drivername} -> {parsed.drivername}")

        # Use render_as_string to properly re-encode special characters in password
        self.database_url = parsed.render_as_string(hide_password=False)

        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
