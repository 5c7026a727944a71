"""
===============================================================================
TARJETA CRC — crosscutting/config.py (Settings)
===============================================================================

Responsabilidades:
  - Leer la configuración desde variables de entorno / .env (pydantic-settings).
  - Rechazar al arrancar combinaciones inválidas: Postgres sin DATABASE_URL,
    MAX_UPLOAD_BYTES > MAX_BODY_BYTES, secreto débil o seed admin en producción.
  - Entregar una única instancia por proceso (get_settings, lru_cache): el
    secreto JWT se lee una vez.

Colaboradores:
  - api/main.py, container.py, identity/auth_users.py, infrastructure/*
===============================================================================
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024
MIN_PRODUCTION_SECRET_LENGTH = 32

# Valores de ejemplo / default que nunca deben firmar tokens en producción.
_PLACEHOLDER_SECRETS = frozenset({"dev-secret", "changeme", "change-me", "password", "secret"})


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = "development"

    # -- servidor ----------------------------------------------------------------
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    allowed_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = False
    log_level: str = "INFO"
    log_json: bool = True

    # -- persistencia ------------------------------------------------------------
    user_repository: Literal["postgres", "memory"] = "postgres"
    database_url: str = ""
    db_pool_min_size: int = Field(1, ge=1)
    db_pool_max_size: int = Field(10, ge=1)
    db_statement_timeout_ms: int = Field(30_000, ge=0)

    # -- tokens ------------------------------------------------------------------
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = Field(60, gt=0)

    # -- uploads y límites -------------------------------------------------------
    upload_dir: str = "storage/avatars"
    upload_public_prefix: str = "/avatars"
    max_upload_bytes: int = Field(5 * MIB, gt=0)
    max_body_bytes: int = Field(10 * MIB, gt=0)

    # -- seed admin (solo APP_ENV=local) -------------------------------------------
    dev_seed_admin: bool = False
    dev_seed_admin_email: str = "admin@local.dev"
    dev_seed_admin_password: str = "admin123"
    dev_seed_admin_name: str = "Admin"
    dev_seed_admin_force_reset: bool = False

    @field_validator("user_repository", mode="before")
    @classmethod
    def _lowercase_backend(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("upload_public_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        segments = value.strip().strip("/")
        if not segments:
            raise ValueError("upload_public_prefix must not be empty")
        return f"/{segments}"

    @model_validator(mode="after")
    def _check_consistency(self) -> "Settings":
        if self.user_repository == "postgres" and not self.database_url.strip():
            raise ValueError("DATABASE_URL is required unless USER_REPOSITORY=memory")

        if self.max_upload_bytes > self.max_body_bytes:
            raise ValueError(
                f"max_upload_bytes ({self.max_upload_bytes}) must not exceed "
                f"max_body_bytes ({self.max_body_bytes})"
            )

        if self.is_production():
            secret = self.jwt_secret.strip()
            if secret in _PLACEHOLDER_SECRETS or len(secret) < MIN_PRODUCTION_SECRET_LENGTH:
                raise ValueError(
                    "JWT_SECRET must be a non-default value of at least "
                    f"{MIN_PRODUCTION_SECRET_LENGTH} characters in production"
                )
            if self.dev_seed_admin:
                raise ValueError("DEV_SEED_ADMIN must be false in production")

        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def get_allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Settings del proceso. Lanza pydantic.ValidationError si la config es inválida."""
    return Settings()
