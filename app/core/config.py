# app/core/config.py
from __future__ import annotations

"""
# KinoAdmin — Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; explicit where prod needs secrets.
- CSV → list helpers for env-provided allow-lists.
- Redis is optional (session revocation lane) so imports never crash in dev.

## Usage
    from app.core.config import settings
"""

import logging
from pathlib import Path
from typing import List, Optional, Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _split_csv(v: str | None) -> list[str]:
    """Split a comma-separated string into a trimmed list (empty-safe)."""
    if not v:
        return []
    return [s.strip() for s in str(v).split(",") if s and s.strip()]


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Security:
        - Session tokens are verified with `JWT_SECRET_KEY`; issuance lives elsewhere.
        - Issuer/audience are only enforced when configured.

    Storage:
        - Uploaded posters and video files land in `UPLOAD_DIR` and are
          referenced as `{UPLOAD_URL_PREFIX}/{filename}`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "KinoAdmin API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True

    # ── Session verification / JWT ────────────────────────────
    JWT_SECRET_KEY: SecretStr = Field(...)
    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    JWT_ISSUER: Optional[str] = None
    JWT_AUDIENCE: Optional[str] = None
    SESSION_COOKIE_NAME: str = "token"

    # Promotion is ungated in the catalog service; the route applies this policy
    PROMOTE_REQUIRES_SUPERADMIN: bool = True

    # ── Redis (session revocation lane) ───────────────────────
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = False
    AUTH_FAIL_OPEN: bool = False

    # ── Database (PostgreSQL) ─────────────────────────────────
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = Field(SecretStr("postgres"))
    POSTGRES_DB: str = "kinoadmin"

    # ── Uploads ───────────────────────────────────────────────
    UPLOAD_DIR: Path = Path("uploads")
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_POSTER_BYTES: int = Field(10 * 1024 * 1024, ge=1)
    MAX_VIDEO_BYTES: int = Field(8 * 1024 * 1024 * 1024, ge=1)

    # ── CORS ──────────────────────────────────────────────────
    BACKEND_CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def _assemble_cors_origins(cls, v: str | List[str]):
        if isinstance(v, str):
            return _split_csv(v)
        return v

    @field_validator("UPLOAD_URL_PREFIX", mode="before")
    @classmethod
    def _normalize_upload_prefix(cls, v: str | None) -> str:
        s = (v or "/uploads").strip().rstrip("/")
        return s if s.startswith("/") else f"/{s}"

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    # Database DSNs (stringified for simplicity)
    @property
    def DATABASE_URL(self) -> str:
        """Sync DSN."""
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Async SQLAlchemy DSN."""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")


# Singleton instance
settings = Settings()
