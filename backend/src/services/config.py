"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DB_PATH = PROJECT_ROOT / "data" / "testgem.db"
DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    jwt_secret_key: Optional[str] = Field(
        default=None,
        description="HMAC secret for JWT signing (required for JWT/HTTP auth)",
    )
    enable_local_mode: bool = Field(
        default=True,
        description="Allow local-dev token bypass when running locally",
    )
    local_dev_token: Optional[str] = Field(
        default="local-dev-token",
        description="Static token accepted in local mode for development",
    )
    record_backend: Literal["sqlite", "supabase"] = Field(
        default="sqlite",
        description="Where documents, notes and workspaces are stored",
    )
    database_path: Path = Field(
        default=DEFAULT_DB_PATH, description="SQLite file used by the sqlite backend"
    )
    supabase_url: Optional[str] = Field(None, description="Supabase project URL")
    supabase_api_key: Optional[str] = Field(None, description="Supabase API key")
    gemini_api_key: Optional[str] = Field(None, description="Google Gemini API key")
    gemini_model: str = Field(default=DEFAULT_GEMINI_MODEL)
    gemini_api_base: str = Field(default=DEFAULT_GEMINI_API_BASE)
    gemini_timeout_seconds: float = Field(default=60.0, gt=0)
    cors_origins: tuple[str, ...] = Field(
        default=("http://localhost:3000", "http://localhost:5173"),
        description="Origins allowed to call the API from a browser",
    )

    @field_validator("database_path", mode="before")
    @classmethod
    def _normalize_db_path(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            return DEFAULT_DB_PATH
        path = value if isinstance(value, Path) else Path(value)
        return path.expanduser().resolve()

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def _ensure_secret(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError(
                "JWT_SECRET_KEY cannot be empty; unset the variable to disable JWT auth in local mode"
            )
        if len(cleaned) < 16:
            raise ValueError("JWT_SECRET_KEY must be at least 16 characters")
        return cleaned

    @field_validator("supabase_url", mode="before")
    @classmethod
    def _strip_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip().rstrip("/")
        return cleaned or None

    @model_validator(mode="after")
    def _require_supabase_settings(self) -> "AppConfig":
        if self.record_backend == "supabase" and not (
            self.supabase_url and self.supabase_api_key
        ):
            raise ValueError(
                "SUPABASE_URL and SUPABASE_API_KEY are required when RECORD_BACKEND=supabase"
            )
        return self


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


def _split_origins(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return ("http://localhost:3000", "http://localhost:5173")
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    enable_local_mode = _read_env("ENABLE_LOCAL_MODE", "true").lower() not in {
        "0",
        "false",
        "no",
    }

    config = AppConfig(
        jwt_secret_key=_read_env("JWT_SECRET_KEY"),
        enable_local_mode=enable_local_mode,
        local_dev_token=_read_env("LOCAL_DEV_TOKEN", "local-dev-token"),
        record_backend=(_read_env("RECORD_BACKEND", "sqlite") or "sqlite").lower(),
        database_path=_read_env("DATABASE_PATH"),
        supabase_url=_read_env("SUPABASE_URL"),
        supabase_api_key=_read_env("SUPABASE_API_KEY"),
        gemini_api_key=_read_env("GEMINI_API_KEY"),
        gemini_model=_read_env("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        gemini_api_base=_read_env("GEMINI_API_BASE", DEFAULT_GEMINI_API_BASE),
        gemini_timeout_seconds=float(_read_env("GEMINI_TIMEOUT_SECONDS", "60")),
        cors_origins=_split_origins(_read_env("CORS_ORIGINS")),
    )
    if config.record_backend == "sqlite":
        config.database_path.parent.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "PROJECT_ROOT",
    "DEFAULT_DB_PATH",
    "DEFAULT_GEMINI_API_BASE",
    "DEFAULT_GEMINI_MODEL",
]
