from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

Environment = Literal["development", "test", "production"]
LogFormat = Literal["json", "console"]

DEFAULT_CORS_ALLOW_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


class Settings(BaseModel):
    app_name: str = Field(default="Task API")
    app_env: Environment = Field(default="development")
    debug: bool = Field(default=True)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)
    database_url: str = Field(default="sqlite:///./tasks.db")
    testing: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default="json")
    log_file: str | None = Field(default=None)
    sqlalchemy_echo: bool | None = Field(default=None)  # None = auto (debug mode)
    local_api_key: str | None = Field(default=None)
    db_auto_init: bool = Field(default=True)
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ALLOW_ORIGINS)
    )
    cors_allow_credentials: bool = Field(default=True)


def _load_env_file(directory: Path) -> None:
    env_file = directory / ".env"
    if env_file.is_file():
        # Real environment variables win over the file.
        load_dotenv(env_file, override=False)


def _to_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _to_bool_or_none(value: str | None) -> bool | None:
    """Parse boolean from env var, return None if not set (for auto behavior)."""
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return None


def _normalize_env(value: str | None) -> Environment:
    if value is None:
        return "development"
    lowered = value.strip().lower()
    if lowered == "test":
        return "test"
    if lowered == "production":
        return "production"
    return "development"


def _normalize_log_format(value: str | None, app_env: Environment) -> LogFormat:
    if value is not None:
        lowered = value.strip().lower()
        if lowered == "console":
            return "console"
        if lowered == "json":
            return "json"
    return "console" if app_env == "development" else "json"


def _parse_csv_list(value: str | None, *, default: list[str]) -> list[str]:
    if value is None:
        return list(default)
    items = [part.strip() for part in value.split(",")]
    normalized = [item for item in items if item]
    return normalized or list(default)


def _normalize_optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


def load_settings() -> Settings:
    _load_env_file(Path.cwd())

    app_env = _normalize_env(os.getenv("APP_ENV"))
    default_debug = app_env != "production"
    default_testing = app_env == "test"
    default_db_auto_init = app_env == "development"

    database_url = _normalize_optional_text(os.getenv("DATABASE_URL"))
    if database_url is None:
        database_url = (
            "sqlite:///./tasks_test.db" if app_env == "test" else "sqlite:///./tasks.db"
        )

    return Settings(
        app_name=os.getenv("APP_NAME", "Task API"),
        app_env=app_env,
        debug=_to_bool(os.getenv("DEBUG"), default=default_debug),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        database_url=database_url,
        testing=_to_bool(os.getenv("TESTING"), default=default_testing),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=_normalize_log_format(os.getenv("LOG_FORMAT"), app_env),
        log_file=_normalize_optional_text(os.getenv("LOG_FILE")),
        sqlalchemy_echo=_to_bool_or_none(os.getenv("SQLALCHEMY_ECHO")),
        local_api_key=_normalize_optional_text(os.getenv("LOCAL_API_KEY")),
        db_auto_init=_to_bool(os.getenv("DB_AUTO_INIT"), default=default_db_auto_init),
        cors_allow_origins=_parse_csv_list(
            os.getenv("CORS_ALLOW_ORIGINS"),
            default=list(DEFAULT_CORS_ALLOW_ORIGINS),
        ),
        cors_allow_credentials=_to_bool(
            os.getenv("CORS_ALLOW_CREDENTIALS"),
            default=True,
        ),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
