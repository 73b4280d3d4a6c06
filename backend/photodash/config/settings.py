"""
Application settings loaded from the environment.
"""
import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from photodash.services.exceptions import ConfigurationError

DEFAULT_MAX_UPLOAD_BYTES = 15 * 1024 * 1024
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]

REQUIRED_VARIABLES = ("BASEROW_API_TOKEN", "BASEROW_BASE_URL", "BASEROW_TABLE_ID")


class Settings(BaseModel):
    """Read-only configuration shared by every request."""

    model_config = ConfigDict(frozen=True)

    api_token: str
    base_url: str
    table_id: str
    timeout_seconds: float = 30.0
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    log_level: str = "INFO"
    cors_origins: List[str] = DEFAULT_CORS_ORIGINS

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value[:-1] if value.endswith("/") else value

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        # getLevelName maps known names to their number, anything else to "Level X"
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @field_validator("timeout_seconds", "max_upload_bytes")
    @classmethod
    def must_be_positive(cls, value):
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value


def _missing_env(name: str) -> ConfigurationError:
    return ConfigurationError(f"Missing required environment variable {name}. Add it to .env.")


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def cors_origins_from_env() -> List[str]:
    """Comma separated CORS_ORIGINS, or an empty list when unset."""
    origins = _optional("CORS_ORIGINS") or ""
    return [origin.strip() for origin in origins.split(",") if origin.strip()]


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build settings from the process environment (and `.env` when present).

    Raises ConfigurationError when a required variable is absent or an
    optional one cannot be parsed.
    """
    load_dotenv(env_file)

    for name in REQUIRED_VARIABLES:
        if not os.getenv(name):
            raise _missing_env(name)

    values = {
        "api_token": os.environ["BASEROW_API_TOKEN"],
        "base_url": os.environ["BASEROW_BASE_URL"],
        "table_id": os.environ["BASEROW_TABLE_ID"],
    }
    optional = {
        "timeout_seconds": _optional("BASEROW_TIMEOUT_SECONDS"),
        "max_upload_bytes": _optional("MAX_UPLOAD_BYTES"),
        "log_level": _optional("LOG_LEVEL"),
    }
    values.update({key: value for key, value in optional.items() if value is not None})

    origins = cors_origins_from_env()
    if origins:
        values["cors_origins"] = origins

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
