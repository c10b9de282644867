"""Service configuration.

All settings come from environment variables (or a ``.env`` file) and fall
back to the defaults below. Import the ``settings`` singleton rather than
instantiating ``Settings`` again.
"""

from __future__ import annotations

import string
from typing import Optional, List, Union
from enum import Enum

from pydantic import Field, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Settings for the short links service.

    Short code bounds drive both validation and the messages shown to
    users, so changing them changes what "too short" means everywhere.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    APP_NAME: str = "Shortlinks"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Owner-scoped short links with public redirects"
    DEBUG: bool = False

    # Public origin used to build short URLs, e.g. https://sho.rt
    BASE_URL: str = "http://localhost:8000"
    API_PREFIX: str = "/api"
    REDIRECT_PREFIX: str = "/l"
    CORS_ORIGINS: Union[List[str], str] = ["*"]

    # Short codes
    SHORT_CODE_LENGTH: int = 6
    SHORT_CODE_CHARS: str = string.ascii_letters + string.digits
    SHORT_CODE_MIN_LENGTH: int = 3
    SHORT_CODE_MAX_LENGTH: int = 20

    # Identity asserted by the upstream auth proxy
    AUTH_USER_HEADER: str = "X-User-Id"
    # Narrow UPDATE/DELETE to the caller's rows; False writes first and checks the owner after
    OWNERSHIP_CHECK_BEFORE_WRITE: bool = True

    # Database
    POSTGRES_SERVER: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: str = Field(default="postgres")
    POSTGRES_DB: str = Field(default="shortlinks")
    DATABASE_URL: Optional[str] = None  # overrides the POSTGRES_* parts
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_POOL_MAX_OVERFLOW: int = 10
    POSTGRES_POOL_TIMEOUT: int = 30
    POSTGRES_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False
    DB_CREATE_TABLES: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "shortlinks.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[request_id]} | {message}"
    LOG_JSON: bool = True
    REQUEST_LOGGING_ENABLED: bool = True

    @field_validator("CORS_ORIGINS")
    def split_origins(cls, v: Union[List[str], str]) -> List[str]:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("REDIRECT_PREFIX", "API_PREFIX")
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def check_short_code_bounds(self) -> Settings:
        if not self.SHORT_CODE_CHARS:
            raise ValueError("SHORT_CODE_CHARS must not be empty")
        if not 1 <= self.SHORT_CODE_MIN_LENGTH <= self.SHORT_CODE_MAX_LENGTH:
            raise ValueError("Short code bounds must satisfy 1 <= SHORT_CODE_MIN_LENGTH <= SHORT_CODE_MAX_LENGTH")
        # Generated codes have to pass the same validation as chosen ones
        if not self.SHORT_CODE_MIN_LENGTH <= self.SHORT_CODE_LENGTH <= self.SHORT_CODE_MAX_LENGTH:
            raise ValueError("SHORT_CODE_LENGTH must lie within the short code bounds")
        return self

    @computed_field
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Async database URL, ``DATABASE_URL`` when set."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def short_url(self, short_code: str) -> str:
        """Public URL that redirects to the link with this code."""
        return f"{self.BASE_URL.rstrip('/')}{self.REDIRECT_PREFIX}/{short_code}"


settings = Settings()
