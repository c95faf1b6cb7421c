"""
Centralized Configuration for napi

Provides a frozen pydantic-settings model with:
- Environment variable loading (.env support)
- Type validation
- Default values
- Required credential / signing key checks

The settings object is built once at startup and handed to create_app();
nothing else reads the environment.

Usage:
    from napi.config import load_settings

    settings = load_settings()
    print(settings.port)
"""

from pathlib import Path
from typing import Optional, Tuple

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from napi.core.errors import ConfigError
from napi.core.sessions import DEFAULT_MAX_SESSIONS

REQUIRED_ENV_VARS = ("USERNAME", "PASSWORD", "VERSION", "SESSION_KEY")


class Settings(BaseSettings):
    """
    Process configuration

    Core values use the bare variable names (USERNAME, PASSWORD, VERSION,
    SESSION_KEY, PORT, WEBSOCKET_PORT, USER). Everything else is prefixed
    with NAPI_.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # ============================================
    # Identity and session signing (required)
    # ============================================

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    version: str = Field(min_length=1)
    session_key: str = Field(min_length=1)

    # ============================================
    # Server
    # ============================================

    host: str = Field(default="0.0.0.0", validation_alias="NAPI_HOST")
    port: int = 5499
    # Reserved for a future websocket listener, not bound
    websocket_port: int = 5498
    server_user: str = Field(default="", validation_alias="USER")

    # ============================================
    # Logging
    # ============================================

    log_file: Optional[str] = Field(default="serve.log", validation_alias="NAPI_LOG_FILE")
    log_level: str = Field(default="INFO", validation_alias="NAPI_LOG_LEVEL")
    verbose_log: bool = Field(default=True, validation_alias="NAPI_VERBOSE_LOG")

    # ============================================
    # Sessions and rate limits
    # ============================================

    secure_cookies: bool = Field(default=True, validation_alias="NAPI_SECURE_COOKIES")
    rate_limit_storage: str = Field(default="memory://", validation_alias="NAPI_RATE_LIMIT_STORAGE")
    general_rate_limit: str = Field(default="10/minute", validation_alias="NAPI_GENERAL_RATE_LIMIT")
    login_rate_limit: str = Field(default="25 per 10 minutes", validation_alias="NAPI_LOGIN_RATE_LIMIT")
    system_rate_limit: str = Field(default="70/minute", validation_alias="NAPI_SYSTEM_RATE_LIMIT")

    # ============================================
    # Access policy and hardening
    # ============================================

    require_session_for_system: bool = Field(
        default=True, validation_alias="NAPI_REQUIRE_SESSION_FOR_SYSTEM"
    )
    file_root: Optional[Path] = Field(default=None, validation_alias="NAPI_FILE_ROOT")
    strict_commands: bool = Field(default=False, validation_alias="NAPI_STRICT_COMMANDS")
    max_sessions: int = Field(
        default=DEFAULT_MAX_SESSIONS, ge=1, validation_alias="NAPI_MAX_SESSIONS"
    )

    @property
    def cors_origins(self) -> Tuple[str, ...]:
        """Origins allowed to make credentialed cross-site requests"""
        return (f"https://ncwi.{self.server_user}.hackclub.app", "http://localhost")

    def describe(self) -> dict:
        """Effective configuration with secrets masked"""
        data = self.model_dump(mode="json")
        for secret in ("password", "session_key"):
            data[secret] = "****"
        data["cors_origins"] = list(self.cors_origins)
        return data


def load_settings(**overrides) -> Settings:
    """Build Settings from the environment.

    Raises:
        ConfigError: required variables missing or values invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = sorted({str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")})
        required_missing = [name for name in REQUIRED_ENV_VARS if name in missing]
        if required_missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(required_missing)}",
                required_missing,
            ) from e
        raise ConfigError(f"Invalid configuration: {', '.join(missing)}", missing) from e
