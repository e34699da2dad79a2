"""
Disqus Bridge Configuration

Settings are loaded from environment variables prefixed with DISQUS_ (and
an optional .env file) using Pydantic Settings.

The user API key configured here is only the starting value: a client's
key can be replaced at runtime with DisqusClient.set_user_key().
"""

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# Where a user obtains their personal API key
USER_KEY_URL = "http://disqus.com/api/get_my_key/"


class DisqusSettings(BaseSettings):
    """
    Configuration for the Disqus API client.

    All settings can be overridden via environment variables prefixed with
    DISQUS_. For example, DISQUS_USER_API_KEY sets the user_api_key field.
    """

    model_config = SettingsConfigDict(
        env_prefix="DISQUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_base_url: str = Field(
        default="http://disqus.com/api", description="Base URL; calls go to <base>/<method>/"
    )
    api_version: str = Field(default="1.1", description="Value sent as api_version")
    user_api_key: str | None = Field(
        default=None, description="User-level API key used by every call"
    )

    # Dispatch
    handler_namespace: str = Field(
        default="disqus",
        description="Prefix of the handler names the remote side is asked to invoke",
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="HTTP client timeout in seconds"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so method URLs are joined with a single slash."""
        return v.rstrip("/")

    @field_validator("api_version", "handler_namespace")
    @classmethod
    def require_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    def method_url(self, method: str) -> str:
        """Get the endpoint URL for an API method."""
        return f"{self.api_base_url}/{method}/"


# Singleton instance for global access
_settings: DisqusSettings | None = None


def get_settings() -> DisqusSettings:
    """
    Get the global settings instance.

    Loaded from the environment on first use.
    """
    global _settings
    if _settings is None:
        _settings = DisqusSettings()
        if not _settings.user_api_key:
            logger.debug("DISQUS_USER_API_KEY not set; call set_user_key() before making calls")
    return _settings


def configure_settings(settings: DisqusSettings | None) -> None:
    """
    Set a custom settings instance.

    Useful for testing or when configuration comes from a non-standard
    source. Passing None makes the next get_settings() reload from the
    environment.
    """
    global _settings
    _settings = settings
