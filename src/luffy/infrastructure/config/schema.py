"""Validated configuration models.

``AppConfig`` is the single, final view of the configuration.  Each field
accepts either its flat name (``http_timeout_seconds``) or its place in the
sectioned YAML (``http.timeout_seconds``); ``load.py`` merges every layer
into the sectioned shape before validating.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import AliasChoices, AliasPath, BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from luffy.infrastructure.common.http import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _in_section(flat: str, section: str, key: str) -> AliasChoices:
    return AliasChoices(flat, AliasPath(section, key))


class AppConfig(BaseModel):
    """Resolver configuration (validated, final).

    YAML sections: ``provider``, ``http``, ``logging``.  Environment
    variables go through ``EnvOverrides`` so the loader controls
    precedence explicitly.
    """

    app_name: str = Field(default="luffy", description="Application name.")
    environment: Environment = Field(
        default="dev", description="Runtime environment; picks the default log format."
    )

    # provider.*
    provider_name: str = Field(
        default="flixhq",
        validation_alias=_in_section("provider_name", "provider", "name"),
        description="Content site to resolve against (sflix, flixhq).",
    )
    max_results: int = Field(
        default=10,
        validation_alias=_in_section("max_results", "provider", "max_results"),
        description="Upper bound on search results per query.",
    )

    # http.*
    http_timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT,
        validation_alias=_in_section("http_timeout_seconds", "http", "timeout_seconds"),
        description="Deadline in seconds for each outbound request.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=_in_section("http_follow_redirects", "http", "follow_redirects"),
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=_in_section("http_user_agent", "http", "user_agent"),
    )

    # logging.*
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=_in_section("log_level", "logging", "level"),
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=_in_section("log_format", "logging", "format"),
        description="console or json; derived from environment when unset.",
    )

    @field_validator("provider_name")
    @classmethod
    def _normalize_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("provider name must not be empty")
        return v

    @field_validator("max_results")
    @classmethod
    def _positive_max_results(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_results must be >= 1")
        return v

    @field_validator("http_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_log_format(self) -> "AppConfig":
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Dump in the sectioned shape of ``config.yaml``."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "provider": {"name": self.provider_name, "max_results": self.max_results},
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """Flat ``LUFFY_*`` environment overrides, all optional.

    e.g. ``LUFFY_PROVIDER_NAME=sflix``, ``LUFFY_HTTP_TIMEOUT_SECONDS=5``.
    """

    model_config = SettingsConfigDict(env_prefix="LUFFY_", extra="ignore", case_sensitive=False)

    app_name: Optional[str] = None
    environment: Optional[Environment] = None
    provider_name: Optional[str] = None
    max_results: Optional[int] = None
    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None
    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Only the values actually set, for merging."""
        return self.model_dump(exclude_none=True)
