"""Typed configuration models for API call runtime settings."""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from packages.api_call.http import CallConfig

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "api-call" / "api-call.yaml"

# YAML file read by the settings sources; scoped per ``load_settings`` call.
ACTIVE_CONFIG_PATH: ContextVar[Path] = ContextVar(
    "api_call_config_path", default=DEFAULT_CONFIG_PATH
)


class LoggingSettings(BaseModel):
    """Log handler configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    json_output: bool = False
    service: str = "api-call"
    environment: str = "dev"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        """Accept lowercase level names."""
        if isinstance(value, str):
            return value.strip().upper()
        return value


class HttpSettings(BaseModel):
    """Defaults applied to every outbound call."""

    base_url: str = ""
    timeout_seconds: float | None = Field(default=None, ge=0)
    headers: dict[str, str] = Field(default_factory=dict)
    username: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def _require_credential_pair(self) -> "HttpSettings":
        """Reject a password without a username."""
        if self.password is not None and self.username is None:
            raise ValueError("http.password requires http.username")
        return self

    def to_call_config(
        self,
        url: str,
        *,
        method: str = "GET",
        body: bytes | str | None = None,
    ) -> CallConfig:
        """Build a ``CallConfig`` for one call from these defaults."""
        config = (
            CallConfig(url=url, method=method, base_url=self.base_url, body=body)
            .with_timeout(self.timeout_seconds)
            .with_headers(self.headers)
        )
        if self.username is not None:
            config = config.with_authentication(self.username, self.password or "")
        return config


class ApiCallSettings(BaseSettings):
    """Root runtime settings resolved from init, env and YAML sources."""

    model_config = SettingsConfigDict(
        env_prefix="API_CALL_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > env > yaml."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=ACTIVE_CONFIG_PATH.get(),
                yaml_file_encoding="utf-8",
            ),
        )
