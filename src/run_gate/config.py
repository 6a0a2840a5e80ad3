"""Configuration management for the run gate."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .github.client import DEFAULT_API_URL


class GateSettings(BaseSettings):
    """Runtime configuration sourced from GitHub Actions inputs and runner variables."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    token: str = Field(default="", validation_alias=AliasChoices("INPUT_TOKEN", "GITHUB_TOKEN"))
    interval: float = Field(default=10.0, validation_alias="INPUT_INTERVAL", allow_inf_nan=False)
    branch: str = Field(default="", validation_alias="INPUT_BRANCH")
    merge_queue_branch: str | None = Field(default=None, validation_alias="MQ_BRANCH_NAME")
    event_path: Path | None = Field(default=None, validation_alias="GITHUB_EVENT_PATH")
    event_name: str | None = Field(default=None, validation_alias="GITHUB_EVENT_NAME")
    repository: str | None = Field(default=None, validation_alias="GITHUB_REPOSITORY")
    run_id: int | None = Field(default=None, validation_alias="GITHUB_RUN_ID")
    api_url: str = Field(default=DEFAULT_API_URL, validation_alias="GITHUB_API_URL")
    request_timeout: float = Field(
        default=30.0, validation_alias="RUN_GATE_REQUEST_TIMEOUT", allow_inf_nan=False
    )
    log_level: str = Field(default="INFO", validation_alias="RUN_GATE_LOG_LEVEL")

    @field_validator("interval")
    @classmethod
    def _validate_interval(cls, value: float) -> float:
        if value < 0:
            raise ValueError("INPUT_INTERVAL must be a non-negative number of seconds")
        return value

    @field_validator("request_timeout")
    @classmethod
    def _validate_request_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("RUN_GATE_REQUEST_TIMEOUT must be > 0")
        return value

    @field_validator("branch", mode="before")
    @classmethod
    def _strip_branch(cls, value):
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("merge_queue_branch", "event_name", "repository", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("run_id", "event_path", mode="before")
    @classmethod
    def _empty_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("api_url")
    @classmethod
    def _normalize_api_url(cls, value: str) -> str:
        return value.strip().rstrip("/") or DEFAULT_API_URL

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "RUN_GATE_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized


@lru_cache(maxsize=1)
def get_settings() -> GateSettings:
    """Return cached settings instance."""

    settings = GateSettings()
    if settings.event_path is not None:
        settings.event_path = settings.event_path.expanduser()
    return settings


__all__ = ["GateSettings", "get_settings"]
