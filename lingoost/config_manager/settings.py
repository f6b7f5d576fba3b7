"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from lingoost import logging_manager

from .constants import (
    DEFAULT_CDN_URL,
    DEFAULT_DUBBING_API_BASE_URL,
    DEFAULT_MANIFEST_RETRY_CEILING,
    DEFAULT_MANIFEST_TIMEOUT_SECONDS,
    DEFAULT_PLACEHOLDER_LANGUAGES,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_PROCESSING_TIMEOUT_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_SESSION_IDLE_TTL_SECONDS,
    VALID_DUPLICATE_POLICIES,
    VALID_JOB_STORES,
)

logger = logging_manager.get_logger()


class DubbingSettings(BaseModel):
    """Typed representation of the service configuration."""

    model_config = ConfigDict(extra="ignore")

    cdn_base_url: str = DEFAULT_CDN_URL
    dubbing_api_base_url: str = DEFAULT_DUBBING_API_BASE_URL
    dubbing_api_key: Optional[SecretStr] = None
    dubbing_request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS, gt=0
    )
    dubbing_poll_interval_seconds: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0
    )
    dubbing_processing_timeout_seconds: float = Field(
        default=DEFAULT_PROCESSING_TIMEOUT_SECONDS, gt=0
    )
    duplicate_submission_policy: str = "reject"
    manifest_timeout_seconds: float = Field(
        default=DEFAULT_MANIFEST_TIMEOUT_SECONDS, gt=0
    )
    manifest_retry_ceiling: int = Field(default=DEFAULT_MANIFEST_RETRY_CEILING, ge=1)
    session_idle_ttl_seconds: float = Field(
        default=DEFAULT_SESSION_IDLE_TTL_SECONDS, gt=0
    )
    placeholder_languages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PLACEHOLDER_LANGUAGES)
    )
    job_store: str = "memory"
    database_url: Optional[SecretStr] = None
    start_poller: bool = False
    log_level: str = "INFO"

    @field_validator("duplicate_submission_policy", "job_store", "log_level", mode="before")
    @classmethod
    def _strip_lower(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("duplicate_submission_policy")
    @classmethod
    def _check_policy(cls, value: str) -> str:
        if value not in VALID_DUPLICATE_POLICIES:
            raise ValueError(
                f"duplicate_submission_policy must be one of {sorted(VALID_DUPLICATE_POLICIES)}"
            )
        return value

    @field_validator("job_store")
    @classmethod
    def _check_job_store(cls, value: str) -> str:
        if value not in VALID_JOB_STORES:
            raise ValueError(f"job_store must be one of {sorted(VALID_JOB_STORES)}")
        return value

    @field_validator("placeholder_languages", mode="before")
    @classmethod
    def _split_languages(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("cdn_base_url", "dubbing_api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")


class EnvironmentOverrides(BaseSettings):
    """Configuration overrides sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    cdn_base_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("LINGOOST_CDN_URL", "NEXT_PUBLIC_CDN_URL"),
    )
    dubbing_api_base_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DUBBING_API_BASE_URL", "LINGOOST_DUBBING_API_BASE_URL"),
    )
    dubbing_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("DUBBING_API_KEY", "ELEVENLABS_API_KEY"),
    )
    dubbing_request_timeout_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("DUBBING_REQUEST_TIMEOUT_SECONDS")
    )
    dubbing_poll_interval_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("DUBBING_POLL_INTERVAL_SECONDS")
    )
    dubbing_processing_timeout_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("DUBBING_PROCESSING_TIMEOUT_SECONDS")
    )
    duplicate_submission_policy: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("DUBBING_DUPLICATE_POLICY")
    )
    manifest_timeout_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("LINGOOST_MANIFEST_TIMEOUT_SECONDS")
    )
    manifest_retry_ceiling: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("LINGOOST_MANIFEST_RETRY_CEILING")
    )
    session_idle_ttl_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("LINGOOST_SESSION_IDLE_TTL_SECONDS")
    )
    placeholder_languages: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LINGOOST_PLACEHOLDER_LANGUAGES")
    )
    job_store: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LINGOOST_JOB_STORE")
    )
    database_url: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("DATABASE_URL", "LINGOOST_DATABASE_URL")
    )
    start_poller: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("LINGOOST_START_POLLER")
    )
    log_level: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LINGOOST_LOG_LEVEL")
    )


def load_environment_overrides() -> Dict[str, Any]:
    """Return configuration overrides sourced from environment variables."""

    try:
        overrides = EnvironmentOverrides()
    except ValidationError as exc:
        logger.warning(
            "Invalid environment configuration detected; using defaults.",
            extra={"event": "config.env.validation_error", "error": str(exc)},
        )
        return {}
    return overrides.model_dump(exclude_none=True)


def apply_settings_updates(
    settings: DubbingSettings, updates: Dict[str, Any]
) -> DubbingSettings:
    """Return a validated copy of ``settings`` updated with ``updates``."""

    if not updates:
        return settings
    payload = settings.model_dump()
    payload.update(updates)
    return DubbingSettings.model_validate(payload)


__all__ = [
    "DubbingSettings",
    "EnvironmentOverrides",
    "apply_settings_updates",
    "load_environment_overrides",
]
