"""Configuration loading for the FogBugz integration.

Precedence (highest to lowest):
1. Explicit keyword overrides passed to :func:`load_config`
2. Environment variables (``FOGBUGZ_*``)
3. A ``.env`` file (never overrides variables already set)
4. Defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigurationError
from .fogbugz_logging import get_logger

logger = get_logger()

API_PATH = "/f/api/0/jsonapi"

ENV_BASE_URL = "FOGBUGZ_URL"
ENV_API_KEY = "FOGBUGZ_API_KEY"
ENV_TIMEOUT = "FOGBUGZ_TIMEOUT"
ENV_MAX_RETRIES = "FOGBUGZ_MAX_RETRIES"
ENV_RETRY_DELAY = "FOGBUGZ_RETRY_DELAY"
ENV_DEBUG = "FOGBUGZ_DEBUG"


class FogBugzConfig(BaseModel):
    """Connection settings for a FogBugz installation."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(description="Root URL of the FogBugz installation")
    api_key: str = Field(description="API token sent with every command")
    timeout: float = Field(default=10.0, description="Per-request timeout in seconds")
    max_retries: int = Field(default=3, description="Attempts per command")
    retry_delay: float = Field(default=1.0, description="Fixed delay between attempts")
    debug: bool = Field(default=False, description="Enable debug logging")

    @model_validator(mode="after")
    def check_settings(self) -> FogBugzConfig:
        missing = []
        if not self.base_url or not self.base_url.strip():
            missing.append(ENV_BASE_URL)
        if not self.api_key or not self.api_key.strip():
            missing.append(ENV_API_KEY)
        if missing:
            raise ConfigurationError(
                f"Missing FogBugz API configuration: {', '.join(missing)}. "
                "Set the environment variable(s) or pass them explicitly."
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 1:
            raise ConfigurationError(
                f"max_retries must be at least 1, got {self.max_retries}"
            )
        if self.retry_delay < 0:
            raise ConfigurationError(
                f"retry_delay must not be negative, got {self.retry_delay}"
            )
        return self

    @property
    def root_url(self) -> str:
        """Base URL without a trailing slash."""
        return self.base_url.strip().rstrip("/")

    @property
    def api_endpoint(self) -> str:
        """Full URL of the JSON API endpoint."""
        return f"{self.root_url}{API_PATH}"


def _parse_number(name: str, raw: str, kind: type) -> Any:
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a {kind.__name__}, got {raw!r}") from e


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_config(env_file: Path | str | None = None, **overrides: Any) -> FogBugzConfig:
    """Load configuration from the environment.

    Args:
        env_file: Optional path to a ``.env`` file. When omitted, a ``.env``
            in the current directory (or a parent) is used if present.
        **overrides: Explicit values for any FogBugzConfig field

    Returns:
        Validated FogBugzConfig

    Raises:
        ConfigurationError: If the base URL or API key is missing, or a
            numeric setting cannot be parsed
    """
    if env_file is not None:
        load_dotenv(dotenv_path=env_file, override=False)
    else:
        load_dotenv(override=False)

    values: dict[str, Any] = {
        "base_url": os.environ.get(ENV_BASE_URL, ""),
        "api_key": os.environ.get(ENV_API_KEY, ""),
    }

    if os.environ.get(ENV_TIMEOUT):
        values["timeout"] = _parse_number(ENV_TIMEOUT, os.environ[ENV_TIMEOUT], float)
    if os.environ.get(ENV_MAX_RETRIES):
        values["max_retries"] = _parse_number(
            ENV_MAX_RETRIES, os.environ[ENV_MAX_RETRIES], int
        )
    if os.environ.get(ENV_RETRY_DELAY):
        values["retry_delay"] = _parse_number(
            ENV_RETRY_DELAY, os.environ[ENV_RETRY_DELAY], float
        )
    if os.environ.get(ENV_DEBUG):
        values["debug"] = _parse_bool(os.environ[ENV_DEBUG])

    for key, value in overrides.items():
        if key not in FogBugzConfig.model_fields:
            raise ConfigurationError(f"Unknown configuration option: {key}")
        if value is not None:
            values[key] = value

    try:
        config = FogBugzConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid FogBugz configuration: {e}") from e
    logger.debug(f"Loaded FogBugz configuration for {config.root_url}")
    return config
