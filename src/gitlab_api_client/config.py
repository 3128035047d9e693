"""Configuration management for the GitLab API client.

Provides the client configuration model and loading from environment
variables, .env files, and optional configuration files with proper
precedence handling.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator

from gitlab_api_client.logging_config import setup_logging

logger = logging.getLogger(__name__)

ENV_PREFIX = "GITLAB_API_"


class ConfigError(Exception):
    """Raised when configuration validation fails."""


class LogLevel(str, Enum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ApiVersion(str, Enum):
    """GitLab REST API versions."""

    V3 = "v3"
    V4 = "v4"

    @property
    def api_namespace(self) -> str:
        """Path appended to the host URL for this API version."""
        return f"/api/{self.value}"


class TokenType(str, Enum):
    """How the auth token is presented to GitLab."""

    PRIVATE = "private"
    ACCESS = "access"


class ClientConfig(BaseModel):
    """Construction parameters for GitLabApiClient.

    Configuration can be loaded from:
    - Environment variables with GITLAB_API_ prefix
    - Optional .env file in the working directory
    - Optional JSON or YAML configuration file
    """

    host_url: str = Field(description="GitLab server URL, e.g. https://gitlab.com")
    auth_token: SecretStr = Field(description="Private or access token")
    api_version: ApiVersion = Field(default=ApiVersion.V4, description="REST API version")
    token_type: TokenType = Field(
        default=TokenType.PRIVATE, description="How auth_token is sent"
    )
    secret_token: SecretStr | None = Field(
        default=None, description="Shared secret for validating webhook payloads"
    )
    sudo_as_id: int | None = Field(
        default=None, ge=0, description="User ID to act as via the Sudo header"
    )
    ignore_certificate_errors: bool = Field(
        default=False, description="Skip TLS certificate and hostname validation"
    )
    client_properties: dict[str, Any] = Field(
        default_factory=dict, description="Keyword arguments passed to httpx.Client"
    )
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    model_config = {
        "frozen": True,
    }

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("api_version", "token_type", mode="before")
    @classmethod
    def normalize_lowercase_enum(cls, v: Any) -> Any:
        """Normalize API version and token type to lowercase."""
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("host_url")
    @classmethod
    def validate_host_url(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        parts = urlsplit(v.strip())
        if parts.scheme not in ("http", "https") or not parts.netloc:
            msg = f"host_url must be an absolute http(s) URL, got {v!r}"
            raise ValueError(msg)
        return v.strip()

    @field_validator("secret_token", mode="before")
    @classmethod
    def normalize_secret_token(cls, v: Any) -> Any:
        """Trim the secret token; a blank token means no validation."""
        if isinstance(v, SecretStr):
            v = v.get_secret_value()
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @property
    def api_url(self) -> str:
        """Host URL without trailing slashes plus the API namespace."""
        return self.host_url.rstrip("/") + self.api_version.api_namespace


def _get_env_value(key: str, prefix: str = ENV_PREFIX) -> str | None:
    """Get environment variable value with prefix."""
    return os.environ.get(f"{prefix}{key.upper()}")


def _load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    env_mapping = {
        "host_url": "HOST_URL",
        "auth_token": "AUTH_TOKEN",
        "api_version": "API_VERSION",
        "token_type": "TOKEN_TYPE",
        "secret_token": "SECRET_TOKEN",
        "sudo_as_id": "SUDO_AS_ID",
        "ignore_certificate_errors": "IGNORE_CERTIFICATE_ERRORS",
        "log_level": "LOG_LEVEL",
    }

    config: dict[str, Any] = {}
    for field_name, env_suffix in env_mapping.items():
        value = _get_env_value(env_suffix)
        if value is None:
            continue
        if field_name == "ignore_certificate_errors":
            value = value.lower() in ("true", "1", "yes")  # type: ignore[assignment]
        elif field_name == "sudo_as_id":
            with contextlib.suppress(ValueError):
                value = int(value)  # type: ignore[assignment]
        config[field_name] = value

    # Transport timeout is the one client property worth exposing via env
    timeout = _get_env_value("TIMEOUT")
    if timeout is not None:
        with contextlib.suppress(ValueError):
            config["client_properties"] = {"timeout": float(timeout)}

    return config


def _load_file_config(path: str | Path) -> dict[str, Any]:
    """Load configuration from a file (JSON or YAML)."""
    path = Path(path)
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise ConfigError(msg)

    suffix = path.suffix.lower()
    content = path.read_text()

    if suffix == ".json":
        return dict(json.loads(content))

    if suffix in (".yaml", ".yml"):
        import yaml

        return dict(yaml.safe_load(content) or {})

    msg = f"Unsupported configuration file format: {suffix}"
    raise ConfigError(msg)


def _redact_for_log(key: str, value: Any) -> str:
    """Redact sensitive values for logging."""
    from gitlab_api_client.security import redact

    if key in ("auth_token", "secret_token"):
        return redact(str(value) if value else None)
    return str(value)


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    configure_logging: bool = False,
) -> ClientConfig:
    """Load and validate client configuration.

    Precedence (highest to lowest):
    1. Explicit overrides
    2. Environment variables
    3. Configuration file
    4. Model defaults

    Args:
        path: Optional path to configuration file
        overrides: Optional explicit values
        configure_logging: Install the package log handler at the
            configured log_level (see logging_config.setup_logging)

    Returns:
        Validated ClientConfig instance

    Raises:
        ConfigError: If configuration is invalid
    """
    load_dotenv()

    config_dict: dict[str, Any] = {}
    if path:
        logger.debug("Loading configuration from file: %s", path)
        config_dict.update(_load_file_config(path))

    for key, value in _load_env_config().items():
        if key == "client_properties":
            merged = dict(config_dict.get("client_properties") or {})
            merged.update(value)
            value = merged
        config_dict[key] = value
        logger.debug("Config %s from environment: %s", key, _redact_for_log(key, value))

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                config_dict[key] = value
                logger.debug("Config %s from overrides: %s", key, _redact_for_log(key, value))

    try:
        config = ClientConfig(**config_dict)
    except Exception as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e

    if configure_logging:
        setup_logging(config)

    return config
