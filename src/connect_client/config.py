"""Configuration management for the Connect XML API client."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable names understood by load_settings_from_env
ENV_KEYS = {
    "service_url": "CONNECT_SERVICE_URL",
    "username": "CONNECT_USERNAME",
    "password": "CONNECT_PASSWORD",
    "domain": "CONNECT_DOMAIN",
    "proxy_url": "CONNECT_PROXY_URL",
    "use_session_param": "CONNECT_USE_SESSION_PARAM",
    "timeout_seconds": "CONNECT_TIMEOUT",
}


class ClientSettings(BaseModel):
    """Settings for a single client instance.

    Immutable once constructed. ``service_url`` is normalized by stripping
    surrounding whitespace and any trailing ``/`` or ``?`` characters, so
    ``https://host/api/xml/?`` becomes ``https://host/api/xml``.
    """

    model_config = ConfigDict(frozen=True)

    service_url: str = Field(..., description="Service endpoint, e.g. https://host/api/xml")
    username: Optional[str] = Field(default=None, description="Account login")
    password: Optional[str] = Field(default=None, description="Account password")
    domain: Optional[str] = Field(default=None, description="Network domain for proxy auth")
    proxy_url: Optional[str] = Field(default=None, description="HTTP proxy URL")
    use_session_param: bool = Field(
        default=True,
        description="Pass the session token as a 'session' query parameter",
    )
    timeout_seconds: float = Field(default=30.0, description="Transport timeout")
    verify_ssl: bool = Field(default=True, description="Verify server certificates")

    @field_validator("service_url")
    @classmethod
    def normalize_service_url(cls, v: str) -> str:
        normalized = v.strip().rstrip("/?")
        if not normalized:
            raise ValueError("Configuration parameter 'service_url' can not be empty")

        parsed = urlsplit(normalized)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(
                f"Configuration parameter 'service_url' must be an absolute "
                f"http(s) URL, got '{normalized}'"
            )
        return normalized

    @field_validator("timeout_seconds")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


def build_settings(values: Dict[str, Any], source: str) -> ClientSettings:
    """Validate raw setting values, reporting failures as ConfigurationError."""
    if not values.get("service_url"):
        raise ConfigurationError(
            "Configuration parameter 'service_url' can not be null", source
        )
    try:
        return ClientSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {source}", str(e))


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"Invalid boolean value: '{raw}'")


def load_settings_from_env(environ: Optional[Mapping[str, str]] = None) -> ClientSettings:
    """Build settings from ``CONNECT_*`` environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ``

    Returns:
        Validated ClientSettings

    Raises:
        ConfigurationError: If the service URL is missing or a value is invalid
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    for field_name, env_name in ENV_KEYS.items():
        raw = env.get(env_name)
        if raw is None or raw == "":
            continue
        if field_name == "use_session_param":
            values[field_name] = _parse_bool(raw)
        else:
            values[field_name] = raw

    return build_settings(values, "environment")


def load_settings_from_file(config_path: Path) -> ClientSettings:
    """Load settings from a JSON configuration file.

    Args:
        config_path: Path to a JSON object with ClientSettings field names

    Returns:
        Validated ClientSettings

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid
    """
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file: {config_path}", str(e))

    if not isinstance(config_data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a JSON object: {config_path}"
        )

    logger.debug(f"Loaded client configuration from {config_path}")
    return build_settings(config_data, str(config_path))
