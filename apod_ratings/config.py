"""Configuration loading for the ratings service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError
from .provider import DEFAULT_API_URL, DEFAULT_TIMEOUT

API_KEY_ENV_VAR = "NASA_API_KEY"
CONFIG_PATH_ENV_VAR = "APOD_RATINGS_CONFIG"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080

# YAML key -> environment variable overriding it.
_ENV_OVERRIDES = {
    "api_key": API_KEY_ENV_VAR,
    "api_url": "APOD_API_URL",
    "request_timeout": "APOD_REQUEST_TIMEOUT",
    "host": "APOD_RATINGS_HOST",
    "port": "APOD_RATINGS_PORT",
}


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the service and its APOD client."""

    api_key: str
    api_url: str = DEFAULT_API_URL
    request_timeout: float = DEFAULT_TIMEOUT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "Settings":
        """Create :class:`Settings` from merged file and environment values."""

        api_key = str(data.get("api_key") or "").strip()
        if not api_key:
            raise ConfigurationError(
                f"required environment variable {API_KEY_ENV_VAR} not set"
            )

        api_url = str(data.get("api_url") or DEFAULT_API_URL).strip() or DEFAULT_API_URL
        host = str(data.get("host") or DEFAULT_HOST).strip() or DEFAULT_HOST

        try:
            request_timeout = float(data.get("request_timeout", DEFAULT_TIMEOUT))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("request_timeout must be a number of seconds") from exc
        if request_timeout <= 0:
            raise ConfigurationError("request_timeout must be greater than zero")

        try:
            port = int(data.get("port", DEFAULT_PORT))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("port must be an integer") from exc
        if not 1 <= port <= 65535:
            raise ConfigurationError("port must be between 1 and 65535")

        return Settings(
            api_key=api_key,
            api_url=api_url,
            request_timeout=request_timeout,
            host=host,
            port=port,
        )

    def describe(self) -> Dict[str, object]:
        """Return the effective settings without the API key."""

        return {
            "api_url": self.api_url,
            "request_timeout": self.request_timeout,
            "host": self.host,
            "port": self.port,
        }


def _load_config_file(config_path: Path) -> Dict[str, object]:
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigurationError(f"Unable to read configuration file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Configuration file {config_path} is not valid YAML") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration file must contain a mapping at the top level")

    unknown = set(raw) - set(_ENV_OVERRIDES)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(sorted(str(key) for key in unknown))}"
        )
    return dict(raw)


def resolve_config_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the optional YAML configuration path."""
    if not env_value or not env_value.strip():
        return None
    return Path(env_value.strip()).expanduser().resolve(strict=False)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from an optional YAML file overlaid with the environment."""

    env = os.environ if environ is None else environ

    values: Dict[str, object] = {}
    config_path = resolve_config_path(env.get(CONFIG_PATH_ENV_VAR))
    if config_path is not None:
        values.update(_load_config_file(config_path))

    for key, variable in _ENV_OVERRIDES.items():
        raw = env.get(variable)
        if raw is not None and raw.strip():
            values[key] = raw.strip()

    return Settings.from_dict(values)


__all__ = [
    "API_KEY_ENV_VAR",
    "CONFIG_PATH_ENV_VAR",
    "Settings",
    "load_settings",
    "resolve_config_path",
]
