"""
Settings resolution for the Cloud Files CLI.

Values come from explicit options first, then CLOUDFILES_* environment
variables, then the read-only ~/.cloudfiles/config.json file. Credentials
are only ever read from options or the environment.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .auth import DEFAULT_API_VERSION, DEFAULT_AUTH_HOST
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path.home() / ".cloudfiles" / "config.json"

ENV_VARS = {
    "username": "CLOUDFILES_USERNAME",
    "api_key": "CLOUDFILES_API_KEY",
    "account": "CLOUDFILES_ACCOUNT",
    "auth_host": "CLOUDFILES_AUTH_HOST",
    "ca_bundle": "CLOUDFILES_CA_BUNDLE",
    "timeout": "CLOUDFILES_TIMEOUT",
}

FILE_KEYS = {"account", "auth_host", "ca_bundle", "timeout", "api_version"}
SECRET_KEYS = {"username", "api_key"}


@dataclass
class ClientSettings:
    """Everything needed to build and authenticate a client."""

    username: Optional[str] = None
    api_key: Optional[str] = None
    account: Optional[str] = None
    auth_host: str = DEFAULT_AUTH_HOST
    ca_bundle: Optional[str] = None
    timeout: Optional[float] = None
    api_version: int = DEFAULT_API_VERSION

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.api_key)


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Read non-secret settings from a JSON config file.

    A missing file yields an empty dict.

    Raises:
        ConfigurationError: If the file is malformed or holds credentials
    """
    path = Path(path) if path else DEFAULT_CONFIG_FILE
    if not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")

    secrets = SECRET_KEYS.intersection(data)
    if secrets:
        raise ConfigurationError(
            f"Config file {path} must not contain credentials ({', '.join(sorted(secrets))}); "
            "use the CLOUDFILES_USERNAME and CLOUDFILES_API_KEY environment variables",
            config_key=sorted(secrets)[0],
        )

    unknown = set(data) - FILE_KEYS
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
    return {key: value for key, value in data.items() if key in FILE_KEYS}


def load_settings(config_file: Optional[Path] = None, **overrides: Any) -> ClientSettings:
    """
    Resolve client settings.

    Args:
        config_file: Config file path, ~/.cloudfiles/config.json by default
        **overrides: Explicit values; None entries are ignored

    Returns:
        ClientSettings
    """
    values: Dict[str, Any] = load_config_file(config_file)

    for key, env_var in ENV_VARS.items():
        env_value = os.getenv(env_var)
        if env_value:
            values[key] = env_value

    for key, value in overrides.items():
        if value is not None:
            values[key] = value

    if values.get("timeout") is not None:
        try:
            values["timeout"] = float(values["timeout"])
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid timeout: {values['timeout']!r}", config_key="timeout")

    if values.get("api_version") is not None:
        try:
            values["api_version"] = int(values["api_version"])
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid api_version: {values['api_version']!r}", config_key="api_version")

    return ClientSettings(**values)
