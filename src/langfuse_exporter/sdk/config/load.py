"""Configuration file loading for the exporter builder."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml

from langfuse_exporter.api.types import RawConfig
from langfuse_exporter.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Pattern for environment variable substitution: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

KNOWN_KEYS = {
    "endpoint",
    "host",
    "public_key",
    "secret_key",
    "headers",
    "timeout",
    "compression",
}


def _substitute_env_vars(
    value: str, strict: bool, environ: Mapping[str, str] | None = None
) -> str:
    """Substitute ${VAR_NAME} patterns with environment variable values.

    Args:
        value: String potentially containing ${VAR_NAME} patterns.
        strict: If True, raise ConfigurationError for missing env vars.
        environ: Mapping to read variables from. Defaults to os.environ.

    Returns:
        String with environment variables substituted.

    Raises:
        ConfigurationError: If strict=True and an env var is not set.
    """
    env = os.environ if environ is None else environ

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = env.get(var_name)
        if env_value is None:
            if strict:
                raise ConfigurationError(
                    f"Environment variable '{var_name}' is not set"
                )
            logger.warning(
                "Environment variable '%s' not set, using empty string", var_name
            )
            return ""
        return env_value.strip()

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(
    data: Any, strict: bool, environ: Mapping[str, str] | None = None
) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {
            k: _substitute_env_vars_recursive(v, strict, environ) for k, v in data.items()
        }
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item, strict, environ) for item in data]
    elif isinstance(data, str):
        return _substitute_env_vars(data, strict, environ)
    else:
        return data


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_headers(data: Any) -> dict[str, str]:
    """Parse the headers section, which must be a mapping of strings."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"'headers' must be a mapping of header names to values, got {type(data).__name__}"
        )
    return {str(name): str(value) for name, value in data.items()}


def load_config(
    path: str | Path,
    strict: bool = False,
    environ: Mapping[str, str] | None = None,
) -> RawConfig:
    """Load explicit exporter settings from a YAML file.

    Values may reference environment variables as ``${VAR_NAME}``. Blank
    values are treated as unset so resolution can fall back to the
    environment.

    Args:
        path: Path to the YAML configuration file.
        strict: If True, a referenced environment variable that is not set
            is an error instead of an empty string.
        environ: Mapping that ${VAR_NAME} references are read from.
            Defaults to os.environ.

    Returns:
        RawConfig populated from the file.

    Raises:
        ConfigurationError: If the file doesn't exist, the YAML is invalid,
                           or a referenced variable is missing in strict mode.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            raw_data = yaml.safe_load(f)
            if raw_data is None:
                raw_data = {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got {type(raw_data).__name__}"
        )

    data = _substitute_env_vars_recursive(raw_data, strict=strict, environ=environ)

    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        logger.warning("Unknown configuration options ignored: %s", unknown)

    endpoint = _optional_str(data, "endpoint")
    host = _optional_str(data, "host")
    if endpoint and host:
        logger.warning(
            "Both 'endpoint' and 'host' are set in %s; 'endpoint' is used", path
        )

    # Validation is deferred to resolution so errors surface at build time
    return RawConfig(
        endpoint=endpoint,
        host=host,
        public_key=_optional_str(data, "public_key"),
        secret_key=_optional_str(data, "secret_key"),
        headers=_parse_headers(data.get("headers")),
        timeout=_optional_str(data, "timeout"),
        compression=_optional_str(data, "compression"),
    )
