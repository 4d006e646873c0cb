"""
Configuration loader with YAML and environment variable support.

Priority (highest to lowest):
1. Environment variables: K8S_MCP_SERVER__PORT=9000
2. Container variables: SERVER_MODE=sse, SERVER_PORT=8080
3. User config: --config-dir path / ~/.k8smcp/config.yaml
4. Built-in defaults: k8s_mcp_server/config/defaults/settings.yaml
"""

import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from k8s_mcp_server.config.models import K8sMCPServerConfig
from k8s_mcp_server.utils.logging import get_logger

logger = get_logger(__name__)

# Default config locations
DEFAULT_CONFIG_DIR = Path.home() / ".k8smcp"
PACKAGE_DEFAULTS_DIR = Path(__file__).parent / "defaults"

# Environment variable prefix
ENV_PREFIX = "K8S_MCP_"
ENV_DELIMITER = "__"

# Variables understood by the published container image
CONTAINER_ENV_VARS = {
    "SERVER_MODE": ("server", "transport"),
    "SERVER_PORT": ("server", "port"),
}


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Values from 'override' take precedence over 'base'.
    Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            content = yaml.safe_load(f)
            return content if isinstance(content, dict) else {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return {}


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate Python type."""
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def _get_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """
    Extract configuration overrides from environment variables.

    Environment variables are expected in the format:
    K8S_MCP_SECTION__KEY=value

    K8S_MCP_SERVER__PORT=9000 -> {"server": {"port": 9000}}
    K8S_MCP_EVENTS__DEFAULT_MAX_EVENTS=50 -> {"events": {"default_max_events": 50}}
    """
    overrides: dict[str, Any] = {}

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        key_path = key[len(ENV_PREFIX) :].lower().split(ENV_DELIMITER)
        if not all(key_path):
            logger.warning(f"Ignoring malformed config variable {key}")
            continue

        current = overrides
        for part in key_path[:-1]:
            current = current.setdefault(part, {})

        current[key_path[-1]] = _parse_env_value(value)

    return overrides


def _get_container_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Map the container image's SERVER_MODE/SERVER_PORT onto config keys."""
    overrides: dict[str, Any] = {}
    for name, (section, key) in CONTAINER_ENV_VARS.items():
        if name in environ and environ[name]:
            overrides.setdefault(section, {})[key] = _parse_env_value(environ[name])
    return overrides


def load_config(
    config_dir: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> K8sMCPServerConfig:
    """
    Load configuration from multiple sources.

    Args:
        config_dir: Optional path to configuration directory.
                   If not provided, uses ~/.k8smcp/
        environ: Environment mapping (default: os.environ)

    Returns:
        K8sMCPServerConfig: Validated configuration object

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    environ = os.environ if environ is None else environ

    # Start with package defaults
    config_data = _load_yaml_file(PACKAGE_DEFAULTS_DIR / "settings.yaml")

    # Merge user config
    user_config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
    user_config = _load_yaml_file(user_config_dir / "config.yaml")
    config_data = _deep_merge(config_data, user_config)

    # Container variables, then prefixed variables (highest priority)
    config_data = _deep_merge(config_data, _get_container_overrides(environ))
    config_data = _deep_merge(config_data, _get_env_overrides(environ))

    return K8sMCPServerConfig.model_validate(config_data)
