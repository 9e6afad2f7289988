"""Configuration hierarchy: merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.find-license/config.yaml)
  3. Project config   (./find-license.yaml, searched upward)
  4. Environment variables (FIND_LICENSE_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from find_license.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".find-license" / "config.yaml"
_PROJECT_CONFIG_NAME = "find-license.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "FIND_LICENSE_BASE_URL": "base_url",
    "FIND_LICENSE_TIMEOUT": "timeout",
    "FIND_LICENSE_RATE": "rate",
    "FIND_LICENSE_BURST": "burst",
    "FIND_LICENSE_CONCURRENCY": "concurrency",
    "FIND_LICENSE_STREAM_CAPACITY": "stream_capacity",
    "FIND_LICENSE_LOG_LEVEL": "log_level",
    "FIND_LICENSE_DEBUG": "debug",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "timeout": float,
    "rate": float,
    "burst": int,
    "concurrency": int,
    "stream_capacity": int,
}

_BOOL_KEYS = {"debug"}

# Boolean env var values
_TRUTHY = {"1", "true", "yes", "on"}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values.
    """
    config = get_defaults()

    # Layer 2: Global config
    global_cfg = _load_yaml_config(_GLOBAL_CONFIG_PATH)
    if global_cfg:
        config.update(global_cfg)

    # Layer 3: Project config (search from cwd upward)
    project_path = _find_project_config()
    if project_path:
        project_cfg = _load_yaml_config(project_path)
        if project_cfg:
            config.update(project_cfg)

    # Layer 4: Environment variables
    config.update(_load_env_vars())

    # Layer 5: Runtime arguments, only when explicitly set
    for key, value in runtime_overrides.items():
        if value is not None:
            config[key] = value

    return config


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists."""
    if not path.exists() or not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return None
    if isinstance(data, dict):
        return data
    logger.warning("Config file %s is not a mapping, ignoring", path)
    return None


def _find_project_config() -> Path | None:
    """Search for find-license.yaml from cwd upward."""
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    """Read FIND_LICENSE_* environment variables."""
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        result[config_key] = _coerce_env_value(config_key, value)
    return result


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the appropriate type."""
    if key in _BOOL_KEYS:
        return value.strip().lower() in _TRUTHY

    target_type = _TYPE_MAP.get(key)
    if target_type:
        try:
            return target_type(value)
        except (ValueError, TypeError):
            logger.warning(
                "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
            )
            return value

    return value
