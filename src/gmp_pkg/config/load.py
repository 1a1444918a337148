"""Configuration loading utilities."""

from __future__ import annotations
import os
from pathlib import Path
from typing import Dict, Any, Union, Optional

from ..contracts.errors import ConfigError
from .model import AppConfig


def default_config() -> AppConfig:
    """Create default configuration."""
    return AppConfig()


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """Load configuration from file or environment.

    Args:
        path: Path to configuration file. If None, looks for:
              - GMP_CONFIG environment variable
              - gmp.toml in current directory
              - ~/.gmp/config.toml

    Returns:
        Loaded configuration with environment overrides applied

    Raises:
        ConfigError: If configuration file is invalid or not found
    """
    if path is None:
        path = _find_config_file()

    if path is None:
        return _apply_env_overrides(default_config())

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        config = AppConfig.from_toml_file(path)
        return _apply_env_overrides(config)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}")


def _find_config_file() -> Optional[Path]:
    """Find configuration file using standard search paths."""

    env_path = os.environ.get("GMP_CONFIG")
    if env_path:
        return Path(env_path)

    cwd_config = Path("gmp.toml")
    if cwd_config.exists():
        return cwd_config

    user_config = Path.home() / ".gmp" / "config.toml"
    if user_config.exists():
        return user_config

    return None


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply environment variable overrides to configuration.

    Environment variables follow pattern: GMP_<SECTION>_<KEY>
    Examples:
        GMP_RUN_DT_MIN=0.5
        GMP_RUN_DURATION_MIN=180
        GMP_PARAMETERS_REF=reference_90kg
    """
    overrides: Dict[str, Dict[str, Any]] = {}

    for key, value in os.environ.items():
        if not key.startswith("GMP_") or key in ("GMP_CONFIG", "GMP_CATALOG_PATH"):
            continue

        parts = key[4:].lower().split("_", 1)  # Remove GMP_ prefix
        if len(parts) != 2:
            continue

        section, field = parts
        overrides.setdefault(section, {})[field] = _convert_env_value(value)

    if overrides:
        config_dict = config.model_dump()
        for section, fields in overrides.items():
            if isinstance(config_dict.get(section), dict):
                config_dict[section].update(fields)

        config = AppConfig.model_validate(config_dict)

    return config


def _convert_env_value(value: str) -> Any:
    """Convert string environment variable to appropriate type."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value
