"""
Configuration Loader - YAML files merged with environment variables
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from queueops.config.settings import AppSettings, ConsumerSettings
from queueops.errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_yaml_config(file_path: str) -> Dict[str, Any]:
    """
    Load YAML configuration file

    Args:
        file_path: Path to YAML file

    Returns:
        Dictionary containing configuration

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if config is None:
            logger.warning(f"Empty configuration file: {file_path}")
            return {}

        logger.info(f"Loaded configuration from {file_path}")
        return config

    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML file {file_path}: {e}")
        raise


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge configuration dictionaries (later configs override earlier ones)

    Args:
        *configs: Configuration dictionaries

    Returns:
        Merged configuration dictionary
    """
    merged: Dict[str, Any] = {}

    for config in configs:
        if not config:
            continue
        _deep_merge(merged, config)

    return merged


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def load_config(
    config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None
) -> AppSettings:
    """
    Load and validate the complete configuration

    Values come from the YAML file (if given), then overrides; anything not
    set there is read from environment variables. Validation happens here,
    before any queue interaction.

    Args:
        config_path: Optional path to YAML config file
        overrides: Optional nested dictionary applied on top of the file

    Returns:
        AppSettings: Validated configuration object

    Raises:
        ConfigurationError: If required settings are missing or invalid
        FileNotFoundError: If config file specified but not found
    """
    yaml_config = load_yaml_config(config_path) if config_path else {}
    data = merge_configs(yaml_config, overrides or {})

    try:
        # Each section reads its own environment variables for keys the file leaves out
        sections = {
            name: field.annotation(**(data.get(name) or {}))
            for name, field in AppSettings.model_fields.items()
        }
        config = AppSettings(**sections)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    logger.debug("Configuration loaded successfully")
    return config


def load_consumer_settings() -> ConsumerSettings:
    """
    Load consumer settings from the environment

    Raises:
        ConfigurationError: If a setting is invalid
    """
    try:
        return ConsumerSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid consumer configuration: {e}") from e
