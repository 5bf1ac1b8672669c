# AegisSim Configuration Management
# Loads simulation defaults and catalog extensions from YAML or JSON files.

import json
import logging
import os
from typing import Dict, Any, Optional

import yaml

from ..exceptions import ConfigurationError

DEFAULT_CONFIG_FILENAME = "aegissim_config.yaml"  # Looked up in the CWD

logger = logging.getLogger(__name__)


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Loads configuration parameters from a YAML or JSON file.

    If `config_path` is not provided, this function looks for
    `DEFAULT_CONFIG_FILENAME` in the current working directory and returns
    an empty dictionary when it is absent. A file that was explicitly
    requested must exist and parse, otherwise `ConfigurationError` is
    raised.

    Args:
        config_path (Optional[str]): Path to a `.yaml`, `.yml` or `.json`
            file. If None, the default file in the CWD is tried.

    Returns:
        Dict[str, Any]: The loaded parameters (empty if the file is empty
            or no default file exists).

    Raises:
        ConfigurationError: If the requested file is missing, has an
            unsupported extension, is malformed, or does not contain a
            mapping at the top level.
    """
    resolved_path = config_path
    if resolved_path is None:
        if not os.path.exists(DEFAULT_CONFIG_FILENAME):
            logger.debug(
                f"No config path provided and default '{DEFAULT_CONFIG_FILENAME}' "
                f"not found in CWD. Using empty config."
            )
            return {}
        resolved_path = DEFAULT_CONFIG_FILENAME
        logger.info(f"No config path provided, using default: '{DEFAULT_CONFIG_FILENAME}' in CWD.")

    resolved_path = os.fspath(resolved_path)
    if not os.path.exists(resolved_path):
        raise ConfigurationError(f"Configuration file not found at '{resolved_path}'.")
    if not resolved_path.endswith((".yaml", ".yml", ".json")):
        raise ConfigurationError(
            f"Unknown config file format for '{resolved_path}'. Supported: .yaml, .yml, .json."
        )

    try:
        with open(resolved_path, 'r', encoding='utf-8') as f:
            if resolved_path.endswith(".json"):
                config_data = json.load(f)
            else:
                config_data = yaml.safe_load(f)
    except yaml.YAMLError as ye:
        raise ConfigurationError(
            f"Error parsing YAML configuration from '{resolved_path}': {ye}"
        ) from ye
    except json.JSONDecodeError as je:
        raise ConfigurationError(
            f"Error parsing JSON configuration from '{resolved_path}': {je}"
        ) from je
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            f"Could not read configuration file '{resolved_path}': {e}"
        ) from e

    if config_data is None:
        config_data = {}
    if not isinstance(config_data, dict):
        raise ConfigurationError(
            f"Configuration in '{resolved_path}' must be a mapping at the top level, "
            f"got {type(config_data).__name__}."
        )
    logger.info(f"Configuration loaded successfully from '{resolved_path}'.")
    return config_data


def get_config_value(config: Dict[str, Any], key_path: str,
                     default: Optional[Any] = None) -> Any:
    """Retrieves a value from a nested config dict using a dot-separated key.

    Example:
        `get_config_value(config, "simulation.seed", None)` looks for
        `config['simulation']['seed']`.

    Args:
        config (Dict[str, Any]): The configuration dictionary.
        key_path (str): Dot-separated path to the key.
        default (Optional[Any]): Returned when the path does not exist.

    Returns:
        Any: The value at `key_path`, or `default`.
    """
    current_level: Any = config
    for key in key_path.split('.'):
        if isinstance(current_level, dict) and key in current_level:
            current_level = current_level[key]
        else:
            return default
    return current_level


class ConfigManager:
    """Holds a loaded configuration and gives dot-path access to it.

    Attributes:
        config_data (Dict[str, Any]): The loaded parameters.
        _config_file_path (Optional[str]): Path used by the last load,
            kept for `reload()`.
    """
    def __init__(self, config_file_path: Optional[str] = None):
        self._config_file_path: Optional[str] = config_file_path
        self.config_data: Dict[str, Any] = load_config(config_file_path)
        if not self.config_data:
            logger.info("ConfigManager initialized with an empty configuration.")

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "ConfigManager":
        """Wraps an in-memory dictionary without touching the filesystem."""
        manager = cls.__new__(cls)
        manager._config_file_path = None
        manager.config_data = dict(config_data)
        return manager

    def get(self, key_path: str, default: Optional[Any] = None) -> Any:
        return get_config_value(self.config_data, key_path, default)

    def get_section(self, section_key_path: str) -> Dict[str, Any]:
        """Returns the mapping at `section_key_path`, or `{}` if absent or not a mapping."""
        section = self.get(section_key_path, default={})
        return section if isinstance(section, dict) else {}

    def reload(self, new_config_file_path: Optional[str] = None):
        """Reloads from `new_config_file_path`, or from the last path used."""
        if new_config_file_path is not None:
            self._config_file_path = new_config_file_path
        logger.info(
            f"ConfigManager: reloading configuration from "
            f"'{self._config_file_path or DEFAULT_CONFIG_FILENAME}'."
        )
        self.config_data = load_config(self._config_file_path)
