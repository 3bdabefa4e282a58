"""
Shared Configuration Loading

This module loads a JSON configuration file for a service package and merges
it over the package's in-code defaults. Each package keeps its own
config_loader.py with a DEFAULT_CONFIG and a cache; this module holds the
common file handling.
"""

import copy
import json
import os
import logging
from typing import Dict, Any, Iterable, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Environment overrides (e.g. FUSION_CONFIG_PATH) may live in a .env file
load_dotenv()


def deep_merge(base: Dict[str, Any], override: Dict[str, Any], row_keys: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Merge override into a copy of base.

    Nested dictionaries are merged key by key; any other value in override
    replaces the value in base. Under a key listed in row_keys, each entry of
    the override replaces the matching default entry whole.

    Args:
        base: Default configuration
        override: Values loaded from file
        row_keys: Top-level keys whose entries are rows, not mergeable trees

    Returns:
        New merged dictionary (inputs are not modified)
    """
    row_keys = set(row_keys)
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if key in row_keys and isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(copy.deepcopy(value))
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def resolve_config_path(module_file: str, env_var: str, config_path: Optional[str] = None) -> str:
    """
    Work out which config file a package should read.

    Order: explicit argument, then the environment variable, then
    config.json next to the calling module.
    """
    if config_path:
        return config_path

    env_path = os.getenv(env_var)
    if env_path:
        return env_path

    module_dir = os.path.dirname(os.path.abspath(module_file))
    return os.path.join(module_dir, "config.json")


def load_json_config(config_path: str, defaults: Dict[str, Any], row_keys: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to config file
        defaults: Default configuration used as base and as fallback
        row_keys: Passed to deep_merge()

    Returns:
        Configuration dictionary. Returns a copy of defaults if the file is
        missing or invalid.
    """
    try:
        if os.path.exists(config_path):
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
            if not isinstance(file_config, dict):
                logger.error(f"Config file {config_path} does not contain a JSON object. Using default configuration.")
                return copy.deepcopy(defaults)
            logger.info(f"Loaded configuration from {config_path}")
            return deep_merge(defaults, file_config, row_keys)
        else:
            logger.debug(f"Config file not found at {config_path}, using default configuration")
            return copy.deepcopy(defaults)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file {config_path}: {e}. Using default configuration.")
        return copy.deepcopy(defaults)
    except OSError as e:
        logger.error(f"Error loading config file {config_path}: {e}. Using default configuration.")
        return copy.deepcopy(defaults)
