"""
Configuration Loader for Analysis Service

This module loads configuration from JSON file and provides fallback defaults.
"""

import logging
from typing import Dict, Any, Optional

from utils.config_loader import load_json_config, resolve_config_path

logger = logging.getLogger(__name__)

# Default configuration (used as fallback)
DEFAULT_CONFIG = {
    "risk_keywords": {
        "high": ["suicide", "kill myself", "end it all", "no reason to live", "want to die", "better off dead"],
        "medium": ["hopeless", "worthless", "nobody cares", "can't go on", "exhausted", "giving up", "alone", "isolated"],
        "low": ["stressed", "anxious", "worried", "tired", "sad", "overwhelmed", "frustrated", "depressed"]
    },
    "positive_keywords": ["happy", "grateful", "hopeful", "excited", "good", "great", "wonderful", "amazing", "better", "improving"],
    "sentiment_timeout_seconds": 2.0,
    "image": {
        "noise_amplitude": 0.04,
        "edge_threshold": 20.0
    }
}

# Cache for loaded config
_config_cache: Optional[Dict[str, Any]] = None


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to config file. If None, uses ANALYSIS_CONFIG_PATH
                     or config.json in this package.

    Returns:
        Configuration dictionary. Returns default config if file not found or invalid.
    """
    global _config_cache

    # Return cached config if available
    if _config_cache is not None:
        return _config_cache

    path = resolve_config_path(__file__, "ANALYSIS_CONFIG_PATH", config_path)
    _config_cache = load_json_config(path, DEFAULT_CONFIG)
    return _config_cache


def reset_config_cache() -> None:
    """Drop the cached config so the next load_config() re-reads it."""
    global _config_cache
    _config_cache = None
