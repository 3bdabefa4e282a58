"""
Configuration Loader for Fusion Service

This module loads configuration from JSON file and provides fallback defaults.
"""

import logging
from typing import Dict, Any, Optional

from utils.config_loader import load_json_config, resolve_config_path

logger = logging.getLogger(__name__)

# Default configuration (used as fallback)
# Weight rows are keyed by the active modalities joined with "+"; a row in
# the config file replaces the default row whole
DEFAULT_CONFIG = {
    "modality_weights": {
        "text": {"text": 1.0},
        "audio": {"audio": 1.0},
        "facial": {"facial": 1.0},
        "text+audio": {"text": 0.6, "audio": 0.4},
        "text+facial": {"text": 0.6, "facial": 0.4},
        "audio+facial": {"audio": 0.55, "facial": 0.45},
        "text+audio+facial": {"text": 0.50, "audio": 0.25, "facial": 0.25}
    },
    "risk_thresholds": {
        "moderate": 0.35,
        "high": 0.6,
        "critical": 0.8
    },
    "confidence_by_modality_count": {
        "1": 0.65,
        "2": 0.80,
        "3": 0.92
    },
    "keyword_boost_per_indicator": 0.15
}

# Cache for loaded config
_config_cache: Optional[Dict[str, Any]] = None


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to config file. If None, uses FUSION_CONFIG_PATH
                     or config.json in this package.

    Returns:
        Configuration dictionary. Returns default config if file not found or invalid.
    """
    global _config_cache

    # Return cached config if available
    if _config_cache is not None:
        return _config_cache

    path = resolve_config_path(__file__, "FUSION_CONFIG_PATH", config_path)
    _config_cache = load_json_config(path, DEFAULT_CONFIG, row_keys=("modality_weights",))
    return _config_cache


def reset_config_cache() -> None:
    """Drop the cached config so the next load_config() re-reads it."""
    global _config_cache
    _config_cache = None
