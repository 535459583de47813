from __future__ import annotations

"""
Configuration Domain Management.

Bridge location, detail source and diagnostics settings, persisted as JSON
in the user data directory. Missing or corrupted files fall back to the
defaults so a bad config never prevents the cache from starting.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from repometa.domain import constants as const
from repometa.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
CURRENT_CONFIG_VERSION = "1.0.0"

_CONNECTION_TYPES = ("dfc", "rest")
_DETAIL_SOURCES = (const.DETAIL_SOURCE_STRUCTURED, const.DETAIL_SOURCE_DUMP)


# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        "version": CURRENT_CONFIG_VERSION,

        # Bridge
        "bridge_url": f"http://{const.DEFAULT_BRIDGE_HOST}:{const.DEFAULT_DFC_PORT}",
        "rest_bridge_url": f"http://{const.DEFAULT_BRIDGE_HOST}:{const.DEFAULT_REST_PORT}",
        "connection_type": "dfc",
        "timeout": const.DEFAULT_TIMEOUT,

        # Cache
        "detail_source": const.DETAIL_SOURCE_STRUCTURED,

        # Diagnostics
        "log_level": "INFO",
        "log_file": None,
    }


def get_default_config_path() -> str:
    return os.path.join(get_user_data_dir(), CONFIG_FILENAME)


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from disk, merged over the defaults.

    Args:
        path: Explicit config file; defaults to config.json in the user data dir.

    Returns:
        Dict[str, Any]: The merged configuration, or defaults on failure.
    """
    config = get_default_config()
    config_path = path or get_default_config_path()

    if not os.path.exists(config_path):
        logger.debug(f"Config file not found at {config_path}. Using defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    config.update({k: v for k, v in data.items() if k in config})
    config["version"] = CURRENT_CONFIG_VERSION

    for warning in validate_config(config):
        logger.warning(f"Configuration: {warning}")
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """
    Persist configuration to disk.

    Args:
        config: The configuration dictionary to save.
        path: Explicit target file; defaults to config.json in the user data dir.
    """
    config_path = path or get_default_config_path()
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_path)), exist_ok=True)
        config["version"] = CURRENT_CONFIG_VERSION
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


# -----------------------------------------------------------------------------
# Validation & Resolution
# -----------------------------------------------------------------------------
def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Normalize enumerated and numeric settings in place.

    Invalid values are replaced by their defaults.

    Returns:
        List[str]: One message per corrected key.
    """
    defaults = get_default_config()
    warnings: List[str] = []

    if config.get("connection_type") not in _CONNECTION_TYPES:
        warnings.append(f"Unknown connection_type {config.get('connection_type')!r}, using 'dfc'.")
        config["connection_type"] = defaults["connection_type"]

    if config.get("detail_source") not in _DETAIL_SOURCES:
        warnings.append(f"Unknown detail_source {config.get('detail_source')!r}, using structured.")
        config["detail_source"] = defaults["detail_source"]

    try:
        timeout = float(config.get("timeout"))
        if timeout <= 0:
            raise ValueError(timeout)
        config["timeout"] = timeout
    except (TypeError, ValueError):
        warnings.append(f"Invalid timeout {config.get('timeout')!r}, using {defaults['timeout']}.")
        config["timeout"] = defaults["timeout"]

    return warnings


def resolve_bridge_url(config: Dict[str, Any]) -> str:
    """Pick the DFC or REST bridge base URL according to connection_type."""
    if config.get("connection_type") == "rest":
        return str(config["rest_bridge_url"]).rstrip("/")
    return str(config["bridge_url"]).rstrip("/")
