"""
Configuration management and singleton pattern.

This module provides the main configuration loading interface, merging the
optional config.toml with command-line overrides and caching the result so
it is loaded only once per process.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import MonitorConfig
from ..validation import handle_config_error, ErrorSeverity
from .loader import load_main_config
from .validators import validate_monitor_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[MonitorConfig] = None

# Default location of the configuration file, relative to the source checkout.
# A missing default file means built-in defaults; a path set through
# set_config_path() must exist.
_DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"
_CONFIG_FILE_PATH = _DEFAULT_CONFIG_FILE_PATH
_CONFIG_FILE_REQUIRED = False


def set_config_path(config_path: Path, required: bool = True) -> None:
    """
    Set a custom configuration file path.

    Args:
        config_path: Path to a config.toml file
        required: Fail on load if the file does not exist

    Note:
        Clears any cached configuration.
    """
    global _CONFIG_FILE_PATH, _CONFIG_FILE_REQUIRED, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG_FILE_REQUIRED = required
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def reset_config_path() -> None:
    """Restore the default (optional) configuration file location."""
    global _CONFIG_FILE_PATH, _CONFIG_FILE_REQUIRED, _CONFIG
    _CONFIG_FILE_PATH = _DEFAULT_CONFIG_FILE_PATH
    _CONFIG_FILE_REQUIRED = False
    _CONFIG = None


def clear_config_cache() -> None:
    """
    Clear the cached configuration, forcing a reload on next access.
    """
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(
    config_path: Path, required: bool, overrides: Dict[str, Any]
) -> MonitorConfig:
    """
    Load the [monitor] table, apply overrides and validate the result.

    Args:
        config_path: Path to config.toml
        required: Whether a missing file is an error
        overrides: Values that replace file values (None values are skipped)

    Returns:
        Validated MonitorConfig instance

    Raises:
        FileNotFoundError: If a required configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the file is malformed
        KeyError: If the file layout is wrong
    """
    try:
        if config_path.exists() or required:
            monitor_data = dict(load_main_config(config_path))
        else:
            logger.info(f"No configuration file at {config_path}, using defaults")
            monitor_data = {}

        for key, value in overrides.items():
            if value is not None:
                monitor_data[key] = value

        monitor_config = validate_monitor_config(monitor_data)
        logger.info(
            f"Configuration loaded: interval={monitor_config.interval_seconds}s, "
            f"view={monitor_config.view_name.lower()}, source={monitor_config.source}"
        )
        return monitor_config

    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise


def get_config(overrides: Optional[Dict[str, Any]] = None) -> MonitorConfig:
    """
    Get the process-wide configuration, loading it if necessary.

    Overrides only take effect on the call that performs the load; call
    clear_config_cache() first to reload with different overrides.

    Returns:
        The singleton MonitorConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH, _CONFIG_FILE_REQUIRED, overrides or {})
    return _CONFIG


def is_config_loaded() -> bool:
    """
    Check if configuration has been loaded and cached.
    """
    return _CONFIG is not None


def get_config_info() -> dict:
    """
    Get information about the current configuration state.
    """
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "config_required": _CONFIG_FILE_REQUIRED,
    }
