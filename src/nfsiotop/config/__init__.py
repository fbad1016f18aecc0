"""
Configuration management for the nfsiotop package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file merged with command-line overrides.
"""

from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    reset_config_path,
    set_config_path,
)

from .loader import load_main_config, load_toml_file
from .validators import validate_interval, validate_monitor_config

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "reset_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "validate_interval",
    "validate_monitor_config",
]
