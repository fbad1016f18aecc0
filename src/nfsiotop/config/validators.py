"""
Configuration validation utilities.

This module turns raw [monitor] data (from TOML or from command-line
overrides) into a validated MonitorConfig.
"""

import logging
from typing import Any, Dict

from ..models.config import (
    DEFAULT_GROUP_MAP,
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_PASSWD_MAP,
    SOURCE_BPFTRACE,
    SOURCE_STDIN,
    MonitorConfig,
)
from ..validation import (
    ValidationError,
    validate_bool,
    validate_enum_choice,
    validate_optional_path,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

# Float noise allowed when checking for whole microseconds (0.1 * 1e6 != 100000).
INTERVAL_US_TOLERANCE = 1e-3

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

KNOWN_KEYS = {
    "interval_seconds",
    "view",
    "resolve_names",
    "passwd_map",
    "group_map",
    "source",
    "bpftrace_path",
    "tracer_stderr_file",
    "render_thread",
    "render_queue_size",
    "log_level",
    "log_file",
}


def validate_interval(value: Any, field_name: str = "monitor.interval_seconds") -> float:
    """
    Window length must be a finite number of seconds greater than zero.

    The tracer's interval probe fires in whole microseconds, so the interval
    must be a whole number of microseconds for the probe period to equal the
    interval the rates are divided by.
    """
    interval = validate_positive_float(
        value,
        min_value=0.0,
        field_name=field_name,
        exclusive_min=True,
    )
    micros = interval * 1_000_000
    if round(micros) < 1 or abs(micros - round(micros)) > INTERVAL_US_TOLERANCE:
        raise ValidationError(
            f"{field_name} must be a whole number of microseconds (>= 0.000001), got {value}",
            field_name=field_name,
            value=value,
        )
    return interval


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Args:
        monitor_data: Raw [monitor] table, possibly merged with CLI overrides

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    unknown = sorted(set(monitor_data) - KNOWN_KEYS)
    if unknown:
        logger.warning(f"Ignoring unknown [monitor] keys: {', '.join(unknown)}")

    interval_seconds = validate_interval(
        monitor_data.get("interval_seconds", DEFAULT_INTERVAL_SECONDS)
    )

    view = validate_enum_choice(
        monitor_data.get("view", "user"),
        valid_choices=["user", "group"],
        field_name="monitor.view",
        case_sensitive=False,
    )

    resolve_names = validate_bool(
        monitor_data.get("resolve_names", True), field_name="monitor.resolve_names"
    )

    passwd_map = validate_optional_path(
        monitor_data.get("passwd_map"), field_name="monitor.passwd_map"
    ) or DEFAULT_PASSWD_MAP
    group_map = validate_optional_path(
        monitor_data.get("group_map"), field_name="monitor.group_map"
    ) or DEFAULT_GROUP_MAP

    source = validate_enum_choice(
        monitor_data.get("source", SOURCE_BPFTRACE),
        valid_choices=[SOURCE_BPFTRACE, SOURCE_STDIN],
        field_name="monitor.source",
    )

    bpftrace_path = monitor_data.get("bpftrace_path", "bpftrace")
    if not isinstance(bpftrace_path, str) or not bpftrace_path.strip():
        raise ValidationError(
            "monitor.bpftrace_path must be a non-empty string",
            field_name="monitor.bpftrace_path",
            value=bpftrace_path,
        )

    tracer_stderr_file = validate_optional_path(
        monitor_data.get("tracer_stderr_file"), field_name="monitor.tracer_stderr_file"
    )

    render_thread = validate_bool(
        monitor_data.get("render_thread", False), field_name="monitor.render_thread"
    )
    render_queue_size = validate_positive_integer(
        monitor_data.get("render_queue_size", 4),
        min_value=1,
        max_value=1024,
        field_name="monitor.render_queue_size",
    )

    log_level = validate_enum_choice(
        monitor_data.get("log_level", "WARNING"),
        valid_choices=LOG_LEVELS,
        field_name="monitor.log_level",
        case_sensitive=False,
    )
    log_file = validate_optional_path(
        monitor_data.get("log_file"), field_name="monitor.log_file"
    )

    if source == SOURCE_STDIN and tracer_stderr_file is not None:
        logger.warning(
            "monitor.tracer_stderr_file is ignored when reading events from stdin"
        )

    return MonitorConfig(
        interval_seconds=interval_seconds,
        group_view=(view == "group"),
        resolve_names=resolve_names,
        passwd_map=passwd_map,
        group_map=group_map,
        source=source,
        bpftrace_path=bpftrace_path.strip(),
        tracer_stderr_file=tracer_stderr_file,
        render_thread=render_thread,
        render_queue_size=render_queue_size,
        log_level=log_level,
        log_file=log_file,
    )
