"""
Configuration data models.

This module contains the validated runtime configuration for a monitor run,
assembled from `config.toml` and command-line overrides.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_INTERVAL_SECONDS = 3.0
DEFAULT_PASSWD_MAP = Path("/etc/passwd")
DEFAULT_GROUP_MAP = Path("/etc/group")

SOURCE_BPFTRACE = "bpftrace"
SOURCE_STDIN = "stdin"


@dataclass(frozen=True)
class MonitorConfig:
    """
    Configuration for a single monitor run, loaded from `config.toml`.
    """

    # [monitor] - sampling
    # Window length in seconds; rates are always bytes / interval_seconds.
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    # Rank by gid instead of uid.
    group_view: bool = False

    # [monitor] - name resolution
    resolve_names: bool = True
    passwd_map: Path = DEFAULT_PASSWD_MAP
    group_map: Path = DEFAULT_GROUP_MAP

    # [monitor] - event source
    # "bpftrace" launches the tracer, "stdin" reads an already running one.
    source: str = SOURCE_BPFTRACE
    bpftrace_path: str = "bpftrace"
    tracer_stderr_file: Optional[Path] = None

    # [monitor] - rendering
    render_thread: bool = False
    render_queue_size: int = 4

    # [monitor] - logging
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    @property
    def view_name(self) -> str:
        """Column heading for the credential column."""
        return "GROUP" if self.group_view else "USER"
