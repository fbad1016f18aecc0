"""
nfsiotop: live per-user / per-group NFS server I/O monitor.

Kernel trace events (bytes read and written by the NFS server threads, keyed
by the request's uid and gid) are aggregated into fixed sampling windows,
ranked by combined throughput and drawn as a bar-charted table that fits
the terminal.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- system: Tracer dependency checks, process cleanup, terminal control
- collectors: Tracer event sources (bpftrace subprocess, stdin stream)
- monitoring: Parsing, aggregation, naming, ranking, rendering, control loop
- cli: Command-line interface

Usage:
    From command line:
        nfsiotop [options]
        python -m nfsiotop.cli.main [options]
"""

__version__ = "1.0.0"

from .config import clear_config_cache, get_config, set_config_path
from .models import (
    CredentialTotals,
    Metric,
    MonitorConfig,
    RankedRow,
    RankedWindow,
    Sample,
    WindowTotals,
)
from .monitoring import (
    CredentialAggregator,
    EventStreamParser,
    MonitorCoordinator,
    NameResolver,
    Renderer,
    humanize,
    rank_window,
)
from .validation import TracerError, ValidationError
from .cli import main_cli

__all__ = [
    "__version__",
    # Configuration
    "clear_config_cache",
    "get_config",
    "set_config_path",
    # Models
    "CredentialTotals",
    "Metric",
    "MonitorConfig",
    "RankedRow",
    "RankedWindow",
    "Sample",
    "WindowTotals",
    # Engine
    "CredentialAggregator",
    "EventStreamParser",
    "MonitorCoordinator",
    "NameResolver",
    "Renderer",
    "humanize",
    "rank_window",
    # Errors
    "TracerError",
    "ValidationError",
    # CLI
    "main_cli",
]
