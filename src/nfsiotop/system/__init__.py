"""
System interaction utilities.

- Dependency checks for the tracer executable
- Process tree termination for the tracer subprocess
- Terminal geometry detection and ANSI screen control
"""

from .commands import check_bpftrace_installed, find_bpftrace
from .processes import terminate_process_tree
from .terminal import (
    CLEAR_HOME,
    DEFAULT_GEOMETRY,
    TerminalGeometry,
    get_terminal_geometry,
)

__all__ = [
    # Commands
    "check_bpftrace_installed",
    "find_bpftrace",
    # Processes
    "terminate_process_tree",
    # Terminal
    "CLEAR_HOME",
    "DEFAULT_GEOMETRY",
    "TerminalGeometry",
    "get_terminal_geometry",
]
