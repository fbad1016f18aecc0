"""
System dependency checks.
"""

import logging
import shutil
from typing import Optional

logger = logging.getLogger(__name__)


def find_bpftrace(bpftrace_path: str = "bpftrace") -> Optional[str]:
    """
    Resolve the bpftrace executable.

    Returns:
        The full path to the executable, or None if it cannot be found.
    """
    resolved = shutil.which(bpftrace_path)
    if resolved is None:
        logger.debug(f"bpftrace not found for '{bpftrace_path}'")
    return resolved


def check_bpftrace_installed(bpftrace_path: str = "bpftrace") -> bool:
    """Check whether the bpftrace executable is available."""
    return find_bpftrace(bpftrace_path) is not None
