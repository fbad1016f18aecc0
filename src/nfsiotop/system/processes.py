"""
Process tree termination for the tracer subprocess.

bpftrace may run under a wrapper (sudo, a shell) that owns the actual tracer,
so the whole tree is signalled rather than just the direct child.
"""

import logging
from typing import List

import psutil

logger = logging.getLogger(__name__)

GRACEFUL_TIMEOUT = 3.0
FORCE_TIMEOUT = 2.0


def _is_process_alive(process: psutil.Process) -> bool:
    """Safely check if a process is still alive and not a zombie."""
    try:
        if not process.is_running():
            return False
        return process.status() not in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return False


def _get_process_children(parent: psutil.Process) -> List[psutil.Process]:
    """Safely get all live descendants of a process."""
    try:
        return [child for child in parent.children(recursive=True) if _is_process_alive(child)]
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return []


def terminate_process_tree(
    pid: int,
    name: str,
    graceful_timeout: float = GRACEFUL_TIMEOUT,
    force_timeout: float = FORCE_TIMEOUT,
) -> bool:
    """
    Terminate a process and its descendants: SIGTERM, then SIGKILL.

    Args:
        pid: Root process id
        name: Human-readable name for log messages
        graceful_timeout: Seconds to wait after SIGTERM
        force_timeout: Seconds to wait after SIGKILL

    Returns:
        True if no process of the tree is left alive
    """
    if pid <= 0:
        logger.warning(f"Invalid PID {pid} for {name}, skipping termination")
        return True

    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        logger.debug(f"Process {name} (PID: {pid}) already terminated")
        return True

    processes = [parent] + _get_process_children(parent)
    logger.info(f"Terminating {name} (PID: {pid}) and {len(processes) - 1} children")

    for phase, timeout in (("terminate", graceful_timeout), ("kill", force_timeout)):
        signalled = []
        for process in processes:
            if not _is_process_alive(process):
                continue
            try:
                if phase == "terminate":
                    process.terminate()
                else:
                    process.kill()
                signalled.append(process)
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied:
                logger.warning(f"Access denied sending {phase} to PID {process.pid}")

        if not signalled:
            return True

        _, still_alive = psutil.wait_procs(signalled, timeout=timeout)
        processes = [p for p in still_alive if _is_process_alive(p)]
        if not processes:
            logger.debug(f"{name} terminated during phase {phase}")
            return True
        logger.warning(f"Phase {phase}: {len(processes)} processes of {name} still alive")

    logger.error(f"Failed to terminate {len(processes)} processes of {name}")
    return False
