"""
Event source launching the `bpftrace` kernel tracer.

This module provides the BpftraceCollector class, which runs a bpftrace
program that sums the bytes returned by read and write calls made by the
kernel NFS server threads, keyed by the credentials of the request, and
prints both maps once per window in the format the parser expects.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import IO, Any, Iterable, List, Optional

from ..models.events import Metric
from ..monitoring.parser import END_MARKER, INFO_PREFIX, RESET_MARKER
from ..system.processes import terminate_process_tree
from ..validation import TracerError
from .base import AbstractEventSource

logger = logging.getLogger(__name__)

# nfsd switches to the client's credentials before touching the file, so
# the uid/gid builtins identify the requesting user. Both maps are cleared
# after every print so each window reports deltas only.
BPFTRACE_PROGRAM = """
BEGIN
{
	printf("INFO_PREFIXTracing NFS server reads and writes every INTERVAL_SECONDSs... Hit Ctrl-C to end.\\n");
}

kretprobe:vfs_read,
kretprobe:vfs_iter_read
/comm == "nfsd" && (int64)retval > 0/
{
	@READ_MAP[uid, gid] = sum(retval);
}

kretprobe:vfs_write,
kretprobe:vfs_iter_write
/comm == "nfsd" && (int64)retval > 0/
{
	@WRITE_MAP[uid, gid] = sum(retval);
}

interval:us:INTERVAL_US
{
	printf("RESET_MARKER\\n");
	print(@READ_MAP);
	print(@WRITE_MAP);
	clear(@READ_MAP);
	clear(@WRITE_MAP);
	printf("END_MARKER\\n");
}

END
{
	clear(@READ_MAP);
	clear(@WRITE_MAP);
}
"""


def build_bpftrace_program(interval_seconds: float) -> str:
    """
    Render the tracer program for the given window length.

    Args:
        interval_seconds: Window length; converted to whole microseconds (min 1)

    Returns:
        bpftrace source text
    """
    interval_us = max(1, int(round(interval_seconds * 1_000_000)))
    return (
        BPFTRACE_PROGRAM
        .replace("INFO_PREFIX", INFO_PREFIX)
        .replace("RESET_MARKER", RESET_MARKER)
        .replace("END_MARKER", END_MARKER)
        .replace("READ_MAP", Metric.READ.map_name)
        .replace("WRITE_MAP", Metric.WRITE.map_name)
        .replace("INTERVAL_SECONDS", f"{interval_seconds:g}")
        .replace("INTERVAL_US", str(interval_us))
        .lstrip("\n")
    )


class BpftraceCollector(AbstractEventSource):
    """
    Runs bpftrace as a subprocess and yields its stdout lines.

    Attributes:
        bpftrace_proc: The running subprocess, or None.
        tracer_stderr_file: Optional path receiving bpftrace's stderr.
    """

    def __init__(self, interval_seconds: float, bpftrace_path: str = "bpftrace", **kwargs):
        """
        Args:
            interval_seconds: Window length passed into the probe program.
            bpftrace_path: Executable name or path.
            **kwargs: "tracer_stderr_file" (Optional[Path]) for bpftrace's stderr.
        """
        super().__init__(**kwargs)
        self.interval_seconds = interval_seconds
        self.bpftrace_path = bpftrace_path
        self.program = build_bpftrace_program(interval_seconds)
        self.bpftrace_proc: Optional[subprocess.Popen] = None
        self.tracer_stderr_file: Optional[Path] = kwargs.get("tracer_stderr_file")
        self._stderr_handle: Optional[IO[Any]] = None
        self._stopping = False

    def build_command(self) -> List[str]:
        return [self.bpftrace_path, "-B", "line", "-e", self.program]

    def start(self) -> None:
        """
        Launch bpftrace.

        Raises:
            TracerError: If the process cannot be started.
        """
        command = self.build_command()

        stderr_dest: Any = subprocess.DEVNULL
        if self.tracer_stderr_file:
            try:
                self._stderr_handle = open(self.tracer_stderr_file, "w")
                stderr_dest = self._stderr_handle
                logger.info(f"bpftrace stderr will be redirected to: {self.tracer_stderr_file}")
            except OSError as e:
                logger.error(
                    f"Failed to open tracer_stderr_file {self.tracer_stderr_file}: {e}. "
                    f"Stderr will be discarded."
                )

        env = os.environ.copy()
        env["LC_ALL"] = "C"

        logger.info(f"Starting bpftrace collector: {self.bpftrace_path} (interval {self.interval_seconds}s)")
        try:
            self.bpftrace_proc = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=stderr_dest,
                stdin=subprocess.DEVNULL,
                text=True,
                bufsize=1,
                env=env,
            )
        except OSError as e:
            self._close_stderr()
            raise TracerError(f"Failed to start bpftrace: {e}") from e

        logger.info(f"bpftrace process started (PID: {self.bpftrace_proc.pid})")

    def stop(self) -> None:
        """
        Terminate the bpftrace process tree and close file handles.
        """
        self._stopping = True
        proc = self.bpftrace_proc
        if proc is not None:
            if proc.poll() is None:
                terminate_process_tree(proc.pid, "bpftrace")
            try:
                proc.wait(timeout=1)
            except subprocess.TimeoutExpired:
                logger.warning(f"bpftrace (PID: {proc.pid}) did not exit after termination")
            if proc.stdout is not None:
                proc.stdout.close()
            self.bpftrace_proc = None
        self._close_stderr()
        logger.info("BpftraceCollector stopped.")

    def read_lines(self) -> Iterable[str]:
        """
        Yield bpftrace stdout lines until it exits.

        Raises:
            TracerError: If bpftrace exits with a non-zero status on its own.
        """
        proc = self.bpftrace_proc
        if proc is None or proc.stdout is None:
            logger.warning("bpftrace process not running or stdout not available.")
            return

        for line in iter(proc.stdout.readline, ""):
            yield line

        returncode = proc.wait()
        logger.info(f"bpftrace exited with status {returncode}")
        if returncode != 0 and not self._stopping:
            hint = f" (see {self.tracer_stderr_file})" if self.tracer_stderr_file else ""
            raise TracerError(f"bpftrace exited with status {returncode}{hint}", returncode)

    def _close_stderr(self) -> None:
        if self._stderr_handle is not None:
            try:
                self._stderr_handle.close()
            except OSError as e:
                logger.error(f"Error closing bpftrace stderr file {self.tracer_stderr_file}: {e}")
            self._stderr_handle = None
