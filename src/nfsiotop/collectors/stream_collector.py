"""
Event source reading an already-open text stream.
"""

import logging
from typing import Iterable, Optional, TextIO

from .base import AbstractEventSource

logger = logging.getLogger(__name__)


class StreamCollector(AbstractEventSource):
    """
    Reads tracer output from a stream the monitor did not start, e.g.

        bpftrace -e "$(nfsiotop --print-program)" | nfsiotop --stdin

    The stream is never closed by the collector unless close_on_stop is set.
    """

    def __init__(self, stream: TextIO, close_on_stop: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.stream: Optional[TextIO] = stream
        self.close_on_stop = close_on_stop
        self.lines_read = 0

    def start(self) -> None:
        logger.info(f"Reading tracer events from {getattr(self.stream, 'name', self.stream)}")

    def stop(self) -> None:
        if self.stream is not None and self.close_on_stop:
            try:
                self.stream.close()
            except OSError as e:
                logger.warning(f"Error closing event stream: {e}")
        self.stream = None

    def read_lines(self) -> Iterable[str]:
        if self.stream is None:
            logger.warning("Event stream not available for reading.")
            return
        for line in iter(self.stream.readline, ""):
            self.lines_read += 1
            yield line
        logger.info(f"Event stream closed after {self.lines_read} lines.")
