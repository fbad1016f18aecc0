"""
Defines the abstract interface for tracer event sources.

An event source produces the tracer's raw text lines. Implementations:
- BpftraceCollector: launches bpftrace and reads its stdout.
- StreamCollector: reads an existing stream (stdin or a file) produced by a
  tracer running as the controlling parent.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable

logger = logging.getLogger(__name__)


class AbstractEventSource(ABC):
    """
    Abstract base class for event sources.

    Usable as a context manager: start() on enter, stop() on exit.
    """

    def __init__(self, **kwargs):
        """
        Args:
            **kwargs: Additional keyword arguments specific to an implementation.
        """
        self.source_kwargs = kwargs
        logger.info(f"Initializing {self.__class__.__name__}, extra_args: {kwargs}")

    @abstractmethod
    def start(self) -> None:
        """
        Starts producing lines (e.g. launches the tracer subprocess).
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """
        Stops the source and releases its resources. Safe to call twice.
        """
        pass

    @abstractmethod
    def read_lines(self) -> Iterable[str]:
        """
        A generator yielding raw lines until the stream ends.

        Blocks indefinitely waiting for the next line; there is no timeout.
        """
        pass

    def __enter__(self) -> "AbstractEventSource":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
