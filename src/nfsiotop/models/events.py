"""
Typed events decoded from the tracer's text stream.

The parser turns every recognized line into one of these objects; raw text
never travels past it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Metric(Enum):
    """I/O direction of a sample, bound to the tracer map that reports it."""

    READ = "nfs_read"
    WRITE = "nfs_write"

    @property
    def map_name(self) -> str:
        return self.value

    @classmethod
    def from_map_name(cls, name: str) -> "Metric":
        """Return the metric for a tracer map name; raises ValueError if unknown."""
        return cls(name)


@dataclass(frozen=True)
class Sample:
    """
    Byte count reported for one (uid, gid) pair during one window.

    Attributes:
        uid: Requesting user id.
        gid: Requesting group id.
        metric: READ or WRITE.
        bytes: Bytes transferred, as summed by the kernel side for this window.
    """

    uid: int
    gid: int
    metric: Metric
    bytes: int


@dataclass(frozen=True)
class WindowReset:
    """Start of a fresh screen: redraw the header, keep accumulating."""


@dataclass(frozen=True)
class WindowEnd:
    """All data lines of the current window have been seen."""


@dataclass(frozen=True)
class InfoMessage:
    """Informational text from the tracer (e.g. its startup banner)."""

    text: str


StreamEvent = Union[Sample, WindowReset, WindowEnd, InfoMessage]
