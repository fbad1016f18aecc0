"""
Tracer event sources.
"""

from .base import AbstractEventSource
from .bpftrace_collector import BPFTRACE_PROGRAM, BpftraceCollector, build_bpftrace_program
from .stream_collector import StreamCollector

__all__ = [
    "AbstractEventSource",
    "BPFTRACE_PROGRAM",
    "BpftraceCollector",
    "StreamCollector",
    "build_bpftrace_program",
]
