"""
Data models for the monitor.

Configuration Models:
- MonitorConfig: validated settings for one run

Event Models:
- Sample, WindowReset, WindowEnd, InfoMessage: typed tracer stream events

Window Models:
- CredentialTotals, WindowTotals: per-window accumulation snapshot
- RankedRow, RankedWindow: ranking output consumed by the renderer
"""

from .config import MonitorConfig
from .events import InfoMessage, Metric, Sample, StreamEvent, WindowEnd, WindowReset
from .window import (
    LABEL_WIDTH,
    CredentialTotals,
    RankedRow,
    RankedWindow,
    WindowTotals,
)

__all__ = [
    # Configuration
    "MonitorConfig",
    # Events
    "InfoMessage",
    "Metric",
    "Sample",
    "StreamEvent",
    "WindowEnd",
    "WindowReset",
    # Window
    "LABEL_WIDTH",
    "CredentialTotals",
    "RankedRow",
    "RankedWindow",
    "WindowTotals",
]
