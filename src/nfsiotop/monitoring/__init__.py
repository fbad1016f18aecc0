"""
Window aggregation and live rendering engine.

Components, leaf-first:
- parser: tracer text lines -> typed events
- aggregator: per-window byte totals by credential
- names: uid/gid -> display name
- ranking: totals -> rates, ordering and truncation
- renderer: ranked window -> terminal text
- coordinator: control loop and optional render thread
"""

from .aggregator import CredentialAggregator
from .coordinator import (
    FramePresenter,
    MonitorCoordinator,
    MonitorState,
    RenderCommand,
    RenderKind,
    RenderThread,
)
from .names import NameResolver, load_name_table
from .parser import END_MARKER, INFO_PREFIX, RESET_MARKER, EventStreamParser
from .ranking import RESERVED_ROWS, rank_window, visible_row_budget
from .renderer import Renderer, bar_width, humanize, read_bar, write_bar

__all__ = [
    "CredentialAggregator",
    "FramePresenter",
    "MonitorCoordinator",
    "MonitorState",
    "RenderCommand",
    "RenderKind",
    "RenderThread",
    "NameResolver",
    "load_name_table",
    "END_MARKER",
    "INFO_PREFIX",
    "RESET_MARKER",
    "EventStreamParser",
    "RESERVED_ROWS",
    "rank_window",
    "visible_row_budget",
    "Renderer",
    "bar_width",
    "humanize",
    "read_bar",
    "write_bar",
]
