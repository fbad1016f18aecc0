"""
Rate computation and ranking of a completed window.
"""

import logging
from typing import Callable

from ..models.window import LABEL_WIDTH, RankedRow, RankedWindow, WindowTotals

logger = logging.getLogger(__name__)

# Title, blank line, column header and totals row.
RESERVED_ROWS = 4


def visible_row_budget(terminal_rows: int) -> int:
    """Number of credential rows that fit below the header and totals."""
    return max(0, terminal_rows - RESERVED_ROWS)


def rank_window(
    totals: WindowTotals,
    interval_seconds: float,
    terminal_rows: int,
    label_for: Callable[[int], str] = str,
) -> RankedWindow:
    """
    Convert a window's byte totals into rates and rank credentials.

    Rows are ordered by descending read+write bytes, ties by ascending
    credential id, and truncated to the terminal's row budget. Rates divide
    by the configured interval, never by measured elapsed time.

    Args:
        totals: Completed window from the aggregator
        interval_seconds: Configured window length, > 0
        terminal_rows: Current terminal height
        label_for: Maps a credential to its display name

    Returns:
        RankedWindow with the totals row, visible rows and overflow count
    """
    if interval_seconds <= 0:
        raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")

    read_bytes = totals.read_bytes
    write_bytes = totals.write_bytes

    ordered = sorted(totals.items(), key=lambda item: (-item[1].total_bytes, item[0]))

    budget = visible_row_budget(terminal_rows)
    rows = tuple(
        RankedRow(
            credential=credential,
            display_label=label_for(credential)[:LABEL_WIDTH],
            read_rate=entry.read_bytes / interval_seconds,
            write_rate=entry.write_bytes / interval_seconds,
            read_bytes=entry.read_bytes,
            write_bytes=entry.write_bytes,
        )
        for credential, entry in ordered[:budget]
    )
    hidden_count = max(0, len(ordered) - budget)
    if hidden_count:
        logger.debug(f"{hidden_count} credentials do not fit in {terminal_rows} rows")

    return RankedWindow(
        read_rate=read_bytes / interval_seconds,
        write_rate=write_bytes / interval_seconds,
        read_bytes=read_bytes,
        write_bytes=write_bytes,
        rows=rows,
        hidden_count=hidden_count,
    )
