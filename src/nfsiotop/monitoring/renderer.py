"""
Text rendering of ranked windows.

Screen layout, one line each:

    nfsiotop - <date time> (<view> view, <interval>s interval)
    <blank>
    USER                        WRITE          <-  ->          READ
    total                    1.00KB/s                      2.00KB/s
    alice                    1.00KB/s    <=====  ====>     2.00KB/s
    ...

Every frame is composed in memory and written with a single write() and
flush(), so an interrupted process never leaves half a table behind.
"""

import logging
import math
from datetime import datetime
from typing import Callable, Optional, TextIO

from ..models.window import LABEL_WIDTH, RankedRow, RankedWindow
from ..system.terminal import CLEAR_HOME

logger = logging.getLogger(__name__)

RATE_WIDTH = 12
SEPARATOR_BUDGET = 4
UNITS = ["", "K", "M", "G", "T", "E"]


def humanize(rate: float) -> str:
    """
    Format a byte rate with a binary unit prefix.

    >>> humanize(1536)
    '1.50KB/s'
    """
    value = float(rate)
    unit = 0
    while abs(value) >= 1024 and unit < len(UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f}{UNITS[unit]}B/s"


def bar_width(columns: int) -> int:
    """Cells per bar chart for a terminal of the given width."""
    width = math.floor((columns - LABEL_WIDTH - SEPARATOR_BUDGET - 2 * RATE_WIDTH) / 2 - 1)
    return max(0, width)


def clip(line: str, columns: int) -> str:
    """Cut a line to columns - 1 cells so it never wraps."""
    return line[:max(0, columns - 1)]


def _bar_length(part: int, whole: int, width: int) -> int:
    if whole <= 0 or width <= 0:
        return 0
    # Round half up.
    return min(width, int(part / whole * width + 0.5))


def write_bar(part: int, whole: int, width: int) -> str:
    """Right-aligned bar whose leading cell is '<'."""
    length = _bar_length(part, whole, width)
    if length == 0:
        return " " * width
    return ("<" + "=" * (length - 1)).rjust(width)


def read_bar(part: int, whole: int, width: int) -> str:
    """Left-aligned bar whose trailing cell is '>'."""
    length = _bar_length(part, whole, width)
    if length == 0:
        return " " * width
    return ("=" * (length - 1) + ">").ljust(width)


class Renderer:
    """
    Draws headers, info messages and ranked windows to a text stream.
    """

    def __init__(
        self,
        stream: TextIO,
        group_view: bool = False,
        interval_seconds: float = 3.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.stream = stream
        self.group_view = group_view
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.frames_drawn = 0
        # Frames end without a newline so the last screen line never scrolls.
        self._line_open = False

    def _line(self, label: str, write_rate: str, wbar: str, rbar: str, read_rate: str) -> str:
        return (
            f"{label:<{LABEL_WIDTH}} {write_rate:>{RATE_WIDTH}} "
            f"{wbar}  {rbar} {read_rate:>{RATE_WIDTH}}"
        ).rstrip()

    def format_title(self, columns: int) -> str:
        view = "group" if self.group_view else "user"
        title = (
            f"nfsiotop - {self.clock():%Y-%m-%d %H:%M:%S} "
            f"({view} view, {self.interval_seconds:g}s interval)"
        )
        return clip(title, columns)

    def format_header(self, columns: int) -> str:
        width = bar_width(columns)
        return clip(
            self._line(
                "GROUP" if self.group_view else "USER",
                "WRITE",
                "<-".rjust(width) if width >= 2 else " " * width,
                "->".ljust(width) if width >= 2 else " " * width,
                "READ",
            ),
            columns,
        )

    def format_totals(self, ranked: RankedWindow, width: int) -> str:
        blank = " " * width
        return self._line(
            "total", humanize(ranked.write_rate), blank, blank, humanize(ranked.read_rate)
        )

    def format_row(self, row: RankedRow, ranked: RankedWindow, width: int) -> str:
        return self._line(
            row.display_label,
            humanize(row.write_rate),
            write_bar(row.write_bytes, ranked.write_bytes, width),
            read_bar(row.read_bytes, ranked.read_bytes, width),
            humanize(row.read_rate),
        )

    def format_window(self, ranked: RankedWindow, columns: int) -> str:
        """
        Totals row, ranked rows and the overflow fragment, newline-led.

        No line is wider than columns - 1. The overflow fragment shares the
        last line so the frame never exceeds the screen height; that line's
        bars shrink to make room for it.
        """
        width = bar_width(columns)
        lines = [self.format_totals(ranked, width)]
        lines.extend(self.format_row(row, ranked, width) for row in ranked.rows)

        if ranked.hidden_count > 0:
            fragment = f" ({ranked.hidden_count} more) ..."
            if ranked.rows:
                narrow = bar_width(columns - len(fragment))
                lines[-1] = self.format_row(ranked.rows[-1], ranked, narrow)
            # Keep the fragment whole; cut the line in front of it instead.
            room = max(0, columns - 1 - len(fragment))
            lines[-1] = lines[-1][:room] + fragment

        return "".join("\n" + clip(line, columns) for line in lines)

    def draw_header(self, columns: int) -> None:
        """Clear the screen and draw title, blank line and column header."""
        self._emit(CLEAR_HOME + self.format_title(columns) + "\n\n" + self.format_header(columns))

    def draw_window(self, ranked: RankedWindow, columns: int) -> None:
        self._emit(self.format_window(ranked, columns))
        self.frames_drawn += 1

    def draw_info(self, text: str) -> None:
        self._emit(("\n" if self._line_open else "") + text)

    def _emit(self, frame: str) -> None:
        self.stream.write(frame)
        self.stream.flush()
        self._line_open = not frame.endswith("\n")

    def finish(self) -> None:
        """Terminate the last screen line so the shell prompt starts clean."""
        if self._line_open:
            self._emit("\n")
