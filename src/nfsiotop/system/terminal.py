"""
Terminal geometry detection and ANSI screen control.
"""

import logging
import shutil
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = 80
DEFAULT_ROWS = 24

# Cursor home, then erase the whole display.
CLEAR_HOME = "\033[H\033[2J"


@dataclass(frozen=True)
class TerminalGeometry:
    columns: int
    rows: int


DEFAULT_GEOMETRY = TerminalGeometry(DEFAULT_COLUMNS, DEFAULT_ROWS)


def get_terminal_geometry() -> TerminalGeometry:
    """
    Detect the terminal size, falling back to 80x24.

    shutil.get_terminal_size() honours COLUMNS/LINES, treats non-numeric
    values as unset and uses the fallback when stdout is not a terminal.
    Non-positive results are replaced by the defaults as well.
    """
    try:
        size = shutil.get_terminal_size(fallback=(DEFAULT_COLUMNS, DEFAULT_ROWS))
    except (OSError, ValueError) as e:
        logger.debug(f"Terminal size detection failed: {e}")
        return DEFAULT_GEOMETRY

    columns = size.columns if size.columns > 0 else DEFAULT_COLUMNS
    rows = size.lines if size.lines > 0 else DEFAULT_ROWS
    return TerminalGeometry(columns, rows)
