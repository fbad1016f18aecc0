"""
Decoder for the tracer's line-oriented output.

The tracer prints four kinds of lines:

    ===                          window reset (redraw the header)
    info|<text>                  informational message
    @<map>[<uid>, <gid>]: <n>    one map entry (bytes for that key this window)
    ---                          window end (render the table)

Anything else, including blank lines, entries of unknown maps and malformed
entries, is skipped. The parser yields typed events only.
"""

import logging
import re
from typing import Iterable, Iterator, Optional

from ..models.events import InfoMessage, Metric, Sample, StreamEvent, WindowEnd, WindowReset

logger = logging.getLogger(__name__)

RESET_MARKER = "==="
END_MARKER = "---"
INFO_PREFIX = "info|"

# bpftrace prints multi-key map entries as "@name[k1, k2]: value".
DATA_LINE_RE = re.compile(r"^@(?P<map>\w+)\[(?P<uid>\d+), (?P<gid>\d+)\]: (?P<value>\d+)$")

_UINT32_MAX = 2**32 - 1


class EventStreamParser:
    """
    Stateless line decoder with skip accounting.

    Attributes:
        lines_seen: Lines passed to parse_line().
        lines_skipped: Lines that matched no grammar or failed validation.
    """

    def __init__(self):
        self.lines_seen = 0
        self.lines_skipped = 0

    def parse_line(self, line: str) -> Optional[StreamEvent]:
        """
        Decode one line.

        Returns:
            The decoded event, or None if the line is ignored.
        """
        self.lines_seen += 1
        text = line.strip()

        if text == RESET_MARKER:
            return WindowReset()
        if text == END_MARKER:
            return WindowEnd()
        if text.startswith(INFO_PREFIX):
            return InfoMessage(text[len(INFO_PREFIX):])
        if not text:
            return None

        sample = self._parse_data_line(text)
        if sample is None:
            self.lines_skipped += 1
            logger.debug(f"Skipping unrecognized tracer line: '{text}'")
        return sample

    def parse(self, lines: Iterable[str]) -> Iterator[StreamEvent]:
        """Decode a stream of lines, dropping ignored ones."""
        for line in lines:
            event = self.parse_line(line)
            if event is not None:
                yield event

    @staticmethod
    def _parse_data_line(text: str) -> Optional[Sample]:
        match = DATA_LINE_RE.match(text)
        if match is None:
            return None

        try:
            metric = Metric.from_map_name(match.group("map"))
        except ValueError:
            return None

        uid = int(match.group("uid"))
        gid = int(match.group("gid"))
        if uid > _UINT32_MAX or gid > _UINT32_MAX:
            return None

        return Sample(uid=uid, gid=gid, metric=metric, bytes=int(match.group("value")))
