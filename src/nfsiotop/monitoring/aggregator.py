"""
Per-window accumulation of byte counts by credential.
"""

import logging
from typing import Dict, List

from ..models.events import Metric, Sample
from ..models.window import CredentialTotals, WindowTotals

logger = logging.getLogger(__name__)


class CredentialAggregator:
    """
    Sums read and write bytes per credential for the current window.

    The credential is the uid in user view and the gid in group view. Only
    the single control loop calls into this class, so it holds no lock;
    flush() hands out an immutable snapshot that later observe() calls
    cannot reach.
    """

    def __init__(self, group_view: bool = False):
        self.group_view = group_view
        # credential -> [read_bytes, write_bytes]
        self._totals: Dict[int, List[int]] = {}

    def observe(self, metric: Metric, uid: int, gid: int, value: int) -> None:
        """Add value to the read or write total of the view's credential."""
        credential = gid if self.group_view else uid
        slot = self._totals.get(credential)
        if slot is None:
            slot = self._totals[credential] = [0, 0]
        if metric is Metric.READ:
            slot[0] += value
        else:
            slot[1] += value

    def observe_sample(self, sample: Sample) -> None:
        self.observe(sample.metric, sample.uid, sample.gid, sample.bytes)

    def flush(self) -> WindowTotals:
        """
        Return the completed window and start an empty one.
        """
        completed, self._totals = self._totals, {}
        snapshot = WindowTotals(
            {
                credential: CredentialTotals(read_bytes=read, write_bytes=write)
                for credential, (read, write) in completed.items()
            }
        )
        logger.debug(f"Flushed window with {len(snapshot)} credentials")
        return snapshot

    def __len__(self) -> int:
        return len(self._totals)
