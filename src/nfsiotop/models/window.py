"""
Per-window aggregation and ranking models.

WindowTotals is the immutable snapshot handed from the aggregator to the
ranking engine; RankedWindow is what the renderer draws.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Tuple

LABEL_WIDTH = 20


@dataclass(frozen=True)
class CredentialTotals:
    """Read and write bytes accumulated for one credential in one window."""

    read_bytes: int = 0
    write_bytes: int = 0

    @property
    def total_bytes(self) -> int:
        return self.read_bytes + self.write_bytes


@dataclass(frozen=True)
class WindowTotals:
    """
    Completed window: credential -> CredentialTotals.

    The key set is exactly the credentials that had at least one sample in
    the window. The mapping is read-only.
    """

    entries: Mapping[int, CredentialTotals] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self):
        if not isinstance(self.entries, MappingProxyType):
            object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self.entries)

    def __contains__(self, credential: object) -> bool:
        return credential in self.entries

    def __getitem__(self, credential: int) -> CredentialTotals:
        return self.entries[credential]

    def items(self):
        return self.entries.items()

    @property
    def read_bytes(self) -> int:
        return sum(t.read_bytes for t in self.entries.values())

    @property
    def write_bytes(self) -> int:
        return sum(t.write_bytes for t in self.entries.values())


@dataclass(frozen=True)
class RankedRow:
    """One visible table row."""

    credential: int
    display_label: str
    read_rate: float
    write_rate: float
    read_bytes: int
    write_bytes: int

    @property
    def total_bytes(self) -> int:
        return self.read_bytes + self.write_bytes


@dataclass(frozen=True)
class RankedWindow:
    """
    Ranking result for one window.

    Attributes:
        read_rate: Sum of all read bytes divided by the interval.
        write_rate: Sum of all write bytes divided by the interval.
        read_bytes: Sum of all read bytes (bar-chart denominator).
        write_bytes: Sum of all write bytes (bar-chart denominator).
        rows: Visible rows in descending combined-throughput order.
        hidden_count: Credentials that did not fit on screen.
    """

    read_rate: float
    write_rate: float
    read_bytes: int
    write_bytes: int
    rows: Tuple[RankedRow, ...] = ()
    hidden_count: int = 0

    @property
    def credential_count(self) -> int:
        return len(self.rows) + self.hidden_count
