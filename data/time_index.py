"""
Month buckets for time-lapse playback.

Observations are assigned to the bucket of their date's month. Citizen
reports, climate samples and agricultural fields are never time-scoped
and always render in full.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from utils.config import get_default_tables

from .records import Observation
from .store import RecordStore

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class TimeBucket:
    """Observations belonging to one month slot."""

    index: int
    month: str
    year: int
    observations: Tuple[Observation, ...] = ()

    @property
    def label(self) -> str:
        return f"{self.month} {self.year}"


@dataclass(frozen=True)
class TimeIndex:
    """Twelve month buckets over a record store."""

    buckets: Tuple[TimeBucket, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, store: RecordStore, tables: Optional[Mapping[str, Any]] = None) -> 'TimeIndex':
        """
        Partition a store's observations by month.

        Args:
            store: Record store to index
            tables: Lookup tables providing the year and month labels

        Returns:
            TimeIndex with exactly twelve buckets
        """
        tables = get_default_tables() if tables is None else tables
        months = list(tables['playback']['months'])

        observations: Dict[int, List[Observation]] = {i: [] for i in range(MONTHS_PER_YEAR)}
        for observation in store.observations:
            observations[observation.date.month - 1].append(observation)

        return cls(buckets=tuple(
            TimeBucket(
                index=i,
                month=months[i],
                year=tables['year'],
                observations=tuple(observations[i]),
            )
            for i in range(MONTHS_PER_YEAR)
        ))

    def __len__(self) -> int:
        return len(self.buckets)

    def __getitem__(self, index: int) -> TimeBucket:
        return self.buckets[index]

    def bucket(self, index: int) -> TimeBucket:
        """Bucket for a month index, wrapping around the year."""
        return self.buckets[index % len(self.buckets)]


def time_range_labels(time_range: str, tables: Optional[Mapping[str, Any]] = None) -> Tuple[str, str]:
    """
    Start and end labels shown under the time slider.

    Raises:
        KeyError: for an unknown range name
    """
    tables = get_default_tables() if tables is None else tables
    ranges = tables['playback']['time_ranges']
    if time_range not in ranges:
        raise KeyError(f"Unknown time range: {time_range}")
    start, end = ranges[time_range]
    return str(start), str(end)
