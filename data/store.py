"""
In-memory record store.

Holds the four record collections for the lifetime of the process.
Collections are tuples so nothing downstream can append to or reorder
them; filtering always builds new tuples.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np
import pandas as pd

from utils.geo import haversine_distances

from .records import AgriculturalField, CitizenReport, ClimateSample, Observation

COLLECTIONS = ('observations', 'citizen_reports', 'climate_samples', 'agricultural_fields')


@dataclass(frozen=True)
class RecordStore:
    """The four generated collections."""

    observations: Tuple[Observation, ...] = ()
    citizen_reports: Tuple[CitizenReport, ...] = ()
    climate_samples: Tuple[ClimateSample, ...] = ()
    agricultural_fields: Tuple[AgriculturalField, ...] = ()

    def collection(self, name: str) -> tuple:
        """Return a collection by name."""
        if name not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {name}")
        return getattr(self, name)

    def counts(self) -> Dict[str, int]:
        """Number of records per collection."""
        return {name: len(self.collection(name)) for name in COLLECTIONS}

    def to_frame(self, name: str) -> pd.DataFrame:
        """
        Collection as a DataFrame, one row per record.

        Enum columns hold their string values and dates stay datetimes.
        """
        records = self.collection(name)
        frame = pd.DataFrame([record.model_dump() for record in records])

        for column in ('intensity', 'bloom_type'):
            if column in frame:
                frame[column] = frame[column].map(lambda value: getattr(value, 'value', value))

        return frame

    def bounding_sphere(self) -> Tuple[Tuple[float, float], float]:
        """
        Centre and radius (metres) enclosing every observation.

        The centre is the mean position; the radius is the largest
        great-circle distance from it. An empty store yields ((0, 0), 0).
        """
        if not self.observations:
            return (0.0, 0.0), 0.0

        lats = np.array([o.lat for o in self.observations])
        lngs = np.array([o.lng for o in self.observations])
        center = (float(lats.mean()), float(lngs.mean()))

        distances = haversine_distances(center[0], center[1], lats, lngs)
        return center, float(distances.max())
