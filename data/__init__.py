"""
Data module for BloomWatch Atlas.

This module holds the typed records, the in-memory record store,
the synthetic sample-data generator and the month time index.
"""

from .records import (
    BloomIntensity, BloomType, Observation, CitizenReport,
    ClimateSample, AgriculturalField
)
from .store import RecordStore, COLLECTIONS
from .generator import generate, build_observation
from .time_index import TimeIndex, TimeBucket, time_range_labels

__all__ = [
    "BloomIntensity",
    "BloomType",
    "Observation",
    "CitizenReport",
    "ClimateSample",
    "AgriculturalField",
    "RecordStore",
    "COLLECTIONS",
    "generate",
    "build_observation",
    "TimeIndex",
    "TimeBucket",
    "time_range_labels"
]
