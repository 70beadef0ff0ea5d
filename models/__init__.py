"""
Models module for BloomWatch Atlas.

Derived-metric models: climate impact, ecosystem health, agricultural
value and crop yield/timing predictions computed from lookup tables.
"""

from .derived import (
    climate_impact, ecosystem_health, agricultural_value,
    harvest_prediction, harvest_date, bloom_timing, climate_zone
)

__all__ = [
    "climate_impact",
    "ecosystem_health",
    "agricultural_value",
    "harvest_prediction",
    "harvest_date",
    "bloom_timing",
    "climate_zone"
]
