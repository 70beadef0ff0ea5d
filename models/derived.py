"""
Derived-metric calculator.

Pure functions turning categorical record fields into derived values
through the lookup tables. Every function takes an optional ``tables``
mapping (a DictConfig or a plain mapping-of-mappings); when omitted the
bundled tables are used. Table misses fall back to the documented defaults
instead of raising.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union

from utils.config import get_default_tables

Category = Union[str, Enum]

DEFAULT_SCORE = 0.0
DEFAULT_MULTIPLIER = 1.0
DEFAULT_BASE_YIELD = 5
DEFAULT_BLOOM_MONTH = 6
DEFAULT_HARVEST_MONTH = 8
HARVEST_DAY = 15


def _key(value: Category) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _section(tables: Optional[Mapping[str, Any]], name: str) -> Mapping[str, Any]:
    tables = get_default_tables() if tables is None else tables
    return tables[name]


def _lookup(table: Mapping[str, Any], key: Category, default: float) -> float:
    value = table.get(_key(key))
    return float(default if value is None else value)


def climate_impact(intensity: Category, bloom_type: Category, tables: Optional[Mapping[str, Any]] = None) -> float:
    """
    Climate impact of a bloom.

    ``impact_scores[intensity] * impact_type_multipliers[type]``
    """
    section = _section(tables, 'derived_metrics')
    score = _lookup(section['impact_scores'], intensity, section.get('default_score', DEFAULT_SCORE))
    multiplier = _lookup(
        section['impact_type_multipliers'], bloom_type,
        section.get('default_multiplier', DEFAULT_MULTIPLIER)
    )
    return score * multiplier


def ecosystem_health(intensity: Category, bloom_type: Category, tables: Optional[Mapping[str, Any]] = None) -> float:
    """
    Ecosystem health contribution of a bloom.

    ``health_scores[intensity] * health_type_multipliers[type]``
    """
    section = _section(tables, 'derived_metrics')
    score = _lookup(section['health_scores'], intensity, section.get('default_score', DEFAULT_SCORE))
    multiplier = _lookup(
        section['health_type_multipliers'], bloom_type,
        section.get('default_multiplier', DEFAULT_MULTIPLIER)
    )
    return score * multiplier


def agricultural_value(bloom_type: Category, country: str, tables: Optional[Mapping[str, Any]] = None) -> float:
    """
    Agricultural value of a bloom.

    ``agricultural_type_values[type] * agricultural_country_multipliers.get(country, 1.0)``
    """
    section = _section(tables, 'derived_metrics')
    value = _lookup(section['agricultural_type_values'], bloom_type, section.get('default_score', DEFAULT_SCORE))
    multiplier = _lookup(
        section['agricultural_country_multipliers'], country,
        section.get('default_multiplier', DEFAULT_MULTIPLIER)
    )
    return value * multiplier


def harvest_prediction(crop: str, bloom_quality: float, tables: Optional[Mapping[str, Any]] = None) -> float:
    """
    Predicted yield for a crop given a bloom quality in [0, 1].

    Scales the crop's baseline yield between 80% and 120%.

    Args:
        crop: Crop name
        bloom_quality: Bloom quality factor, 0 (poor) to 1 (excellent)
        tables: Optional lookup tables

    Returns:
        Predicted yield in tons per hectare
    """
    section = _section(tables, 'crops')
    base = _lookup(section['base_yield'], crop, section.get('default_base_yield', DEFAULT_BASE_YIELD))
    return base * (0.8 + bloom_quality * 0.4)


def harvest_date(crop: str, year: int, tables: Optional[Mapping[str, Any]] = None) -> datetime:
    """Expected harvest date: the 15th of the crop's harvest month."""
    section = _section(tables, 'crops')
    month = int(_lookup(section['harvest_month'], crop, section.get('default_harvest_month', DEFAULT_HARVEST_MONTH)))
    return datetime(year, month, HARVEST_DAY)


def bloom_timing(crop: str, year: int, tables: Optional[Mapping[str, Any]] = None) -> datetime:
    """Expected bloom date: the 15th of the crop's bloom month."""
    section = _section(tables, 'crops')
    month = int(_lookup(section['bloom_month'], crop, section.get('default_bloom_month', DEFAULT_BLOOM_MONTH)))
    return datetime(year, month, HARVEST_DAY)


def climate_zone(lat: float) -> str:
    """Coarse climate zone from latitude alone."""
    if lat > 60:
        return 'Polar'
    if lat > 30:
        return 'Temperate'
    if lat > -30:
        return 'Tropical'
    return 'Polar'
