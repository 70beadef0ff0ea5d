"""
Synthetic sample-data generator.

Builds the four record collections from the region seed tables. Every
position is ``center + U[-radius/2, radius/2]`` per axis and every
categorical field is drawn uniformly from its table. Generation cannot
fail; it is not reproducible unless a seed or generator is supplied.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from models.derived import (
    agricultural_value, bloom_timing, climate_impact, climate_zone,
    ecosystem_health, harvest_date, harvest_prediction
)
from utils.config import get_default_tables
from utils.logging import log_time

from .records import (
    AgriculturalField, BloomIntensity, BloomType, CitizenReport,
    ClimateSample, Observation
)
from .store import RecordStore

logger = logging.getLogger(__name__)


def _pick(rng: np.random.Generator, values: Sequence[Any]) -> Any:
    return values[int(rng.integers(len(values)))]


def _jitter(rng: np.random.Generator, center: Sequence[float], spread: float) -> Tuple[float, float]:
    lat = float(center[0]) + (rng.random() - 0.5) * spread
    lng = float(center[1]) + (rng.random() - 0.5) * spread
    return lat, lng


def random_date(rng: np.random.Generator, year: int) -> datetime:
    """Uniform random instant between Jan 1 and Dec 31 of ``year``."""
    start = datetime(year, 1, 1)
    span = (datetime(year, 12, 31) - start).total_seconds()
    return start + timedelta(seconds=float(rng.random()) * span)


def species_for(country: str, tables: Mapping[str, Any]) -> List[str]:
    """Species list for a country, falling back to the default country's list."""
    generation = tables['generation']
    species = generation['species_by_country'].get(country)
    if species is None:
        species = generation['species_by_country'][generation['default_species_country']]
    return list(species)


def crops_for(country: str, tables: Mapping[str, Any]) -> List[str]:
    """Crop list for a country, falling back to the default crops."""
    generation = tables['generation']
    crops = generation['crops_by_country'].get(country)
    return list(crops if crops is not None else generation['default_crops'])


def build_observation(
    id: str,
    lat: float,
    lng: float,
    intensity: BloomIntensity,
    bloom_type: BloomType,
    country: str,
    tables: Optional[Mapping[str, Any]] = None,
    **fields
) -> Observation:
    """
    Create an observation with its derived metrics filled in.

    Derived metrics are only ever computed here, at creation time.
    """
    return Observation(
        id=id,
        lat=lat,
        lng=lng,
        intensity=intensity,
        bloom_type=bloom_type,
        country=country,
        climate_impact=climate_impact(intensity, bloom_type, tables),
        ecosystem_health=ecosystem_health(intensity, bloom_type, tables),
        agricultural_value=agricultural_value(bloom_type, country, tables),
        **fields
    )


def generate_observations(
    rng: np.random.Generator,
    tables: Mapping[str, Any],
    regions: Optional[Sequence[Mapping[str, Any]]] = None,
    count: Optional[int] = None
) -> List[Observation]:
    """
    Generate bloom observations around each region seed.

    Args:
        rng: Random generator
        tables: Lookup tables
        regions: Region seeds (name, center, radius, country); defaults to the table
        count: Records per region; defaults to the table

    Returns:
        List of observations, region by region
    """
    generation = tables['generation']
    regions = generation['bloom_regions'] if regions is None else regions
    count = generation['bloom_count_per_region'] if count is None else count
    intensities = [BloomIntensity(value) for value in generation['intensities']]
    bloom_types = [BloomType(value) for value in generation['bloom_types']]

    observations = []
    for region in regions:
        species = species_for(region['country'], tables)
        for i in range(count):
            lat, lng = _jitter(rng, region['center'], region['radius'])
            observations.append(build_observation(
                id=f"bloom_{region['name']}_{i}",
                lat=lat,
                lng=lng,
                intensity=_pick(rng, intensities),
                bloom_type=_pick(rng, bloom_types),
                country=region['country'],
                tables=tables,
                species=_pick(rng, species),
                confidence=float(rng.random()) * 0.4 + 0.6,
                date=random_date(rng, tables['year']),
                area=float(rng.random()) * 1000 + 100,
                region=region['name'],
            ))

    return observations


def generate_citizen_reports(rng: np.random.Generator, tables: Mapping[str, Any]) -> List[CitizenReport]:
    """Generate citizen-science reports scattered around each country centre."""
    generation = tables['generation']
    reports = []

    for country in generation['citizen_countries']:
        species = species_for(country, tables)
        center = generation['country_coordinates'][country]
        for i in range(generation['citizen_count_per_country']):
            lat, lng = _jitter(rng, center, generation['citizen_jitter'])
            reports.append(CitizenReport(
                id=f"citizen_{country}_{i}",
                lat=lat,
                lng=lng,
                species=_pick(rng, species),
                date=random_date(rng, tables['year']),
                observer=f"Observer_{country}_{int(rng.integers(1000))}",
                validated=bool(rng.random() < generation['citizen_validated_probability']),
                country=country,
            ))

    return reports


def generate_climate_samples(rng: np.random.Generator, tables: Mapping[str, Any]) -> List[ClimateSample]:
    """Generate climate station readings around each climate region."""
    generation = tables['generation']
    samples = []

    for region in generation['climate_regions']:
        for i in range(generation['climate_count_per_region']):
            lat, lng = _jitter(rng, region['center'], region['radius'])
            samples.append(ClimateSample(
                id=f"climate_{region['name']}_{i}",
                lat=lat,
                lng=lng,
                temperature=15 + float(rng.random()) * 25,
                precipitation=float(rng.random()) * 2000,
                humidity=30 + float(rng.random()) * 50,
                wind_speed=float(rng.random()) * 20,
                pressure=980 + float(rng.random()) * 40,
                region=region['name'],
                climate_zone=climate_zone(lat),
                bloom_correlation=float(rng.random()) * 0.8 + 0.2,
            ))

    return samples


def generate_agricultural_fields(rng: np.random.Generator, tables: Mapping[str, Any]) -> List[AgriculturalField]:
    """Generate agricultural fields with crop timing and yield predictions."""
    generation = tables['generation']
    year = tables['year']
    fields = []

    for country in generation['agricultural_countries']:
        crops = crops_for(country, tables)
        center = generation['country_coordinates'][country]
        for i in range(generation['agricultural_count_per_country']):
            lat, lng = _jitter(rng, center, generation['agricultural_jitter'])
            crop = _pick(rng, crops)
            fields.append(AgriculturalField(
                id=f"agri_{country}_{i}",
                lat=lat,
                lng=lng,
                crop=crop,
                planting_date=random_date(rng, year),
                expected_harvest=harvest_date(crop, year, tables),
                yield_estimate=float(rng.random()) * 10 + 2,
                soil_moisture=float(rng.random()) * 100,
                fertilizer_level=float(rng.random()) * 100,
                pest_pressure=float(rng.random()) * 100,
                country=country,
                bloom_timing=bloom_timing(crop, year, tables),
                harvest_prediction=harvest_prediction(crop, float(rng.random()), tables),
            ))

    return fields


def generate(
    tables: Optional[Mapping[str, Any]] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None
) -> RecordStore:
    """
    Generate every collection in one batch.

    Args:
        tables: Lookup tables (defaults to the bundled tables)
        rng: Random generator to draw from
        seed: Seed for a fresh generator when ``rng`` is not given

    Returns:
        RecordStore with all four collections
    """
    tables = get_default_tables() if tables is None else tables
    rng = np.random.default_rng(seed) if rng is None else rng

    with log_time(logger, "Sample data generation"):
        store = RecordStore(
            observations=tuple(generate_observations(rng, tables)),
            citizen_reports=tuple(generate_citizen_reports(rng, tables)),
            climate_samples=tuple(generate_climate_samples(rng, tables)),
            agricultural_fields=tuple(generate_agricultural_fields(rng, tables)),
        )

    logger.info(f"Generated sample data: {store.counts()}")
    return store
