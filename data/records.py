"""
Typed records held by the BloomWatch record store.

All records are frozen pydantic models: they are built once at startup,
validated on construction and never updated in place. Filtering produces
new tuples of the same record objects.
"""

from datetime import datetime
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class BloomIntensity(str, Enum):
    """Categorical bloom intensity."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    EXTREME = "extreme"


class BloomType(str, Enum):
    """Categorical bloom type."""
    SUPERBLOOM = "superbloom"
    WILDFLOWER = "wildflower"
    AGRICULTURAL = "agricultural"
    URBAN = "urban"


class Record(BaseModel):
    """Base class for every record: an identifier and a WGS84 position."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Record identifier")
    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in degrees")

    @property
    def position(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


class Observation(Record):
    """A single synthetic flowering event."""

    intensity: BloomIntensity
    bloom_type: BloomType
    species: str
    confidence: float = Field(..., ge=0.6, lt=1.0)
    date: datetime
    area: float = Field(..., gt=0, description="Bloom area in hectares")
    country: str
    region: str
    climate_impact: float = Field(..., ge=0)
    ecosystem_health: float = Field(..., ge=0)
    agricultural_value: float = Field(..., ge=0)


class CitizenReport(Record):
    """A citizen-science sighting."""

    species: str
    date: datetime
    observer: str
    validated: bool
    country: str


class ClimateSample(Record):
    """A climate station reading."""

    temperature: float = Field(..., description="Air temperature in degrees C")
    precipitation: float = Field(..., ge=0, description="Precipitation in mm")
    humidity: float = Field(..., ge=0, le=100, description="Relative humidity in %")
    wind_speed: float = Field(..., ge=0, description="Wind speed in m/s")
    pressure: float = Field(..., gt=0, description="Pressure in hPa")
    region: str
    climate_zone: str
    bloom_correlation: float = Field(..., ge=0, le=1)


class AgriculturalField(Record):
    """A cultivated field with crop timing and yield estimates."""

    crop: str
    planting_date: datetime
    expected_harvest: datetime
    yield_estimate: float = Field(..., ge=0, description="Tons per hectare")
    soil_moisture: float = Field(..., ge=0, le=100)
    fertilizer_level: float = Field(..., ge=0, le=100)
    pest_pressure: float = Field(..., ge=0, le=100)
    country: str
    bloom_timing: datetime
    harvest_prediction: float = Field(..., ge=0, description="Predicted yield in tons per hectare")
