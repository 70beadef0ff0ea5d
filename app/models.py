"""
Pydantic models for API request/response schemas.

This module defines the data models used for API requests and responses
with proper validation and documentation.
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class ControlRequest(BaseModel):
    """Request body for a UI control change."""

    value: Any = Field(
        None,
        description="New control value; ignored by play_pause, reset and speed",
        examples=["superbloom", 75, True]
    )


class ControlResponse(BaseModel):
    """Result of a control change."""

    control: str = Field(..., description="Control that was changed")
    result: Any = Field(None, description="Value returned by the control handler")
    state: Dict[str, Any] = Field(..., description="Dashboard state after the change")


class PlaybackResponse(BaseModel):
    """Playback controller status."""

    state: str = Field(..., description="'playing' or 'stopped'", examples=["playing"])
    index: int = Field(..., ge=0, le=11, description="Current month index")
    speed: float = Field(..., gt=0, description="Speed multiplier", examples=[1.0])
    period_ms: float = Field(..., gt=0, description="Tick period in milliseconds")
    label: str = Field(..., description="Month label of the current index", examples=["Jan 2024"])


class MarkerModel(BaseModel):
    """One rendered marker."""

    record_id: str
    position: Tuple[float, float]
    style: Dict[str, Any]
    popup_html: str


class LayersResponse(BaseModel):
    """Rendered markers per layer under the current filters."""

    time_index: Optional[int] = Field(None, description="Month index, or null for all months")
    counts: Dict[str, int] = Field(..., description="Number of markers per layer")
    layers: Dict[str, List[MarkerModel]]


class BloomInfoResponse(BaseModel):
    """Nearest bloom observation to a clicked point."""

    found: bool = Field(..., description="Whether an observation lies within range")
    message: str = Field(..., examples=["No Bloom Data"])
    distance_m: Optional[float] = Field(None, ge=0, description="Distance to the observation in metres")
    observation: Optional[Dict[str, Any]] = None
    popup_html: Optional[str] = None


class StatisticsResponse(BaseModel):
    """Statistics panels for the currently rendered records."""

    summary: Dict[str, Any]
    ecosystem: Dict[str, Any]
    agriculture: Dict[str, Any]


class HealthResponse(BaseModel):
    """API health status."""

    status: str = Field(..., examples=["healthy"])
    timestamp: float
    api_version: str
    records: Dict[str, int] = Field(default_factory=dict)
    playback: Optional[str] = None
