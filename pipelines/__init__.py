"""
Pipelines module for BloomWatch Atlas.

This module turns the record store into rendered map layers: filter
state, the render coordinator, time-lapse playback and the dashboard
that dispatches UI controls.
"""

from .state import FilterState, AppState
from .coordinator import (
    MarkerSpec, RenderCoordinator, build_layers,
    nearest_observation, select_records
)
from .playback import (
    PlaybackState, PlaybackController, Scheduler,
    AsyncioScheduler, PeriodicTimer
)
from .dashboard import BloomDashboard, ControlError

__all__ = [
    "FilterState",
    "AppState",
    "MarkerSpec",
    "RenderCoordinator",
    "build_layers",
    "nearest_observation",
    "select_records",
    "PlaybackState",
    "PlaybackController",
    "Scheduler",
    "AsyncioScheduler",
    "PeriodicTimer",
    "BloomDashboard",
    "ControlError"
]
