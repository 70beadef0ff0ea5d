"""
API endpoints for BloomWatch Atlas.

This module defines the API routes for the dashboard state, rendered
layers, map and globe pages, statistics, bloom lookups, UI controls and
time-lapse playback.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse

from pipelines.coordinator import build_layers
from pipelines.dashboard import ControlError
from utils.geo import haversine_distance
from visualization.popups import observation_popup

from .models import (
    BloomInfoResponse, ControlRequest, ControlResponse, LayersResponse,
    MarkerModel, PlaybackResponse, StatisticsResponse
)
from .utils import DashboardBundle

# Setup logging
logger = logging.getLogger(__name__)

# Dashboard bundle (set by main.py at startup)
bundle: Optional[DashboardBundle] = None


def get_bundle() -> DashboardBundle:
    """Dependency to get the running dashboard."""
    if bundle is None:
        raise HTTPException(status_code=503, detail="Dashboard not initialized")
    return bundle


# Create router
router = APIRouter()


def _playback_response(current: DashboardBundle) -> PlaybackResponse:
    playback = current.dashboard.playback
    return PlaybackResponse(
        **playback.to_dict(),
        label=current.dashboard.state.time_index.bucket(playback.index).label
    )


@router.get("/state")
async def get_state(current: DashboardBundle = Depends(get_bundle)):
    """Current filters, display settings and playback status."""
    state = current.dashboard.state.to_dict()
    state['playback'] = current.dashboard.playback.to_dict()
    return state


@router.get("/layers", response_model=LayersResponse)
async def get_layers(current: DashboardBundle = Depends(get_bundle)):
    """
    Markers for every layer under the current filters and month.

    Returns:
        LayersResponse with marker specifications per layer
    """
    dashboard = current.dashboard
    state = dashboard.state
    layers = build_layers(state.store, state.filters, state.tables, dashboard.coordinator.bucket_for(state))

    return LayersResponse(
        time_index=state.filters.time_index,
        counts={layer.value: len(specs) for layer, specs in layers.items()},
        layers={
            layer.value: [
                MarkerModel(
                    record_id=spec.record_id,
                    position=spec.position,
                    style=spec.style.to_dict(),
                    popup_html=spec.popup_html
                )
                for spec in specs
            ]
            for layer, specs in layers.items()
        }
    )


@router.get("/map", response_class=HTMLResponse)
async def get_map(current: DashboardBundle = Depends(get_bundle)):
    """Leaflet map page of the current layers."""
    return HTMLResponse(current.map_view.render_html())


@router.get("/globe", response_class=HTMLResponse)
async def get_globe(current: DashboardBundle = Depends(get_bundle)):
    """3D globe page of the current layers."""
    return HTMLResponse(current.globe.render_html())


@router.get("/bloom-info", response_model=BloomInfoResponse)
async def get_bloom_info(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    current: DashboardBundle = Depends(get_bundle)
):
    """
    Nearest rendered bloom observation to a clicked point.

    Args:
        lat: Latitude of the click
        lng: Longitude of the click

    Returns:
        BloomInfoResponse; ``found`` is false when nothing lies within 50 km
    """
    observation = current.dashboard.bloom_info(lat, lng)
    if observation is None:
        return BloomInfoResponse(found=False, message="No Bloom Data")

    return BloomInfoResponse(
        found=True,
        message=observation.species,
        distance_m=haversine_distance((lat, lng), observation.position),
        observation=observation.model_dump(mode='json'),
        popup_html=observation_popup(observation)
    )


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(current: DashboardBundle = Depends(get_bundle)):
    """Statistics panels for the currently rendered records."""
    return StatisticsResponse(**current.dashboard.statistics())


@router.post("/controls/{control}", response_model=ControlResponse)
async def post_control(
    control: str,
    request: ControlRequest,
    current: DashboardBundle = Depends(get_bundle)
):
    """
    Apply a UI control change.

    Args:
        control: Control name, e.g. ``bloom_type`` or ``show_citizen``
        request: Body carrying the new value

    Returns:
        ControlResponse with the handler result and the new state
    """
    try:
        result = current.dashboard.dispatch(control, request.value)
    except ControlError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if hasattr(result, 'value'):
        result = result.value
    return ControlResponse(control=control, result=result, state=current.dashboard.state.to_dict())


@router.post("/playback/play", response_model=PlaybackResponse)
async def play(current: DashboardBundle = Depends(get_bundle)):
    current.dashboard.playback.start()
    return _playback_response(current)


@router.post("/playback/pause", response_model=PlaybackResponse)
async def pause(current: DashboardBundle = Depends(get_bundle)):
    current.dashboard.playback.pause()
    return _playback_response(current)


@router.post("/playback/toggle", response_model=PlaybackResponse)
async def toggle(current: DashboardBundle = Depends(get_bundle)):
    current.dashboard.playback.toggle()
    return _playback_response(current)


@router.post("/playback/reset", response_model=PlaybackResponse)
async def reset(current: DashboardBundle = Depends(get_bundle)):
    current.dashboard.playback.reset()
    return _playback_response(current)


@router.post("/playback/speed", response_model=PlaybackResponse)
async def change_speed(current: DashboardBundle = Depends(get_bundle)):
    current.dashboard.playback.change_speed()
    return _playback_response(current)
