"""
Visualization module for BloomWatch Atlas.

This module provides marker styling, popup content and the map overlay
adapters (in-memory, folium 2D map and plotly 3D globe).
"""

from .styles import (
    MarkerStyle, bloom_size, bloom_color, climate_color,
    crop_color, citizen_color, layer_style, legend_gradient
)
from .popups import (
    observation_popup, citizen_popup, climate_popup,
    agricultural_popup, popup_to_hover
)
from .overlay import (
    LayerId, LAYER_TITLES, PlacedMarker,
    MapOverlayAdapter, InMemoryOverlayAdapter
)
from .leaflet_map import FoliumMapAdapter
from .globe import PlotlyGlobeAdapter

__all__ = [
    "MarkerStyle",
    "bloom_size",
    "bloom_color",
    "climate_color",
    "crop_color",
    "citizen_color",
    "layer_style",
    "legend_gradient",
    "observation_popup",
    "citizen_popup",
    "climate_popup",
    "agricultural_popup",
    "popup_to_hover",
    "LayerId",
    "LAYER_TITLES",
    "PlacedMarker",
    "MapOverlayAdapter",
    "InMemoryOverlayAdapter",
    "FoliumMapAdapter",
    "PlotlyGlobeAdapter"
]
