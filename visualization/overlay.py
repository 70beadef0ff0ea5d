"""
Map overlay adapter contract.

The render coordinator talks to every map surface through the same
small set of operations: add a marker to a named layer, clear a layer,
move the viewport, bind a popup, and change a layer's opacity or
visibility. ``InMemoryOverlayAdapter`` keeps the resulting marker state
so that concrete surfaces (folium, plotly) only have to draw it.
"""

import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .styles import MarkerStyle

Position = Tuple[float, float]


class LayerId(str, Enum):
    """Data layers drawn on every map surface."""

    BLOOMS = 'blooms'
    CITIZEN = 'citizen'
    CLIMATE = 'climate'
    AGRICULTURAL = 'agricultural'


LAYER_TITLES = {
    LayerId.BLOOMS: 'Bloom Observations',
    LayerId.CITIZEN: 'Citizen Science',
    LayerId.CLIMATE: 'Climate Data',
    LayerId.AGRICULTURAL: 'Agricultural Fields',
}


@dataclass(frozen=True)
class PlacedMarker:
    """A marker that has been added to a layer."""

    handle: int
    layer: LayerId
    position: Position
    style: MarkerStyle
    popup: Optional[str] = None


class MapOverlayAdapter(ABC):
    """Operations a map surface must support to receive rendered layers."""

    @abstractmethod
    def add_marker(self, layer: LayerId, position: Position, style: MarkerStyle) -> int:
        """Add a circle marker and return its handle."""

    @abstractmethod
    def clear_layer(self, layer: LayerId) -> None:
        """Remove every marker from a layer."""

    @abstractmethod
    def set_viewport(self, center: Position, zoom: int) -> None:
        """Move the view to ``center`` at ``zoom``."""

    @abstractmethod
    def bind_popup(self, handle: int, html: str) -> None:
        """Attach popup content to a previously added marker."""

    @abstractmethod
    def set_layer_opacity(self, layer: LayerId, opacity: float) -> None:
        """Scale a layer's marker opacity, 0 to 1."""

    @abstractmethod
    def set_layer_visible(self, layer: LayerId, visible: bool) -> None:
        """Show or hide a layer without discarding its markers."""

    def set_satellite(self, show: bool) -> None:
        """Toggle satellite imagery under the layers. Surfaces without a basemap ignore it."""


class InMemoryOverlayAdapter(MapOverlayAdapter):
    """
    Overlay adapter that records marker state per layer.

    Handles are unique for the lifetime of the adapter, so a handle from
    a cleared layer never aliases a newer marker.
    """

    def __init__(self, center: Position = (20.0, 77.0), zoom: int = 3):
        self.center = tuple(center)
        self.zoom = zoom
        self.satellite = False
        self.opacity: Dict[LayerId, float] = {layer: 1.0 for layer in LayerId}
        self.visible: Dict[LayerId, bool] = {layer: True for layer in LayerId}
        self._layers: Dict[LayerId, Dict[int, PlacedMarker]] = {layer: {} for layer in LayerId}
        self._owners: Dict[int, LayerId] = {}
        self._handles = itertools.count(1)

    def add_marker(self, layer: LayerId, position: Position, style: MarkerStyle) -> int:
        layer = LayerId(layer)
        handle = next(self._handles)
        self._layers[layer][handle] = PlacedMarker(handle, layer, (float(position[0]), float(position[1])), style)
        self._owners[handle] = layer
        return handle

    def clear_layer(self, layer: LayerId) -> None:
        layer = LayerId(layer)
        for handle in self._layers[layer]:
            self._owners.pop(handle, None)
        self._layers[layer] = {}

    def set_viewport(self, center: Position, zoom: int) -> None:
        self.center = (float(center[0]), float(center[1]))
        self.zoom = int(zoom)

    def bind_popup(self, handle: int, html: str) -> None:
        if handle not in self._owners:
            raise KeyError(f"Unknown marker handle: {handle}")
        markers = self._layers[self._owners[handle]]
        markers[handle] = replace(markers[handle], popup=html)

    def set_layer_opacity(self, layer: LayerId, opacity: float) -> None:
        if not 0.0 <= opacity <= 1.0:
            raise ValueError(f"Opacity must be between 0 and 1, got {opacity}")
        self.opacity[LayerId(layer)] = float(opacity)

    def set_layer_visible(self, layer: LayerId, visible: bool) -> None:
        self.visible[LayerId(layer)] = bool(visible)

    def set_satellite(self, show: bool) -> None:
        self.satellite = bool(show)

    def markers(self, layer: LayerId) -> List[PlacedMarker]:
        """Markers currently on ``layer``, in insertion order."""
        return list(self._layers[LayerId(layer)].values())

    def marker_count(self, layer: Optional[LayerId] = None) -> int:
        if layer is not None:
            return len(self._layers[LayerId(layer)])
        return sum(len(markers) for markers in self._layers.values())
