"""
3D globe view built with plotly.

An orthographic ``Scattergeo`` figure receives the same layers as the
2D map. Place labels can be pinned on the globe, and ``fly_to`` awaits
an asynchronously prepared target before moving the camera. A failed
target is logged and leaves the globe where it was.
"""

import logging
import math
from pathlib import Path
from typing import Awaitable, List, Optional, Tuple, Union

import plotly.graph_objects as go

from .overlay import LAYER_TITLES, InMemoryOverlayAdapter, LayerId, Position
from .popups import popup_to_hover

logger = logging.getLogger(__name__)

EARTH_CIRCUMFERENCE_M = 40_075_000.0


def zoom_for_radius(radius_m: float, default: int = 6) -> int:
    """Zoom level that roughly fits a bounding sphere of ``radius_m`` metres."""
    if radius_m <= 0:
        return default
    zoom = math.log2(EARTH_CIRCUMFERENCE_M / (4 * radius_m))
    return int(max(1, min(18, round(zoom))))


def projection_scale(zoom: int) -> float:
    """Map a Leaflet-style zoom onto plotly's projection scale (zoom 3 shows the whole globe)."""
    return float(2 ** max(zoom - 3, 0))


class PlotlyGlobeAdapter(InMemoryOverlayAdapter):
    """Overlay adapter that renders to an orthographic plotly globe."""

    def __init__(self, center: Position = (20.0, 77.0), zoom: int = 3, title: str = "BloomWatch Globe"):
        super().__init__(center, zoom)
        self.title = title
        self.labels: List[Tuple[str, Position]] = []

    def add_label(self, name: str, position: Position) -> None:
        """Pin a named point label on the globe."""
        self.labels.append((name, (float(position[0]), float(position[1]))))

    async def fly_to(self, ready: Awaitable[Tuple[Position, float]]) -> bool:
        """
        Move the camera onto a target once it is available.

        Args:
            ready: Awaitable resolving to ``(center, radius_m)``

        Returns:
            True if the camera moved, False if loading the target failed
        """
        try:
            center, radius_m = await ready
        except Exception as e:
            logger.error(f"Error loading tileset: {e}")
            return False

        self.set_viewport(center, zoom_for_radius(radius_m))
        logger.debug(f"Globe moved to {self.center} at zoom {self.zoom}")
        return True

    def _layer_trace(self, layer: LayerId) -> Optional[go.Scattergeo]:
        markers = self.markers(layer)
        if not markers:
            return None

        layer_opacity = self.opacity[layer]
        return go.Scattergeo(
            lat=[marker.position[0] for marker in markers],
            lon=[marker.position[1] for marker in markers],
            mode='markers',
            name=LAYER_TITLES[layer],
            visible=True if self.visible[layer] else 'legendonly',
            text=[popup_to_hover(marker.popup) if marker.popup else '' for marker in markers],
            hoverinfo='text',
            marker=dict(
                size=[marker.style.radius * 2 for marker in markers],
                color=[marker.style.fill_color for marker in markers],
                opacity=markers[0].style.fill_opacity * layer_opacity,
                line=dict(color=markers[0].style.color, width=markers[0].style.weight)
            )
        )

    def to_figure(self) -> go.Figure:
        """Draw the current overlay state as a new figure."""
        fig = go.Figure()

        for layer in LayerId:
            trace = self._layer_trace(layer)
            if trace is not None:
                fig.add_trace(trace)

        if self.labels:
            fig.add_trace(go.Scattergeo(
                lat=[position[0] for _, position in self.labels],
                lon=[position[1] for _, position in self.labels],
                mode='markers+text',
                name='Labels',
                text=[name for name, _ in self.labels],
                textposition='top center',
                marker=dict(size=10, color='red', line=dict(color='white', width=2))
            ))

        fig.update_geos(
            projection_type='orthographic',
            projection_rotation=dict(lat=self.center[0], lon=self.center[1]),
            projection_scale=projection_scale(self.zoom),
            showland=True, landcolor='#E5ECF6',
            showocean=True, oceancolor='#B3D9FF',
            showcountries=True, countrycolor='#999999',
        )
        fig.update_layout(
            title=self.title,
            height=700,
            margin=dict(l=0, r=0, t=40, b=0),
            legend=dict(x=0.01, y=0.99)
        )
        return fig

    def render_html(self) -> str:
        return self.to_figure().to_html(include_plotlyjs='cdn')

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        self.to_figure().write_html(str(path), include_plotlyjs='cdn')
        logger.info(f"Saved globe with {self.marker_count()} markers to {path}")
        return path
