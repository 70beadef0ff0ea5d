"""
2D Leaflet map built with folium.

``FoliumMapAdapter`` accumulates marker state through the overlay
contract and draws a fresh ``folium.Map`` on demand: one FeatureGroup
per data layer, an optional Esri satellite basemap, a layer control and
an intensity legend.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import folium

from .overlay import LAYER_TITLES, InMemoryOverlayAdapter, LayerId, PlacedMarker
from .styles import legend_gradient

logger = logging.getLogger(__name__)

LEGEND_TEMPLATE = """
<div style="position: fixed; bottom: 30px; left: 30px; z-index: 9999;
            background: white; padding: 10px 14px; border-radius: 6px;
            box-shadow: 0 1px 4px rgba(0,0,0,0.3); font-size: 12px;">
  <strong>Bloom Intensity</strong>
  <div style="width: 160px; height: 10px; margin: 6px 0; background: {gradient};"></div>
  <div style="display: flex; justify-content: space-between;"><span>Low</span><span>Extreme</span></div>
</div>
"""


class FoliumMapAdapter(InMemoryOverlayAdapter):
    """Overlay adapter that renders to a Leaflet map through folium."""

    def __init__(
        self,
        center=(20.0, 77.0),
        zoom: int = 3,
        tiles: str = "CartoDB positron",
        tables: Optional[Mapping[str, Any]] = None
    ):
        super().__init__(center, zoom)
        self.tiles = tiles
        self.tables = tables

    def _circle(self, marker: PlacedMarker) -> folium.CircleMarker:
        style = marker.style
        layer_opacity = self.opacity[marker.layer]
        popup = folium.Popup(marker.popup, max_width=300) if marker.popup else None
        return folium.CircleMarker(
            location=list(marker.position),
            radius=style.radius,
            color=style.color,
            weight=style.weight,
            opacity=style.opacity * layer_opacity,
            fill=True,
            fill_color=style.fill_color,
            fill_opacity=style.fill_opacity * layer_opacity,
            popup=popup,
        )

    def to_map(self) -> folium.Map:
        """
        Draw the current overlay state.

        Returns:
            A new folium.Map; the adapter keeps no reference to it
        """
        m = folium.Map(location=list(self.center), zoom_start=self.zoom, tiles=self.tiles)
        if self.satellite:
            folium.TileLayer("Esri.WorldImagery", name="Satellite").add_to(m)

        for layer in LayerId:
            group = folium.FeatureGroup(name=LAYER_TITLES[layer], show=self.visible[layer])
            for marker in self.markers(layer):
                self._circle(marker).add_to(group)
            group.add_to(m)

        folium.LayerControl(collapsed=False).add_to(m)
        legend = LEGEND_TEMPLATE.format(gradient=legend_gradient(self.tables))
        m.get_root().html.add_child(folium.Element(legend))
        return m

    def render_html(self) -> str:
        return self.to_map().get_root().render()

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        self.to_map().save(str(path))
        logger.info(f"Saved map with {self.marker_count()} markers to {path}")
        return path
