"""
Unit tests for visualization module components.

Tests the in-memory overlay adapter, popups, the folium map and the
plotly globe.
"""

import asyncio
import logging

import folium
import plotly.graph_objects as go
import pytest

from visualization import (
    FoliumMapAdapter, InMemoryOverlayAdapter, LayerId, MarkerStyle,
    PlotlyGlobeAdapter, observation_popup, popup_to_hover
)
from visualization.globe import zoom_for_radius

STYLE = MarkerStyle(radius=8, fill_color='#FFD700')


class TestInMemoryOverlay:
    """Test the overlay adapter contract."""

    def test_add_and_clear(self):
        adapter = InMemoryOverlayAdapter()
        adapter.add_marker(LayerId.BLOOMS, (10.0, 20.0), STYLE)
        adapter.add_marker(LayerId.CLIMATE, (11.0, 21.0), STYLE)

        adapter.clear_layer(LayerId.BLOOMS)

        assert adapter.marker_count(LayerId.BLOOMS) == 0
        assert adapter.marker_count(LayerId.CLIMATE) == 1

    def test_handles_are_unique(self):
        adapter = InMemoryOverlayAdapter()
        first = adapter.add_marker('blooms', (0.0, 0.0), STYLE)
        adapter.clear_layer('blooms')
        second = adapter.add_marker('blooms', (0.0, 0.0), STYLE)

        assert first != second
        with pytest.raises(KeyError):
            adapter.bind_popup(first, '<p>stale</p>')

    def test_bind_popup(self):
        adapter = InMemoryOverlayAdapter()
        handle = adapter.add_marker(LayerId.CITIZEN, (1.0, 2.0), STYLE)
        adapter.bind_popup(handle, '<p>hi</p>')

        assert adapter.markers(LayerId.CITIZEN)[0].popup == '<p>hi</p>'

    def test_opacity_range(self):
        adapter = InMemoryOverlayAdapter()
        adapter.set_layer_opacity(LayerId.BLOOMS, 0.3)

        assert adapter.opacity[LayerId.BLOOMS] == 0.3
        with pytest.raises(ValueError):
            adapter.set_layer_opacity(LayerId.BLOOMS, 1.5)

    def test_viewport(self):
        adapter = InMemoryOverlayAdapter()
        adapter.set_viewport((39.8, -98.5), 4)
        assert adapter.center == (39.8, -98.5)
        assert adapter.zoom == 4


class TestPopups:
    """Test popup content."""

    def test_observation_popup(self, store):
        bloom = store.observations[0]
        html = observation_popup(bloom)

        assert bloom.species in html
        assert f"{bloom.confidence * 100:.1f}%" in html
        assert f"{bloom.area:.1f} hectares" in html

    def test_popup_escapes_text(self, store):
        bloom = store.observations[0].model_copy(update={'species': '<script>x</script>'})
        assert '<script>' not in observation_popup(bloom)

    def test_popup_to_hover(self):
        hover = popup_to_hover('<div><h4>Rose</h4><p><strong>Country:</strong> USA</p></div>')
        assert hover == 'Rose<br>Country: USA'


class TestFoliumMap:
    """Test the 2D Leaflet map."""

    def test_to_map(self, dashboard):
        adapter = FoliumMapAdapter()
        dashboard.attach(adapter)
        dashboard.render()

        m = adapter.to_map()
        assert isinstance(m, folium.Map)

        groups = [child for child in m._children.values() if isinstance(child, folium.FeatureGroup)]
        assert len(groups) == len(LayerId)
        assert sum(len(group._children) for group in groups) == adapter.marker_count()

    def test_render_html_has_legend_and_popups(self, dashboard):
        adapter = FoliumMapAdapter()
        dashboard.attach(adapter)
        dashboard.render()

        html = adapter.render_html()
        assert 'Bloom Intensity' in html
        assert 'bloom-popup' in html

    def test_satellite_layer(self):
        adapter = FoliumMapAdapter()
        adapter.set_satellite(True)

        tiles = [child for child in adapter.to_map()._children.values() if isinstance(child, folium.TileLayer)]
        assert any(tile.layer_name == 'Satellite' for tile in tiles)

    def test_save(self, dashboard, temp_data_dir):
        adapter = FoliumMapAdapter()
        dashboard.attach(adapter)
        dashboard.render()

        path = adapter.save(temp_data_dir / 'map.html')
        assert path.exists() and path.stat().st_size > 0


class TestPlotlyGlobe:
    """Test the 3D globe."""

    def test_to_figure(self, dashboard):
        globe = PlotlyGlobeAdapter()
        globe.add_label('New Delhi', (28.6139, 77.2090))
        dashboard.attach(globe)
        dashboard.render()

        fig = globe.to_figure()

        assert isinstance(fig, go.Figure)
        assert fig.layout.geo.projection.type == 'orthographic'
        names = [trace.name for trace in fig.data]
        assert 'Bloom Observations' in names
        assert 'Labels' in names

    def test_hidden_layer_is_legend_only(self, dashboard):
        globe = PlotlyGlobeAdapter()
        dashboard.attach(globe)
        dashboard.render()
        dashboard.dispatch('show_climate', False)

        traces = {trace.name: trace for trace in globe.to_figure().data}
        assert traces['Climate Data'].visible == 'legendonly'

    def test_fly_to(self, store):
        globe = PlotlyGlobeAdapter()

        async def ready():
            return store.bounding_sphere()

        moved = asyncio.run(globe.fly_to(ready()))

        center, radius = store.bounding_sphere()
        assert moved is True
        assert globe.center == pytest.approx(center)
        assert globe.zoom == zoom_for_radius(radius)

    def test_fly_to_failure_is_logged(self, caplog):
        """A failed target is logged and leaves the viewport alone."""
        globe = PlotlyGlobeAdapter(center=(1.0, 2.0), zoom=3)

        async def broken():
            raise RuntimeError("tileset unavailable")

        with caplog.at_level(logging.ERROR):
            moved = asyncio.run(globe.fly_to(broken()))

        assert moved is False
        assert globe.center == (1.0, 2.0)
        assert "Error loading tileset: tileset unavailable" in caplog.text

    def test_zoom_for_radius(self):
        assert zoom_for_radius(0) == 6
        assert zoom_for_radius(10_000_000) == 1
        assert zoom_for_radius(100_000) > zoom_for_radius(1_000_000)
