"""
Filter and render coordination.

``build_layers`` turns the record store plus the current filters into
styled marker specifications for each data layer. ``RenderCoordinator``
pushes those specifications to every attached map surface, always
clearing a layer before re-adding its markers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from data.records import AgriculturalField, CitizenReport, ClimateSample, Observation
from data.store import RecordStore
from data.time_index import TimeBucket
from utils.config import get_default_tables
from utils.geo import nearest_within
from utils.logging import log_time
from visualization.overlay import LayerId, MapOverlayAdapter
from visualization.popups import agricultural_popup, citizen_popup, climate_popup, observation_popup
from visualization.styles import (
    MarkerStyle, bloom_color, bloom_size, citizen_color, climate_color,
    crop_color, default_radius, layer_style
)

from .state import ALL, AppState, FilterState

logger = logging.getLogger(__name__)

NEARBY_DISTANCE_M = 50_000.0

# Layers whose opacity follows the opacity slider
OPACITY_LAYERS = (LayerId.BLOOMS, LayerId.CITIZEN)


@dataclass(frozen=True)
class MarkerSpec:
    """One marker ready to hand to an overlay adapter."""

    record_id: str
    position: Tuple[float, float]
    style: MarkerStyle
    popup_html: str


@dataclass(frozen=True)
class VisibleRecords:
    """Records that pass the current filters."""

    observations: Tuple[Observation, ...]
    citizen_reports: Tuple[CitizenReport, ...]
    climate_samples: Tuple[ClimateSample, ...]
    agricultural_fields: Tuple[AgriculturalField, ...]

    def as_args(self) -> Tuple[tuple, tuple, tuple, tuple]:
        return self.observations, self.citizen_reports, self.climate_samples, self.agricultural_fields


def region_labels(region: str, tables: Mapping[str, Any]) -> Optional[frozenset]:
    """Country/region labels belonging to a focus region, or None for no restriction."""
    labels = tables['views']['region_labels'].get(region)
    return frozenset(labels) if labels is not None else None


def _in_region(record: Any, labels: Optional[frozenset]) -> bool:
    if labels is None:
        return True
    return getattr(record, 'country', None) in labels or getattr(record, 'region', None) in labels


def _matches(observation: Observation, filters: FilterState) -> bool:
    if filters.bloom_type != ALL and observation.bloom_type.value != filters.bloom_type:
        return False
    if filters.intensity != ALL and observation.intensity.value != filters.intensity:
        return False
    return observation.confidence * 100 >= filters.confidence


def select_records(
    store: RecordStore,
    filters: FilterState,
    tables: Optional[Mapping[str, Any]] = None,
    bucket: Optional[TimeBucket] = None
) -> VisibleRecords:
    """
    Apply the filters to every collection.

    Args:
        store: Record store
        filters: Current filter values
        tables: Lookup tables (region membership)
        bucket: Month bucket scoping observations; None shows every month

    Returns:
        VisibleRecords with the surviving records of each collection
    """
    tables = get_default_tables() if tables is None else tables
    labels = region_labels(filters.region, tables)

    observations = bucket.observations if bucket is not None else store.observations

    return VisibleRecords(
        observations=tuple(o for o in observations if _matches(o, filters) and _in_region(o, labels)),
        citizen_reports=tuple(r for r in store.citizen_reports if _in_region(r, labels)),
        climate_samples=tuple(c for c in store.climate_samples if _in_region(c, labels)),
        agricultural_fields=tuple(f for f in store.agricultural_fields if _in_region(f, labels)),
    )


def observation_marker(bloom: Observation, tables: Mapping[str, Any]) -> MarkerSpec:
    style = layer_style(
        LayerId.BLOOMS.value, bloom_size(bloom.area, tables), bloom_color(bloom.intensity, tables), tables
    )
    return MarkerSpec(bloom.id, bloom.position, style, observation_popup(bloom))


def citizen_marker(report: CitizenReport, tables: Mapping[str, Any]) -> MarkerSpec:
    layer = LayerId.CITIZEN.value
    style = layer_style(layer, default_radius(layer, tables), citizen_color(report.validated, tables), tables)
    return MarkerSpec(report.id, report.position, style, citizen_popup(report))


def climate_marker(sample: ClimateSample, tables: Mapping[str, Any]) -> MarkerSpec:
    layer = LayerId.CLIMATE.value
    style = layer_style(layer, default_radius(layer, tables), climate_color(sample.temperature, tables), tables)
    return MarkerSpec(sample.id, sample.position, style, climate_popup(sample))


def agricultural_marker(field: AgriculturalField, tables: Mapping[str, Any]) -> MarkerSpec:
    layer = LayerId.AGRICULTURAL.value
    style = layer_style(layer, default_radius(layer, tables), crop_color(field.crop, tables), tables)
    return MarkerSpec(field.id, field.position, style, agricultural_popup(field))


def build_layers(
    store: RecordStore,
    filters: FilterState,
    tables: Optional[Mapping[str, Any]] = None,
    bucket: Optional[TimeBucket] = None
) -> Dict[LayerId, List[MarkerSpec]]:
    """
    Styled markers for every layer under the current filters.

    Returns:
        Dict mapping each LayerId to its marker specifications
    """
    tables = get_default_tables() if tables is None else tables
    visible = select_records(store, filters, tables, bucket)

    return {
        LayerId.BLOOMS: [observation_marker(o, tables) for o in visible.observations],
        LayerId.CITIZEN: [citizen_marker(r, tables) for r in visible.citizen_reports],
        LayerId.CLIMATE: [climate_marker(c, tables) for c in visible.climate_samples],
        LayerId.AGRICULTURAL: [agricultural_marker(f, tables) for f in visible.agricultural_fields],
    }


def nearest_observation(
    observations: Sequence[Observation],
    lat: float,
    lng: float,
    max_distance_m: float = NEARBY_DISTANCE_M
) -> Optional[Observation]:
    """Closest observation strictly within ``max_distance_m`` of a clicked point."""
    observation, _ = nearest_within(observations, lat, lng, max_distance_m)
    return observation


class RenderCoordinator:
    """
    Pushes rendered layers to a set of map surfaces.

    Every surface receives the same layers; a render fully replaces the
    previous contents of each layer.
    """

    def __init__(self, adapters: Optional[Sequence[MapOverlayAdapter]] = None):
        self.adapters: List[MapOverlayAdapter] = list(adapters or [])
        self.render_count = 0
        self._framed: Dict[int, str] = {}

    def attach(self, adapter: MapOverlayAdapter) -> None:
        self.adapters.append(adapter)

    def bucket_for(self, state: AppState) -> Optional[TimeBucket]:
        if state.filters.time_index is None:
            return None
        return state.time_index.bucket(state.filters.time_index)

    def reframe(self) -> None:
        """Move every surface to the region view on the next display update."""
        self._framed.clear()

    def apply_display(self, state: AppState) -> None:
        """
        Push viewport, visibility, opacity and basemap without re-rendering markers.

        A surface moves to the region view only when it has not been framed
        on the current region yet.
        """
        view = state.view()
        region = state.filters.region
        for adapter in self.adapters:
            if self._framed.get(id(adapter)) != region:
                adapter.set_viewport(view['center'], view['zoom'])
                self._framed[id(adapter)] = region
            adapter.set_satellite(state.satellite)
            for layer in LayerId:
                adapter.set_layer_visible(layer, state.visible[layer])
            for layer in OPACITY_LAYERS:
                adapter.set_layer_opacity(layer, state.opacity)

    def render(self, state: AppState) -> Dict[LayerId, int]:
        """
        Rebuild every layer on every surface.

        Args:
            state: Current dashboard state

        Returns:
            Number of markers drawn per layer
        """
        bucket = self.bucket_for(state)
        with log_time(logger, "render layers", bucket=bucket.label if bucket else ALL):
            layers = build_layers(state.store, state.filters, state.tables, bucket)

            for adapter in self.adapters:
                for layer, specs in layers.items():
                    adapter.clear_layer(layer)
                    for spec in specs:
                        handle = adapter.add_marker(layer, spec.position, spec.style)
                        adapter.bind_popup(handle, spec.popup_html)

            self.apply_display(state)

        self.render_count += 1
        return {layer: len(specs) for layer, specs in layers.items()}
