"""
Bloom dashboard.

``BloomDashboard`` wires the record store, the render coordinator and
the playback controller together and exposes one entry point for UI
input: ``dispatch(control, value)``. Each control maps to exactly one
handler; invalid input raises ``ControlError`` and leaves the state
unchanged.
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import numpy as np

from data.records import BloomIntensity, BloomType, Observation
from data.store import RecordStore
from data.time_index import time_range_labels
from utils.metrics import calculate_bloom_metrics
from visualization.overlay import LayerId, MapOverlayAdapter

from .coordinator import RenderCoordinator, nearest_observation, select_records
from .playback import PlaybackController, Scheduler
from .state import ALL, AppState

logger = logging.getLogger(__name__)


class ControlError(ValueError):
    """Raised for an unknown control or an invalid control value."""


def _as_bool(control: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    raise ControlError(f"{control} expects a boolean, got {value!r}")


def _as_number(control: str, value: Any, low: float, high: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ControlError(f"{control} expects a number, got {value!r}") from e
    if not low <= number <= high:
        raise ControlError(f"{control} must be between {low:g} and {high:g}, got {number:g}")
    return number


def _as_choice(control: str, value: Any, choices: Sequence[str]) -> str:
    if value not in choices:
        raise ControlError(f"{control} must be one of {', '.join(choices)}, got {value!r}")
    return str(value)


class BloomDashboard:
    """
    State owner and control dispatcher for the bloom map.

    Args:
        store: Generated record store
        tables: Lookup tables
        scheduler: Timer factory for playback
        adapters: Map surfaces to render to
        rng: Random generator for the statistics panel
    """

    def __init__(
        self,
        store: RecordStore,
        tables: Mapping[str, Any],
        scheduler: Scheduler,
        adapters: Optional[Sequence[MapOverlayAdapter]] = None,
        rng: Optional[np.random.Generator] = None
    ):
        self.state = AppState.create(store, tables)
        self.tables = tables
        self.coordinator = RenderCoordinator(adapters)
        self.rng = np.random.default_rng() if rng is None else rng

        playback = tables['playback']
        self.playback = PlaybackController(
            on_tick=self._on_tick,
            scheduler=scheduler,
            length=len(self.state.time_index),
            speeds=list(playback['speeds']),
            base_period_ms=float(playback['base_period_ms']),
        )

        self._handlers: Dict[str, Callable[[Any], Any]] = {
            'data_source': self.update_data_source,
            'bloom_type': self.update_bloom_type,
            'bloom_intensity': self.update_bloom_intensity,
            'time_range': self.update_time_range,
            'time_slider': self.update_time_slider,
            'confidence': self.update_confidence,
            'opacity': self.update_opacity,
            'region': self.update_region,
            'show_blooms': lambda value: self.toggle_layer(LayerId.BLOOMS, _as_bool('show_blooms', value)),
            'show_citizen': lambda value: self.toggle_layer(LayerId.CITIZEN, _as_bool('show_citizen', value)),
            'show_climate': lambda value: self.toggle_layer(LayerId.CLIMATE, _as_bool('show_climate', value)),
            'show_agricultural': lambda value: self.toggle_layer(
                LayerId.AGRICULTURAL, _as_bool('show_agricultural', value)
            ),
            'show_satellite': self.toggle_satellite,
            'play_pause': lambda value: self.playback.toggle(),
            'reset': lambda value: self.playback.reset(),
            'speed': lambda value: self.playback.change_speed(),
        }

    @property
    def controls(self):
        return sorted(self._handlers)

    def dispatch(self, control: str, value: Any = None) -> Any:
        """
        Route a UI control change to its handler.

        Args:
            control: Control name
            value: New control value (ignored by the playback buttons)

        Returns:
            Whatever the handler returns

        Raises:
            ControlError: unknown control or invalid value
        """
        handler = self._handlers.get(control)
        if handler is None:
            raise ControlError(f"Unknown control: {control}")
        logger.debug(f"Control {control} -> {value!r}")
        return handler(value)

    def attach(self, adapter: MapOverlayAdapter) -> None:
        self.coordinator.attach(adapter)

    def render(self) -> Dict[LayerId, int]:
        return self.coordinator.render(self.state)

    def _set_filters(self, **changes) -> None:
        self.state.filters = replace(self.state.filters, **changes)

    def _on_tick(self, index: int) -> None:
        self._set_filters(time_index=index)
        self.render()

    def update_data_source(self, value: Any) -> str:
        source = _as_choice('data_source', value, list(self.tables['views']['data_sources']))
        self._set_filters(data_source=source)
        logger.info(f"Data source set to {source}")
        return source

    def update_bloom_type(self, value: Any) -> str:
        bloom_type = _as_choice('bloom_type', value, [ALL] + [t.value for t in BloomType])
        self._set_filters(bloom_type=bloom_type)
        self.render()
        return bloom_type

    def update_bloom_intensity(self, value: Any) -> str:
        intensity = _as_choice('bloom_intensity', value, [ALL] + [i.value for i in BloomIntensity])
        self._set_filters(intensity=intensity)
        self.render()
        return intensity

    def update_time_range(self, value: Any):
        try:
            labels = time_range_labels(value, self.tables)
        except KeyError as e:
            raise ControlError(f"Unknown time range: {value!r}") from e
        self._set_filters(time_range=str(value))
        return labels

    def update_time_slider(self, value: Any) -> int:
        index = int(_as_number('time_slider', value, 0, self.playback.length - 1))
        self.playback.seek(index)
        return index

    def update_confidence(self, value: Any) -> int:
        confidence = int(_as_number('confidence', value, 0, 100))
        self._set_filters(confidence=confidence)
        self.render()
        return confidence

    def update_opacity(self, value: Any) -> float:
        self.state.opacity = _as_number('opacity', value, 0, 100) / 100
        self.coordinator.apply_display(self.state)
        return self.state.opacity

    def update_region(self, value: Any) -> str:
        region = _as_choice('region', value, list(self.tables['views']['regions']))
        self._set_filters(region=region)
        self.coordinator.reframe()
        self.render()
        return region

    def toggle_layer(self, layer: LayerId, show: bool) -> bool:
        self.state.visible[layer] = show
        self.coordinator.apply_display(self.state)
        return show

    def toggle_satellite(self, value: Any) -> bool:
        self.state.satellite = _as_bool('show_satellite', value)
        self.coordinator.apply_display(self.state)
        return self.state.satellite

    def visible_records(self):
        return select_records(
            self.state.store, self.state.filters, self.tables, self.coordinator.bucket_for(self.state)
        )

    def statistics(self) -> Dict[str, Dict[str, Any]]:
        """Statistics panels over the records currently on the map."""
        return calculate_bloom_metrics(
            *self.visible_records().as_args(), region=self.state.filters.region, rng=self.rng
        )

    def bloom_info(self, lat: float, lng: float) -> Optional[Observation]:
        """Observation nearest a clicked point, or None when nothing is close."""
        return nearest_observation(self.visible_records().observations, lat, lng)

    def shutdown(self) -> None:
        self.playback.pause()
