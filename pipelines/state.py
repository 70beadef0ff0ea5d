"""
Dashboard state.

``FilterState`` is an immutable snapshot of every filter control;
changing a control produces a new snapshot. ``AppState`` owns the
record store, its time index and the display settings that are not
filters (layer visibility, opacity and the satellite basemap).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from data.store import RecordStore
from data.time_index import TimeIndex
from visualization.overlay import LayerId

ALL = 'all'


@dataclass(frozen=True)
class FilterState:
    """Current values of the filter controls."""

    region: str = 'global'
    bloom_type: str = ALL
    intensity: str = ALL
    confidence: int = 0
    time_index: Optional[int] = None
    data_source: str = 'modis'
    time_range: str = 'recent'

    @classmethod
    def from_tables(cls, tables: Mapping[str, Any]) -> 'FilterState':
        views = tables['views']
        return cls(
            region=str(views['default_region']),
            data_source=str(views.get('default_data_source', cls.data_source)),
            time_range=str(views.get('default_time_range', cls.time_range)),
        )


@dataclass
class AppState:
    """Everything the dashboard renders from."""

    store: RecordStore
    time_index: TimeIndex
    tables: Mapping[str, Any]
    filters: FilterState = field(default_factory=FilterState)
    visible: Dict[LayerId, bool] = field(default_factory=lambda: {layer: True for layer in LayerId})
    opacity: float = 1.0
    satellite: bool = False

    @classmethod
    def create(cls, store: RecordStore, tables: Mapping[str, Any]) -> 'AppState':
        """Initial state for a freshly generated store."""
        return cls(
            store=store,
            time_index=TimeIndex.build(store, tables),
            tables=tables,
            filters=FilterState.from_tables(tables),
        )

    def view(self) -> Dict[str, Any]:
        """Centre and zoom of the currently selected region."""
        regions = self.tables['views']['regions']
        region = regions[self.filters.region]
        return {'center': tuple(region['center']), 'zoom': int(region['zoom'])}

    def to_dict(self) -> Dict[str, Any]:
        filters = self.filters
        return {
            'region': filters.region,
            'bloom_type': filters.bloom_type,
            'intensity': filters.intensity,
            'confidence': filters.confidence,
            'time_index': filters.time_index,
            'data_source': filters.data_source,
            'time_range': filters.time_range,
            'layers': {layer.value: shown for layer, shown in self.visible.items()},
            'opacity': self.opacity,
            'satellite': self.satellite,
            'counts': self.store.counts(),
        }
