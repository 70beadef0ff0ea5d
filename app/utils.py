"""
Utility functions for the BloomWatch Atlas application.

This module builds the dashboard from configuration and exports the
rendered maps, record tables and statistics to disk.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from omegaconf import OmegaConf

from data.generator import generate
from data.store import COLLECTIONS
from pipelines.dashboard import BloomDashboard
from pipelines.playback import AsyncioScheduler, Scheduler
from utils.config import load_config_from_env, load_lookup_tables
from utils.helpers import ensure_dir, make_rng
from utils.logging import log_time
from visualization.globe import PlotlyGlobeAdapter
from visualization.leaflet_map import FoliumMapAdapter

from .config import AppConfig

logger = logging.getLogger(__name__)

# Cities pinned on the globe
GLOBE_LABELS = {
    'New Delhi': (28.6139, 77.2090),
    'Mumbai': (19.0760, 72.8777),
    'Bangalore': (12.9716, 77.5946),
    'Kolkata': (22.5726, 88.3639),
}


class DashboardBundle:
    """A dashboard together with the map surfaces it renders to."""

    def __init__(self, dashboard: BloomDashboard, map_view: FoliumMapAdapter, globe: PlotlyGlobeAdapter):
        self.dashboard = dashboard
        self.map_view = map_view
        self.globe = globe


def load_tables(config: AppConfig):
    """Lookup tables with environment overrides applied."""
    overrides = OmegaConf.merge(
        OmegaConf.create(load_config_from_env()),
        OmegaConf.create(config.table_overrides())
    )
    return load_lookup_tables(config.tables_path, overrides if overrides else None)


def create_dashboard(
    config: Optional[AppConfig] = None,
    scheduler: Optional[Scheduler] = None,
    tables=None
) -> DashboardBundle:
    """
    Generate sample data and build a dashboard with a 2D map and a globe.

    Args:
        config: Application configuration (read from the environment if None)
        scheduler: Playback timer factory (asyncio by default)
        tables: Lookup tables, bypassing the configured tables when given

    Returns:
        DashboardBundle with the rendered dashboard
    """
    config = config or AppConfig()
    tables = load_tables(config) if tables is None else tables
    rng = make_rng(config.seed)

    store = generate(tables, rng=rng)

    view = tables['views']['regions'][tables['views']['default_region']]
    center, zoom = tuple(view['center']), int(view['zoom'])
    map_view = FoliumMapAdapter(center, zoom, tables=tables)
    globe = PlotlyGlobeAdapter(center, zoom)
    for name, position in GLOBE_LABELS.items():
        globe.add_label(name, position)

    dashboard = BloomDashboard(
        store, tables, scheduler or AsyncioScheduler(), adapters=[map_view, globe], rng=rng
    )
    dashboard.render()
    return DashboardBundle(dashboard, map_view, globe)


def _json_default(value: Any) -> Any:
    if hasattr(value, 'item'):
        return value.item()
    return str(value)


def export_outputs(bundle: DashboardBundle, output_dir: Union[str, Path]) -> Dict[str, Path]:
    """
    Write the rendered map, globe, per-collection CSVs and statistics.

    Args:
        bundle: Rendered dashboard
        output_dir: Directory to write into (created if missing)

    Returns:
        Dict mapping output name to written path
    """
    output_dir = ensure_dir(output_dir)
    written: Dict[str, Path] = {}

    with log_time(logger, "Export outputs", output_dir=str(output_dir)):
        written['map'] = bundle.map_view.save(output_dir / 'bloom_map.html')
        written['globe'] = bundle.globe.save(output_dir / 'bloom_globe.html')

        store = bundle.dashboard.state.store
        for name in COLLECTIONS:
            path = output_dir / f"{name}.csv"
            store.to_frame(name).to_csv(path, index=False)
            written[name] = path

        stats_path = output_dir / 'statistics.json'
        with open(stats_path, 'w') as f:
            json.dump(bundle.dashboard.statistics(), f, indent=2, default=_json_default)
        written['statistics'] = stats_path

    logger.info(f"Wrote {len(written)} files to {output_dir}")
    return written
