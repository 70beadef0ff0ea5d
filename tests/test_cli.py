"""
Tests for the dashboard factory, output export and command line.

Tests building the dashboard bundle from the environment, writing the
map, globe, record tables and statistics, and the ``render`` command.
"""

import asyncio
import json
import logging

import pandas as pd
import pytest

import main
from app.config import AppConfig
from app.utils import GLOBE_LABELS, create_dashboard, export_outputs
from data.store import COLLECTIONS
from visualization.overlay import LayerId

OUTPUT_FILES = {
    'bloom_map.html', 'bloom_globe.html', 'statistics.json',
    *(f"{name}.csv" for name in COLLECTIONS)
}


@pytest.fixture
def quiet_env(monkeypatch):
    """Seeded sample data with warnings-only logging."""
    monkeypatch.setenv('BLOOMWATCH_SEED', '7')
    monkeypatch.setenv('BLOOMWATCH_LOG_LEVEL', 'WARNING')
    monkeypatch.delenv('BLOOMWATCH_LOG_DIR', raising=False)
    monkeypatch.delenv('BLOOMWATCH_LOG_JSON', raising=False)
    monkeypatch.delenv('BLOOMWATCH_DEFAULT_REGION', raising=False)


@pytest.fixture
def restore_root_logging():
    """Put the root logger back the way the command line found it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCreateDashboard:
    """Test building the dashboard bundle."""

    def test_bundle_is_rendered(self, quiet_env):
        bundle = create_dashboard()
        store = bundle.dashboard.state.store

        assert bundle.dashboard.coordinator.adapters == [bundle.map_view, bundle.globe]
        assert bundle.map_view.marker_count(LayerId.BLOOMS) == len(store.observations)
        assert bundle.globe.marker_count() == sum(store.counts().values())
        assert [name for name, _ in bundle.globe.labels] == list(GLOBE_LABELS)

    def test_seed_makes_data_repeatable(self, quiet_env):
        first = create_dashboard().dashboard.state.store
        second = create_dashboard().dashboard.state.store

        assert first.observations == second.observations

    def test_default_region_from_environment(self, quiet_env, monkeypatch):
        monkeypatch.setenv('BLOOMWATCH_DEFAULT_REGION', 'europe')
        bundle = create_dashboard()

        assert bundle.dashboard.state.filters.region == 'europe'
        assert bundle.map_view.center == (54.5260, 15.2551)

    def test_globe_framing_survives_controls(self, quiet_env):
        """The fly-to framing stays in place until a new region is chosen."""
        bundle = create_dashboard()
        store = bundle.dashboard.state.store

        async def ready():
            return store.bounding_sphere()

        assert asyncio.run(bundle.globe.fly_to(ready())) is True
        framed = (bundle.globe.center, bundle.globe.zoom)

        bundle.dashboard.dispatch('bloom_type', 'urban')
        bundle.dashboard.dispatch('opacity', 50)
        assert (bundle.globe.center, bundle.globe.zoom) == framed

        bundle.dashboard.dispatch('region', 'usa')
        assert bundle.globe.center == (39.8283, -98.5795)


class TestExportOutputs:
    """Test writing outputs to disk."""

    def test_writes_every_output(self, quiet_env, temp_data_dir):
        bundle = create_dashboard()
        written = export_outputs(bundle, temp_data_dir / 'out')

        assert {path.name for path in written.values()} == OUTPUT_FILES
        assert all(path.exists() and path.stat().st_size > 0 for path in written.values())

    def test_csv_rows_match_records(self, quiet_env, temp_data_dir):
        bundle = create_dashboard()
        export_outputs(bundle, temp_data_dir)
        counts = bundle.dashboard.state.store.counts()

        for name in COLLECTIONS:
            assert len(pd.read_csv(temp_data_dir / f"{name}.csv")) == counts[name]

    def test_statistics_follow_filters(self, quiet_env, temp_data_dir):
        bundle = create_dashboard()
        bundle.dashboard.dispatch('region', 'india')
        export_outputs(bundle, temp_data_dir)

        with open(temp_data_dir / 'statistics.json') as f:
            stats = json.load(f)

        assert set(stats) == {'summary', 'ecosystem', 'agriculture'}
        assert stats['summary']['current_region'] == 'india'
        assert stats['summary']['countries_covered'] == 1


class TestCommandLine:
    """Test the ``render`` command."""

    def test_render_writes_outputs(self, quiet_env, restore_root_logging, temp_data_dir):
        code = main.main(['render', '--output-dir', str(temp_data_dir), '--seed', '3'])

        assert code == 0
        assert {path.name for path in temp_data_dir.iterdir()} == OUTPUT_FILES

    def test_render_with_controls(self, quiet_env, restore_root_logging, temp_data_dir):
        code = main.main([
            'render', '--output-dir', str(temp_data_dir),
            '--region', 'europe', '--month', '4', '--satellite'
        ])

        assert code == 0
        html = (temp_data_dir / 'bloom_map.html').read_text()
        assert 'Satellite' in html

    def test_unknown_region_exits_with_2(self, quiet_env, restore_root_logging, temp_data_dir):
        code = main.main(['render', '--output-dir', str(temp_data_dir), '--region', 'mars'])

        assert code == 2
        assert not (temp_data_dir / 'statistics.json').exists()

    def test_month_out_of_range_exits_with_2(self, quiet_env, restore_root_logging, temp_data_dir):
        assert main.main(['render', '--output-dir', str(temp_data_dir), '--month', '12']) == 2

    def test_missing_command_is_rejected(self):
        with pytest.raises(SystemExit):
            main.parse_args([])

    def test_serve_arguments(self):
        args = main.parse_args(['serve', '--host', '127.0.0.1', '--port', '9000', '--reload'])

        assert (args.command, args.host, args.port, args.reload) == ('serve', '127.0.0.1', 9000, True)

    def test_json_log_file(self, quiet_env, restore_root_logging, monkeypatch, temp_data_dir):
        """BLOOMWATCH_LOG_JSON writes the log file as one JSON object per line."""
        log_dir = temp_data_dir / 'logs'
        monkeypatch.setenv('BLOOMWATCH_LOG_DIR', str(log_dir))
        monkeypatch.setenv('BLOOMWATCH_LOG_JSON', 'true')

        assert AppConfig().log_json is True
        main.main(['--log-level', 'INFO', 'render', '--output-dir', str(temp_data_dir / 'out')])
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = (log_dir / 'bloomwatch.log').read_text().splitlines()
        assert lines
        assert all('message' in json.loads(line) for line in lines)
