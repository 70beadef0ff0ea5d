"""
Unit tests for utils module components.

Tests configuration management, logging, distance helpers,
statistics and helper utilities.
"""

import json
import logging

import numpy as np
import pytest
import yaml
from omegaconf import OmegaConf

from data.records import BloomType
from utils import (
    ConfigManager, setup_logging, get_logger, log_time, calculate_bloom_metrics,
    haversine_distance, nearest_within, ensure_dir, make_rng, set_seed, format_percent
)
from utils.config import DEFAULT_TABLES_PATH, load_config_from_env, load_lookup_tables
from utils.logging import JsonFormatter


class TestConfigManager:
    """Test ConfigManager functionality."""

    def test_config_initialization(self, temp_data_dir):
        """Test ConfigManager initialization from a YAML file."""
        config_file = temp_data_dir / "tables.yaml"
        with open(config_file, 'w') as f:
            yaml.dump({'year': 2023, 'views': {'default_region': 'india'}}, f)

        config_manager = ConfigManager(str(config_file))

        assert config_manager.config is not None
        assert config_manager.get('year') == 2023
        assert config_manager.get('views.default_region') == 'india'

    def test_config_get_set(self):
        """Test getting and setting nested values."""
        config_manager = ConfigManager()
        config_manager.config = OmegaConf.create({'playback': {'speeds': [1, 2]}})

        assert config_manager.get('playback.speeds') == [1, 2]
        assert config_manager.get('nonexistent.key', 'default') == 'default'

        config_manager.set('playback.base_period_ms', 500)
        assert config_manager.get('playback.base_period_ms') == 500

    def test_bundled_tables_are_valid(self):
        """The bundled lookup tables pass validation."""
        config_manager = ConfigManager(DEFAULT_TABLES_PATH)
        report = config_manager.validate_config()

        assert report['valid'], report['errors']

    def test_invalid_tables_rejected(self):
        """Non-positive speeds make the tables invalid."""
        with pytest.raises(ValueError, match="speeds"):
            load_lookup_tables(overrides={'playback': {'speeds': [0, 1]}})

    def test_unknown_default_region_rejected(self):
        """The default region must have a view."""
        with pytest.raises(ValueError, match="default region"):
            load_lookup_tables(overrides={'views': {'default_region': 'atlantis'}})

    def test_merge_overrides(self):
        """Overrides replace values and keep the rest of the tables."""
        tables = load_lookup_tables(overrides={'generation': {'bloom_count_per_region': 2}})

        assert tables.generation.bloom_count_per_region == 2
        assert len(tables.generation.bloom_regions) == 17

    def test_save_and_reload(self, temp_data_dir):
        """Saved tables load back identically."""
        config_manager = ConfigManager(DEFAULT_TABLES_PATH)
        path = temp_data_dir / "saved.yaml"
        config_manager.save_config(path)

        assert ConfigManager(path).to_dict() == config_manager.to_dict()

    def test_load_config_from_env(self, monkeypatch):
        """Environment variables become nested overrides."""
        monkeypatch.setenv('BLOOMWATCH_TABLES_GENERATION__BLOOM_COUNT_PER_REGION', '5')
        monkeypatch.setenv('BLOOMWATCH_TABLES_PLAYBACK__BASE_PERIOD_MS', '250.5')
        monkeypatch.setenv('BLOOMWATCH_TABLES_VIEWS__DEFAULT_REGION', 'europe')

        overrides = load_config_from_env()

        assert overrides['generation']['bloom_count_per_region'] == 5
        assert overrides['playback']['base_period_ms'] == 250.5
        assert overrides['views']['default_region'] == 'europe'


class TestLogging:
    """Test logging setup."""

    def test_setup_logging(self, temp_data_dir):
        """Console and file handlers are attached."""
        logger = setup_logging(name='bloomwatch_test', level='DEBUG', log_dir=str(temp_data_dir))

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        logger.info("hello")
        assert (temp_data_dir / "bloomwatch_test.log").exists()

    def test_setup_logging_without_file(self):
        """Without a log directory only the console handler is attached."""
        logger = setup_logging(name='bloomwatch_console', log_dir=None)
        assert len(logger.handlers) == 1

    def test_get_logger(self):
        """get_logger defaults to the calling module's name."""
        assert get_logger().name == __name__
        assert get_logger('bloomwatch').name == 'bloomwatch'

    def test_json_formatter(self):
        """JSON output carries the message and extra fields."""
        record = logging.LogRecord('bloomwatch', logging.INFO, __file__, 1, "rendered", None, None)
        record.layer = 'blooms'

        payload = json.loads(JsonFormatter().format(record))

        assert payload['message'] == "rendered"
        assert payload['layer'] == 'blooms'

    def test_log_time(self, caplog):
        """Timed blocks record their duration and log failures."""
        logger = logging.getLogger('bloomwatch_timer')

        with log_time(logger, "quick") as timer:
            pass
        assert timer.duration is not None and timer.duration >= 0

        with caplog.at_level(logging.ERROR, logger='bloomwatch_timer'):
            with pytest.raises(RuntimeError):
                with log_time(logger, "broken"):
                    raise RuntimeError("boom")
        assert "broken failed" in caplog.text


class TestGeo:
    """Test great-circle distance helpers."""

    def test_zero_distance(self):
        assert haversine_distance((28.6, 77.2), (28.6, 77.2)) == pytest.approx(0.0)

    def test_one_degree_of_latitude(self):
        """One degree of latitude is about 111.2 km."""
        assert haversine_distance((0.0, 0.0), (1.0, 0.0)) == pytest.approx(111_195, rel=1e-3)

    def test_nearest_within_range(self, store):
        """A point next to exactly one observation finds it."""
        target = store.observations[0]
        record, distance = nearest_within([target], target.lat + 0.1, target.lng, 50_000)

        assert record is target
        assert distance < 50_000

    def test_nearest_out_of_range(self, store):
        """Nothing within 50 km yields no record."""
        record, distance = nearest_within(store.observations, 0.0, -150.0, 50_000)
        assert record is None and distance is None

    def test_nearest_empty(self):
        assert nearest_within([], 0.0, 0.0, 50_000) == (None, None)


class TestMetrics:
    """Test statistics panels."""

    def test_summary_statistics(self, store):
        """Summary counts match the records."""
        metrics = calculate_bloom_metrics(
            store.observations, store.citizen_reports, store.climate_samples,
            store.agricultural_fields, region='india', rng=np.random.default_rng(0)
        )
        summary = metrics['summary']

        assert summary['active_blooms'] == len(store.observations)
        assert summary['superblooms'] == sum(o.bloom_type is BloomType.SUPERBLOOM for o in store.observations)
        assert summary['validated_blooms'] == sum(r.validated for r in store.citizen_reports)
        assert summary['climate_stations'] == len(store.climate_samples)
        assert summary['current_region'] == 'india'
        assert 0.6 <= summary['prediction_accuracy'] < 1.0

    def test_ecosystem_indicators(self, store):
        """Biodiversity is species x countries / 100 and correlation caps at 1."""
        ecosystem = calculate_bloom_metrics(
            store.observations, [], store.climate_samples, []
        )['ecosystem']

        species = len({o.species for o in store.observations})
        countries = len({o.country for o in store.observations})
        assert ecosystem['biodiversity_index'] == pytest.approx(species * countries / 100)
        assert ecosystem['climate_correlation'] == 1.0

    def test_harvest_prediction_band(self, store):
        """Overall harvest prediction is within 10% of the mean yield."""
        agriculture = calculate_bloom_metrics([], [], [], store.agricultural_fields)['agriculture']

        assert 0.9 * agriculture['avg_yield'] <= agriculture['harvest_prediction'] <= 1.1 * agriculture['avg_yield']

    def test_empty_inputs_yield_zeros(self):
        """Empty subsets produce zeros rather than errors."""
        metrics = calculate_bloom_metrics([], [], [], [])

        assert metrics['summary']['active_blooms'] == 0
        assert metrics['summary']['prediction_accuracy'] == 0.0
        assert metrics['ecosystem']['climate_correlation'] == 0.0
        assert metrics['agriculture']['avg_yield'] == 0.0
        assert metrics['agriculture']['crop_diversity'] == 0


class TestHelpers:
    """Test helper utilities."""

    def test_ensure_dir(self, temp_data_dir):
        path = ensure_dir(temp_data_dir / "a" / "b")
        assert path.is_dir()

    def test_seeded_generators_repeat(self):
        assert set_seed(5).random() == make_rng(5).random()

    def test_format_percent(self):
        assert format_percent(0.873) == "87.3%"
        assert format_percent(1.0, digits=0) == "100%"
