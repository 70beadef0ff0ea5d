"""
Test configuration and fixtures for BloomWatch Atlas tests.

This module provides pytest configuration, shared fixtures,
and utility classes for testing the BloomWatch Atlas project.
"""

import pytest
import tempfile
from pathlib import Path

import numpy as np

from data.generator import generate
from pipelines.dashboard import BloomDashboard
from pipelines.playback import Scheduler, TimerHandle
from utils.config import get_default_tables
from visualization.overlay import InMemoryOverlayAdapter

# Test configuration
pytest_plugins = []


class ManualTimer(TimerHandle):
    """Timer that fires only when the owning scheduler is advanced."""

    def __init__(self, period_s, callback):
        self.period_s = period_s
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    @property
    def active(self):
        return not self.cancelled


class ManualScheduler(Scheduler):
    """Deterministic scheduler: ``advance()`` fires every live timer once."""

    def __init__(self):
        self.timers = []

    def every(self, period_s, callback):
        timer = ManualTimer(period_s, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self):
        return [timer for timer in self.timers if timer.active]

    def advance(self, ticks=1):
        for _ in range(ticks):
            for timer in self.live:
                timer.callback()


class RecordingAdapter(InMemoryOverlayAdapter):
    """In-memory adapter that also logs the order of overlay calls."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def add_marker(self, layer, position, style):
        self.calls.append(('add_marker', layer))
        return super().add_marker(layer, position, style)

    def clear_layer(self, layer):
        self.calls.append(('clear_layer', layer))
        super().clear_layer(layer)


@pytest.fixture
def tables():
    """Fixture providing the bundled lookup tables."""
    return get_default_tables()


@pytest.fixture
def rng():
    """Fixture providing a seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def store(tables, rng):
    """Fixture providing a generated record store."""
    return generate(tables, rng=rng)


@pytest.fixture
def scheduler():
    """Fixture providing a manually advanced scheduler."""
    return ManualScheduler()


@pytest.fixture
def adapter():
    """Fixture providing a recording overlay adapter."""
    return RecordingAdapter()


@pytest.fixture
def dashboard(store, tables, scheduler, adapter):
    """Fixture providing a rendered dashboard on a manual scheduler."""
    dashboard = BloomDashboard(store, tables, scheduler, adapters=[adapter], rng=np.random.default_rng(0))
    dashboard.render()
    return dashboard


@pytest.fixture
def temp_data_dir():
    """Fixture providing a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def client(monkeypatch):
    """Fixture providing an API test client with seeded sample data."""
    from fastapi.testclient import TestClient

    from app.main import app

    monkeypatch.setenv('BLOOMWATCH_SEED', '7')
    monkeypatch.setenv('BLOOMWATCH_LOG_LEVEL', 'WARNING')

    with TestClient(app) as test_client:
        yield test_client
