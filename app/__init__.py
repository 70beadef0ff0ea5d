"""
FastAPI application for BloomWatch Atlas.

This module provides a REST API serving the bloom map, globe,
statistics, UI controls and time-lapse playback.
"""

from .main import app
from .endpoints import router
from .config import AppConfig
from .utils import create_dashboard, export_outputs

__all__ = [
    "app",
    "router",
    "AppConfig",
    "create_dashboard",
    "export_outputs"
]
