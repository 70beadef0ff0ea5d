"""
Utilities module for BloomWatch Atlas.

This module provides configuration handling, logging setup,
statistics, distance helpers and other utility functions.
"""

from .config import ConfigManager, load_lookup_tables, get_default_tables
from .logging import setup_logging, get_logger, log_time
from .metrics import calculate_bloom_metrics
from .geo import haversine_distance, nearest_within
from .helpers import ensure_dir, make_rng, set_seed, format_percent

__all__ = [
    "ConfigManager",
    "load_lookup_tables",
    "get_default_tables",
    "setup_logging",
    "get_logger",
    "log_time",
    "calculate_bloom_metrics",
    "haversine_distance",
    "nearest_within",
    "ensure_dir",
    "make_rng",
    "set_seed",
    "format_percent"
]
