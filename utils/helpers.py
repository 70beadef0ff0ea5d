"""
Helper utilities for BloomWatch Atlas.

Directory management, random generator construction and small
formatting helpers shared by the CLI and the API.
"""

import random
from pathlib import Path
from typing import Optional, Union

import numpy as np


def ensure_dir(directory: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if it doesn't.

    Args:
        directory: Directory path

    Returns:
        Path object for the directory
    """
    dir_path = Path(directory)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def set_seed(seed: int = 42) -> np.random.Generator:
    """
    Seed the global random sources and return a seeded generator.

    Args:
        seed: Random seed value

    Returns:
        numpy Generator seeded with ``seed``
    """
    random.seed(seed)
    np.random.seed(seed)
    return np.random.default_rng(seed)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Seeded generator when ``seed`` is given, otherwise fresh OS entropy."""
    return set_seed(seed) if seed is not None else np.random.default_rng()


def format_percent(value: float, digits: int = 1) -> str:
    """Format a 0-1 fraction as a percentage string, e.g. 0.873 -> '87.3%'."""
    return f"{value * 100:.{digits}f}%"
