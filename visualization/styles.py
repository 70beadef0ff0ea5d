"""
Marker styling rules.

Colours and radii come from the ``styling`` section of the lookup
tables so a different palette is a data change, not a code change.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from utils.config import get_default_tables


@dataclass(frozen=True)
class MarkerStyle:
    """Style attributes handed to a map overlay for one circle marker."""

    radius: float
    fill_color: str
    color: str = '#fff'
    weight: float = 2
    opacity: float = 0.8
    fill_opacity: float = 0.7

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _styling(tables: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    tables = get_default_tables() if tables is None else tables
    return tables['styling']


def bloom_size(area: float, tables: Optional[Mapping[str, Any]] = None) -> int:
    """
    Marker radius for a bloom of the given area (hectares).

    Step function: <200 -> 8, <500 -> 12, <800 -> 16, otherwise 20.
    """
    styling = _styling(tables)
    for upper_bound, radius in styling['size_steps']:
        if area < upper_bound:
            return int(radius)
    return int(styling['max_radius'])


def bloom_color(intensity: Any, tables: Optional[Mapping[str, Any]] = None) -> str:
    """Fill colour for a bloom intensity."""
    styling = _styling(tables)
    key = getattr(intensity, 'value', intensity)
    return str(styling['intensity_colors'].get(key, styling['default_intensity_color']))


def climate_color(temperature: float, tables: Optional[Mapping[str, Any]] = None) -> str:
    """Fill colour for a temperature band, cold blue through hot red."""
    styling = _styling(tables)
    for upper_bound, color in styling['temperature_colors']:
        if temperature < upper_bound:
            return str(color)
    return str(styling['hot_color'])


def crop_color(crop: str, tables: Optional[Mapping[str, Any]] = None) -> str:
    """Fill colour for a crop."""
    styling = _styling(tables)
    return str(styling['crop_colors'].get(crop, styling['default_crop_color']))


def citizen_color(validated: bool, tables: Optional[Mapping[str, Any]] = None) -> str:
    styling = _styling(tables)
    return str(styling['citizen_validated_color'] if validated else styling['citizen_pending_color'])


def layer_style(layer: str, radius: float, fill_color: str, tables: Optional[Mapping[str, Any]] = None) -> MarkerStyle:
    """
    Combine a layer's base style with a per-record radius and colour.

    Args:
        layer: Layer name ('blooms', 'citizen', 'climate', 'agricultural')
        radius: Marker radius in pixels
        fill_color: Marker fill colour
        tables: Optional lookup tables

    Returns:
        MarkerStyle for the record
    """
    base = _styling(tables)['layers'][layer]
    return MarkerStyle(
        radius=radius,
        fill_color=fill_color,
        color=str(base['outline']),
        weight=float(base['weight']),
        opacity=float(base['opacity']),
        fill_opacity=float(base['fill_opacity']),
    )


def default_radius(layer: str, tables: Optional[Mapping[str, Any]] = None) -> float:
    """Fixed radius for layers whose markers do not scale with the record."""
    return float(_styling(tables)['layers'][layer]['radius'])


def legend_gradient(tables: Optional[Mapping[str, Any]] = None) -> str:
    """CSS gradient running through the intensity colours, low to extreme."""
    colors = ', '.join(str(color) for color in _styling(tables)['intensity_colors'].values())
    return f"linear-gradient(to right, {colors})"
