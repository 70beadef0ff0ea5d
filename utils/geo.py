"""
Great-circle distance helpers.

Distances match Leaflet's ``map.distance``: haversine on a sphere of
radius 6 371 000 m.
"""

from typing import Optional, Sequence, Tuple, TypeVar

import numpy as np

EARTH_RADIUS_M = 6371000.0

T = TypeVar('T')


def haversine_distances(
    lat: float,
    lng: float,
    lats: Sequence[float],
    lngs: Sequence[float]
) -> np.ndarray:
    """
    Distances in metres from one point to many.

    Args:
        lat: Latitude of the reference point in degrees
        lng: Longitude of the reference point in degrees
        lats: Latitudes of the target points in degrees
        lngs: Longitudes of the target points in degrees

    Returns:
        Array of distances in metres, same length as ``lats``
    """
    lat1, lng1 = np.radians(lat), np.radians(lng)
    lat2, lng2 = np.radians(np.asarray(lats, dtype=float)), np.radians(np.asarray(lngs, dtype=float))

    a = (np.sin((lat2 - lat1) / 2) ** 2
         + np.cos(lat1) * np.cos(lat2) * np.sin((lng2 - lng1) / 2) ** 2)
    return 2 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def haversine_distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Distance in metres between two (lat, lng) points."""
    return float(haversine_distances(a[0], a[1], [b[0]], [b[1]])[0])


def nearest_within(
    records: Sequence[T],
    lat: float,
    lng: float,
    max_distance_m: float
) -> Tuple[Optional[T], Optional[float]]:
    """
    Closest record to a point, if any lies strictly within ``max_distance_m``.

    Records need ``lat`` and ``lng`` attributes.

    Returns:
        (record, distance in metres), or (None, None) when nothing is in range
    """
    if not records:
        return None, None

    distances = haversine_distances(lat, lng, [r.lat for r in records], [r.lng for r in records])
    index = int(np.argmin(distances))

    if distances[index] >= max_distance_m:
        return None, None
    return records[index], float(distances[index])
