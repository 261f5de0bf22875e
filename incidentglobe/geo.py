"""Latitude/longitude <-> unit-sphere and UV-space mapping.

All functions share one angle convention:

    phi   = (90 - lat) in radians   (polar angle from +y)
    theta = -lon in radians

so that ``lat_lon_to_uv`` agrees with ``mesh_uv`` evaluated on the point that
``lat_lon_to_xyz`` places on the sphere. Hover queries rely on this: the UV
handed to us by the raycaster comes from the globe mesh, which is UV-mapped
with ``mesh_uv``.
"""

import math
from typing import NamedTuple

import numpy as np


class GeoPoint(NamedTuple):
    x: float
    y: float
    z: float


class UVPoint(NamedTuple):
    u: float
    v: float


def _angles(lat: float, lon: float) -> tuple[float, float]:
    return math.radians(90.0 - lat), math.radians(-lon)


def lat_lon_to_xyz(lat: float, lon: float, radius: float = 1.0) -> GeoPoint:
    phi, theta = _angles(lat, lon)
    return GeoPoint(
        radius * math.sin(phi) * math.cos(theta),
        radius * math.cos(phi),
        radius * math.sin(phi) * math.sin(theta),
    )


def lat_lon_to_uv(lat: float, lon: float) -> UVPoint:
    phi, theta = _angles(lat, lon)
    return UVPoint(1.0 - (theta + math.pi) / (2.0 * math.pi), 1.0 - phi / math.pi)


def mesh_uv(x: float, y: float, z: float) -> UVPoint:
    """Spherical UV of a mesh vertex, as assigned to the globe geometry."""
    theta = math.atan2(z, x)
    r = math.sqrt(x * x + y * y + z * z)
    phi = math.acos(max(-1.0, min(1.0, y / r)))
    return UVPoint(1.0 - (theta + math.pi) / (2.0 * math.pi), 1.0 - phi / math.pi)


def xyz_to_lat_lon(x: float, y: float, z: float) -> tuple[float, float]:
    r = math.sqrt(x * x + y * y + z * z)
    phi = math.acos(max(-1.0, min(1.0, y / r)))
    theta = math.atan2(z, x)
    return 90.0 - math.degrees(phi), -math.degrees(theta)


def uv_to_lat_lon(u: float, v: float) -> tuple[float, float]:
    phi = (1.0 - v) * math.pi
    theta = (1.0 - u) * 2.0 * math.pi - math.pi
    return 90.0 - math.degrees(phi), -math.degrees(theta)


# --- Vectorized forms used to build per-record caches ---


def lat_lon_to_xyz_array(lats: np.ndarray, lons: np.ndarray, radius: float = 1.0) -> np.ndarray:
    """(n,) lat/lon arrays -> (n, 3) positions."""
    phi = np.radians(90.0 - np.asarray(lats, dtype=np.float64))
    theta = np.radians(-np.asarray(lons, dtype=np.float64))
    return np.column_stack((
        radius * np.sin(phi) * np.cos(theta),
        radius * np.cos(phi),
        radius * np.sin(phi) * np.sin(theta),
    ))


def lat_lon_to_uv_array(lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
    """(n,) lat/lon arrays -> (n, 2) UVs."""
    phi = np.radians(90.0 - np.asarray(lats, dtype=np.float64))
    theta = np.radians(-np.asarray(lons, dtype=np.float64))
    return np.column_stack((
        1.0 - (theta + np.pi) / (2.0 * np.pi),
        1.0 - phi / np.pi,
    ))
