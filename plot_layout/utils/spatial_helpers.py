"""
Spatial analysis helper functions.

Provides utilities for:
- Clearance checks against already placed points
- Exclusion-zone lookup and containment
- KD-Tree pair queries for spacing verification
"""
from typing import Sequence
import numpy as np
from scipy.spatial import KDTree
from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry
import logging

from plot_layout.domain.models import NodeInstance
from plot_layout.utils.geometry import footprint_at

logger = logging.getLogger(__name__)


def build_kdtree(coordinates: list[tuple[float, float]]) -> KDTree:
    """
    Build a KD-Tree for efficient spatial queries.

    Args:
        coordinates: List of (x, y) coordinate tuples

    Returns:
        KDTree instance
    """
    points = np.array(coordinates)
    return KDTree(points)


def node_footprint(node: NodeInstance) -> BaseGeometry:
    """Shapely geometry of a resolved node at its absolute offset."""
    return footprint_at(node.shape, node.x, node.y)


def has_clearance(
    candidate: tuple[float, float],
    radius: float,
    placed: np.ndarray,
    min_distance: float,
) -> bool:
    """
    Check that a candidate keeps its distance from every placed point.

    Args:
        candidate: (x, y) of the candidate center
        radius: Radius of the candidate
        placed: Array of shape (n, 3) holding x, y, radius of placed points
        min_distance: Extra clearance required between edges

    Returns:
        True if distance > r_candidate + r_placed + min_distance for every placed point
    """
    if len(placed) == 0:
        return True
    distances = np.hypot(placed[:, 0] - candidate[0], placed[:, 1] - candidate[1])
    required = placed[:, 2] + radius + min_distance
    return bool(np.all(distances > required))


def overlapping_exclusion_zones(
    unit: NodeInstance,
    candidates: Sequence[NodeInstance],
) -> list[BaseGeometry]:
    """
    Footprints of exclusion zones that overlap a sampling unit.

    Args:
        unit: Sampling unit receiving observations
        candidates: Nodes of the plot tagged as exclusion zones

    Returns:
        Footprints of every candidate other than ``unit`` that shares area with it
    """
    unit_geom = node_footprint(unit)
    zones = []
    for node in candidates:
        if node.id == unit.id:
            continue
        zone_geom = node_footprint(node)
        if unit_geom.intersection(zone_geom).area > 0:
            zones.append(zone_geom)
    return zones


def point_in_any_zone(
    point: tuple[float, float],
    zones: Sequence[BaseGeometry],
) -> bool:
    """
    Check if a point lies inside any of the given zones.

    Args:
        point: (x, y) coordinate tuple
        zones: Shapely geometries

    Returns:
        True if at least one zone contains the point
    """
    point_geom = Point(point)
    return any(zone.contains(point_geom) for zone in zones)


def find_spacing_violations(
    points: Sequence[tuple[float, float, float]],
    min_distance: float,
) -> list[tuple[int, int, float]]:
    """
    Find pairs of points closer than their radii plus the minimum distance.

    Uses scipy's query_pairs with the largest possible violation distance as
    search radius, then filters by the exact per-pair requirement.

    Args:
        points: Sequence of (x, y, radius) tuples
        min_distance: Required clearance between edges

    Returns:
        List of (index1, index2, distance) tuples for violating pairs
    """
    if len(points) < 2:
        return []

    data = np.array(points, dtype=float)
    kdtree = build_kdtree(data[:, :2])

    search_radius = 2 * float(data[:, 2].max()) + min_distance
    pairs = kdtree.query_pairs(r=search_radius, output_type='ndarray')

    if len(pairs) == 0:
        return []

    distances = np.linalg.norm(data[pairs[:, 0], :2] - data[pairs[:, 1], :2], axis=1)
    required = data[pairs[:, 0], 2] + data[pairs[:, 1], 2] + min_distance

    mask = distances <= required
    violations = [
        (int(pairs[i, 0]), int(pairs[i, 1]), float(distances[i]))
        for i in np.flatnonzero(mask)
    ]

    logger.debug(f"Found {len(violations)} spacing violations among {len(points)} points")
    return violations
