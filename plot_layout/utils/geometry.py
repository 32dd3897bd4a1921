"""
Shape geometry helpers.

Provides utilities for:
- Bounding dimensions per shape kind (rendering/layout)
- Explicit per-kind areas (analytics)
- Anchor points for every shape kind
- Shapely footprints of placed nodes
- Uniform sampling inside a shape

Offsets are measured from the bottom-left corner of the shape's bounding box,
Cartesian with y pointing up.
"""
from typing import Optional
import math
import numpy as np
from shapely.geometry import Point, box
from shapely.geometry.base import BaseGeometry

from plot_layout.domain.shapes import (
    CircleShape,
    LineShape,
    PointShape,
    RectangleShape,
    ShapeDefinition,
)

# Rendering fallbacks for optional dimensions. Never used for area math.
DEFAULT_LINE_WIDTH = 0.1
DEFAULT_POINT_RADIUS = 0.1

_DIAGONAL = 1 / math.sqrt(2)


def shape_dimensions(shape: ShapeDefinition) -> tuple[float, float]:
    """
    Bounding box of a shape.

    Args:
        shape: Shape definition

    Returns:
        (width, height) in meters
    """
    if isinstance(shape, RectangleShape):
        return (shape.width, shape.length)
    if isinstance(shape, CircleShape):
        return (shape.radius * 2, shape.radius * 2)
    if isinstance(shape, LineShape):
        width = shape.width if shape.width is not None else DEFAULT_LINE_WIDTH
        return (shape.length, width)
    radius = _point_radius(shape)
    return (radius * 2, radius * 2)


def shape_area(shape: ShapeDefinition) -> Optional[float]:
    """
    Area of a shape in square meters.

    Returns None when the area is undefined (a transect without a width or a
    point without a radius) rather than substituting a rendering default.
    """
    if isinstance(shape, RectangleShape):
        return shape.width * shape.length
    if isinstance(shape, CircleShape):
        return math.pi * shape.radius ** 2
    if isinstance(shape, LineShape):
        if shape.width is None:
            return None
        return shape.length * shape.width
    if isinstance(shape, PointShape):
        if shape.radius is None:
            return None
        return math.pi * shape.radius ** 2
    raise TypeError(f"Unsupported shape: {shape!r}")


def anchor_point(shape: ShapeDefinition, anchor: str) -> tuple[float, float]:
    """
    Position of a named anchor relative to the shape's bounding-box origin.

    Rectangles and lines use the corners and center of their footprint.
    Circles use their center and the four points on the circumference at 45
    degrees. Points collapse every anchor to their center.

    Args:
        shape: Shape definition
        anchor: CENTER, TOP_LEFT, TOP_RIGHT, BOTTOM_RIGHT or BOTTOM_LEFT

    Returns:
        (x, y) offset in meters
    """
    if isinstance(shape, PointShape):
        radius = _point_radius(shape)
        return (radius, radius)

    if isinstance(shape, CircleShape):
        r = shape.radius
        d = r * _DIAGONAL
        return {
            "CENTER": (r, r),
            "TOP_LEFT": (r - d, r + d),
            "TOP_RIGHT": (r + d, r + d),
            "BOTTOM_RIGHT": (r + d, r - d),
            "BOTTOM_LEFT": (r - d, r - d),
        }[anchor]

    width, height = shape_dimensions(shape)
    return {
        "CENTER": (width / 2, height / 2),
        "TOP_LEFT": (0.0, height),
        "TOP_RIGHT": (width, height),
        "BOTTOM_RIGHT": (width, 0.0),
        "BOTTOM_LEFT": (0.0, 0.0),
    }[anchor]


def centered_offset(
    parent: ShapeDefinition,
    child: ShapeDefinition,
) -> tuple[float, float]:
    """
    Offset that centers ``child`` inside ``parent``.

    Rectangle in rectangle gives ((W - w) / 2, (L - l) / 2); circle in circle
    gives (R - r, R - r).
    """
    parent_cx, parent_cy = anchor_point(parent, "CENTER")
    child_cx, child_cy = anchor_point(child, "CENTER")
    return (parent_cx - child_cx, parent_cy - child_cy)


def bounds_at(shape: ShapeDefinition, x: float, y: float) -> tuple[float, float, float, float]:
    """Bounding box (min_x, min_y, max_x, max_y) of a shape placed at (x, y)."""
    width, height = shape_dimensions(shape)
    return (x, y, x + width, y + height)


def bounds_within(
    inner: tuple[float, float, float, float],
    outer: tuple[float, float, float, float],
    tolerance: float = 1e-6,
) -> bool:
    """Check whether one bounding box lies inside another."""
    return (
        inner[0] >= outer[0] - tolerance and
        inner[1] >= outer[1] - tolerance and
        inner[2] <= outer[2] + tolerance and
        inner[3] <= outer[3] + tolerance
    )


def footprint_at(shape: ShapeDefinition, x: float, y: float) -> BaseGeometry:
    """
    Shapely geometry of a shape placed at (x, y).

    Args:
        shape: Shape definition
        x: Bounding-box origin x in meters
        y: Bounding-box origin y in meters

    Returns:
        Polygon for areal shapes, Point for a point quadrat without radius
    """
    if isinstance(shape, CircleShape):
        return Point(x + shape.radius, y + shape.radius).buffer(shape.radius)
    if isinstance(shape, PointShape):
        radius = _point_radius(shape)
        center = Point(x + radius, y + radius)
        return center.buffer(shape.radius) if shape.radius else center
    width, height = shape_dimensions(shape)
    return box(x, y, x + width, y + height)


def sample_point_in_shape(
    shape: ShapeDefinition,
    x: float,
    y: float,
    inset: float,
    rng: np.random.Generator,
) -> tuple[float, float]:
    """
    Draw a uniform point inside a placed shape, kept ``inset`` away from its edge.

    When the shape is too small for the inset, the inset collapses and the
    shape's center is returned on that axis.

    Args:
        shape: Shape definition
        x: Bounding-box origin x
        y: Bounding-box origin y
        inset: Minimum distance from the edge (usually the point's own radius)
        rng: Seeded numpy generator

    Returns:
        (x, y) in the same coordinate space as the inputs
    """
    if isinstance(shape, CircleShape):
        usable = max(shape.radius - inset, 0.0)
        rho = usable * math.sqrt(rng.random())
        theta = 2 * math.pi * rng.random()
        return (
            x + shape.radius + rho * math.cos(theta),
            y + shape.radius + rho * math.sin(theta),
        )

    if isinstance(shape, PointShape):
        center_x, center_y = anchor_point(shape, "CENTER")
        return (x + center_x, y + center_y)

    width, height = shape_dimensions(shape)
    return (
        x + _sample_span(width, inset, rng.random()),
        y + _sample_span(height, inset, rng.random()),
    )


def _sample_span(extent: float, inset: float, u: float) -> float:
    usable = extent - 2 * inset
    if usable <= 0:
        return extent / 2
    return inset + u * usable


def _point_radius(shape: PointShape) -> float:
    return shape.radius if shape.radius is not None else DEFAULT_POINT_RADIUS
