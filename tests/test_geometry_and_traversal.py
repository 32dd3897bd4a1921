"""
Unit tests for shape geometry, tree traversal, identifiers and display scaling.
"""
import math
import numpy as np
import pytest
from pydantic import ValidationError

from plot_layout.domain.shapes import CircleShape, LineShape, PointShape, RectangleShape
from plot_layout.utils.display_scale import DisplayTransform
from plot_layout.utils.geometry import (
    anchor_point,
    centered_offset,
    footprint_at,
    sample_point_in_shape,
    shape_area,
    shape_dimensions,
)
from plot_layout.utils.identifiers import make_instance_id
from plot_layout.utils.spatial_helpers import find_spacing_violations, has_clearance
from plot_layout.utils.traversal import (
    find_node,
    iter_nodes,
    label_index,
    sampling_units,
    tree_bounds,
    unit_area,
    walk,
)


# ============================================================
# Shape Tests
# ============================================================

class TestShapes:
    """Tests for shape validation, dimensions and areas."""

    def test_negative_dimension_rejected(self):
        """Negative sizes fail at construction."""
        with pytest.raises(ValidationError):
            RectangleShape(width=-1, length=5)

    def test_non_finite_dimension_rejected(self):
        """Infinite or NaN sizes fail at construction."""
        with pytest.raises(ValidationError):
            CircleShape(radius=float("inf"))
        with pytest.raises(ValidationError):
            LineShape(length=float("nan"))

    @pytest.mark.parametrize("shape,expected", [
        (RectangleShape(width=4, length=5), 20.0),
        (CircleShape(radius=2), math.pi * 4),
        (LineShape(length=50, width=2), 100.0),
        (PointShape(radius=1), math.pi),
    ])
    def test_area(self, shape, expected):
        assert shape_area(shape) == pytest.approx(expected)

    def test_undefined_area(self):
        """Lines without width and points without radius have no area."""
        assert shape_area(LineShape(length=50)) is None
        assert shape_area(PointShape()) is None

    def test_dimensions_use_rendering_fallbacks(self):
        """Bounding boxes fall back to the default line width and point radius."""
        assert shape_dimensions(LineShape(length=50)) == (50, 0.1)
        assert shape_dimensions(PointShape()) == (0.2, 0.2)
        assert shape_dimensions(CircleShape(radius=3)) == (6, 6)


class TestAnchors:
    """Tests for anchor points and centering."""

    def test_rectangle_corners(self):
        """Rectangle anchors are its bounding-box corners, y up."""
        shape = RectangleShape(width=4, length=2)

        assert anchor_point(shape, "BOTTOM_LEFT") == (0.0, 0.0)
        assert anchor_point(shape, "TOP_LEFT") == (0.0, 2)
        assert anchor_point(shape, "TOP_RIGHT") == (4, 2)
        assert anchor_point(shape, "CENTER") == (2, 1)

    def test_circle_anchors_on_circumference(self):
        """Circle corner anchors lie on the circumference at 45 degrees."""
        shape = CircleShape(radius=2)
        cx, cy = anchor_point(shape, "CENTER")

        for anchor in ("TOP_LEFT", "TOP_RIGHT", "BOTTOM_RIGHT", "BOTTOM_LEFT"):
            x, y = anchor_point(shape, anchor)
            assert math.hypot(x - cx, y - cy) == pytest.approx(2.0)

        x, y = anchor_point(shape, "TOP_RIGHT")
        assert x > cx and y > cy

    def test_point_anchors_collapse(self):
        """Every anchor of a point is its center."""
        shape = PointShape(radius=0.5)
        assert {anchor_point(shape, a) for a in ("CENTER", "TOP_LEFT", "BOTTOM_RIGHT")} == {(0.5, 0.5)}

    def test_centered_offset(self):
        """Centering works for rectangles and mixed shapes."""
        assert centered_offset(RectangleShape(width=20, length=20), RectangleShape(width=5, length=5)) == (7.5, 7.5)
        assert centered_offset(RectangleShape(width=10, length=10), CircleShape(radius=1)) == (4, 4)


class TestSampling:
    """Tests for footprints and uniform sampling."""

    def test_footprints(self):
        """Footprints sit at the given offset."""
        assert footprint_at(RectangleShape(width=2, length=3), 1, 1).bounds == (1, 1, 3, 4)
        circle = footprint_at(CircleShape(radius=1), 0, 0)
        assert circle.centroid.x == pytest.approx(1.0)
        assert circle.area == pytest.approx(math.pi, rel=1e-2)

    def test_rectangle_samples_respect_inset(self):
        """Samples stay at least ``inset`` away from the rectangle's edges."""
        rng = np.random.default_rng(1)
        for _ in range(200):
            x, y = sample_point_in_shape(RectangleShape(width=2, length=4), 10, 20, 0.25, rng)
            assert 10.25 <= x <= 11.75
            assert 20.25 <= y <= 23.75

    def test_circle_samples_inside_disk(self):
        """Samples in a circle stay inside the inset disk."""
        rng = np.random.default_rng(2)
        for _ in range(200):
            x, y = sample_point_in_shape(CircleShape(radius=3), 0, 0, 0.5, rng)
            assert math.hypot(x - 3, y - 3) <= 2.5 + 1e-9

    def test_too_small_collapses_to_center(self):
        """An inset larger than the shape yields its center."""
        rng = np.random.default_rng(3)
        assert sample_point_in_shape(RectangleShape(width=0.2, length=0.2), 0, 0, 0.5, rng) == (0.1, 0.1)


# ============================================================
# Spatial Helper Tests
# ============================================================

class TestSpatialHelpers:
    """Tests for clearance checks and pair queries."""

    def test_clearance_is_strict(self):
        """Exactly touching the required distance is not clearance."""
        placed = np.array([[0.0, 0.0, 0.25]])

        assert not has_clearance((1.0, 0.0), 0.25, placed, 0.5)
        assert has_clearance((1.01, 0.0), 0.25, placed, 0.5)
        assert has_clearance((0.0, 0.0), 0.25, np.empty((0, 3)), 0.5)

    def test_find_spacing_violations(self):
        """Only pairs closer than r_a + r_b + min distance are reported."""
        points = [(0, 0, 0.25), (0.9, 0, 0.25), (5, 5, 0.25)]
        violations = find_spacing_violations(points, 0.5)

        assert [(i, j) for i, j, _ in violations] == [(0, 1)]
        assert violations[0][2] == pytest.approx(0.9)


# ============================================================
# Traversal Tests
# ============================================================

class TestTraversal:
    """Tests for tree search helpers."""

    def test_iter_nodes_pre_order(self, quadrant_layout):
        """The root comes first, then children in generation order."""
        labels = [node.label for node in iter_nodes(quadrant_layout)]
        assert labels == ["Main Plot", "Q1", "Q2", "Q3", "Q4"]

    def test_walk_depths(self, quadrant_layout):
        """Visitors receive the depth of each node."""
        seen = []
        walk(quadrant_layout, lambda node, depth: seen.append((node.label, depth)))
        assert seen[0] == ("Main Plot", 0)
        assert all(depth == 1 for _, depth in seen[1:])

    def test_find_node(self, quadrant_layout):
        """Lookup by id returns the node, or None on a miss."""
        q2 = quadrant_layout.children[1]
        assert find_node(quadrant_layout, q2.id) is q2
        assert find_node(quadrant_layout, "missing") is None

    def test_label_index(self, quadrant_layout):
        """Unit labels resolve to ids for bulk import."""
        index = label_index(quadrant_layout)
        assert set(index) == {"Q1", "Q2", "Q3", "Q4"}
        assert index["Q3"] == quadrant_layout.children[2].id

    def test_unit_area(self, quadrant_layout):
        assert unit_area(quadrant_layout, quadrant_layout.children[0].id) == 25.0
        assert unit_area(quadrant_layout, "missing") is None

    def test_sampling_units_and_bounds(self, quadrant_layout):
        assert len(sampling_units(quadrant_layout)) == 4
        assert tree_bounds(quadrant_layout) == (0.0, 0.0, 10.0, 10.0)


# ============================================================
# Identifier and Display Tests
# ============================================================

class TestIdentifiers:
    """Tests for stable instance ids."""

    def test_stable_and_distinct(self):
        a = make_instance_id("plot", "bp", 1, "root/r0c0")
        assert a == make_instance_id("plot", "bp", 1, "root/r0c0")
        assert a != make_instance_id("plot", "bp", 1, "root/r0c1")
        assert a != make_instance_id(None, "bp", 1, "root/r0c0")

    def test_no_plot_distinct_from_empty(self):
        """An absent plot id never collides with an empty one."""
        assert make_instance_id(None, "bp", 1, "root") != make_instance_id("", "bp", 1, "root")


class TestDisplayTransform:
    """Tests for the meters to display mapping."""

    def test_fit_uses_tighter_axis(self, quadrant_layout):
        """A wide viewport is limited by its height."""
        transform = DisplayTransform.fit(quadrant_layout, 400, 120, padding=10)
        assert transform.scale == pytest.approx(10.0)

    def test_round_trip(self, quadrant_layout):
        transform = DisplayTransform.fit(quadrant_layout, 200, 300, padding=16, flip_y=True)
        assert transform.to_meters(*transform.to_display(3.5, 7.25)) == pytest.approx((3.5, 7.25))

    @pytest.mark.parametrize("width, height, padding", [
        (20, 20, 16),
        (32, 100, 16),
        (100, 10, 5),
    ])
    def test_fit_rejects_padding_without_drawable_area(self, quadrant_layout, width, height, padding):
        """A fit that would give a zero or negative scale raises."""
        with pytest.raises(ValueError):
            DisplayTransform.fit(quadrant_layout, width, height, padding=padding)

    def test_identity(self):
        identity = DisplayTransform.identity()
        assert identity.to_display(1.5, 2.5) == (1.5, 2.5)
        assert identity.length(0.3) == 0.3
