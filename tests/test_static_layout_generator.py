"""
Unit tests for blueprint (static) layout generation.

Tests cover:
- GRID partitioning, ordering and labels
- NESTED centering
- FIXED_LIST anchor placement
- Absolute offsets at depth > 2
- Stable ids and determinism
- Degradation diagnostics
"""
import pytest

from plot_layout.domain.models import Blueprint
from plot_layout.domain.shapes import RectangleShape
from plot_layout.services.domain.diagnostics import CHILD_OUTSIDE_PARENT, GRID_REQUIRES_RECTANGLE
from plot_layout.services.domain.static_layout_generator import (
    StaticLayoutGenerator,
    generate_layout,
)
from plot_layout.utils.geometry import shape_area
from plot_layout.utils.traversal import iter_nodes, sampling_units


def _fixed_list_blueprint(parent_size, child_shape, parent_anchor, child_anchor, offset=(0, 0)):
    return Blueprint.model_validate({
        "id": "fixed-test",
        "version": 1,
        "name": "Fixed list test",
        "root": {
            "type": "CONTAINER",
            "label": "Main Plot",
            "shape": {"kind": "RECTANGLE", "width": parent_size, "length": parent_size},
            "childrenGenerator": {
                "method": "FIXED_LIST",
                "children": [{
                    "definition": {"type": "SAMPLING_UNIT", "label": "Child", "shape": child_shape},
                    "position": {
                        "parentAnchor": parent_anchor,
                        "childAnchor": child_anchor,
                        "offsetX": offset[0],
                        "offsetY": offset[1],
                    },
                }],
            },
        },
    })


# ============================================================
# GRID Tests
# ============================================================

class TestGridGeneration:
    """Tests for the GRID children generator."""

    def test_quadrants_tile_parent(self, quadrant_blueprint):
        """Four 5x5 quadrants should cover the 10x10 plot without overlap."""
        root = generate_layout(quadrant_blueprint, plot_id="plot-1").root

        assert len(root.children) == 4
        total = sum(shape_area(child.shape) for child in root.children)
        assert total == pytest.approx(100.0)

        origins = {(child.x, child.y) for child in root.children}
        assert origins == {(0.0, 0.0), (5.0, 0.0), (0.0, 5.0), (5.0, 5.0)}

    def test_top_to_bottom_labels(self, quadrant_blueprint):
        """Q1 is top-left, Q2 top-right, Q3 bottom-left, Q4 bottom-right."""
        root = generate_layout(quadrant_blueprint).root
        by_label = {child.label: (child.x, child.y) for child in root.children}

        assert by_label == {
            "Q1": (0.0, 5.0),
            "Q2": (5.0, 5.0),
            "Q3": (0.0, 0.0),
            "Q4": (5.0, 0.0),
        }

    def test_cells_are_sampling_quadrants(self, quadrant_blueprint):
        """Grid cells should be SAMPLING_UNIT nodes with role QUADRANT."""
        root = generate_layout(quadrant_blueprint).root

        for child in root.children:
            assert child.type == "SAMPLING_UNIT"
            assert child.role == "QUADRANT"
            assert child.shape == RectangleShape(width=5, length=5)

    def test_bottom_to_top_right_to_left(self):
        """Reversed orders should start numbering at the bottom-right cell."""
        blueprint = Blueprint.model_validate({
            "id": "reversed",
            "version": 1,
            "name": "Reversed grid",
            "root": {
                "type": "CONTAINER",
                "shape": {"kind": "RECTANGLE", "width": 6, "length": 4},
                "childrenGenerator": {
                    "method": "GRID",
                    "grid": {
                        "rows": 2,
                        "cols": 3,
                        "rowOrder": "BOTTOM_TO_TOP",
                        "colOrder": "RIGHT_TO_LEFT",
                        "labelPattern": "R{r}C{c}-{idx}",
                        "startIndex": 0,
                    },
                },
            },
        })
        root = generate_layout(blueprint).root
        first = root.children[0]
        last = root.children[-1]

        assert first.label == "R1C1-0"
        assert (first.x, first.y) == (4.0, 0.0)
        assert last.label == "R2C3-5"
        assert (last.x, last.y) == (0.0, 2.0)

    def test_root_shape_override(self, quadrant_blueprint):
        """An overridden root shape should resize every cell."""
        override = RectangleShape(width=20, length=20)
        root = generate_layout(quadrant_blueprint, root_shape=override).root

        assert root.shape == override
        assert all(child.shape == RectangleShape(width=10, length=10) for child in root.children)

    def test_grid_on_circle_degrades(self):
        """GRID under a circular parent yields no children and a diagnostic."""
        blueprint = Blueprint.model_validate({
            "id": "circle-grid",
            "version": 1,
            "name": "Circle grid",
            "root": {
                "type": "CONTAINER",
                "shape": {"kind": "CIRCLE", "radius": 10},
                "childrenGenerator": {"method": "GRID", "grid": {"rows": 2, "cols": 2}},
            },
        })
        result = generate_layout(blueprint)

        assert result.root.children == []
        assert [d.code for d in result.diagnostics] == [GRID_REQUIRES_RECTANGLE]
        assert result.diagnostics[0].path == "root"


# ============================================================
# NESTED and FIXED_LIST Tests
# ============================================================

class TestNestedGeneration:
    """Tests for the NESTED children generator."""

    def test_rectangle_centered(self, nested_blueprint):
        """A 5x5 child nested in a 20x20 parent sits at (7.5, 7.5)."""
        root = generate_layout(nested_blueprint).root
        child = root.children[0]

        assert (child.x, child.y) == (7.5, 7.5)
        assert child.path == "root/nested"

    def test_circle_in_circle(self):
        """A circle of radius r in a circle of radius R is offset by R - r."""
        blueprint = Blueprint.model_validate({
            "id": "rings",
            "version": 1,
            "name": "Rings",
            "root": {
                "type": "CONTAINER",
                "shape": {"kind": "CIRCLE", "radius": 10},
                "childrenGenerator": {
                    "method": "NESTED",
                    "child": {"type": "SAMPLING_UNIT", "shape": {"kind": "CIRCLE", "radius": 4}},
                },
            },
        })
        child = generate_layout(blueprint).root.children[0]

        assert child.x == pytest.approx(6.0)
        assert child.y == pytest.approx(6.0)


class TestFixedListGeneration:
    """Tests for anchor-based FIXED_LIST placement (y axis up)."""

    def test_bottom_right_anchor(self):
        """Matching BOTTOM_RIGHT anchors put a 2x2 child flush in the bottom-right corner."""
        blueprint = _fixed_list_blueprint(
            10, {"kind": "RECTANGLE", "width": 2, "length": 2}, "BOTTOM_RIGHT", "BOTTOM_RIGHT"
        )
        child = generate_layout(blueprint).root.children[0]

        assert (child.x, child.y) == (8.0, 0.0)

    def test_top_right_anchor(self):
        """Matching TOP_RIGHT anchors put a 2x2 child at (8, 8)."""
        blueprint = _fixed_list_blueprint(
            10, {"kind": "RECTANGLE", "width": 2, "length": 2}, "TOP_RIGHT", "TOP_RIGHT"
        )
        child = generate_layout(blueprint).root.children[0]

        assert (child.x, child.y) == (8.0, 8.0)

    def test_herb_subplots_inset(self, herb_blueprint):
        """Built-in herb subplots sit 0.5m inside each corner."""
        root = generate_layout(herb_blueprint).root
        by_label = {child.label: (child.x, child.y) for child in root.children}

        assert by_label["Herb-NW"] == pytest.approx((0.5, 8.5))
        assert by_label["Herb-NE"] == pytest.approx((8.5, 8.5))
        assert by_label["Herb-SW"] == pytest.approx((0.5, 0.5))
        assert by_label["Herb-SE"] == pytest.approx((8.5, 0.5))
        assert [child.path for child in root.children] == ["root/child0", "root/child1", "root/child2", "root/child3"]

    def test_circle_child_center_anchor(self):
        """CENTER on CENTER puts a radius-1 circle at (4, 4) in a 10x10 parent."""
        blueprint = _fixed_list_blueprint(
            10, {"kind": "CIRCLE", "radius": 1}, "CENTER", "CENTER"
        )
        child = generate_layout(blueprint).root.children[0]

        assert child.x == pytest.approx(4.0)
        assert child.y == pytest.approx(4.0)

    def test_child_outside_parent_is_reported(self):
        """Children pushed past the parent edge are kept and reported."""
        blueprint = _fixed_list_blueprint(
            10, {"kind": "RECTANGLE", "width": 2, "length": 2}, "TOP_RIGHT", "BOTTOM_LEFT"
        )
        result = generate_layout(blueprint)

        assert len(result.root.children) == 1
        assert result.root.children[0].x == 10.0
        assert [d.code for d in result.diagnostics] == [CHILD_OUTSIDE_PARENT]


# ============================================================
# Deep Tree Tests
# ============================================================

class TestAbsoluteOffsets:
    """Offsets accumulate through every level of the tree."""

    def test_grid_inside_fixed_child(self):
        """Grandchildren are offset by their parent's absolute position."""
        blueprint = Blueprint.model_validate({
            "id": "deep",
            "version": 1,
            "name": "Deep",
            "root": {
                "type": "CONTAINER",
                "shape": {"kind": "RECTANGLE", "width": 20, "length": 20},
                "childrenGenerator": {
                    "method": "FIXED_LIST",
                    "children": [{
                        "definition": {
                            "type": "CONTAINER",
                            "label": "Block",
                            "shape": {"kind": "RECTANGLE", "width": 10, "length": 10},
                            "childrenGenerator": {
                                "method": "NESTED",
                                "child": {
                                    "type": "CONTAINER",
                                    "shape": {"kind": "RECTANGLE", "width": 4, "length": 4},
                                    "childrenGenerator": {
                                        "method": "GRID",
                                        "grid": {"rows": 2, "cols": 2},
                                    },
                                },
                            },
                        },
                        "position": {"parentAnchor": "TOP_RIGHT", "childAnchor": "TOP_RIGHT"},
                    }],
                },
            },
        })
        root = generate_layout(blueprint).root
        block = root.children[0]
        inner = block.children[0]
        cells = {cell.label: (cell.x, cell.y) for cell in inner.children}

        assert (block.x, block.y) == (10.0, 10.0)
        assert (inner.x, inner.y) == (13.0, 13.0)
        assert cells["Q3"] == (13.0, 13.0)
        assert cells["Q2"] == (15.0, 15.0)
        assert inner.children[0].path == "root/child0/nested/r0c0"


# ============================================================
# Identity Tests
# ============================================================

class TestStableIds:
    """Tests for deterministic, stable node ids."""

    def test_regeneration_is_identical(self, quadrant_blueprint):
        """Same inputs should give identical trees, ids included."""
        generator = StaticLayoutGenerator()
        first = generator.generate(quadrant_blueprint, plot_id="plot-1")
        second = generator.generate(quadrant_blueprint, plot_id="plot-1")

        assert first.root == second.root

    def test_ids_depend_on_plot(self, quadrant_blueprint):
        """Two plots sharing a blueprint get distinct unit ids."""
        a = {n.id for n in iter_nodes(generate_layout(quadrant_blueprint, plot_id="a").root)}
        b = {n.id for n in iter_nodes(generate_layout(quadrant_blueprint, plot_id="b").root)}
        preview = {n.id for n in iter_nodes(generate_layout(quadrant_blueprint).root)}

        assert a.isdisjoint(b)
        assert a.isdisjoint(preview)

    def test_ids_depend_on_version(self, quadrant_blueprint):
        """A new blueprint version mints new ids."""
        v2 = quadrant_blueprint.model_copy(update={"version": 2})
        ids_v1 = [u.id for u in sampling_units(generate_layout(quadrant_blueprint, plot_id="p").root)]
        ids_v2 = [u.id for u in sampling_units(generate_layout(v2, plot_id="p").root)]

        assert set(ids_v1).isdisjoint(ids_v2)

    def test_ids_unique_within_tree(self, herb_blueprint):
        """Every node in a tree has a distinct id."""
        nodes = list(iter_nodes(generate_layout(herb_blueprint, plot_id="p").root))
        assert len({n.id for n in nodes}) == len(nodes)

    def test_missing_label_defaults(self):
        """Definitions without a label are named 'Node'."""
        blueprint = Blueprint.model_validate({
            "id": "unlabelled",
            "version": 1,
            "name": "Unlabelled",
            "root": {"type": "SAMPLING_UNIT", "shape": {"kind": "POINT"}},
        })
        root = generate_layout(blueprint).root

        assert root.label == "Node"
        assert root.blueprint_id == "unlabelled"
        assert root.blueprint_version == 1
