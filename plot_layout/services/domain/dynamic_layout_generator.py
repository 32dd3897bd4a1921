"""
Domain service: Dynamic layout generation from a parametric PlotConfiguration.

Builds a NodeInstance tree directly from a one-off configuration, without a
registered blueprint. Configurations carry no versioned identity, so every
node receives a freshly minted random id on every call. Callers that need
per-unit identity across reads must capture the ids once, right after the
first generation, and persist them (see EphemeralLayout.capture_unit_ids).
"""
from typing import Optional
import logging

from plot_layout.config import settings
from plot_layout.domain.models import (
    DYNAMIC_BLUEPRINT_ID,
    EXCLUDES_CANOPY_TAG,
    NodeInstance,
    PlotConfiguration,
    SubplotRule,
)
from plot_layout.domain.shapes import CircleShape, RectangleShape, ShapeDefinition
from plot_layout.services.domain.diagnostics import (
    CHILD_OUTSIDE_PARENT,
    GRID_REQUIRES_RECTANGLE,
    SUBPLOT_RULE_NOT_IMPLEMENTED,
    Diagnostic,
    DiagnosticLog,
)
from plot_layout.utils.geometry import bounds_at, bounds_within, footprint_at, shape_dimensions
from plot_layout.utils.identifiers import mint_ephemeral_id
from plot_layout.utils.traversal import sampling_units

logger = logging.getLogger(__name__)

DYNAMIC_BLUEPRINT_VERSION = 1

_SUBPLOT_LABELS = {
    "CORNER_SW": "SW",
    "CORNER_SE": "SE",
    "CORNER_NW": "NW",
    "CORNER_NE": "NE",
    "CENTER": "Center",
}


class EphemeralLayout:
    """
    Layout tree whose ids are only valid within the call that produced it.

    Two ephemeral layouts are equal only when they are the same generation;
    comparing the trees of separate calls is meaningless because every id
    differs.
    """

    def __init__(
        self,
        root: NodeInstance,
        diagnostics: Optional[list[Diagnostic]] = None,
        unimplemented_rules: Optional[list[SubplotRule]] = None,
    ):
        self.root = root
        self.generation_id = mint_ephemeral_id()
        self.diagnostics = diagnostics or []
        self.unimplemented_rules = unimplemented_rules or []

    def capture_unit_ids(self) -> list[str]:
        """Ids of every sampling unit, to be persisted by the caller."""
        return [unit.id for unit in sampling_units(self.root)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EphemeralLayout):
            return NotImplemented
        return self.generation_id == other.generation_id

    def __hash__(self) -> int:
        return hash(self.generation_id)

    def __repr__(self) -> str:
        return (f"EphemeralLayout(generation_id={self.generation_id!r}, "
                f"plot_id={self.root.plot_id!r}, children={len(self.root.children)})")


class DynamicLayoutGenerator:
    """
    Domain service that builds a layout from a PlotConfiguration.

    Produces a MAIN_PLOT root, optional grid quadrants (rectangular plots
    only) and optional fixed subplots. Coordinates are rounded to keep
    repeated generation free of floating-point drift.
    """

    def __init__(self, precision: Optional[int] = None):
        self.precision = settings.coordinate_precision if precision is None else precision

    def generate(self, configuration: PlotConfiguration, plot_id: str) -> EphemeralLayout:
        """
        Generate the layout of a configured plot.

        Args:
            configuration: Parametric plot description
            plot_id: Owning plot

        Returns:
            EphemeralLayout with fresh ids, diagnostics and any rules that
            could not be honoured
        """
        diagnostics = DiagnosticLog(logger)
        dimensions = configuration.dimensions

        if configuration.shape == "RECTANGLE":
            root_shape = RectangleShape(width=dimensions.width, length=dimensions.length)
        else:
            root_shape = CircleShape(radius=dimensions.radius or 0.0)

        children: list[NodeInstance] = []

        if configuration.grid.enabled:
            if configuration.shape == "RECTANGLE":
                children.extend(self._grid_cells(configuration, plot_id))
            else:
                diagnostics.warn(
                    GRID_REQUIRES_RECTANGLE,
                    f"Grid requested on a {configuration.shape} plot; no quadrants generated",
                    path="root",
                )

        unimplemented: list[SubplotRule] = []
        if configuration.subplots.enabled:
            for rule in configuration.subplots.rules:
                if rule.type == "fixed":
                    children.append(self._fixed_subplot(rule, root_shape, plot_id, diagnostics))
                else:
                    unimplemented.append(rule)
                    diagnostics.warn(
                        SUBPLOT_RULE_NOT_IMPLEMENTED,
                        f"Subplot rule type '{rule.type}' at {rule.position} is not implemented; "
                        f"no subplot generated",
                        path=f"root/subplot/{rule.position}",
                    )

        root = NodeInstance(
            id=mint_ephemeral_id(),
            blueprint_id=DYNAMIC_BLUEPRINT_ID,
            blueprint_version=DYNAMIC_BLUEPRINT_VERSION,
            plot_id=plot_id,
            type="CONTAINER",
            label="Main Plot",
            path="root",
            shape=root_shape,
            x=0.0,
            y=0.0,
            rotation=0.0,
            role="MAIN_PLOT",
            children=children,
        )

        logger.info(f"Generated dynamic layout for plot {plot_id}: "
                    f"{len(children)} units, {len(diagnostics)} diagnostics")

        return EphemeralLayout(
            root=root,
            diagnostics=diagnostics.entries,
            unimplemented_rules=unimplemented,
        )

    def _grid_cells(self, configuration: PlotConfiguration, plot_id: str) -> list[NodeInstance]:
        """
        Quadrants laid out Cartesian: row 0 at the bottom, column 0 on the left.
        """
        grid = configuration.grid
        cell_width = configuration.dimensions.width / grid.cols
        cell_length = configuration.dimensions.length / grid.rows

        cells = []
        for r in range(grid.rows):
            for c in range(grid.cols):
                cells.append(NodeInstance(
                    id=mint_ephemeral_id(),
                    blueprint_id=DYNAMIC_BLUEPRINT_ID,
                    blueprint_version=DYNAMIC_BLUEPRINT_VERSION,
                    plot_id=plot_id,
                    type="SAMPLING_UNIT",
                    label=_cell_label(grid.label_style, grid.rows, grid.cols, r, c),
                    path=f"root/grid/{r}/{c}",
                    shape=RectangleShape(width=cell_width, length=cell_length),
                    x=self._round(c * cell_width),
                    y=self._round(r * cell_length),
                    role="QUADRANT",
                ))
        return cells

    def _fixed_subplot(
        self,
        rule: SubplotRule,
        root_shape: ShapeDefinition,
        plot_id: str,
        diagnostics: DiagnosticLog,
    ) -> NodeInstance:
        """
        A subplot flush against the requested corner of the plot's bounding
        box, or centered in it. Circular subplots are placed by their 2r box.
        """
        if rule.shape == "CIRCLE":
            shape = CircleShape(radius=rule.dimensions.radius or 1.0)
        else:
            shape = RectangleShape(
                width=rule.dimensions.width or 1.0,
                length=rule.dimensions.length or 1.0,
            )
        width, length = shape_dimensions(shape)
        plot_width, plot_length = shape_dimensions(root_shape)

        x = 0.0
        y = 0.0
        if rule.position in ("CORNER_SE", "CORNER_NE"):
            x = plot_width - width
        if rule.position in ("CORNER_NW", "CORNER_NE"):
            y = plot_length - length
        if rule.position == "CENTER":
            x = (plot_width - width) / 2
            y = (plot_length - length) / 2

        subplot = NodeInstance(
            id=mint_ephemeral_id(),
            blueprint_id=DYNAMIC_BLUEPRINT_ID,
            blueprint_version=DYNAMIC_BLUEPRINT_VERSION,
            plot_id=plot_id,
            type="SAMPLING_UNIT",
            label=_SUBPLOT_LABELS[rule.position],
            path=f"root/subplot/{rule.position}",
            shape=shape,
            x=self._round(x),
            y=self._round(y),
            role="SUBPLOT",
            tags=[EXCLUDES_CANOPY_TAG] if rule.excludes_canopy else [],
        )

        if not _inside_plot(subplot, root_shape):
            diagnostics.warn(
                CHILD_OUTSIDE_PARENT,
                f"Subplot {subplot.path} extends beyond the {root_shape.kind} plot",
                path=subplot.path,
                subject_id=subplot.id,
            )
        return subplot

    def _round(self, value: float) -> float:
        return round(value, self.precision)


def _inside_plot(subplot: NodeInstance, root_shape: ShapeDefinition) -> bool:
    """Bounding-box containment; a circular plot also needs the disk to cover the subplot."""
    if not bounds_within(bounds_at(subplot.shape, subplot.x, subplot.y), bounds_at(root_shape, 0.0, 0.0)):
        return False
    if isinstance(root_shape, CircleShape):
        plot_disk = footprint_at(root_shape, 0.0, 0.0).buffer(1e-6)
        return plot_disk.covers(footprint_at(subplot.shape, subplot.x, subplot.y))
    return True


def _cell_label(label_style: str, rows: int, cols: int, r: int, c: int) -> str:
    if label_style == "Q1-Q4":
        # Reading order: Q1 is the top-left cell
        return f"Q{(rows - 1 - r) * cols + c + 1}"
    if label_style == "Matrix":
        return f"{r + 1},{c + 1}"
    return f"Cell {r}-{c}"


def generate_dynamic_layout(configuration: PlotConfiguration, plot_id: str) -> EphemeralLayout:
    """Module-level shortcut for DynamicLayoutGenerator().generate()."""
    return DynamicLayoutGenerator().generate(configuration, plot_id)
