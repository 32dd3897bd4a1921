"""
Domain service: Static layout generation from versioned blueprints.

Resolves a Blueprint (a tree of NodeDefinitions with optional children
generators) into a NodeInstance tree with absolute offsets and stable ids:
- GRID: rows x cols equal cells over a rectangular parent
- NESTED: a single child centered in its parent
- FIXED_LIST: children placed by parent/child anchor pairs plus offsets

The generator is pure: identical (blueprint, version, plot id, override)
inputs always give identical ids and coordinates.
"""
from typing import Optional
from dataclasses import dataclass, field
import logging

from plot_layout.domain.models import (
    Blueprint,
    FixedListGenerator,
    GridGenerator,
    GridSpec,
    NestedGenerator,
    NodeDefinition,
    NodeInstance,
)
from plot_layout.domain.shapes import RectangleShape, ShapeDefinition
from plot_layout.services.domain.diagnostics import (
    CHILD_OUTSIDE_PARENT,
    GRID_REQUIRES_RECTANGLE,
    Diagnostic,
    DiagnosticLog,
)
from plot_layout.utils.geometry import (
    anchor_point,
    bounds_at,
    bounds_within,
    centered_offset,
)
from plot_layout.utils.identifiers import join_path, make_instance_id

logger = logging.getLogger(__name__)

ROOT_PATH = "root"
DEFAULT_NODE_LABEL = "Node"
DEFAULT_GRID_LABEL_PATTERN = "Q{idx}"


@dataclass
class LayoutResult:
    """Resolved layout tree of a blueprint plus any degradation notices."""
    root: NodeInstance
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class _Context:
    blueprint_id: str
    blueprint_version: int
    plot_id: Optional[str]
    diagnostics: DiagnosticLog


class StaticLayoutGenerator:
    """
    Domain service that turns a Blueprint into a NodeInstance tree.

    Recursion terminates at definitions without a children generator.
    Shape/generator mismatches degrade to childless nodes plus a diagnostic.
    """

    def generate(
        self,
        blueprint: Blueprint,
        root_shape: Optional[ShapeDefinition] = None,
        plot_id: Optional[str] = None,
    ) -> LayoutResult:
        """
        Generate the instance tree of a blueprint.

        Args:
            blueprint: Published blueprint
            root_shape: Optional override for the root dimensions
            plot_id: Owning plot; part of every stable id

        Returns:
            LayoutResult with the root instance and diagnostics
        """
        ctx = _Context(
            blueprint_id=blueprint.id,
            blueprint_version=blueprint.version,
            plot_id=plot_id,
            diagnostics=DiagnosticLog(logger),
        )
        shape = root_shape or blueprint.root.shape

        logger.debug(f"Generating layout for blueprint {blueprint.id} v{blueprint.version} "
                     f"(plot={plot_id}, override={root_shape is not None})")

        root = self._process_node(blueprint.root, shape, 0.0, 0.0, ROOT_PATH, ctx)
        return LayoutResult(root=root, diagnostics=ctx.diagnostics.entries)

    def _process_node(
        self,
        definition: NodeDefinition,
        shape: ShapeDefinition,
        x: float,
        y: float,
        path: str,
        ctx: _Context,
    ) -> NodeInstance:
        """
        Resolve one definition at an absolute offset and recurse into its children.

        Args:
            definition: Node template
            shape: Resolved shape (the override for the root, the cell for grid children)
            x: Absolute x of the bounding-box origin in meters
            y: Absolute y of the bounding-box origin in meters
            path: Structural path of this node
            ctx: Per-call generation context

        Returns:
            Resolved NodeInstance
        """
        children: list[NodeInstance] = []
        generator = definition.children_generator

        if isinstance(generator, GridGenerator):
            children = self._grid_children(generator.grid, shape, x, y, path, ctx)
        elif isinstance(generator, NestedGenerator):
            children = [self._nested_child(generator, shape, x, y, path, ctx)]
        elif isinstance(generator, FixedListGenerator):
            children = self._fixed_children(generator, shape, x, y, path, ctx)

        parent_bounds = bounds_at(shape, x, y)
        for child in children:
            if not bounds_within(bounds_at(child.shape, child.x, child.y), parent_bounds):
                ctx.diagnostics.warn(
                    CHILD_OUTSIDE_PARENT,
                    f"Child {child.path} extends beyond its parent {path}",
                    path=child.path,
                    subject_id=child.id,
                )

        return NodeInstance(
            id=make_instance_id(ctx.plot_id, ctx.blueprint_id, ctx.blueprint_version, path),
            blueprint_id=ctx.blueprint_id,
            blueprint_version=ctx.blueprint_version,
            plot_id=ctx.plot_id,
            type=definition.type,
            label=definition.label or DEFAULT_NODE_LABEL,
            path=path,
            shape=shape,
            x=x,
            y=y,
            role=definition.role,
            tags=list(definition.tags),
            children=children,
        )

    def _grid_children(
        self,
        grid: GridSpec,
        shape: ShapeDefinition,
        x: float,
        y: float,
        path: str,
        ctx: _Context,
    ) -> list[NodeInstance]:
        """
        Partition a rectangular parent into rows x cols quadrants.

        Row 0 is the top row for TOP_TO_BOTTOM and the bottom row for
        BOTTOM_TO_TOP; column 0 is the left column for LEFT_TO_RIGHT and the
        right column for RIGHT_TO_LEFT.
        """
        if not isinstance(shape, RectangleShape):
            ctx.diagnostics.warn(
                GRID_REQUIRES_RECTANGLE,
                f"GRID generator at {path} needs a RECTANGLE parent, got {shape.kind}; "
                f"node left without children",
                path=path,
            )
            return []

        cell_width = shape.width / grid.cols
        cell_height = shape.length / grid.rows
        pattern = grid.label_pattern or DEFAULT_GRID_LABEL_PATTERN

        children = []
        idx = 0
        for r in range(grid.rows):
            for c in range(grid.cols):
                if grid.row_order == "TOP_TO_BOTTOM":
                    cell_y = shape.length - (r + 1) * cell_height
                else:
                    cell_y = r * cell_height

                if grid.col_order == "LEFT_TO_RIGHT":
                    cell_x = c * cell_width
                else:
                    cell_x = shape.width - (c + 1) * cell_width

                cell_shape = RectangleShape(width=cell_width, length=cell_height)
                cell_definition = NodeDefinition(
                    type="SAMPLING_UNIT",
                    label=_grid_label(pattern, grid.start_index + idx, r, c),
                    shape=cell_shape,
                    role="QUADRANT",
                )
                children.append(self._process_node(
                    cell_definition,
                    cell_shape,
                    x + cell_x,
                    y + cell_y,
                    join_path(path, f"r{r}c{c}"),
                    ctx,
                ))
                idx += 1

        logger.debug(f"GRID at {path}: {grid.rows}x{grid.cols} cells of "
                     f"{cell_width:.2f}x{cell_height:.2f}m")
        return children

    def _nested_child(
        self,
        generator: NestedGenerator,
        shape: ShapeDefinition,
        x: float,
        y: float,
        path: str,
        ctx: _Context,
    ) -> NodeInstance:
        child_definition = generator.child
        offset_x, offset_y = centered_offset(shape, child_definition.shape)
        return self._process_node(
            child_definition,
            child_definition.shape,
            x + offset_x,
            y + offset_y,
            join_path(path, "nested"),
            ctx,
        )

    def _fixed_children(
        self,
        generator: FixedListGenerator,
        shape: ShapeDefinition,
        x: float,
        y: float,
        path: str,
        ctx: _Context,
    ) -> list[NodeInstance]:
        """
        Place each child so that its child anchor sits on the parent anchor,
        then shift it by the explicit offset.
        """
        children = []
        for i, item in enumerate(generator.children):
            child_definition = item.definition
            position = item.position

            pivot_x, pivot_y = anchor_point(shape, position.parent_anchor)
            anchor_x, anchor_y = anchor_point(child_definition.shape, position.child_anchor)

            local_x = pivot_x - anchor_x + position.offset_x
            local_y = pivot_y - anchor_y + position.offset_y

            children.append(self._process_node(
                child_definition,
                child_definition.shape,
                x + local_x,
                y + local_y,
                join_path(path, f"child{i}"),
                ctx,
            ))
        return children


def _grid_label(pattern: str, idx: int, r: int, c: int) -> str:
    return (
        pattern
        .replace("{idx}", str(idx))
        .replace("{r}", str(r + 1))
        .replace("{c}", str(c + 1))
    )


def generate_layout(
    blueprint: Blueprint,
    root_shape: Optional[ShapeDefinition] = None,
    plot_id: Optional[str] = None,
) -> LayoutResult:
    """Module-level shortcut for StaticLayoutGenerator().generate()."""
    return StaticLayoutGenerator().generate(blueprint, root_shape=root_shape, plot_id=plot_id)
