"""
In-memory blueprint registry with the built-in layout blueprints.

A published (id, version) pair is immutable: registering a different
definition under an existing pair is refused.
"""
from typing import Optional
import logging

from plot_layout.domain.errors import BlueprintConflictError
from plot_layout.domain.models import Blueprint

logger = logging.getLogger(__name__)


def _quadrant_blueprint(blueprint_id: str, name: str, size: float) -> Blueprint:
    return Blueprint.model_validate({
        "id": blueprint_id,
        "version": 1,
        "name": name,
        "root": {
            "type": "CONTAINER",
            "label": "Main Plot",
            "code": "P",
            "role": "MAIN_PLOT",
            "shape": {"kind": "RECTANGLE", "width": size, "length": size},
            "childrenGenerator": {
                "method": "GRID",
                "grid": {
                    "rows": 2,
                    "cols": 2,
                    "rowOrder": "TOP_TO_BOTTOM",
                    "colOrder": "LEFT_TO_RIGHT",
                    "labelPattern": "Q{idx}",
                    "startIndex": 1,
                },
            },
        },
    })


def _herb_subplot(corner: str, anchor: str, offset_x: float, offset_y: float) -> dict:
    return {
        "definition": {
            "type": "SAMPLING_UNIT",
            "label": f"Herb-{corner}",
            "code": f"H-{corner}",
            "role": "SUBPLOT",
            "shape": {"kind": "RECTANGLE", "width": 1, "length": 1},
            "tags": ["herb", "ground_vegetation"],
        },
        "position": {
            "parentAnchor": anchor,
            "childAnchor": anchor,
            "offsetX": offset_x,
            "offsetY": offset_y,
        },
    }


STD_10X10_QUADRANTS = _quadrant_blueprint("std-10x10-4q", "Standard 10x10m (4 Quadrants)", 10)

STD_20X20_QUADRANTS = _quadrant_blueprint("std-20x20-4q", "Standard 20x20m (4 Quadrants)", 20)

CIRCULAR_10M_FULL = Blueprint.model_validate({
    "id": "cir-10m-full",
    "version": 1,
    "name": "Circular 10m Radius (Single Unit)",
    "root": {
        "type": "SAMPLING_UNIT",
        "label": "Main Plot",
        "code": "P",
        "role": "MAIN_PLOT",
        "shape": {"kind": "CIRCLE", "radius": 10},
    },
})

# 1x1m herb subplots inset 0.5m from each corner
STD_10X10_WITH_HERB_SUBPLOTS = Blueprint.model_validate({
    "id": "std-10x10-herb-subplots",
    "version": 1,
    "name": "10x10m with Corner Herb Subplots",
    "root": {
        "type": "CONTAINER",
        "label": "Main Plot",
        "code": "P",
        "role": "MAIN_PLOT",
        "shape": {"kind": "RECTANGLE", "width": 10, "length": 10},
        "childrenGenerator": {
            "method": "FIXED_LIST",
            "children": [
                _herb_subplot("NW", "TOP_LEFT", 0.5, -0.5),
                _herb_subplot("NE", "TOP_RIGHT", -0.5, -0.5),
                _herb_subplot("SW", "BOTTOM_LEFT", 0.5, 0.5),
                _herb_subplot("SE", "BOTTOM_RIGHT", -0.5, 0.5),
            ],
        },
    },
})

BUILTIN_BLUEPRINTS = [
    STD_10X10_QUADRANTS,
    STD_20X20_QUADRANTS,
    CIRCULAR_10M_FULL,
    STD_10X10_WITH_HERB_SUBPLOTS,
]


class BlueprintRegistry:
    """
    Blueprint lookup keyed by (id, version).

    Lookups never raise: an unknown id or version returns None and the
    caller decides how to degrade.
    """

    def __init__(self, blueprints: Optional[list[Blueprint]] = None):
        self._blueprints: dict[tuple[str, int], Blueprint] = {}
        for blueprint in blueprints or []:
            self.register(blueprint)

    def register(self, blueprint: Blueprint) -> None:
        """
        Publish a blueprint version.

        Re-registering an identical definition is a no-op.

        Raises:
            BlueprintConflictError: If the (id, version) pair is already
                published with a different definition
        """
        key = (blueprint.id, blueprint.version)
        existing = self._blueprints.get(key)
        if existing is not None:
            if existing != blueprint:
                raise BlueprintConflictError(blueprint.id, blueprint.version)
            return
        self._blueprints[key] = blueprint
        logger.debug(f"Registered blueprint {blueprint.id} v{blueprint.version}")

    def get(self, blueprint_id: str, version: Optional[int] = None) -> Optional[Blueprint]:
        """
        Look up a blueprint.

        Args:
            blueprint_id: Blueprint id
            version: Specific version; the latest published version when omitted

        Returns:
            The blueprint, or None on a miss
        """
        if version is not None:
            return self._blueprints.get((blueprint_id, version))

        versions = [bp for (bp_id, _), bp in self._blueprints.items() if bp_id == blueprint_id]
        if not versions:
            return None
        return max(versions, key=lambda bp: bp.version)

    def list(self) -> list[Blueprint]:
        """Every published blueprint version, ordered by id then version."""
        return [self._blueprints[key] for key in sorted(self._blueprints)]

    def __len__(self) -> int:
        return len(self._blueprints)


_registry: Optional[BlueprintRegistry] = None


def get_blueprint_registry() -> BlueprintRegistry:
    """
    Get or create the shared registry preloaded with the built-in blueprints.

    Returns:
        BlueprintRegistry instance
    """
    global _registry
    if _registry is None:
        _registry = BlueprintRegistry(BUILTIN_BLUEPRINTS)
    return _registry
