"""
Domain service: Placement of point observations inside sampling units.

Observations with stored local coordinates are mapped directly. Observations
without them are scattered by seeded rejection sampling:
- Seed derived from the observation id, so repeated passes reproduce the scatter
- Candidates drawn uniformly inside the unit, inset by the point's radius
- Rejected when closer than r_a + r_b + min distance to any placed point
- Rejected when inside an overlapping exclusion-zone subplot
- Attempt budget per observation; the last candidate is kept when exhausted

Placement never blocks the caller: budget exhaustion and lookup misses are
reported as diagnostics.
"""
from typing import Callable, Optional
from dataclasses import dataclass, field
import math
import numpy as np
import logging

from plot_layout.config import settings
from plot_layout.domain.models import NodeInstance, Observation, PlacedObservation
from plot_layout.services.domain.diagnostics import (
    NOT_A_SAMPLING_UNIT,
    PLACEMENT_BUDGET_EXHAUSTED,
    UNKNOWN_SAMPLING_UNIT,
    Diagnostic,
    DiagnosticLog,
)
from plot_layout.utils.display_scale import DisplayTransform
from plot_layout.utils.geometry import sample_point_in_shape
from plot_layout.utils.spatial_helpers import (
    has_clearance,
    overlapping_exclusion_zones,
    point_in_any_zone,
)
from plot_layout.utils.traversal import index_by_id, iter_nodes

logger = logging.getLogger(__name__)

RadiusFunction = Callable[[Observation], float]


@dataclass
class PlacementConfig:
    """Configuration for the placement algorithm."""

    min_inter_tree_distance: float = 0.5
    """Clearance required between the edges of two placed points (meters)"""

    max_attempts: int = 100
    """Rejection sampling budget per implicitly placed observation"""

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.min_inter_tree_distance < 0:
            raise ValueError(f"min_inter_tree_distance must be non-negative, got {self.min_inter_tree_distance}")


@dataclass
class PlacementResult:
    """Placed observations in caller space plus degradation notices."""
    placements: list[PlacedObservation] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def exhausted_count(self) -> int:
        return sum(1 for p in self.placements if p.budget_exhausted)


class ClampedLinearRadius:
    """
    Visual radius from a size measurement: ``clamp(gbh * per_unit, minimum, maximum)``.

    A presentation mapping handed to the placement engine by the caller.
    Radii are in meters.
    """

    def __init__(
        self,
        per_unit: Optional[float] = None,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        default_measurement: Optional[float] = None,
    ):
        self.per_unit = settings.radius_per_measurement_unit if per_unit is None else per_unit
        self.minimum = settings.radius_min if minimum is None else minimum
        self.maximum = settings.radius_max if maximum is None else maximum
        self.default_measurement = (
            settings.radius_default_measurement if default_measurement is None else default_measurement
        )

    def __call__(self, observation: Observation) -> float:
        measurement = observation.gbh if observation.gbh is not None else self.default_measurement
        return max(self.minimum, min(self.maximum, measurement * self.per_unit))


def observation_seed(observation_id: str) -> int:
    """
    Deterministic seed from an observation id.

    Sine hash over the sum of the id's character codes, scaled to 32 bits.
    """
    total = sum(ord(ch) for ch in observation_id)
    fraction = abs(math.sin(total * 12.9898) * 43758.5453) % 1.0
    return int(fraction * 2 ** 32)


class PlacementEngine:
    """
    Domain service that positions observations inside a layout tree.

    The set of already placed points is local to one ``place`` call and
    covers the whole plot, so points in neighbouring units repel each other.
    """

    def __init__(self, config: Optional[PlacementConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Placement configuration; defaults come from settings
        """
        if config:
            self.config = config
        else:
            self.config = PlacementConfig(
                min_inter_tree_distance=settings.placement_min_inter_tree_distance,
                max_attempts=settings.placement_max_attempts,
            )

    def place(
        self,
        root: NodeInstance,
        observations: list[Observation],
        min_inter_tree_distance: Optional[float] = None,
        radius_for: Optional[RadiusFunction] = None,
        transform: Optional[DisplayTransform] = None,
    ) -> PlacementResult:
        """
        Place observations in the units they reference.

        Args:
            root: Layout tree of the plot
            observations: Observations of the plot, in a stable order
            min_inter_tree_distance: Overrides the configured clearance
            radius_for: Caller-supplied visual radius in meters per observation
            transform: Conversion to caller space; meters when omitted

        Returns:
            PlacementResult with placements in input order (skipped observations omitted)
        """
        if not observations:
            return PlacementResult()

        min_distance = (
            self.config.min_inter_tree_distance
            if min_inter_tree_distance is None else min_inter_tree_distance
        )
        radius_for = radius_for or ClampedLinearRadius()
        transform = transform or DisplayTransform.identity()
        diagnostics = DiagnosticLog(logger)

        units = self._resolve_units(root, observations, diagnostics)
        exclusion_nodes = [node for node in iter_nodes(root) if node.excludes_canopy]

        placed = np.empty((0, 3))
        slots: list[Optional[PlacedObservation]] = [None] * len(observations)

        # Stored positions first: they never move and implicit points avoid them
        for i, observation in enumerate(observations):
            unit = units.get(observation.sampling_unit_id)
            if unit is None or not observation.has_stored_position:
                continue
            radius = radius_for(observation)
            x = unit.x + observation.local_x
            y = unit.y + observation.local_y
            placed = np.vstack([placed, [x, y, radius]])
            slots[i] = self._to_caller_space(observation, x, y, radius, "EXPLICIT", 0, False, transform)

        zones_by_unit = {
            unit_id: overlapping_exclusion_zones(unit, exclusion_nodes)
            for unit_id, unit in units.items()
        }

        for i, observation in enumerate(observations):
            unit = units.get(observation.sampling_unit_id)
            if unit is None or observation.has_stored_position:
                continue
            radius = radius_for(observation)
            (x, y), attempts, accepted = self._sample_position(
                observation,
                unit,
                radius,
                placed,
                zones_by_unit[unit.id],
                min_distance,
            )
            if not accepted:
                diagnostics.warn(
                    PLACEMENT_BUDGET_EXHAUSTED,
                    f"No position satisfying spacing/exclusion found for observation "
                    f"{observation.id} in {unit.label} after {attempts} attempts; using last candidate",
                    path=unit.path,
                    subject_id=observation.id,
                )
            placed = np.vstack([placed, [x, y, radius]])
            slots[i] = self._to_caller_space(
                observation, x, y, radius, "IMPLICIT", attempts, not accepted, transform
            )

        placements = [slot for slot in slots if slot is not None]
        logger.info(f"Placed {len(placements)}/{len(observations)} observations "
                    f"({diagnostics.count(PLACEMENT_BUDGET_EXHAUSTED)} over budget)")

        return PlacementResult(placements=placements, diagnostics=diagnostics.entries)

    def _resolve_units(
        self,
        root: NodeInstance,
        observations: list[Observation],
        diagnostics: DiagnosticLog,
    ) -> dict[str, NodeInstance]:
        """
        Look up every referenced unit once.

        Unknown ids and ids of non-sampling nodes are reported and left out.
        """
        index = index_by_id(root)
        units: dict[str, NodeInstance] = {}
        rejected: set[str] = set()

        for observation in observations:
            unit_id = observation.sampling_unit_id
            if unit_id in units or unit_id in rejected:
                continue
            node = index.get(unit_id)
            if node is None:
                rejected.add(unit_id)
                diagnostics.warn(
                    UNKNOWN_SAMPLING_UNIT,
                    f"Observations reference unknown sampling unit {unit_id}; skipped",
                    subject_id=unit_id,
                )
            elif not node.is_sampling_unit:
                rejected.add(unit_id)
                diagnostics.warn(
                    NOT_A_SAMPLING_UNIT,
                    f"Observations reference {node.label} ({node.type}), not a sampling unit; skipped",
                    path=node.path,
                    subject_id=unit_id,
                )
            else:
                units[unit_id] = node

        return units

    def _sample_position(
        self,
        observation: Observation,
        unit: NodeInstance,
        radius: float,
        placed: np.ndarray,
        zones: list,
        min_distance: float,
    ) -> tuple[tuple[float, float], int, bool]:
        """
        Rejection-sample one position.

        Returns:
            ((x, y), attempts used, whether the candidate met every constraint)
        """
        rng = np.random.default_rng(observation_seed(observation.id))
        candidate = (unit.x, unit.y)

        for attempt in range(1, self.config.max_attempts + 1):
            candidate = sample_point_in_shape(unit.shape, unit.x, unit.y, radius, rng)
            if not has_clearance(candidate, radius, placed, min_distance):
                continue
            if point_in_any_zone(candidate, zones):
                continue
            return candidate, attempt, True

        return candidate, self.config.max_attempts, False

    def _to_caller_space(
        self,
        observation: Observation,
        x: float,
        y: float,
        radius: float,
        source: str,
        attempts: int,
        exhausted: bool,
        transform: DisplayTransform,
    ) -> PlacedObservation:
        display_x, display_y = transform.to_display(x, y)
        return PlacedObservation(
            observation_id=observation.id,
            sampling_unit_id=observation.sampling_unit_id,
            x=display_x,
            y=display_y,
            radius=transform.length(radius),
            source=source,
            attempts=attempts,
            budget_exhausted=exhausted,
        )
