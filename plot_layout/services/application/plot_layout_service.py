"""
Application service: Orchestration layer for plot layout operations.
"""
from typing import Any, List, Optional, Tuple, Union
import logging

from pydantic import ValidationError

from plot_layout.domain.errors import LayoutValidationError
from plot_layout.domain.models import (
    GeoOrigin,
    NodeInstance,
    Observation,
    PlacedObservation,
    PlotConfiguration,
    PlotRecord,
    UnitProgress,
)
from plot_layout.domain.shapes import ShapeDefinition
from plot_layout.infrastructure.blueprint_registry import BlueprintRegistry
from plot_layout.services.domain.dynamic_layout_generator import (
    DynamicLayoutGenerator,
    EphemeralLayout,
)
from plot_layout.services.domain.placement_engine import (
    PlacementEngine,
    PlacementResult,
    RadiusFunction,
)
from plot_layout.services.domain.static_layout_generator import (
    LayoutResult,
    StaticLayoutGenerator,
)
from plot_layout.utils.display_scale import DisplayTransform
from plot_layout.utils.geo_projection import local_to_latlon
from plot_layout.utils.traversal import sampling_units

logger = logging.getLogger(__name__)

ResolvedLayout = Union[LayoutResult, EphemeralLayout]


class PlotLayoutService:
    """
    Application service for plot layout operations.

    Coordinates the registry, the layout generators and the placement engine.
    No layout math happens here.
    """

    def __init__(
        self,
        registry: BlueprintRegistry,
        placement_engine: PlacementEngine,
        static_generator: Optional[StaticLayoutGenerator] = None,
        dynamic_generator: Optional[DynamicLayoutGenerator] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            registry: Published blueprints
            placement_engine: Observation placement
            static_generator: Blueprint resolution (default instance when omitted)
            dynamic_generator: Configuration resolution (default instance when omitted)
        """
        self.registry = registry
        self.placement_engine = placement_engine
        self.static_generator = static_generator or StaticLayoutGenerator()
        self.dynamic_generator = dynamic_generator or DynamicLayoutGenerator()

    @staticmethod
    def load_plot(data: dict[str, Any]) -> PlotRecord:
        """
        Validate a raw plot record as supplied by storage.

        Raises:
            LayoutValidationError: If the record is malformed
        """
        try:
            return PlotRecord.model_validate(data)
        except ValidationError as e:
            raise LayoutValidationError(
                f"Invalid plot record: {e.error_count()} validation error(s)",
                errors=e.errors(include_url=False, include_context=False),
            ) from e

    def resolve_static(
        self,
        blueprint_id: str,
        version: Optional[int] = None,
        root_shape: Optional[ShapeDefinition] = None,
        plot_id: Optional[str] = None,
    ) -> Optional[LayoutResult]:
        """
        Resolve a registered blueprint.

        Returns:
            LayoutResult, or None when the blueprint (version) is not registered
        """
        blueprint = self.registry.get(blueprint_id, version)
        if blueprint is None:
            logger.info(f"Blueprint {blueprint_id} (version={version}) not found")
            return None
        return self.static_generator.generate(blueprint, root_shape=root_shape, plot_id=plot_id)

    def resolve_dynamic(self, configuration: PlotConfiguration, plot_id: str) -> EphemeralLayout:
        return self.dynamic_generator.generate(configuration, plot_id)

    def resolve_layout(self, plot: PlotRecord) -> Optional[ResolvedLayout]:
        """
        Resolve the layout of a plot from whichever source it carries.

        Args:
            plot: Plot record with a blueprint reference or a configuration

        Returns:
            LayoutResult (blueprint), EphemeralLayout (configuration), or None
            when the referenced blueprint is not registered
        """
        if plot.configuration is not None:
            return self.resolve_dynamic(plot.configuration, plot.id)
        return self.resolve_static(
            plot.blueprint_id,
            version=plot.blueprint_version,
            root_shape=plot.root_shape,
            plot_id=plot.id,
        )

    def initialize_unit_progress(self, plot: PlotRecord) -> Optional[List[UnitProgress]]:
        """
        Progress seeds for every sampling unit of a freshly created plot.

        For configuration-based plots this is the single moment the unit ids
        exist; the caller must persist them before generating again.

        Returns:
            One NOT_STARTED record per sampling unit, or None on a registry miss
        """
        layout = self.resolve_layout(plot)
        if layout is None:
            return None

        progress = [
            UnitProgress(plot_id=plot.id, sampling_unit_id=unit.id, label=unit.label)
            for unit in sampling_units(layout.root)
        ]
        logger.info(f"Initialized progress for {len(progress)} sampling units of plot {plot.id}")
        return progress

    def place_observations(
        self,
        root: NodeInstance,
        observations: List[Observation],
        configuration: Optional[PlotConfiguration] = None,
        min_inter_tree_distance: Optional[float] = None,
        radius_for: Optional[RadiusFunction] = None,
        transform: Optional[DisplayTransform] = None,
    ) -> PlacementResult:
        """
        Place observations, honouring the plot's own spacing rule when present.

        An explicit ``min_inter_tree_distance`` wins over the configuration.
        """
        if min_inter_tree_distance is None and configuration is not None:
            min_inter_tree_distance = configuration.rules.min_inter_tree_distance

        return self.placement_engine.place(
            root,
            observations,
            min_inter_tree_distance=min_inter_tree_distance,
            radius_for=radius_for,
            transform=transform,
        )

    def georeference(
        self,
        origin: GeoOrigin,
        placements: List[PlacedObservation],
    ) -> List[Tuple[str, float, float]]:
        """
        Convert meter placements to lat/lon.

        Args:
            origin: Surveyed origin and orientation of the plot
            placements: Placements in plot meters (identity transform)

        Returns:
            List of (observation_id, latitude, longitude) tuples
        """
        latlon = local_to_latlon(
            origin.lat,
            origin.lng,
            [(p.x, p.y) for p in placements],
            orientation_deg=origin.orientation,
        )
        return [
            (placement.observation_id, lat, lon)
            for placement, (lat, lon) in zip(placements, latlon)
        ]
