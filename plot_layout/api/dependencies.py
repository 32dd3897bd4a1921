"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from plot_layout.infrastructure.blueprint_registry import (
    BlueprintRegistry,
    get_blueprint_registry,
)
from plot_layout.services.domain.placement_engine import PlacementEngine
from plot_layout.services.application.plot_layout_service import PlotLayoutService


def get_placement_engine() -> PlacementEngine:
    """
    Dependency factory for PlacementEngine.

    Returns:
        PlacementEngine instance
    """
    return PlacementEngine()


def get_plot_layout_service(
    registry: Annotated[BlueprintRegistry, Depends(get_blueprint_registry)],
    placement_engine: Annotated[PlacementEngine, Depends(get_placement_engine)],
) -> PlotLayoutService:
    """
    Dependency factory for PlotLayoutService.

    Args:
        registry: Blueprint registry (injected)
        placement_engine: Placement engine (injected)

    Returns:
        PlotLayoutService instance
    """
    return PlotLayoutService(registry=registry, placement_engine=placement_engine)


# Type aliases for cleaner route signatures
BlueprintRegistryDep = Annotated[BlueprintRegistry, Depends(get_blueprint_registry)]
PlotLayoutServiceDep = Annotated[PlotLayoutService, Depends(get_plot_layout_service)]
