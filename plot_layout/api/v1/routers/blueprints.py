"""
API router for the blueprint and template catalogue.
"""
from fastapi import APIRouter, HTTPException, Path, Query
from typing import Annotated, List, Optional

from plot_layout.api.dependencies import BlueprintRegistryDep
from plot_layout.api.v1.models.responses import BlueprintListResponse, BlueprintSummary
from plot_layout.domain.models import Blueprint
from plot_layout.infrastructure.plot_templates import PLOT_TEMPLATES, PlotTemplate


router = APIRouter(tags=["catalogue"])


@router.get(
    "/blueprints",
    response_model=BlueprintListResponse,
    summary="List registered blueprints",
)
async def list_blueprints(registry: BlueprintRegistryDep) -> BlueprintListResponse:
    """
    List every published blueprint version.

    Args:
        registry: Blueprint registry (injected dependency)

    Returns:
        BlueprintListResponse with one entry per (id, version)
    """
    return BlueprintListResponse(
        blueprints=[
            BlueprintSummary(
                id=bp.id,
                version=bp.version,
                name=bp.name,
                root_kind=bp.root.shape.kind,
            )
            for bp in registry.list()
        ]
    )


@router.get(
    "/blueprints/{blueprint_id}",
    response_model=Blueprint,
    response_model_by_alias=False,
    summary="Get a blueprint definition",
    responses={404: {"description": "Blueprint (version) not registered"}},
)
async def get_blueprint(
    blueprint_id: Annotated[str, Path(description="Blueprint id")],
    registry: BlueprintRegistryDep,
    version: Annotated[Optional[int], Query(ge=1, description="Version; latest when omitted")] = None,
) -> Blueprint:
    blueprint = registry.get(blueprint_id, version)
    if blueprint is None:
        raise HTTPException(
            status_code=404,
            detail=f"Blueprint '{blueprint_id}' (version={version}) not found"
        )
    return blueprint


@router.get(
    "/templates",
    response_model=List[PlotTemplate],
    response_model_by_alias=False,
    summary="List plot configuration templates",
)
async def list_templates() -> List[PlotTemplate]:
    return PLOT_TEMPLATES
