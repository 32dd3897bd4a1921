"""
API router for layout generation endpoints.
"""
from fastapi import APIRouter, Body, HTTPException
from typing import Annotated, Any, Union

from plot_layout.api.dependencies import PlotLayoutServiceDep
from plot_layout.api.v1.models.requests import DynamicLayoutRequest, StaticLayoutRequest
from plot_layout.api.v1.models.responses import LayoutResponse, UnitProgressResponse
from plot_layout.services.domain.dynamic_layout_generator import EphemeralLayout
from plot_layout.services.domain.static_layout_generator import LayoutResult
from plot_layout.utils.traversal import sampling_units


router = APIRouter(tags=["layouts"])


def _to_response(layout: Union[LayoutResult, EphemeralLayout]) -> LayoutResponse:
    root = layout.root
    ephemeral = isinstance(layout, EphemeralLayout)
    return LayoutResponse(
        plot_id=root.plot_id,
        blueprint_id=root.blueprint_id,
        blueprint_version=root.blueprint_version,
        ephemeral=ephemeral,
        generation_id=layout.generation_id if ephemeral else None,
        sampling_unit_count=len(sampling_units(root)),
        layout=root,
        diagnostics=layout.diagnostics,
        unimplemented_rules=layout.unimplemented_rules if ephemeral else [],
    )


@router.post(
    "/layouts/static",
    response_model=LayoutResponse,
    response_model_by_alias=False,
    summary="Resolve a registered blueprint",
    description="""
    Resolve a versioned blueprint into a layout tree.

    Node ids are stable: the same blueprint, version, plot id and path always
    yield the same id, so the tree can be recomputed on every read.
    """,
    responses={
        404: {"description": "Blueprint (version) not registered"},
    }
)
async def resolve_static_layout(
    request: StaticLayoutRequest,
    layout_service: PlotLayoutServiceDep,
) -> LayoutResponse:
    result = layout_service.resolve_static(
        request.blueprint_id,
        version=request.version,
        root_shape=request.root_shape,
        plot_id=request.plot_id,
    )
    if result is None:
        raise HTTPException(
            status_code=404,
            detail=f"Blueprint '{request.blueprint_id}' (version={request.version}) not found"
        )
    return _to_response(result)


@router.post(
    "/layouts/dynamic",
    response_model=LayoutResponse,
    response_model_by_alias=False,
    summary="Generate a layout from a plot configuration",
    description="""
    Build a layout tree from a one-off configuration.

    Every call mints new node ids. Capture the sampling unit ids of the
    first generation (see /plots/unit-progress) before relying on them.
    """,
)
async def generate_dynamic_layout(
    request: DynamicLayoutRequest,
    layout_service: PlotLayoutServiceDep,
) -> LayoutResponse:
    layout = layout_service.resolve_dynamic(request.configuration, request.plot_id)
    return _to_response(layout)


@router.post(
    "/plots/unit-progress",
    response_model=UnitProgressResponse,
    response_model_by_alias=False,
    summary="Initialize unit progress for a new plot",
    responses={
        404: {"description": "Referenced blueprint not registered"},
        422: {"description": "Malformed plot record"},
    }
)
async def initialize_unit_progress(
    plot: Annotated[dict[str, Any], Body(description="Plot record as stored")],
    layout_service: PlotLayoutServiceDep,
) -> UnitProgressResponse:
    """
    Create one NOT_STARTED progress seed per sampling unit.

    Args:
        plot: Raw plot record (blueprint reference or configuration)
        layout_service: Plot layout service (injected dependency)

    Returns:
        UnitProgressResponse with the captured unit ids

    Raises:
        LayoutValidationError: If the plot record is malformed (mapped to 422)
        HTTPException: If the referenced blueprint is not registered
    """
    record = layout_service.load_plot(plot)
    units = layout_service.initialize_unit_progress(record)
    if units is None:
        raise HTTPException(
            status_code=404,
            detail=f"Blueprint '{record.blueprint_id}' (version={record.blueprint_version}) not found"
        )
    return UnitProgressResponse(
        plot_id=record.id,
        ephemeral=record.configuration is not None,
        units=units,
    )
