"""
API router for observation placement.
"""
from fastapi import APIRouter, HTTPException

from plot_layout.api.dependencies import PlotLayoutServiceDep
from plot_layout.api.v1.models.requests import PlacementRequest
from plot_layout.api.v1.models.responses import PlacementItem, PlacementResponse
from plot_layout.config import settings
from plot_layout.services.domain.placement_engine import ClampedLinearRadius
from plot_layout.utils.display_scale import DisplayTransform


router = APIRouter(tags=["placements"])


@router.post(
    "/placements",
    response_model=PlacementResponse,
    response_model_by_alias=False,
    summary="Place observations inside their sampling units",
    responses={400: {"description": "Conflicting output options"}},
    description="""
    Position observations in a layout tree.

    Observations with stored local coordinates are mapped directly. The rest
    are scattered by seeded rejection sampling:
    - Deterministic per observation id
    - Minimum clearance between placed points
    - Exclusion-zone subplots are avoided
    - Attempt budget per observation; exhausted placements are flagged

    Lat/lon is added when an origin is given and the output is in meters.
    """,
)
async def place_observations(
    request: PlacementRequest,
    layout_service: PlotLayoutServiceDep,
) -> PlacementResponse:
    if request.origin is not None and request.viewport is not None:
        raise HTTPException(
            status_code=400,
            detail="origin and viewport cannot be combined: georeferencing needs meter output"
        )

    radius_for = None
    if request.radius is not None:
        radius_for = ClampedLinearRadius(**request.radius.model_dump())

    transform = None
    if request.viewport is not None:
        viewport = request.viewport
        transform = DisplayTransform.fit(
            request.layout,
            viewport.width,
            viewport.height,
            padding=settings.display_padding if viewport.padding is None else viewport.padding,
            flip_y=viewport.flip_y,
        )

    result = layout_service.place_observations(
        request.layout,
        request.observations,
        min_inter_tree_distance=request.min_inter_tree_distance,
        radius_for=radius_for,
        transform=transform,
    )

    items = [PlacementItem(**p.model_dump()) for p in result.placements]
    if request.origin is not None:
        geo = layout_service.georeference(request.origin, result.placements)
        for item, (_, lat, lon) in zip(items, geo):
            item.latitude = lat
            item.longitude = lon

    return PlacementResponse(
        placement_count=len(items),
        exhausted_count=result.exhausted_count,
        placements=items,
        diagnostics=result.diagnostics,
    )
