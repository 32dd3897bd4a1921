"""
API request models using Pydantic.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from plot_layout.config import settings
from plot_layout.domain.models import GeoOrigin, NodeInstance, Observation, PlotConfiguration
from plot_layout.domain.shapes import ShapeDefinition


class StaticLayoutRequest(BaseModel):
    """Request model for resolving a registered blueprint."""
    blueprint_id: str = Field(
        description="Id of a registered blueprint",
        examples=["std-10x10-4q"]
    )
    version: Optional[int] = Field(
        default=None,
        ge=1,
        description="Blueprint version; latest when omitted"
    )
    root_shape: Optional[ShapeDefinition] = Field(
        default=None,
        description="Override for the root dimensions"
    )
    plot_id: Optional[str] = Field(
        default=None,
        description="Owning plot; part of every stable node id"
    )


class DynamicLayoutRequest(BaseModel):
    """Request model for generating a layout from a one-off configuration."""
    plot_id: str = Field(description="Owning plot")
    configuration: PlotConfiguration


class ViewportSpec(BaseModel):
    """Display area the placements should be scaled into."""
    width: float = Field(gt=0, allow_inf_nan=False)
    height: float = Field(gt=0, allow_inf_nan=False)
    padding: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    flip_y: bool = Field(default=False, description="Measure y downward from the top edge")

    @model_validator(mode="after")
    def check_drawable_area(self) -> "ViewportSpec":
        padding = settings.display_padding if self.padding is None else self.padding
        if 2 * padding >= min(self.width, self.height):
            raise ValueError(f"padding {padding} leaves no drawable area in a {self.width}x{self.height} viewport")
        return self


class RadiusSpec(BaseModel):
    """Clamped linear radius map; unset fields fall back to settings."""
    per_unit: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    minimum: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    maximum: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    default_measurement: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


class PlacementRequest(BaseModel):
    """Request model for placing observations in a layout tree."""
    layout: NodeInstance = Field(description="Layout tree the observations belong to")
    observations: List[Observation] = Field(default_factory=list)
    min_inter_tree_distance: Optional[float] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        description="Clearance between placed points in meters; settings default when omitted"
    )
    radius: Optional[RadiusSpec] = None
    viewport: Optional[ViewportSpec] = Field(
        default=None,
        description="Scale output into this viewport; meters when omitted"
    )
    origin: Optional[GeoOrigin] = Field(
        default=None,
        description="Plot origin; adds lat/lon to each placement (meter output only)"
    )
