"""
API response models using Pydantic.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from plot_layout.domain.models import NodeInstance, SubplotRule, UnitProgress
from plot_layout.services.domain.diagnostics import Diagnostic


class BlueprintSummary(BaseModel):
    """Single entry of the blueprint catalogue."""
    id: str
    version: int
    name: str
    root_kind: str = Field(description="Shape kind of the root node")


class BlueprintListResponse(BaseModel):
    blueprints: List[BlueprintSummary]


class LayoutResponse(BaseModel):
    """Response model for layout endpoints."""
    plot_id: Optional[str] = Field(description="Owning plot")
    blueprint_id: str
    blueprint_version: int
    ephemeral: bool = Field(
        description="True when node ids are fresh per call and must be captured by the caller"
    )
    generation_id: Optional[str] = Field(
        default=None,
        description="Identity of an ephemeral generation"
    )
    sampling_unit_count: int
    layout: NodeInstance
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    unimplemented_rules: List[SubplotRule] = Field(default_factory=list)


class UnitProgressResponse(BaseModel):
    """Response model for unit-progress initialization."""
    plot_id: str
    ephemeral: bool
    units: List[UnitProgress]


class PlacementItem(BaseModel):
    """Position of a single observation."""
    observation_id: str
    sampling_unit_id: str
    x: float
    y: float
    radius: float
    source: str
    attempts: int
    budget_exhausted: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class PlacementResponse(BaseModel):
    """Response model for the placement endpoint."""
    placement_count: int
    exhausted_count: int = Field(
        description="Placements that ran out of attempts and kept their last candidate"
    )
    placements: List[PlacementItem]
    diagnostics: List[Diagnostic] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "placement_count": 1,
                "exhausted_count": 0,
                "placements": [
                    {
                        "observation_id": "tree-1",
                        "sampling_unit_id": "6f1c...",
                        "x": 2.41,
                        "y": 7.03,
                        "radius": 0.25,
                        "source": "IMPLICIT",
                        "attempts": 1,
                        "budget_exhausted": False,
                    }
                ],
                "diagnostics": [],
            }
        }
