"""
Domain models for plot layouts and field observations.

These models represent the core domain entities and should be independent
of any infrastructure concerns (registries, storage, HTTP).

Blueprint-side models (``NodeDefinition``, ``Blueprint``) are frozen: a
published (id, version) pair never changes. ``NodeInstance`` trees are derived
values, recomputed on demand and never persisted as geometry.
"""
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field, model_validator

from plot_layout.domain.shapes import ShapeDefinition


NodeType = Literal["CONTAINER", "SAMPLING_UNIT"]
NodeRole = Literal["MAIN_PLOT", "QUADRANT", "SUBPLOT", "TRANSECT", "POINT", "OTHER"]
Anchor = Literal["CENTER", "TOP_LEFT", "TOP_RIGHT", "BOTTOM_RIGHT", "BOTTOM_LEFT"]
RowOrder = Literal["TOP_TO_BOTTOM", "BOTTOM_TO_TOP"]
ColOrder = Literal["LEFT_TO_RIGHT", "RIGHT_TO_LEFT"]
SubplotPosition = Literal["CORNER_SW", "CORNER_SE", "CORNER_NW", "CORNER_NE", "CENTER"]

EXCLUDES_CANOPY_TAG = "excludes-canopy"
DYNAMIC_BLUEPRINT_ID = "dynamic"


# ============================================================
# Blueprint (design time)
# ============================================================

class GridSpec(BaseModel):
    """Uniform rows x cols partition of a rectangular parent."""
    rows: int = Field(ge=1)
    cols: int = Field(ge=1)
    row_order: RowOrder = Field(default="TOP_TO_BOTTOM", alias="rowOrder")
    col_order: ColOrder = Field(default="LEFT_TO_RIGHT", alias="colOrder")
    label_pattern: Optional[str] = Field(
        default=None,
        alias="labelPattern",
        description="Tokens: {idx} (running index from start_index), {r}, {c} (1-based)"
    )
    start_index: int = Field(default=1, alias="startIndex")

    class Config:
        frozen = True
        populate_by_name = True


class GridGenerator(BaseModel):
    method: Literal["GRID"] = "GRID"
    grid: GridSpec

    class Config:
        frozen = True


class NestedGenerator(BaseModel):
    method: Literal["NESTED"] = "NESTED"
    child: "NodeDefinition"

    class Config:
        frozen = True


class ChildPosition(BaseModel):
    """Anchor pair plus an explicit offset in meters."""
    parent_anchor: Anchor = Field(alias="parentAnchor")
    child_anchor: Anchor = Field(default="CENTER", alias="childAnchor")
    offset_x: float = Field(default=0.0, alias="offsetX", allow_inf_nan=False)
    offset_y: float = Field(default=0.0, alias="offsetY", allow_inf_nan=False)

    class Config:
        frozen = True
        populate_by_name = True


class FixedChild(BaseModel):
    definition: "NodeDefinition"
    position: ChildPosition

    class Config:
        frozen = True


class FixedListGenerator(BaseModel):
    method: Literal["FIXED_LIST"] = "FIXED_LIST"
    children: List[FixedChild] = Field(default_factory=list)

    class Config:
        frozen = True


ChildrenGenerator = Annotated[
    Union[GridGenerator, NestedGenerator, FixedListGenerator],
    Field(discriminator="method"),
]


class NodeDefinition(BaseModel):
    """Reusable node template owned by a blueprint."""
    type: NodeType
    shape: ShapeDefinition
    label: Optional[str] = None
    code: Optional[str] = Field(default=None, description="Semantic code, e.g. 'Q' or 'H-NW'")
    children_generator: Optional[ChildrenGenerator] = Field(default=None, alias="childrenGenerator")
    role: Optional[NodeRole] = None
    tags: List[str] = Field(default_factory=list)

    class Config:
        frozen = True
        populate_by_name = True


class Blueprint(BaseModel):
    """Versioned, reusable plot-layout template."""
    id: str
    version: int = Field(ge=1)
    name: str
    root: NodeDefinition

    class Config:
        frozen = True


NestedGenerator.model_rebuild()
FixedChild.model_rebuild()


# ============================================================
# Parametric configuration (one-off, unversioned)
# ============================================================

class PlotDimensions(BaseModel):
    width: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    length: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    radius: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


class GridSettings(BaseModel):
    enabled: bool = False
    rows: int = Field(default=1, ge=1)
    cols: int = Field(default=1, ge=1)
    label_style: str = Field(
        default="Q1-Q4",
        alias="labelStyle",
        description="'Q1-Q4', 'Matrix', or anything else for 'Cell r-c'"
    )

    class Config:
        populate_by_name = True


class SubplotDimensions(BaseModel):
    width: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    length: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    radius: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


class SubplotRule(BaseModel):
    type: Literal["fixed", "random"]
    shape: Literal["RECTANGLE", "CIRCLE"] = "RECTANGLE"
    dimensions: SubplotDimensions = Field(default_factory=SubplotDimensions)
    position: SubplotPosition = "CENTER"
    strata: List[str] = Field(default_factory=list)
    excludes_canopy: bool = Field(default=False, alias="excludesCanopy")

    class Config:
        populate_by_name = True


class SubplotSettings(BaseModel):
    enabled: bool = False
    rules: List[SubplotRule] = Field(default_factory=list)


class PlacementRules(BaseModel):
    min_inter_tree_distance: float = Field(
        default=0.5,
        ge=0,
        allow_inf_nan=False,
        alias="minInterTreeDistance",
    )

    class Config:
        populate_by_name = True


class PlotConfiguration(BaseModel):
    """Parametric layout description belonging to exactly one plot."""
    shape: Literal["RECTANGLE", "CIRCLE"] = "RECTANGLE"
    dimensions: PlotDimensions
    grid: GridSettings = Field(default_factory=GridSettings)
    subplots: SubplotSettings = Field(default_factory=SubplotSettings)
    rules: PlacementRules = Field(default_factory=PlacementRules)


# ============================================================
# Resolved instance tree (runtime)
# ============================================================

class NodeInstance(BaseModel):
    """
    A resolved node.

    ``x``/``y`` is the absolute offset, in plot meters (Cartesian, y up), of the
    bottom-left corner of the shape's bounding box.
    """
    id: str
    blueprint_id: str = Field(alias="blueprintId")
    blueprint_version: int = Field(alias="blueprintVersion")
    plot_id: Optional[str] = Field(default=None, alias="plotId")
    type: NodeType
    label: str
    path: str
    shape: ShapeDefinition
    x: float
    y: float
    rotation: Optional[float] = Field(default=None, description="Degrees")
    role: Optional[NodeRole] = None
    tags: List[str] = Field(default_factory=list)
    children: List["NodeInstance"] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @property
    def is_sampling_unit(self) -> bool:
        return self.type == "SAMPLING_UNIT"

    @property
    def excludes_canopy(self) -> bool:
        return EXCLUDES_CANOPY_TAG in self.tags


NodeInstance.model_rebuild()


# ============================================================
# Observations and placement output
# ============================================================

class Observation(BaseModel):
    """Field observation (e.g. a tree) recorded against a sampling unit."""
    id: str
    sampling_unit_id: str = Field(alias="samplingUnitId")
    local_x: Optional[float] = Field(
        default=None,
        alias="localX",
        allow_inf_nan=False,
        description="Meters from the unit's bottom-left corner"
    )
    local_y: Optional[float] = Field(default=None, alias="localY", allow_inf_nan=False)
    gbh: Optional[float] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        description="Girth at breast height in cm"
    )

    class Config:
        populate_by_name = True

    @property
    def has_stored_position(self) -> bool:
        return self.local_x is not None and self.local_y is not None


class PlacedObservation(BaseModel):
    """Position and visual radius of one observation in caller space."""
    observation_id: str = Field(alias="observationId")
    sampling_unit_id: str = Field(alias="samplingUnitId")
    x: float
    y: float
    radius: float
    source: Literal["EXPLICIT", "IMPLICIT"]
    attempts: int = 0
    budget_exhausted: bool = Field(default=False, alias="budgetExhausted")

    class Config:
        populate_by_name = True


class UnitProgress(BaseModel):
    """Seed for a unit-progress record, captured right after plot creation."""
    plot_id: str = Field(alias="plotId")
    sampling_unit_id: str = Field(alias="samplingUnitId")
    label: str
    status: Literal["NOT_STARTED", "IN_PROGRESS", "DONE"] = "NOT_STARTED"

    class Config:
        populate_by_name = True


# ============================================================
# Plot record (as supplied by the storage collaborator)
# ============================================================

class GeoOrigin(BaseModel):
    """Surveyed location of the plot's local origin."""
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    orientation: float = Field(
        default=0.0,
        ge=0,
        le=360,
        description="Azimuth of the plot's local y axis, degrees clockwise from north"
    )


class PlotRecord(BaseModel):
    """Layout inputs of a plot: a blueprint reference or a configuration."""
    id: str
    blueprint_id: Optional[str] = Field(default=None, alias="blueprintId")
    blueprint_version: Optional[int] = Field(default=None, alias="blueprintVersion")
    root_shape: Optional[ShapeDefinition] = Field(default=None, alias="rootShape")
    configuration: Optional[PlotConfiguration] = None
    origin: Optional[GeoOrigin] = None

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def _check_layout_source(self) -> "PlotRecord":
        has_blueprint = self.blueprint_id is not None
        has_configuration = self.configuration is not None
        if has_blueprint == has_configuration:
            raise ValueError("A plot needs exactly one of blueprint_id or configuration")
        return self
