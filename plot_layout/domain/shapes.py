"""
Primitive shape definitions.

All dimensions are in meters. Non-finite or negative values are rejected when
the model is constructed.
"""
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field


class RectangleShape(BaseModel):
    """Axis-aligned rectangle; ``length`` runs along the y axis."""
    kind: Literal["RECTANGLE"] = "RECTANGLE"
    width: float = Field(ge=0, allow_inf_nan=False, description="Extent along x in meters")
    length: float = Field(ge=0, allow_inf_nan=False, description="Extent along y in meters")

    class Config:
        frozen = True


class CircleShape(BaseModel):
    kind: Literal["CIRCLE"] = "CIRCLE"
    radius: float = Field(ge=0, allow_inf_nan=False, description="Radius in meters")

    class Config:
        frozen = True


class LineShape(BaseModel):
    """Transect."""
    kind: Literal["LINE"] = "LINE"
    length: float = Field(ge=0, allow_inf_nan=False)
    width: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    class Config:
        frozen = True


class PointShape(BaseModel):
    """Point quadrat."""
    kind: Literal["POINT"] = "POINT"
    radius: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    class Config:
        frozen = True


ShapeDefinition = Annotated[
    Union[RectangleShape, CircleShape, LineShape, PointShape],
    Field(discriminator="kind"),
]
