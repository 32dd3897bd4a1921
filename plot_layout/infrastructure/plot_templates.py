"""
Ready-made plot configurations offered when creating a plot.
"""
from typing import Optional
from pydantic import BaseModel

from plot_layout.domain.models import PlotConfiguration


class PlotTemplate(BaseModel):
    """Named PlotConfiguration preset."""
    id: str
    name: str
    description: str
    config: PlotConfiguration


def _quadrant_config(shape: str, dimensions: dict) -> dict:
    return {
        "shape": shape,
        "dimensions": dimensions,
        "grid": {"enabled": True, "rows": 2, "cols": 2, "labelStyle": "Q1-Q4"},
        "subplots": {"enabled": False, "rules": []},
        "rules": {"minInterTreeDistance": 0.5},
    }


def _corner_rule(position: str) -> dict:
    return {
        "type": "fixed",
        "shape": "RECTANGLE",
        "dimensions": {"width": 5, "length": 5},
        "position": position,
        "excludesCanopy": False,
        "strata": ["HERB", "SAPLING"],
    }


PLOT_TEMPLATES: list[PlotTemplate] = [
    PlotTemplate.model_validate({
        "id": "standard-10x10",
        "name": "Standard 10x10m",
        "description": "The gold standard for vegetation sampling. 100m² area divided into 4 quadrants (5x5m).",
        "config": _quadrant_config("RECTANGLE", {"width": 10, "length": 10}),
    }),
    PlotTemplate.model_validate({
        "id": "standard-20x20",
        "name": "Large Forest Plot (20x20m)",
        "description": "400m² plot for high-density mature forests. Divided into 4 quadrants (10x10m).",
        "config": _quadrant_config("RECTANGLE", {"width": 20, "length": 20}),
    }),
    PlotTemplate.model_validate({
        "id": "circular-10m",
        "name": "Circular Plot (10m Radius)",
        "description": "Circular plot (~314m²) used for rapid assessment.",
        # Grid stays requested; circular plots report it as unsupported
        "config": _quadrant_config("CIRCLE", {"width": 20, "length": 20, "radius": 10}),
    }),
    PlotTemplate.model_validate({
        "id": "transect-50x5",
        "name": "Gentry Transect Segment (50x2m)",
        "description": "A long, narrow transect (100m²) for diversity studies. Often used in sets of 10.",
        "config": {
            "shape": "RECTANGLE",
            "dimensions": {"width": 2, "length": 50},
            "grid": {"enabled": True, "rows": 10, "cols": 1, "labelStyle": "Alpha"},
            "subplots": {"enabled": False, "rules": []},
            "rules": {"minInterTreeDistance": 0.2},
        },
    }),
    PlotTemplate.model_validate({
        "id": "nested-regeneration",
        "name": "Nested Regeneration Plot (20x20m)",
        "description": "20x20m plot with dedicated 5x5m corner subplots for sampling regeneration and herbs.",
        "config": {
            **_quadrant_config("RECTANGLE", {"width": 20, "length": 20}),
            "subplots": {
                "enabled": True,
                "rules": [
                    _corner_rule("CORNER_SW"),
                    _corner_rule("CORNER_SE"),
                    _corner_rule("CORNER_NW"),
                    _corner_rule("CORNER_NE"),
                ],
            },
        },
    }),
]


def get_template(template_id: str) -> Optional[PlotTemplate]:
    """Template by id, or None when unknown."""
    for template in PLOT_TEMPLATES:
        if template.id == template_id:
            return template
    return None
