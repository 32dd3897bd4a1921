"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample blueprints and plot configurations
- Resolved layout trees
- Sample observations
- FastAPI test client
"""
import pytest
from fastapi.testclient import TestClient

from plot_layout.main import app
from plot_layout.domain.models import Blueprint, Observation, PlotConfiguration
from plot_layout.infrastructure.blueprint_registry import (
    STD_10X10_QUADRANTS,
    STD_10X10_WITH_HERB_SUBPLOTS,
    BlueprintRegistry,
    BUILTIN_BLUEPRINTS,
)
from plot_layout.services.domain.static_layout_generator import StaticLayoutGenerator
from plot_layout.services.domain.placement_engine import PlacementConfig, PlacementEngine


# ============================================================
# Blueprint Fixtures
# ============================================================

@pytest.fixture
def quadrant_blueprint() -> Blueprint:
    """10x10m plot split into four 5x5m quadrants."""
    return STD_10X10_QUADRANTS


@pytest.fixture
def herb_blueprint() -> Blueprint:
    """10x10m plot with four 1x1m corner herb subplots."""
    return STD_10X10_WITH_HERB_SUBPLOTS


@pytest.fixture
def nested_blueprint() -> Blueprint:
    """20x20m container with a single 5x5m unit nested in its center."""
    return Blueprint.model_validate({
        "id": "nested-test",
        "version": 1,
        "name": "Nested test",
        "root": {
            "type": "CONTAINER",
            "label": "Main Plot",
            "shape": {"kind": "RECTANGLE", "width": 20, "length": 20},
            "childrenGenerator": {
                "method": "NESTED",
                "child": {
                    "type": "SAMPLING_UNIT",
                    "label": "Core",
                    "shape": {"kind": "RECTANGLE", "width": 5, "length": 5},
                },
            },
        },
    })


@pytest.fixture
def exclusion_blueprint() -> Blueprint:
    """
    10x10m sampling unit containing a 4x4m centered exclusion-zone subplot.
    """
    return Blueprint.model_validate({
        "id": "exclusion-test",
        "version": 1,
        "name": "Exclusion test",
        "root": {
            "type": "SAMPLING_UNIT",
            "label": "Main Plot",
            "role": "MAIN_PLOT",
            "shape": {"kind": "RECTANGLE", "width": 10, "length": 10},
            "childrenGenerator": {
                "method": "NESTED",
                "child": {
                    "type": "SAMPLING_UNIT",
                    "label": "Regeneration",
                    "role": "SUBPLOT",
                    "shape": {"kind": "RECTANGLE", "width": 4, "length": 4},
                    "tags": ["excludes-canopy"],
                },
            },
        },
    })


@pytest.fixture
def registry() -> BlueprintRegistry:
    """Fresh registry with the built-in blueprints."""
    return BlueprintRegistry(BUILTIN_BLUEPRINTS)


# ============================================================
# Configuration Fixtures
# ============================================================

@pytest.fixture
def quadrant_configuration() -> PlotConfiguration:
    """20x20m rectangular plot with a 2x2 Q1-Q4 grid."""
    return PlotConfiguration.model_validate({
        "shape": "RECTANGLE",
        "dimensions": {"width": 20, "length": 20},
        "grid": {"enabled": True, "rows": 2, "cols": 2, "labelStyle": "Q1-Q4"},
    })


@pytest.fixture
def bare_configuration() -> PlotConfiguration:
    """Rectangular plot with grid and subplots disabled."""
    return PlotConfiguration.model_validate({
        "shape": "RECTANGLE",
        "dimensions": {"width": 10, "length": 10},
    })


# ============================================================
# Layout and Observation Fixtures
# ============================================================

@pytest.fixture
def quadrant_layout(quadrant_blueprint):
    """Resolved 10x10m quadrant layout for plot 'plot-1'."""
    return StaticLayoutGenerator().generate(quadrant_blueprint, plot_id="plot-1").root


@pytest.fixture
def make_observations():
    """Factory for implicit observations in a single unit."""
    def _make(unit_id: str, count: int, prefix: str = "tree", gbh: float = 50.0) -> list[Observation]:
        return [
            Observation(id=f"{prefix}-{i}", sampling_unit_id=unit_id, gbh=gbh)
            for i in range(count)
        ]
    return _make


@pytest.fixture
def engine() -> PlacementEngine:
    """Placement engine with the default 0.5m clearance and 100 attempts."""
    return PlacementEngine(PlacementConfig(min_inter_tree_distance=0.5, max_attempts=100))


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    app.state.limiter.reset()
    return TestClient(app)
