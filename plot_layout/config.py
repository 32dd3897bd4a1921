"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Placement Engine Parameters
    placement_min_inter_tree_distance: float = Field(
        default=0.5,
        ge=0,
        description="Default minimum clearance between placed observations (meters)"
    )
    placement_max_attempts: int = Field(
        default=100,
        ge=1,
        description="Rejection sampling budget per implicitly placed observation"
    )

    # Visual radius map (size measurement -> meters)
    radius_default_measurement: float = Field(
        default=50.0,
        description="GBH (cm) assumed when an observation has no size measurement"
    )
    radius_per_measurement_unit: float = Field(
        default=0.005,
        description="Meters of visual radius per cm of GBH"
    )
    radius_min: float = Field(
        default=0.1,
        description="Lower clamp for the visual radius in meters"
    )
    radius_max: float = Field(
        default=0.5,
        description="Upper clamp for the visual radius in meters"
    )

    # Geometry
    coordinate_precision: int = Field(
        default=2,
        description="Decimal places kept for dynamically generated coordinates"
    )
    display_padding: float = Field(
        default=16.0,
        description="Padding in display units used when fitting a plot to a viewport"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Plot Layout Engine",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        env_prefix = "PLOT_LAYOUT_"
        case_sensitive = False


# Global settings instance
settings = Settings()
