"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from plot_layout.config import settings
from plot_layout.middleware.error_handler import ErrorHandlerMiddleware
from plot_layout.api.v1.routers import blueprints, layouts, placements
from plot_layout.infrastructure.blueprint_registry import get_blueprint_registry

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Rate limiter
limiter = Limiter(key_func=get_remote_address, default_limits=[f"{settings.rate_limit_requests}/minute"])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Placement config: min_inter_tree_distance={settings.placement_min_inter_tree_distance}, "
                f"max_attempts={settings.placement_max_attempts}")
    logger.info(f"Blueprints registered: {len(get_blueprint_registry())}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Plot Layout Engine for field vegetation surveys

    Turns plot definitions into spatial layout trees and positions field
    observations inside their sampling units.

    ## Features

    - **Blueprint Layouts**: Versioned templates (GRID, NESTED, FIXED_LIST) resolved
      into trees with stable, recomputable node ids
    - **Dynamic Layouts**: One-off plot configurations with quadrants and corner subplots
    - **Observation Placement**: Seeded rejection sampling with minimum spacing and
      exclusion zones, plus optional viewport scaling and georeferencing
    - **Diagnostics**: Degraded results are returned with structured notices, never
      silently dropped
    - **Rate Limiting**: Protects the API from abuse
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(blueprints.router, prefix="/api/v1")
app.include_router(layouts.router, prefix="/api/v1")
app.include_router(placements.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
