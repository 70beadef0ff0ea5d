"""
Main FastAPI application for BloomWatch Atlas.

This module sets up the FastAPI application with middleware,
error handling, and API documentation.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import asyncio
import logging
import time
from contextlib import asynccontextmanager

# Import application components
from utils.logging import setup_logging

from . import endpoints
from .config import AppConfig
from .endpoints import router
from .models import HealthResponse
from .utils import create_dashboard

API_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown events.
    """
    # Startup
    config = AppConfig()
    setup_logging(
        name='',
        level=config.log_level,
        log_dir=config.log_dir,
        file_output=config.log_dir is not None,
        json_format=config.log_json
    )
    logger.info("Starting BloomWatch Atlas API...")

    bundle = create_dashboard(config)
    endpoints.bundle = bundle

    # Frame the globe on the generated observations once their extent is known
    store = bundle.dashboard.state.store
    await bundle.globe.fly_to(asyncio.to_thread(store.bounding_sphere))

    logger.info("BloomWatch Atlas API startup complete!")

    yield

    # Shutdown
    logger.info("Shutting down BloomWatch Atlas API...")
    bundle.dashboard.shutdown()
    endpoints.bundle = None
    logger.info("BloomWatch Atlas API shutdown complete!")


# Create FastAPI application
app = FastAPI(
    title="BloomWatch Atlas API",
    description="""
    BloomWatch Atlas Bloom Map API

    This API serves an interactive map of plant bloom observations with
    citizen-science, climate and agricultural overlays.

    ## Features

    * **Layered Map**: Leaflet map and 3D globe of the current layers
    * **Filtering**: Bloom type, intensity, confidence and focus region
    * **Time-lapse**: Month-by-month playback at adjustable speed
    * **Statistics**: Bloom, ecosystem and agricultural summaries
    * **Interactive Documentation**: Swagger UI and ReDoc available
    """,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add middleware
cors_config = AppConfig()
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_config.cors_origins,
    allow_credentials=True,
    allow_methods=cors_config.cors_methods,
    allow_headers=cors_config.cors_headers,
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request, call_next):
    """Add processing time to response headers."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# Error handlers
@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Handle 404 errors."""
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "message": "The requested resource was not found",
            "path": str(request.url.path)
        }
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Handle 500 errors."""
    logger.error(f"Internal server error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "An internal server error occurred"
        }
    )


# Health check endpoint
@app.get("/health", tags=["Health"], response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns the current status of the API and the loaded records.
    """
    bundle = endpoints.bundle
    return HealthResponse(
        status="healthy" if bundle else "starting",
        timestamp=time.time(),
        api_version=API_VERSION,
        records=bundle.dashboard.state.store.counts() if bundle else {},
        playback=bundle.dashboard.playback.state.value if bundle else None
    )


@app.get("/", tags=["Info"])
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Welcome to BloomWatch Atlas API",
        "description": "Interactive bloom map with time-lapse playback",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "map": "/api/v1/map",
        "globe": "/api/v1/globe"
    }


# Include API routes
app.include_router(router, prefix="/api/v1", tags=["BloomWatch"])
