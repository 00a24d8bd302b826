"""
FastAPI application for the CMA adjustment service.

Production deployment configuration via environment variables.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.cma import CmaRepository
from utils.config import Config
from web.cma_routes import router as cma_router

logger = logging.getLogger(__name__)

# =============================================================================
# Environment Configuration
# =============================================================================

# Production mode detection
IS_PRODUCTION = os.getenv("RAILWAY_ENVIRONMENT") is not None or os.getenv("PRODUCTION", "").lower() == "true"

# CORS configuration - locked down for production
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else []
if not ALLOWED_ORIGINS and not IS_PRODUCTION:
    # Development fallback only
    ALLOWED_ORIGINS = ["http://localhost:8000", "http://127.0.0.1:8000"]

# Debug mode - NEVER enabled in production
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true" and not IS_PRODUCTION

VERSION = "1.0.0"


def create_app(
    config: Optional[Config] = None,
    repository: Optional[CmaRepository] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration (default: loaded from environment)
        repository: CMA store (default: built from config)
    """
    config = config or Config.load()
    default_rates = config.default_rates()

    app = FastAPI(
        title="CMA Adjustment Engine",
        description="Comparable adjustments and provenance for CMA presentations",
        version=VERSION,
        # Production settings: disable docs/redoc for private deployment
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=DEBUG_MODE,
    )

    app.state.default_rates = default_rates
    app.state.cma_repository = repository or CmaRepository(
        config.cma_store_path, default_rates
    )

    # Healthchecks: no dependencies, no IO
    @app.get("/", include_in_schema=False)
    def root():
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        return {
            "status": "healthy",
            "version": VERSION,
            "environment": "production" if IS_PRODUCTION else "development",
        }

    if ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=["*"],
        )

    app.include_router(cma_router)

    logger.info(
        "CMA adjustment service configured (store=%s)",
        config.cma_store_path or "memory",
    )
    return app


# Create app instance for uvicorn
app = create_app()
