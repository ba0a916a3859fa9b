"""
DocuValle - FastAPI Application
Document authenticity analysis service.

Core Promise: tell a reviewer, in one number and one word, how far an uploaded
certificate or diploma can be trusted, and show the evidence behind it.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.errors import setup_exception_handlers
from app.routers.authenticity import router as authenticity_router
from app.services.authenticity import build_services


# =============================================================================
# Logging Setup
# =============================================================================

def setup_logging():
    """Configure logging based on settings using enhanced logging config."""
    from app.core.logging_config import setup_logging as configure_logging
    settings = get_settings()
    configure_logging(
        level=settings.log_level.upper(),
        json_format=settings.log_json_format,
        log_file=Path("logs/docuvalle.log") if settings.log_json_format else None,
    )


# =============================================================================
# Lifespan (Startup/Shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create the OCR / generative clients on startup and close them on shutdown.
    One set of clients is shared by all requests.
    """
    settings = get_settings()
    logger = logging.getLogger(__name__)

    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    services = build_services(settings)
    app.state.authenticity_services = services

    if not settings.vision_configured:
        logger.warning("GOOGLE_VISION_API_KEY is not set - image analysis will fail")
    if not settings.generative_configured:
        logger.info("Gemini not configured - scoring uses vision signals only")

    try:
        yield
    finally:
        await services.aclose()
        app.state.authenticity_services = None
        logger.info("%s stopped", settings.app_name)


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.enable_docs else None,
        redoc_url="/api/redoc" if settings.enable_docs else None,
        openapi_url="/api/openapi.json" if settings.enable_docs else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)
    app.include_router(authenticity_router)

    @app.get("/api/health", tags=["Health"])
    async def health():
        """Liveness check."""
        return {
            "status": "ok",
            "service": settings.app_name,
            "version": settings.app_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


# Create the app instance
app = create_app()


# =============================================================================
# Development Server
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
