"""FastAPI application entry point with structured logging and health checks."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pap import __version__
from pap.api import analysis, claimants, claims, dashboard
from pap.container import AppContainer
from pap.health import router as health_router
from pap.logging_config import get_logger, setup_logging
from pap.services.sync_coordinator import (
    ClaimantNotFoundError,
    ClaimNotFoundError,
    ImportValidationError,
    SyncNotReadyError,
)

logger = get_logger(__name__)

API_V1_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load both collections before serving; drain pending writes on shutdown."""
    container: AppContainer = app.state.container
    logger.info("application_startup", version=__version__)

    container.init_resources()
    coordinator = container.sync_coordinator()
    analysis_service = container.analysis_service()
    await coordinator.start()
    await analysis_service.init()
    logger.info("application_ready", demo_mode=coordinator.demo_mode, ai=analysis_service.ai_available)

    yield

    container.enrichment_service().dispose()
    await coordinator.dispose()
    await analysis_service.dispose()
    container.shutdown_resources()
    logger.info("application_shutdown")


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClaimNotFoundError)
    async def _claim_not_found(request: Request, exc: ClaimNotFoundError):
        return JSONResponse(status_code=404, content={"detail": f"Claim {exc.args[0]} not found"})

    @app.exception_handler(ClaimantNotFoundError)
    async def _claimant_not_found(request: Request, exc: ClaimantNotFoundError):
        return JSONResponse(status_code=404, content={"detail": f"Claimant {exc.args[0]} not found"})

    @app.exception_handler(ImportValidationError)
    async def _invalid_import(request: Request, exc: ImportValidationError):
        logger.warning("import_rejected", reason=str(exc))
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(SyncNotReadyError)
    async def _not_ready(request: Request, exc: SyncNotReadyError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    container = container or AppContainer()
    settings = container.settings()
    setup_logging(json_logs=settings.json_logs, log_level=settings.log_level)

    app = FastAPI(
        title="Prediction Accountability Platform",
        description=(
            "Tracks public predictions, scores how falsifiable they are, and "
            "keeps claim data in sync between a local cache and a shared remote store."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    _register_error_handlers(app)

    # Health checks (no versioning)
    app.include_router(health_router, tags=["health"])

    app.include_router(claims.router, prefix=f"{API_V1_PREFIX}/claims", tags=["claims"])
    app.include_router(claimants.router, prefix=f"{API_V1_PREFIX}/claimants", tags=["claimants"])
    app.include_router(dashboard.router, prefix=f"{API_V1_PREFIX}/dashboard", tags=["dashboard"])
    app.include_router(analysis.router, prefix=f"{API_V1_PREFIX}/analysis", tags=["analysis"])

    @app.get("/")
    async def root():
        return {
            "service": "Prediction Accountability Platform API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "api_version": "v1",
            "endpoints": {
                "claims": f"{API_V1_PREFIX}/claims/",
                "claimants": f"{API_V1_PREFIX}/claimants/",
                "dashboard": f"{API_V1_PREFIX}/dashboard/summary",
                "analysis": f"{API_V1_PREFIX}/analysis/vagueness",
            },
        }

    return app


app = create_app()
