"""Health check endpoints.

Provides checks for:
- Local cache database connectivity
- Remote store and Claude API configuration
- Sync state of both collections
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pap import __version__
from pap.container import AppContainer
from pap.dependencies import get_analysis_service, get_container, get_sync_coordinator
from pap.logging_config import get_logger
from pap.services.analysis_service import AnalysisService
from pap.services.sync_coordinator import SyncCoordinator

router = APIRouter()
logger = get_logger(__name__)


def check_local_cache(container: AppContainer) -> Dict[str, Any]:
    try:
        with container.session_factory()() as session:
            session.execute(text("SELECT 1"))
        return {"healthy": True, "message": "Local cache connected"}
    except SQLAlchemyError as e:
        logger.error("local_cache_health_check_failed", error=str(e))
        return {"healthy": False, "message": f"Local cache error: {e}"}


def check_remote_store(coordinator: SyncCoordinator) -> Dict[str, Any]:
    """Configuration only; reachability shows up as demo mode in ``sync``."""
    if not coordinator.remote.is_configured():
        return {"healthy": False, "message": "Remote store not configured"}
    if coordinator.demo_mode:
        return {"healthy": False, "message": "Remote store unreachable at last load (demo mode)"}
    return {"healthy": True, "message": "Remote store configured"}


def check_llm_api(analysis: AnalysisService) -> Dict[str, Any]:
    # No live call: a health probe should not cost tokens
    if not analysis.ai_available:
        return {"healthy": False, "message": "Anthropic API key not configured; heuristic analysis only"}
    return {"healthy": True, "message": "Claude API key configured"}


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    return {"status": "healthy", "service": "pap", "version": __version__}


@router.get("/health/detailed")
async def detailed_health_check(
    container: AppContainer = Depends(get_container),
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    analysis: AnalysisService = Depends(get_analysis_service),
) -> Dict[str, Any]:
    """Dependency status plus the coordinator's per-collection sync state.

    Missing remote or AI configuration degrades the status; the service
    still answers from its fallbacks.
    """
    checks = {
        "local_cache": check_local_cache(container),
        "remote_store": check_remote_store(coordinator),
        "claude_api": check_llm_api(analysis),
    }

    all_healthy = all(check["healthy"] for check in checks.values())
    overall_status = "healthy" if all_healthy else "degraded"

    logger.info(
        "health_check_performed",
        status=overall_status,
        local_cache=checks["local_cache"]["healthy"],
        remote_store=checks["remote_store"]["healthy"],
        claude_api=checks["claude_api"]["healthy"],
    )

    return {
        "status": overall_status,
        "service": "pap",
        "version": __version__,
        "checks": checks,
        "sync": coordinator.status(),
    }


@router.get("/health/ready")
async def readiness_check(coordinator: SyncCoordinator = Depends(get_sync_coordinator)) -> Dict[str, Any]:
    """200 once both collections are loaded, 503 before."""
    if not coordinator.ready:
        raise HTTPException(status_code=503, detail={"ready": False, "reason": "Collections still loading"})
    return {"ready": True, "demo_mode": coordinator.demo_mode}


@router.get("/health/live")
async def liveness_check() -> Dict[str, Any]:
    return {"alive": True}
