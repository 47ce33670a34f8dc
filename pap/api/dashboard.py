"""Dashboard aggregates."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from pap.dependencies import get_sync_coordinator
from pap.services.sync_coordinator import SyncCoordinator

router = APIRouter()


@router.get("/summary")
async def dashboard_summary(sync: SyncCoordinator = Depends(get_sync_coordinator)) -> Dict[str, Any]:
    return sync.dashboard()


@router.get("/status")
async def sync_status(sync: SyncCoordinator = Depends(get_sync_coordinator)) -> Dict[str, Any]:
    return sync.status()


@router.post("/reload")
async def reload(sync: SyncCoordinator = Depends(get_sync_coordinator)) -> Dict[str, Any]:
    """Re-run the startup load; leaves demo mode once the remote store answers."""
    await sync.reload()
    return sync.status()
