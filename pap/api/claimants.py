"""Claimant endpoints. Stats in every response are recomputed from the claims."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from pap.dependencies import get_enrichment_service, get_sync_coordinator
from pap.domain import statistics
from pap.logging_config import get_logger
from pap.schemas.claim import Claim
from pap.schemas.claimant import Claimant, ClaimantStats
from pap.services.enrichment_service import EnrichmentService
from pap.services.sync_coordinator import SyncCoordinator

logger = get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=List[Claimant])
async def list_claimants(sync: SyncCoordinator = Depends(get_sync_coordinator)) -> List[Claimant]:
    return sync.list_claimants()


@router.get("/{claimant_id}", response_model=Claimant)
async def get_claimant(claimant_id: str, sync: SyncCoordinator = Depends(get_sync_coordinator)) -> Claimant:
    return sync.get_claimant(claimant_id)


@router.get("/{claimant_id}/claims", response_model=List[Claim])
async def get_claimant_claims(
    claimant_id: str, sync: SyncCoordinator = Depends(get_sync_coordinator)
) -> List[Claim]:
    return sync.claimant_claims(claimant_id)


@router.get("/{claimant_id}/stats", response_model=ClaimantStats)
async def get_claimant_stats(
    claimant_id: str, sync: SyncCoordinator = Depends(get_sync_coordinator)
) -> ClaimantStats:
    return statistics.claimant_stats(claimant_id, sync.claimant_claims(claimant_id))


@router.post("/{claimant_id}/background", response_model=Claimant)
async def lookup_background(
    claimant_id: str,
    language: Optional[str] = None,
    enrichment: EnrichmentService = Depends(get_enrichment_service),
) -> Claimant:
    """Enrich a claimant profile from an AI background summary.

    Returns 503 when no summary could be obtained; the profile is unchanged.
    """
    claimant = await enrichment.lookup_claimant_background(claimant_id, language)
    if claimant is None:
        logger.info("background_lookup_unavailable", claimant_id=claimant_id)
        raise HTTPException(status_code=503, detail="Background lookup unavailable")
    return claimant
