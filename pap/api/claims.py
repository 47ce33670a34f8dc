"""Claim endpoints: CRUD, bulk export/import and per-claim analysis.

Domain errors raised by the sync coordinator (not found, invalid import,
not ready) are turned into HTTP responses by the handlers registered in
:mod:`pap.main`.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel, Field

from pap.dependencies import get_enrichment_service, get_sync_coordinator
from pap.logging_config import get_logger
from pap.schemas.analysis import VaguenessInsight
from pap.schemas.claim import Claim, ClaimDraft
from pap.services.enrichment_service import EnrichmentService
from pap.services.sync_coordinator import SyncCoordinator

logger = get_logger(__name__)
router = APIRouter()


class HumanParamRequest(BaseModel):
    label: str = Field(min_length=1)


@router.get("/", response_model=List[Claim])
async def list_claims(
    q: str = "",
    category: Optional[str] = Query(default=None, description="A category name or 'All'"),
    sync: SyncCoordinator = Depends(get_sync_coordinator),
) -> List[Claim]:
    """List claims, newest first, matching ``q`` against text, claimant name and topic."""
    claims = sync.list_claims(query=q, category=category)
    logger.info("claims_list_completed", query=q, category=category, count=len(claims))
    return claims


@router.get("/export")
async def export_claims(sync: SyncCoordinator = Depends(get_sync_coordinator)) -> Response:
    return Response(
        content=sync.export_claims(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="pap-claims.json"'},
    )


@router.post("/import")
async def import_claims(request: Request, sync: SyncCoordinator = Depends(get_sync_coordinator)) -> dict:
    """Replace every claim with the posted JSON array (the export format)."""
    body = (await request.body()).decode("utf-8", errors="replace")
    count = sync.import_claims(body)
    return {"imported": count}


@router.get("/{claim_id}", response_model=Claim)
async def get_claim(claim_id: str, sync: SyncCoordinator = Depends(get_sync_coordinator)) -> Claim:
    return sync.get_claim(claim_id)


@router.post("/", response_model=Claim, status_code=status.HTTP_201_CREATED)
async def create_claim(draft: ClaimDraft, sync: SyncCoordinator = Depends(get_sync_coordinator)) -> Claim:
    try:
        return sync.create_claim(draft)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.put("/{claim_id}", response_model=Claim)
async def update_claim(
    claim_id: str,
    draft: ClaimDraft,
    sync: SyncCoordinator = Depends(get_sync_coordinator),
) -> Claim:
    return sync.update_claim(claim_id, draft)


@router.delete("/{claim_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_claim(claim_id: str, sync: SyncCoordinator = Depends(get_sync_coordinator)) -> Response:
    sync.delete_claim(claim_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{claim_id}/params", response_model=Claim)
async def add_human_param(
    claim_id: str,
    body: HumanParamRequest,
    sync: SyncCoordinator = Depends(get_sync_coordinator),
) -> Claim:
    try:
        return sync.add_human_param(claim_id, body.label)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/{claim_id}/analyze", response_model=Claim)
async def analyze_claim(
    claim_id: str,
    language: Optional[str] = None,
    enrichment: EnrichmentService = Depends(get_enrichment_service),
) -> Claim:
    """Re-score a claim (AI with heuristic fallback) and merge the result."""
    claim = await enrichment.analyze_claim(claim_id, language)
    if claim is None:
        raise HTTPException(status_code=409, detail="Analysis superseded by a newer request")
    return claim


@router.get("/{claim_id}/insight", response_model=VaguenessInsight)
async def claim_insight(
    claim_id: str,
    language: Optional[str] = None,
    enrichment: EnrichmentService = Depends(get_enrichment_service),
) -> VaguenessInsight:
    return await enrichment.claim_insight(claim_id, language)
