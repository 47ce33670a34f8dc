"""Stateless analysis endpoints: score free text, extract manifesto commitments."""

from fastapi import APIRouter, Depends
from pydantic import Field

from pap.dependencies import get_analysis_service
from pap.domain import statistics
from pap.logging_config import get_logger
from pap.schemas.analysis import AnalyzeTextRequest, ClaimAnalysis, Language, ManifestoExtraction
from pap.schemas.claim import CamelModel
from pap.services.analysis_service import AnalysisService

logger = get_logger(__name__)
router = APIRouter()


class ManifestoRequest(CamelModel):
    text: str = Field(min_length=1)
    language_hint: Language = Language.ENGLISH


@router.post("/vagueness", response_model=ClaimAnalysis)
async def analyze_text(
    body: AnalyzeTextRequest,
    analysis: AnalysisService = Depends(get_analysis_service),
) -> ClaimAnalysis:
    result = await analysis.analyze_claim(body.text, body.language_hint.value)
    logger.info("text_analyzed", source=result.source.value, score=result.vagueness_score)
    return result


@router.post("/manifesto", response_model=ManifestoExtraction)
async def extract_manifesto(
    body: ManifestoRequest,
    analysis: AnalysisService = Depends(get_analysis_service),
) -> ManifestoExtraction:
    items, source = await analysis.extract_manifesto(body.text, body.language_hint.value)
    logger.info("manifesto_extracted", source=source.value, items=len(items))
    return ManifestoExtraction(
        items=items,
        completion_percentage=statistics.manifesto_completion(items),
        source=source,
    )
