"""Analysis schemas: AI response contract, analysis results, manifesto items."""

from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BeforeValidator, Field

from pap.schemas.claim import (
    AnalysisParameter,
    CamelModel,
    Status,
    VerificationVector,
    WebEvidenceLink,
)


class Language(str, Enum):
    ENGLISH = "en"
    NEPALI = "ne"


class AnalysisSource(str, Enum):
    AI = "ai"
    HEURISTIC = "heuristic"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ManifestoStatus(str, Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    FAILED = "failed"
    ONGOING = "ongoing"


def _truncate(limit: int):
    def _validator(value: Any) -> Any:
        if isinstance(value, list):
            return value[:limit]
        return value
    return _validator


def _normalize_verdict(value: Any) -> Any:
    """Map free-form verdict strings onto Status; unknown ones are inconclusive."""
    if isinstance(value, Status):
        return value
    if isinstance(value, str):
        for status in Status:
            if status.value.lower() == value.strip().lower():
                return status
    return Status.INCONCLUSIVE


class AIVerificationVector(VerificationVector):
    verdict: Annotated[Status, BeforeValidator(_normalize_verdict)]


class AIAnalysisResponse(CamelModel):
    """Shape the AI scoring service must return.

    Lists longer than the contract allows are truncated; anything that
    fails validation sends the caller to the heuristic analyzer.
    """

    vagueness_score: float = Field(ge=1, le=10)
    analysis_params: Annotated[List[AnalysisParameter], BeforeValidator(_truncate(10))] = []
    verification_vectors: Annotated[List[AIVerificationVector], BeforeValidator(_truncate(5))] = []
    web_evidence: Annotated[List[WebEvidenceLink], BeforeValidator(_truncate(5))] = []


class ClaimAnalysis(CamelModel):
    """Result handed to callers, whichever engine produced it."""

    vagueness_score: int = Field(ge=1, le=10)
    analysis_params: List[AnalysisParameter]
    verification_vectors: List[VerificationVector] = []
    web_evidence: List[WebEvidenceLink] = []
    source: AnalysisSource


class ManifestoClaim(CamelModel):
    id: str
    text: str
    priority: Priority
    category: str = "Manifesto"
    status: ManifestoStatus = ManifestoStatus.PENDING
    progress_percentage: int = Field(default=0, ge=0, le=100)
    evidence_url: Optional[str] = None
    notes: Optional[str] = None


class AnalyzeTextRequest(CamelModel):
    text: str = Field(min_length=1)
    language_hint: Language = Language.ENGLISH


class VaguenessInsight(CamelModel):
    score: int
    label: str
    insight: str


class AIManifestoItem(CamelModel):
    text: str = Field(min_length=1)
    priority: Priority = Priority.MEDIUM


class ManifestoExtraction(CamelModel):
    items: List[ManifestoClaim]
    completion_percentage: int
    source: AnalysisSource
