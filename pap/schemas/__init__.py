"""Pydantic schemas for the domain model, API payloads and AI contracts."""

from pap.schemas.analysis import (
    AIAnalysisResponse,
    AIManifestoItem,
    AnalysisSource,
    AnalyzeTextRequest,
    ClaimAnalysis,
    Language,
    ManifestoClaim,
    ManifestoExtraction,
    ManifestoStatus,
    Priority,
    VaguenessInsight,
)
from pap.schemas.claim import (
    AnalysisParameter,
    Category,
    Claim,
    ClaimDraft,
    ClaimSource,
    ClaimVersion,
    SourceType,
    Status,
    VerificationVector,
    WebEvidenceLink,
)
from pap.schemas.claimant import Claimant, ClaimantBackground, ClaimantStats

__all__ = [
    "Claim", "ClaimDraft", "ClaimSource", "ClaimVersion",
    "Category", "Status", "SourceType",
    "AnalysisParameter", "VerificationVector", "WebEvidenceLink",
    "Claimant", "ClaimantStats", "ClaimantBackground",
    "AIAnalysisResponse", "AIManifestoItem", "ClaimAnalysis", "AnalysisSource", "AnalyzeTextRequest",
    "Language", "ManifestoClaim", "ManifestoExtraction", "ManifestoStatus", "Priority", "VaguenessInsight",
]
