from pap.services.analysis_service import AnalysisService
from pap.services.enrichment_service import EnrichmentService
from pap.services.sync_coordinator import (
    ClaimantNotFoundError,
    ClaimNotFoundError,
    ImportValidationError,
    SyncCoordinator,
    SyncNotReadyError,
)

__all__ = [
    "AnalysisService",
    "EnrichmentService",
    "SyncCoordinator",
    "ClaimNotFoundError",
    "ClaimantNotFoundError",
    "ImportValidationError",
    "SyncNotReadyError",
]
