"""Background enrichment of claims and claimants.

An enrichment runs an AI (or heuristic) call and then writes the result
back through the sync coordinator. Each run takes a request token for its
entity; a newer run or a :meth:`release` for that entity (the detail view
closing) makes the token stale, and the late result is dropped instead of
overwriting fresher state.
"""

from typing import Hashable, Optional, Tuple

from pap.logging_config import get_logger
from pap.schemas.analysis import VaguenessInsight
from pap.schemas.claim import Claim
from pap.schemas.claimant import Claimant
from pap.services.analysis_service import AnalysisService
from pap.services.sync_coordinator import ClaimantNotFoundError, ClaimNotFoundError, SyncCoordinator
from pap.utils.staleness import RequestTokens

logger = get_logger(__name__)


def claim_key(claim_id: str) -> Tuple[str, str]:
    return ("claim", claim_id)


def claimant_key(claimant_id: str) -> Tuple[str, str]:
    return ("claimant", claimant_id)


class EnrichmentService:
    def __init__(self, sync_coordinator: SyncCoordinator, analysis_service: AnalysisService):
        self.sync = sync_coordinator
        self.analysis = analysis_service
        self._tokens = RequestTokens()

    async def analyze_claim(self, claim_id: str, language: Optional[str] = None) -> Optional[Claim]:
        """Re-analyse a claim and merge the result.

        Returns the updated claim, or None when the result went stale or
        the claim disappeared while the analysis was running.
        """
        claim = self.sync.get_claim(claim_id)
        key = claim_key(claim_id)
        token = self._tokens.issue(key)

        analysis = await self.analysis.analyze_claim(claim.text, language)

        if not self._tokens.is_current(token, key):
            logger.info("stale_analysis_discarded", claim_id=claim_id)
            return None
        try:
            return self.sync.apply_analysis(claim_id, analysis)
        except ClaimNotFoundError:
            logger.info("analysis_target_gone", claim_id=claim_id)
            return None

    async def claim_insight(self, claim_id: str, language: Optional[str] = None) -> VaguenessInsight:
        claim = self.sync.get_claim(claim_id)
        return await self.analysis.vagueness_insight(claim.text, claim.vagueness_index, language)

    async def lookup_claimant_background(
        self, claimant_id: str, language: Optional[str] = None
    ) -> Optional[Claimant]:
        """Fetch and apply a background summary. None if nothing was applied."""
        claimant = self.sync.get_claimant(claimant_id)
        key = claimant_key(claimant_id)
        token = self._tokens.issue(key)

        background = await self.analysis.claimant_background(claimant.name, language)

        if background is None:
            logger.info("claimant_background_unavailable", claimant_id=claimant_id)
            return None
        if not self._tokens.is_current(token, key):
            logger.info("stale_background_discarded", claimant_id=claimant_id)
            return None
        try:
            return self.sync.apply_background(claimant_id, background)
        except ClaimantNotFoundError:
            return None

    def release(self, key: Hashable) -> None:
        """Stop applying results for ``key`` (use :func:`claim_key` / :func:`claimant_key`)."""
        self._tokens.release(key)

    def dispose(self) -> None:
        self._tokens.release_all()
