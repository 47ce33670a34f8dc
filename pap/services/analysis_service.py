"""AI-backed claim analysis with the heuristic analyzer as the safety net.

Every public coroutine returns a usable result. When the Anthropic key is
missing, the call times out, or the reply fails to validate, the
deterministic heuristics in :mod:`pap.engines.heuristic_analyzer` answer
instead. The one exception is the claimant background lookup, which has no
heuristic counterpart and yields ``None``.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from pydantic import TypeAdapter

from pap.clients.llm_client import LLMClient
from pap.engines import heuristic_analyzer
from pap.logging_config import get_logger
from pap.prompts.manager import PromptManager
from pap.schemas.analysis import (
    AIAnalysisResponse,
    AIManifestoItem,
    AnalysisSource,
    ClaimAnalysis,
    Language,
    ManifestoClaim,
    VaguenessInsight,
)
from pap.schemas.claim import AnalysisParameter
from pap.schemas.claimant import ClaimantBackground

logger = get_logger(__name__)

T = TypeVar("T")

_LANGUAGE_NAMES = {Language.ENGLISH: "English", Language.NEPALI: "Nepali"}
_manifesto_items = TypeAdapter(List[AIManifestoItem])


class AnalysisService:
    def __init__(
        self,
        llm_client: LLMClient,
        prompt_manager: PromptManager,
        ai_timeout: float = 12.0,
        language_hint: str = "en",
    ):
        self.llm = llm_client
        self.prompts = prompt_manager
        self.ai_timeout = ai_timeout
        self.default_language = _language(language_hint)

    async def init(self) -> None:
        await self.llm.init()

    async def dispose(self) -> None:
        await self.llm.dispose()

    @property
    def ai_available(self) -> bool:
        return self.llm.is_configured()

    # ── claim scoring ────────────────────────────────────────────────

    async def analyze_claim(self, text: str, language: Optional[str] = None) -> ClaimAnalysis:
        """Score ``text`` with the AI service, or heuristically if that fails."""
        prompt = self.prompts.render(
            "claim_analysis", claim_text=text, language=self._language_name(language)
        )
        raw = await self._ask("claim_analysis", lambda: self.llm.complete_json(prompt, max_tokens=2048))
        if raw is None:
            return heuristic_analyzer.analyze(text)

        try:
            response = AIAnalysisResponse.model_validate(raw)
        except ValueError as exc:
            logger.warning("ai_response_invalid", prompt="claim_analysis", error=str(exc))
            return heuristic_analyzer.analyze(text)

        return ClaimAnalysis(
            vagueness_score=_clamp_score(response.vagueness_score),
            analysis_params=[
                AnalysisParameter(label=p.label, fulfilled=p.fulfilled) for p in response.analysis_params
            ],
            verification_vectors=list(response.verification_vectors),
            web_evidence=list(response.web_evidence),
            source=AnalysisSource.AI,
        )

    async def vagueness_insight(
        self, text: str, score: Optional[int] = None, language: Optional[str] = None
    ) -> VaguenessInsight:
        if score is None:
            score = heuristic_analyzer.vagueness(text)
        prompt = self.prompts.render(
            "vagueness_insight",
            claim_text=text,
            score=score,
            language=self._language_name(language),
        )
        insight = await self._ask("vagueness_insight", lambda: self.llm.complete(prompt, max_tokens=512))
        if not insight:
            insight = heuristic_analyzer.explain_vagueness(text, score)
        return VaguenessInsight(
            score=score, label=heuristic_analyzer.vagueness_label(score), insight=insight
        )

    # ── enrichment ───────────────────────────────────────────────────

    async def claimant_background(
        self, name: str, language: Optional[str] = None
    ) -> Optional[ClaimantBackground]:
        """AI background summary for ``name``, or None when unavailable."""
        prompt = self.prompts.render(
            "claimant_background", name=name, language=self._language_name(language)
        )
        raw = await self._ask("claimant_background", lambda: self.llm.complete_json(prompt, max_tokens=1024))
        if not isinstance(raw, dict):
            return None
        try:
            background = ClaimantBackground.model_validate(raw)
        except ValueError as exc:
            logger.warning("ai_response_invalid", prompt="claimant_background", error=str(exc))
            return None
        return background if background.summary.strip() else None

    async def extract_manifesto(
        self, text: str, language: Optional[str] = None
    ) -> tuple[List[ManifestoClaim], AnalysisSource]:
        prompt = self.prompts.render(
            "manifesto_extraction", manifesto_text=text, language=self._language_name(language)
        )
        raw = await self._ask("manifesto_extraction", lambda: self.llm.complete_json(prompt, max_tokens=4096))
        items: List[AIManifestoItem] = []
        if isinstance(raw, list):
            try:
                items = _manifesto_items.validate_python(raw)
            except ValueError as exc:
                logger.warning("ai_response_invalid", prompt="manifesto_extraction", error=str(exc))

        if not items:
            return heuristic_analyzer.extract_manifesto_claims(text), AnalysisSource.HEURISTIC

        claims = [
            ManifestoClaim(id=f"mc-{i + 1}", text=item.text, priority=item.priority)
            for i, item in enumerate(items[: heuristic_analyzer.MANIFESTO_MAX_CLAIMS])
        ]
        return claims, AnalysisSource.AI

    # ── internal ─────────────────────────────────────────────────────

    async def _ask(self, prompt_name: str, call: Callable[[], Awaitable[T]]) -> Optional[T]:
        """Run one AI call under the timeout; None means use the fallback."""
        if not self.llm.is_configured():
            logger.debug("ai_unconfigured", prompt=prompt_name)
            return None
        try:
            return await asyncio.wait_for(call(), timeout=self.ai_timeout)
        except asyncio.TimeoutError:
            logger.warning("ai_timeout", prompt=prompt_name, timeout=self.ai_timeout)
        except Exception as exc:
            logger.warning("ai_call_failed", prompt=prompt_name, error=str(exc), exc_type=type(exc).__name__)
        return None

    def _language_name(self, language: Optional[str]) -> str:
        lang = _language(language) if language else self.default_language
        return _LANGUAGE_NAMES[lang]


def _language(value: Any) -> Language:
    try:
        return Language(value)
    except ValueError:
        return Language.ENGLISH


def _clamp_score(value: float) -> int:
    return max(1, min(10, int(value + 0.5)))
