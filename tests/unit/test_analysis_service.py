"""Unit tests for AnalysisService: AI path, validation and heuristic fallback."""

import json

import pytest

from pap.prompts.manager import PromptManager
from pap.schemas.analysis import AnalysisSource, Priority
from pap.schemas.claim import Status
from pap.services.analysis_service import AnalysisService
from tests.fixtures import load_fixture
from tests.fixtures.fakes import FakeLLMClient

GDP = "Nepal's GDP will grow by exactly 5.2% in the fiscal year 2024/25."


def _service(*replies, configured=True, delay=0.0, timeout=0.5, language_hint="en") -> AnalysisService:
    llm = FakeLLMClient(list(replies), configured=configured, delay=delay)
    return AnalysisService(llm, PromptManager(), ai_timeout=timeout, language_hint=language_hint)


class TestAnalyzeClaim:
    """Test AI scoring with fallback to the heuristic analyzer."""

    @pytest.mark.asyncio
    async def test_ai_result(self):
        """A valid AI reply is normalized and marked as AI-sourced."""
        service = _service(load_fixture("ai_claim_analysis.json"))

        result = await service.analyze_claim(GDP)

        assert result.source == AnalysisSource.AI
        assert result.vagueness_score == 3
        assert len(result.analysis_params) == 10
        assert [v.verdict for v in result.verification_vectors] == [
            Status.ONGOING,
            Status.PARTIAL,
            Status.INCONCLUSIVE,
        ]
        assert result.web_evidence[0].title == "NRB monetary policy review"

    @pytest.mark.asyncio
    async def test_fenced_json_reply(self):
        """Replies wrapped in markdown fences still parse."""
        raw = "Here you go:\n```json\n" + json.dumps(load_fixture("ai_claim_analysis.json")) + "\n```"
        service = _service(raw)

        assert (await service.analyze_claim(GDP)).source == AnalysisSource.AI

    @pytest.mark.asyncio
    async def test_overlong_lists_truncated(self):
        reply = load_fixture("ai_claim_analysis.json")
        reply["analysisParams"] = reply["analysisParams"] * 2
        reply["verificationVectors"] = reply["verificationVectors"] * 3
        reply["webEvidence"] = reply["webEvidence"] * 8

        result = await _service(reply).analyze_claim(GDP)

        assert len(result.analysis_params) == 10
        assert len(result.verification_vectors) == 5
        assert len(result.web_evidence) == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score, expected", [(1.0, 1), (9.5, 10), (10, 10), (4.49, 4)])
    async def test_score_rounded(self, score, expected):
        reply = load_fixture("ai_claim_analysis.json")
        reply["vaguenessScore"] = score

        assert (await _service(reply).analyze_claim(GDP)).vagueness_score == expected

    @pytest.mark.asyncio
    async def test_human_flags_from_ai_ignored(self):
        reply = load_fixture("ai_claim_analysis.json")
        reply["analysisParams"][0]["humanAdded"] = True

        result = await _service(reply).analyze_claim(GDP)

        assert not any(p.human_added for p in result.analysis_params)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            None,
            "I cannot help with that.",
            {"vaguenessScore": 14},
            {"vaguenessScore": "very"},
            {"analysisParams": []},
            [1, 2, 3],
            {"vaguenessScore": 5, "verificationVectors": [{"modelName": "x", "verdict": "ongoing", "confidence": 7}]},
        ],
    )
    async def test_invalid_reply_falls_back(self, reply):
        result = await _service(reply).analyze_claim(GDP)

        assert result.source == AnalysisSource.HEURISTIC
        assert result.vagueness_score == 8

    @pytest.mark.asyncio
    async def test_unconfigured_never_calls_ai(self):
        service = _service(load_fixture("ai_claim_analysis.json"), configured=False)

        result = await service.analyze_claim(GDP)

        assert result.source == AnalysisSource.HEURISTIC
        assert service.llm.prompts == []
        assert service.ai_available is False

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self):
        service = _service(load_fixture("ai_claim_analysis.json"), delay=0.5, timeout=0.05)

        result = await service.analyze_claim(GDP)

        assert result.source == AnalysisSource.HEURISTIC

    @pytest.mark.asyncio
    async def test_client_error_falls_back(self):
        service = _service(RuntimeError("connection reset"))

        assert (await service.analyze_claim(GDP)).source == AnalysisSource.HEURISTIC

    @pytest.mark.asyncio
    async def test_language_hint_in_prompt(self):
        service = _service(None, None, language_hint="ne")

        await service.analyze_claim(GDP)
        await service.analyze_claim(GDP, language="en")

        assert "Respond in Nepali" in service.llm.prompts[0]
        assert "Respond in English" in service.llm.prompts[1]
        assert GDP in service.llm.prompts[0]


class TestVaguenessInsight:
    @pytest.mark.asyncio
    async def test_ai_insight(self):
        service = _service("The claim names a figure and a fiscal year.")

        insight = await service.vagueness_insight(GDP, 2)

        assert insight.score == 2
        assert insight.label == "Clear"
        assert insight.insight == "The claim names a figure and a fiscal year."

    @pytest.mark.asyncio
    async def test_fallback_explanation(self):
        insight = await _service(configured=False).vagueness_insight("Something big will happen soon.")

        assert insight.score == 10
        assert insight.label == "Very Vague"
        assert insight.insight.startswith("This claim is very vague")

    @pytest.mark.asyncio
    async def test_blank_reply_falls_back(self):
        insight = await _service("").vagueness_insight(GDP, 8)

        assert insight.insight.startswith("This claim is very vague")


class TestClaimantBackground:
    @pytest.mark.asyncio
    async def test_background(self):
        reply = {
            "summary": "Economist and former finance ministry advisor.",
            "affiliation": "Nepal Policy Institute",
            "knownFor": ["GDP forecasts"],
        }
        background = await _service(reply).claimant_background("Dr. Ramesh Sharma")

        assert background.summary.startswith("Economist")
        assert background.known_for == ["GDP forecasts"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [None, ["a"], {"summary": "   "}, {"affiliation": "x"}])
    async def test_unusable_reply_is_none(self, reply):
        assert await _service(reply).claimant_background("Someone") is None

    @pytest.mark.asyncio
    async def test_unconfigured_is_none(self):
        assert await _service(configured=False).claimant_background("Someone") is None


class TestManifestoExtraction:
    MANIFESTO = (
        "We will build 500 km of roads in every province. "
        "We pledge free schooling up to grade twelve."
    )

    @pytest.mark.asyncio
    async def test_ai_items(self):
        reply = [
            {"text": "Build 500 km of roads", "priority": "high"},
            {"text": "Free schooling to grade 12"},
        ]
        items, source = await _service(reply).extract_manifesto(self.MANIFESTO)

        assert source == AnalysisSource.AI
        assert [i.id for i in items] == ["mc-1", "mc-2"]
        assert [i.priority for i in items] == [Priority.HIGH, Priority.MEDIUM]

    @pytest.mark.asyncio
    async def test_ai_items_capped(self):
        reply = [{"text": f"Commitment {i}"} for i in range(40)]
        items, _ = await _service(reply).extract_manifesto(self.MANIFESTO)

        assert len(items) == 20

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [None, [], {"items": []}, [{"text": ""}], [{"priority": "urgent"}]])
    async def test_fallback(self, reply):
        items, source = await _service(reply).extract_manifesto(self.MANIFESTO)

        assert source == AnalysisSource.HEURISTIC
        assert len(items) == 2
        assert items[0].text == "We will build 500 km of roads in every province."


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_init_and_dispose_delegate(self):
        service = _service()

        await service.init()
        await service.dispose()

        assert service.llm.initialized and service.llm.disposed
