"""Deterministic stand-in for the AI scoring service.

Used whenever the AI service is unconfigured, too slow, or returns
something that does not parse. Every function here is pure: identical
input always yields identical output.

Usage::

    from pap.engines.heuristic_analyzer import vagueness, verifiability_params

    vagueness("Nepal's GDP will grow by exactly 5.2% in the fiscal year 2024/25.")  # 8
    [p.label for p in verifiability_params("...")]  # always the same 10 labels
"""

import re
from dataclasses import dataclass
from typing import Callable, List

from pap.schemas.analysis import AnalysisSource, ClaimAnalysis, ManifestoClaim, Priority
from pap.schemas.claim import AnalysisParameter, Status, VerificationVector

MAX_VAGUENESS = 10
MIN_VAGUENESS = 1
MAX_DEDUCTION = 8
CHARS_PER_SPECIFICITY_POINT = 140

_MONTHS = (
    "January|February|March|April|May|June|July|August|September|October|November|December"
    "|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec"
)

_DIGIT_RE = re.compile(r"\d+")
_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
_MONTH_RE = re.compile(rf"\b(?:{_MONTHS})\b")
_NUMERIC_DATE_RE = re.compile(r"\b\d{1,4}[/-]\d{1,2}[/-]\d{1,4}\b")
_NAMED_ENTITY_RE = re.compile(r"\b[A-Z][a-z]+\s+[A-Z][a-z]+\b")
_METRIC_RE = re.compile(
    r"(?:\d+(?:[.,]\d+)?\s*(?:%|percent\b|per\s+cent\b|MW\b|GW\b|megawatts?\b|crores?\b|lakhs?\b"
    r"|billion\b|million\b|thousand\b|km\b|kilomet(?:er|re)s?\b|tons?\b|seats?\b|votes?\b))"
    r"|(?:(?:Rs\.?|NPR|USD|\$)\s*\d)",
    re.IGNORECASE,
)
_LOCATION_RE = re.compile(
    r"\b(?:nepal|kathmandu|pokhara|lalitpur|bhaktapur|biratnagar|birgunj|terai|himalayas?|"
    r"province|district|municipality|valley|city|country|india|china|region)\b",
    re.IGNORECASE,
)
_CAUSAL_RE = re.compile(
    r"\b(?:because|due to|as a result|result(?:s|ed)? in|leads? to|led to|caused by|causes?|"
    r"therefore|owing to|thanks to|since)\b",
    re.IGNORECASE,
)
_MODAL_RE = re.compile(r"\b(?:will|shall|won't|will not|must)\b", re.IGNORECASE)
_TIME_BOUND_RE = re.compile(
    r"\b(?:by|before|within|until|no later than|in the next|over the next)\s+"
    r"(?:the\s+)?(?:end\s+of\s+)?(?:next\s+)?"
    rf"(?:\d+|(?:{_MONTHS})\b|(?:19|20)\d{{2}}|fiscal\s+year|"
    r"(?:one|two|three|four|five|six|ten|twelve)\s+(?:days?|weeks?|months?|years?)|"
    r"(?:days?|weeks?|months?|years?|quarters?)\b)",
    re.IGNORECASE,
)
_OUTCOME_RE = re.compile(
    r"\b(?:grow|grows|growth|increase[sd]?|decrease[sd]?|decline[sd]?|rise|rises|fall|falls|"
    r"drop|drops|reach(?:es)?|exceed(?:s)?|double[sd]?|halve[sd]?|capacity|rate|gdp|inflation|"
    r"percent|majority|win|lose)\b",
    re.IGNORECASE,
)
_ACTION_RE = re.compile(
    r"\b(?:build|built|complete[sd]?|launch(?:es|ed)?|pass(?:es|ed)?|sign(?:s|ed)?|open(?:s|ed)?|"
    r"construct(?:s|ed)?|hold(?:s)?|held|approve[sd]?|implement(?:s|ed)?|resign(?:s|ed)?|"
    r"elect(?:s|ed)?|generate[sd]?|export(?:s|ed)?|form(?:s|ed)?|dissolve[sd]?|announce[sd]?)\b",
    re.IGNORECASE,
)


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


# ---------------------------------------------------------------------------
# Vagueness score
# ---------------------------------------------------------------------------

def vagueness(text: str) -> int:
    """Score how vague a claim is, from 1 (falsifiable) to 10 (unfalsifiable).

    Starts from 10 and deducts one point each for: any digit sequence; a
    4-digit year (1900-2099) or month name; two consecutive capitalised
    words; plus ``round(len(text) / 140)`` for length. Total deduction is
    capped at 8, so the heuristic never scores below 2.

    Examples:
        >>> vagueness("Something big will happen soon.")
        10
        >>> vagueness("The Upper Tamakoshi project will reach full capacity by December 2023.")
        6
    """
    deduction = 0
    if _DIGIT_RE.search(text):
        deduction += 1
    if _YEAR_RE.search(text) or _MONTH_RE.search(text):
        deduction += 1
    if _NAMED_ENTITY_RE.search(text):
        deduction += 1
    deduction += _round_half_up(len(text) / CHARS_PER_SPECIFICITY_POINT)

    deduction = min(deduction, MAX_DEDUCTION)
    return max(MIN_VAGUENESS, min(MAX_VAGUENESS, MAX_VAGUENESS - deduction))


def vagueness_label(score: int) -> str:
    if score >= 8:
        return "Very Vague"
    if score >= 6:
        return "Somewhat Vague"
    if score >= 4:
        return "Moderately Clear"
    return "Clear"


# ---------------------------------------------------------------------------
# Verifiability checklist
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Check:
    label: str
    phrase: str  # used in explanations
    predicate: Callable[[str], bool]


def _has_date(text: str) -> bool:
    return bool(_YEAR_RE.search(text) or _MONTH_RE.search(text) or _NUMERIC_DATE_RE.search(text))


CHECKS: tuple = (
    _Check("Specific date or deadline", "a specific date", _has_date),
    _Check("Named actor or entity", "a named actor", lambda t: bool(_NAMED_ENTITY_RE.search(t))),
    _Check("Quantified metric", "a quantified metric", lambda t: bool(_METRIC_RE.search(t))),
    _Check("Geographic location", "a geographic location", lambda t: bool(_LOCATION_RE.search(t))),
    _Check("Causal mechanism stated", "causal language", lambda t: bool(_CAUSAL_RE.search(t))),
    _Check("Falsifiable modal verb", "a definite modal verb", lambda t: bool(_MODAL_RE.search(t))),
    _Check("Explicit time-bound phrase", "an explicit time bound", lambda t: bool(_TIME_BOUND_RE.search(t))),
    _Check("Measurable outcome", "a measurable outcome", lambda t: bool(_OUTCOME_RE.search(t))),
    _Check("Concrete action verb", "a concrete action", lambda t: bool(_ACTION_RE.search(t))),
    _Check("Clear scope", "a clear scope", lambda t: True),
)


def verifiability_params(text: str) -> List[AnalysisParameter]:
    """Evaluate the fixed 10-item verifiability checklist against ``text``.

    Labels and order never change; only ``fulfilled`` depends on the text.
    """
    return [AnalysisParameter(label=c.label, fulfilled=c.predicate(text)) for c in CHECKS]


def explain_vagueness(text: str, score: int) -> str:
    """Human-readable explanation of a vagueness score."""
    if score >= 8:
        opening = "This claim is very vague and hard to falsify."
    elif score >= 6:
        opening = "This claim is somewhat vague; details needed to verify it are missing."
    elif score >= 4:
        opening = "This claim is moderately clear but leaves room for interpretation."
    else:
        opening = "This claim is clear and specific enough to be verified."

    # "Clear scope" always fires and says nothing about this text
    checks = CHECKS[:-1]
    present = [c.phrase for c in checks if c.predicate(text)]
    missing = [c.phrase for c in checks if not c.predicate(text)]

    parts = [opening]
    if present:
        parts.append(f"It includes {_join(present)}.")
    if missing:
        parts.append(f"It lacks {_join(missing)}.")
    return " ".join(parts)


def _join(phrases: List[str]) -> str:
    if len(phrases) == 1:
        return phrases[0]
    return ", ".join(phrases[:-1]) + " and " + phrases[-1]


# ---------------------------------------------------------------------------
# Simulated verification vectors
# ---------------------------------------------------------------------------

# (model name, the two checklist labels that model leans on)
_PERSPECTIVES = (
    ("Economic Analyst", ("Quantified metric", "Measurable outcome")),
    ("Political Fact-Checker", ("Named actor or entity", "Specific date or deadline")),
    ("Logical Consistency Bot", ("Causal mechanism stated", "Falsifiable modal verb")),
)


def simulate_verification_vectors(text: str, score: int) -> List[VerificationVector]:
    """Three perspective verdicts derived from the checklist.

    Without outside evidence no perspective can confirm or refute a claim,
    so the verdict is Ongoing for checkable claims and Inconclusive for
    very vague ones; confidence grows with the evidence each perspective
    can anchor on.
    """
    fulfilled = {p.label: p.fulfilled for p in verifiability_params(text)}
    verdict = Status.INCONCLUSIVE if score >= 8 else Status.ONGOING

    vectors = []
    for model_name, labels in _PERSPECTIVES:
        hits = [label for label in labels if fulfilled[label]]
        confidence = round(0.35 + 0.25 * len(hits), 2)
        if hits:
            reasoning = f"Anchors found: {', '.join(h.lower() for h in hits)}."
        else:
            reasoning = "No anchors this perspective can check against."
        vectors.append(
            VerificationVector(
                model_name=model_name,
                verdict=verdict,
                confidence=confidence,
                reasoning=reasoning,
            )
        )
    return vectors


def analyze(text: str) -> ClaimAnalysis:
    """Full heuristic analysis in the same shape the AI path returns."""
    score = vagueness(text)
    return ClaimAnalysis(
        vagueness_score=score,
        analysis_params=verifiability_params(text),
        verification_vectors=simulate_verification_vectors(text, score),
        web_evidence=[],
        source=AnalysisSource.HEURISTIC,
    )


# ---------------------------------------------------------------------------
# Manifesto claim extraction
# ---------------------------------------------------------------------------

MANIFESTO_MAX_CLAIMS = 20
MANIFESTO_HIGH_COUNT = 5
MANIFESTO_MEDIUM_COUNT = 7
MANIFESTO_LONG_SENTENCE = 120
MANIFESTO_MIN_SENTENCE = 20

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?।])\s+|\n+")
_COMMITMENT_RE = re.compile(
    r"\b(?:will|shall|commit(?:s|ted)?|pledge[sd]?|promise[sd]?|ensure[sd]?|guarantee[sd]?|"
    r"provide[sd]?|build|establish(?:es|ed)?|implement(?:s|ed)?|introduce[sd]?|create[sd]?|"
    r"increase[sd]?|reduce[sd]?|abolish(?:es|ed)?|launch(?:es|ed)?|end)\b",
    re.IGNORECASE,
)


def extract_manifesto_claims(text: str) -> List[ManifestoClaim]:
    """Pull candidate commitments out of a manifesto by position.

    Sentences qualify when they contain a commitment verb or are long
    enough to carry one. The first qualifying sentences are high priority,
    the next ones medium, the rest low. Nothing semantic happens here.
    """
    sentences = (" ".join(s.split()) for s in _SENTENCE_SPLIT_RE.split(text))
    candidates = [
        s for s in sentences
        if len(s) >= MANIFESTO_MIN_SENTENCE
        and (_COMMITMENT_RE.search(s) or len(s) > MANIFESTO_LONG_SENTENCE)
    ][:MANIFESTO_MAX_CLAIMS]

    claims = []
    for i, sentence in enumerate(candidates):
        if i < MANIFESTO_HIGH_COUNT:
            priority = Priority.HIGH
        elif i < MANIFESTO_HIGH_COUNT + MANIFESTO_MEDIUM_COUNT:
            priority = Priority.MEDIUM
        else:
            priority = Priority.LOW
        claims.append(ManifestoClaim(id=f"mc-{i + 1}", text=sentence, priority=priority))
    return claims
