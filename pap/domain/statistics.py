"""Derived statistics over the Claim collection.

The Claim collection is the single source of truth for counts and
accuracy. Values stored on a Claimant are a cache that
:func:`with_derived_stats` overlays on every read.

Usage:
    from pap.domain.statistics import accuracy_rate, claimant_stats

    accuracy_rate(fulfilled=3, total=4)        # -> 75
    claimant_stats("c1", claims).total_claims  # -> number of c1's claims
"""

from collections import Counter
from typing import Dict, Iterable, List, Sequence, Tuple

from pap.schemas.analysis import ManifestoClaim, ManifestoStatus
from pap.schemas.claim import Category, Claim, Status
from pap.schemas.claimant import Claimant, ClaimantStats


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def accuracy_rate(fulfilled: int, total: int) -> int:
    """Percentage of fulfilled claims, rounded half-up. Zero when ``total`` is 0."""
    if total <= 0:
        return 0
    return _round_half_up(fulfilled / total * 100)


def claimant_stats(claimant_id: str, claims: Iterable[Claim]) -> ClaimantStats:
    owned = [c for c in claims if c.claimant_id == claimant_id]
    counts = Counter(c.status for c in owned)
    total = len(owned)
    mean_vagueness = (
        round(sum(c.vagueness_index for c in owned) / total, 1) if total else 0.0
    )
    return ClaimantStats(
        claimant_id=claimant_id,
        total_claims=total,
        fulfilled=counts[Status.FULFILLED],
        disproven=counts[Status.DISPROVEN],
        ongoing=counts[Status.ONGOING],
        accuracy_rate=accuracy_rate(counts[Status.FULFILLED], total),
        vagueness_score=mean_vagueness,
    )


def with_derived_stats(claimant: Claimant, claims: Sequence[Claim]) -> Claimant:
    """Return a copy of ``claimant`` with the cached stats recomputed.

    A claimant without any claims in the collection keeps its stored
    values, so seed profiles and claimants whose claims were deleted still
    render sensibly.
    """
    stats = claimant_stats(claimant.id, claims)
    if stats.total_claims == 0:
        return claimant.model_copy(deep=True)
    return claimant.model_copy(
        update={
            "total_claims": stats.total_claims,
            "accuracy_rate": float(stats.accuracy_rate),
            "vagueness_score": stats.vagueness_score,
        },
        deep=True,
    )


def category_counts(claims: Iterable[Claim]) -> Dict[str, int]:
    """Claim count per category, in enum order, zero buckets omitted."""
    counts = Counter(c.category for c in claims)
    return {cat.value: counts[cat] for cat in Category if counts[cat]}


def status_counts(claims: Iterable[Claim]) -> Dict[str, int]:
    counts = Counter(c.status for c in claims)
    return {s.value: counts[s] for s in Status if counts[s]}


def topic_counts(claims: Iterable[Claim]) -> List[Tuple[str, int]]:
    """Claims per topic group, most populated first; ungrouped claims are skipped."""
    counts = Counter(c.topic_group.strip() for c in claims if c.topic_group and c.topic_group.strip())
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def overall_accuracy(claims: Sequence[Claim]) -> int:
    fulfilled = sum(1 for c in claims if c.status == Status.FULFILLED)
    return accuracy_rate(fulfilled, len(claims))


def manifesto_completion(items: Sequence[ManifestoClaim]) -> int:
    fulfilled = sum(1 for i in items if i.status == ManifestoStatus.FULFILLED)
    return accuracy_rate(fulfilled, len(items))
