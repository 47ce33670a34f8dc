"""Search and filtering over the in-memory collections."""

from typing import Dict, List, Optional, Sequence

from pap.schemas.claim import Category, Claim
from pap.schemas.claimant import Claimant

ALL_CATEGORIES = "All"


def filter_claims(
    claims: Sequence[Claim],
    claimants: Sequence[Claimant],
    query: str = "",
    category: Optional[str] = ALL_CATEGORIES,
) -> List[Claim]:
    """Case-insensitive match on claim text, claimant name or topic group.

    ``category`` is ``"All"`` (or empty) for no filtering, otherwise a
    :class:`Category` value. Unknown categories match nothing.
    """
    names: Dict[str, str] = {c.id: c.name.casefold() for c in claimants}
    needle = (query or "").strip().casefold()
    wanted = _category(category)

    result = []
    for claim in claims:
        if wanted is not None and claim.category != wanted:
            continue
        if needle and not (
            needle in claim.text.casefold()
            or needle in names.get(claim.claimant_id, "")
            or needle in (claim.topic_group or "").casefold()
        ):
            continue
        result.append(claim)
    return result


def find_claimant_by_name(claimants: Sequence[Claimant], name: str) -> Optional[Claimant]:
    key = name.strip().casefold()
    if not key:
        return None
    for claimant in claimants:
        if claimant.name.strip().casefold() == key:
            return claimant
    return None


def claims_for(claims: Sequence[Claim], claimant_id: str) -> List[Claim]:
    return [c for c in claims if c.claimant_id == claimant_id]


def _category(value: Optional[str]):
    if not value or value == ALL_CATEGORIES:
        return None
    try:
        return Category(value)
    except ValueError:
        return _NO_MATCH


# Sentinel that never equals a real Category
_NO_MATCH = object()
