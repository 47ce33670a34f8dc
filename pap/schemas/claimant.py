"""Claimant schemas."""

from typing import List, Optional

from pydantic import Field

from pap.schemas.claim import CamelModel

DEFAULT_BIO = "Recorded via PAP platform."
DEFAULT_AFFILIATION = "Independent"


class Claimant(CamelModel):
    """A person or organisation credited with claims.

    ``accuracy_rate``, ``vagueness_score`` and ``total_claims`` are cached
    values; the Claim collection is authoritative for all three.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    bio: str = ""
    affiliation: str = DEFAULT_AFFILIATION
    photo_url: str = ""
    tags: List[str] = []
    accuracy_rate: float = Field(default=0.0, ge=0.0, le=100.0)
    vagueness_score: float = 0.0
    total_claims: int = Field(default=0, ge=0)


class ClaimantStats(CamelModel):
    claimant_id: str
    total_claims: int
    fulfilled: int
    disproven: int
    ongoing: int
    accuracy_rate: float
    vagueness_score: float


class ClaimantBackground(CamelModel):
    """Background summary returned by the AI lookup."""

    summary: str
    affiliation: Optional[str] = None
    known_for: List[str] = []
    accuracy_info: Optional[str] = None
