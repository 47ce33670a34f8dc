"""Claim schemas and supporting enums.

Serialized field names are camelCase (``claimantId``, ``vaguenessIndex``)
so cached, remote and exported documents stay readable by every client
that shares the database.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    POLITICS = "Politics"
    ECONOMY = "Economy"
    ASTROLOGY = "Astrology"
    HYDROPOWER = "Hydropower"
    TOURISM = "Tourism"
    MANIFESTO = "Manifesto Tracker"

    @classmethod
    def _missing_(cls, value):
        # Accept the short "Manifesto" form and any letter case
        if isinstance(value, str):
            wanted = value.strip().casefold()
            for member in cls:
                if wanted in (member.value.casefold(), member.value.split()[0].casefold()):
                    return member
        return None


class Status(str, Enum):
    FULFILLED = "Fulfilled"
    DISPROVEN = "Disproven"
    PARTIAL = "Partial"
    ONGOING = "Ongoing"
    INCONCLUSIVE = "Inconclusive"


class SourceType(str, Enum):
    TIKTOK = "TikTok"
    FACEBOOK = "Facebook"
    X_TWITTER = "X/Twitter"
    REDDIT = "Reddit"
    NEWS = "News Site"
    YOUTUBE = "YouTube"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClaimSource(CamelModel):
    type: SourceType
    url: str
    screenshot_url: Optional[str] = None


class AnalysisParameter(CamelModel):
    label: str
    fulfilled: bool
    # Older clients wrote ``isHumanAdded``
    human_added: bool = Field(
        default=False,
        validation_alias=AliasChoices("humanAdded", "isHumanAdded", "human_added"),
        serialization_alias="humanAdded",
    )


class VerificationVector(CamelModel):
    model_name: str
    verdict: Status
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str

    model_config = ConfigDict(protected_namespaces=())


class WebEvidenceLink(CamelModel):
    title: str
    url: str


class ClaimVersion(CamelModel):
    """Snapshot of a claim taken just before an edit."""

    timestamp: datetime
    text: str
    status: Status
    vagueness_index: int = Field(ge=1, le=10)


class Claim(CamelModel):
    id: str = Field(min_length=1)
    claimant_id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    date_made: date
    target_date: Optional[date] = None
    category: Category
    status: Status = Status.ONGOING
    sources: List[ClaimSource] = []
    vagueness_index: int = Field(ge=1, le=10)
    analysis_params: List[AnalysisParameter] = []
    verification_vectors: List[VerificationVector] = []
    web_evidence_links: Optional[List[WebEvidenceLink]] = None
    topic_group: Optional[str] = None
    history: List[ClaimVersion] = []

    @field_validator("target_date", mode="before")
    @classmethod
    def _blank_date_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def snapshot(self, timestamp: datetime) -> ClaimVersion:
        return ClaimVersion(
            timestamp=timestamp,
            text=self.text,
            status=self.status,
            vagueness_index=self.vagueness_index,
        )


class ClaimDraft(CamelModel):
    """User-supplied claim fields for create and edit.

    ``claimant_name`` is only used on create; an edit keeps the owning
    claimant. A missing ``vagueness_index`` is filled by the heuristic
    analyzer.
    """

    text: str = Field(min_length=1)
    claimant_name: str = ""
    category: Category = Category.POLITICS
    status: Status = Status.ONGOING
    target_date: Optional[date] = None
    sources: List[ClaimSource] = []
    topic_group: Optional[str] = None
    vagueness_index: Optional[int] = Field(default=None, ge=1, le=10)
    analysis_params: Optional[List[AnalysisParameter]] = None
    verification_vectors: Optional[List[VerificationVector]] = None
    web_evidence_links: Optional[List[WebEvidenceLink]] = None

    @field_validator("text", "claimant_name", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("target_date", mode="before")
    @classmethod
    def _blank_date_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
