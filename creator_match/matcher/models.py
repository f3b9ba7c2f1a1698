"""Data objects for the creator matcher.

Creator profiles and candidates are plain dataclasses built while the
database session is open, so they stay usable after the unit of work closes.
Campaign and brand descriptors arrive from callers and are validated with
pydantic; they are frozen for the duration of a recommendation pass.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass
class CreatorProfile:
    """Snapshot of a creator and its per-platform facts.

    ``platform_metrics``, ``pricing`` and ``audience_demographics`` are keyed
    by platform name; each value is the row's columns as a dict.

    ``scoring_platform`` is the platform the search filtered on. When set,
    scoring and pricing read that platform's rows instead of the primary one.
    """
    id: int
    creator_name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    niche: Optional[str] = None
    tier: Optional[str] = None
    primary_platform: Optional[str] = None
    content_categories: List[str] = field(default_factory=list)
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    verification_status: Optional[str] = None
    client_satisfaction_score: Optional[float] = None
    total_collaborations: Optional[int] = None
    personality_profile: Optional[Dict[str, Any]] = None
    platform_metrics: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    pricing: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    audience_demographics: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    audience_interests: List[str] = field(default_factory=list)
    past_brands: List[str] = field(default_factory=list)
    scoring_platform: Optional[str] = None

    @property
    def active_platform(self) -> Optional[str]:
        return self.scoring_platform or self.primary_platform

    def _for_platform(self, table: Dict[str, Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        platform = self.active_platform
        if platform and platform in table:
            return table[platform]
        return None

    @property
    def primary_metrics(self) -> Optional[Dict[str, Any]]:
        return self._for_platform(self.platform_metrics)

    @property
    def primary_pricing(self) -> Optional[Dict[str, Any]]:
        return self._for_platform(self.pricing)

    @property
    def primary_demographics(self) -> Optional[Dict[str, Any]]:
        """Demographics of the active platform.

        Without a scoring platform, falls back to the first platform listed.
        """
        found = self._for_platform(self.audience_demographics)
        if found is None and self.scoring_platform is None and self.audience_demographics:
            first = sorted(self.audience_demographics)[0]
            found = self.audience_demographics[first]
        return found


@dataclass
class Candidate:
    """A creator returned by the ANN search with its raw cosine similarity in [-1, 1]."""
    creator: CreatorProfile
    similarity: float
    distance: float

    @property
    def creator_id(self) -> int:
        return self.creator.id


@dataclass(frozen=True)
class Predicate:
    """One relational condition ANDed into the ANN query.

    ``op`` is one of ``eq``, ``gte`` or ``lte``. ``field`` is a logical field
    name that the repository maps onto a column.
    """
    field: str
    op: str
    value: Any


@dataclass
class SearchResponse:
    """Outcome of a search that never raises: either results or an error message."""
    success: bool
    results: List[Candidate] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class MaintenanceReport:
    """Counters from one embedding maintenance run.

    ``errors`` maps creator id to the failure message.
    """
    attempted: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    errors: Dict[int, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Campaign / brand descriptors
# ---------------------------------------------------------------------------

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def _parse_json_text(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        return json.loads(text)
    return value


class TargetAudience(_Frozen):
    age_groups: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    gender: Optional[str] = None
    follower_range: Optional[str] = None


class CampaignRequirements(_Frozen):
    platforms: List[str] = Field(default_factory=list)
    content_type: List[str] = Field(default_factory=list)
    deliverables: List[str] = Field(default_factory=list)


class ProductAudience(_Frozen):
    age_groups: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    demographics: Optional[str] = None


class ProductAnalysis(_Frozen):
    category: Optional[str] = None
    ideal_creator_types: List[str] = Field(default_factory=list)
    target_audience: Optional[ProductAudience] = None
    key_features: List[str] = Field(default_factory=list)


class ProductInfo(_Frozen):
    product_name: Optional[str] = None
    product_url: Optional[str] = None
    product_price: Optional[float] = None
    analysis: Optional[ProductAnalysis] = None


class CampaignDescriptor(_Frozen):
    """What the brand wants out of a campaign."""
    campaign_name: str = ""
    campaign_type: Optional[str] = None
    description: Optional[str] = None
    objectives: Optional[str] = None
    budget: Optional[float] = None
    currency: str = "USD"
    location: Optional[str] = None
    target_audience: TargetAudience = Field(default_factory=TargetAudience)
    requirements: CampaignRequirements = Field(default_factory=CampaignRequirements)
    product_info: Optional[ProductInfo] = None

    @property
    def product_analysis(self) -> Optional[ProductAnalysis]:
        return self.product_info.analysis if self.product_info else None


class BrandDescriptor(_Frozen):
    """Brand facts used for niche inference, query text and brand alignment.

    ``brand_values`` and ``ai_generated_overview`` are accepted as JSON text
    as well as already-decoded values.
    """
    brand_name: str = ""
    industry: Optional[str] = None
    brand_values: List[str] = Field(default_factory=list)
    ai_generated_overview: Optional[Dict[str, Any]] = None

    @field_validator("brand_values", mode="before")
    @classmethod
    def _decode_values(cls, value: Any) -> Any:
        decoded = _parse_json_text(value)
        return [] if decoded is None else decoded

    @field_validator("ai_generated_overview", mode="before")
    @classmethod
    def _decode_overview(cls, value: Any) -> Any:
        return _parse_json_text(value)

    @property
    def ideal_creators(self) -> Optional[str]:
        """The overview's collaboration_fit.ideal_creators text, if any."""
        overview = self.ai_generated_overview or {}
        fit = overview.get("collaboration_fit") or {}
        ideal = fit.get("ideal_creators") if isinstance(fit, dict) else None
        if isinstance(ideal, list):
            return " ".join(str(item) for item in ideal)
        return ideal
