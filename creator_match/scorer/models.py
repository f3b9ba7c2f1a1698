from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

from creator_match.matcher.models import Candidate

CONTACT_FOR_PRICING = "Contact for pricing"


@dataclass
class ScoreBreakdown:
    """Weighted contribution of each sub-score, in the weight table's units."""
    scale: float = 1.0
    cosine_similarity_raw: float = 0.0
    similarity: float = 0.0
    engagement: float = 0.0
    followers: float = 0.0
    satisfaction: float = 0.0
    experience: float = 0.0
    budget_fit: float = 0.0
    audience_alignment: float = 0.0
    content_fit: float = 0.0
    product_affinity: float = 0.0
    brand_alignment: float = 0.0
    location_relevance: float = 0.0

    def contributions(self) -> Dict[str, float]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in ('scale', 'cosine_similarity_raw')
        }

    @property
    def total(self) -> float:
        return sum(self.contributions().values())

    def as_dict(self) -> Dict[str, float]:
        data = {name: round(value, 4) for name, value in self.contributions().items()}
        data['cosine_similarity_raw'] = round(self.cosine_similarity_raw, 4)
        return data


@dataclass
class CostEstimate:
    """Estimated price of the collaboration; ``cost`` is CONTACT_FOR_PRICING when unknown."""
    cost: Union[float, str] = CONTACT_FOR_PRICING
    currency: str = "USD"
    estimated: bool = True
    breakdown: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_priced(self) -> bool:
        return isinstance(self.cost, (int, float)) and not isinstance(self.cost, bool)


@dataclass
class ScoredCandidate:
    candidate: Candidate
    campaign_fit_score: float
    score_breakdown: ScoreBreakdown
    estimated_cost: CostEstimate
    recommendation_reasons: List[str] = field(default_factory=list)
    price_per_1k_followers: Optional[float] = None

    @property
    def creator_id(self) -> int:
        return self.candidate.creator_id


@dataclass
class RecommendationResult:
    recommendations: List[ScoredCandidate]
    search_query_used: str
    filters_applied: Dict[str, Any]
    total_found: int
    budget_filtered: int
    product_context: Optional[Dict[str, Any]] = None
