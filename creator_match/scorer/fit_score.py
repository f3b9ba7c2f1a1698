#!/usr/bin/env python3
"""
Campaign Fit Score - weighted sum of independent sub-scores.

Each sub-score function returns a fraction in [0, 1]; the scorer multiplies it
by the sub-score's weight and clamps the total to the weight table's scale.

Key behavior:
- Missing inputs contribute 0, except budget fit and brand alignment which
  default to a neutral 0.5.
- Location relevance only applies to event coverage campaigns with a location.
- Tier boundaries are exclusive on the upper threshold (engagement 8.0 is the >5 tier).
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Sequence

from creator_match.config_loader import ReasonThresholds, ScoringWeights
from creator_match.matcher.filters import AGE_GROUP_BUCKETS
from creator_match.matcher.models import (
    BrandDescriptor,
    CampaignDescriptor,
    Candidate,
    CreatorProfile,
    ProductAnalysis,
    TargetAudience,
)
from creator_match.scorer.cost import estimate_cost, estimate_enhanced_cost, price_per_1k_followers
from creator_match.scorer.models import ScoreBreakdown, ScoredCandidate
from creator_match.scorer.reasons import build_reasons
from creator_match.utils import clamp, normalize_similarity, to_float

logger = logging.getLogger(__name__)

NEUTRAL = 0.5

# Share (percent) of the creator's audience a bucket needs to count as overlapping
AUDIENCE_SHARE_THRESHOLD = 30.0
PRODUCT_AUDIENCE_SHARE_THRESHOLD = 25.0

BRAND_STYLE_PAIRS = (
    ("premium", "professional"),
    ("fun", "casual"),
    ("authentic", "genuine"),
)
BRAND_PAIR_BONUS = 0.3


# ----------------------------
# Tiered sub-scores
# ----------------------------
def engagement_fraction(rate: Optional[float]) -> float:
    rate = to_float(rate, 0.0)
    if rate > 8:
        return 1.0
    if rate > 5:
        return 0.8
    if rate > 3:
        return 0.6
    if rate >= 1.5:
        return 0.4
    return 0.0


def followers_fraction(followers: Optional[float]) -> float:
    followers = to_float(followers, 0.0)
    if followers > 1_000_000:
        return 1.0
    if followers > 500_000:
        return 0.9
    if followers > 100_000:
        return 0.8
    if followers > 50_000:
        return 0.7
    if followers > 10_000:
        return 0.6
    if followers >= 1_000:
        return 0.4
    return 0.0


def satisfaction_fraction(score: Optional[float]) -> float:
    return clamp(to_float(score, 0.0) / 5.0, 0.0, 1.0)


def experience_fraction(collaborations: Optional[float]) -> float:
    collaborations = to_float(collaborations, 0.0)
    if collaborations > 50:
        return 1.0
    if collaborations > 20:
        return 0.8
    if collaborations > 10:
        return 0.6
    if collaborations > 5:
        return 0.4
    if collaborations > 0:
        return 0.2
    return 0.0


def budget_fit_fraction(budget: Optional[float], rate: Optional[float]) -> float:
    """Sweet spot is a rate of 70-90% of the budget."""
    budget = to_float(budget)
    rate = to_float(rate)
    if not budget or not rate:
        return NEUTRAL

    ratio = rate / budget
    if 0.7 <= ratio <= 0.9:
        return 1.0
    if 0.5 <= ratio <= 1.1:
        return 0.8
    if 0.3 <= ratio <= 1.3:
        return 0.6
    if ratio <= 1.5:
        return 0.4
    return 0.2


# ----------------------------
# Overlap sub-scores
# ----------------------------
def _lower(values: Iterable[str]) -> List[str]:
    return [str(v).lower() for v in values if v]


def _overlap_ratio(wanted: Sequence[str], have: Sequence[str], bidirectional: bool = True) -> float:
    """Share of ``wanted`` items that substring-match some item of ``have``."""
    wanted_l = _lower(wanted)
    have_l = _lower(have)
    if not wanted_l:
        return 0.0
    matched = 0
    for w in wanted_l:
        if any(w in h or (bidirectional and h in w) for h in have_l):
            matched += 1
    return matched / len(wanted_l)


def age_overlap(age_groups: Sequence[str], demographics: Optional[Mapping], threshold: float) -> float:
    """Share of target age groups where the creator's audience share exceeds ``threshold``."""
    if not age_groups or not demographics:
        return 0.0
    hits = 0
    for group in age_groups:
        column = AGE_GROUP_BUCKETS.get(str(group).strip().lower().replace(" ", ""))
        share = to_float(demographics.get(column), 0.0) if column else 0.0
        if share > threshold:
            hits += 1
    return hits / len(age_groups)


def _mean(parts: List[float]) -> float:
    return sum(parts) / len(parts) if parts else 0.0


def audience_alignment_fraction(target: TargetAudience, creator: CreatorProfile) -> float:
    parts = []
    demographics = creator.primary_demographics
    if target.age_groups and demographics:
        parts.append(age_overlap(target.age_groups, demographics, AUDIENCE_SHARE_THRESHOLD))
    if target.interests and creator.audience_interests:
        parts.append(_overlap_ratio(target.interests, creator.audience_interests, bidirectional=False))
    return _mean(parts)


def content_fit_fraction(required: Sequence[str], categories: Sequence[str]) -> float:
    if not required or not categories:
        return 0.0
    return _overlap_ratio(required, categories)


def product_affinity_fraction(analysis: Optional[ProductAnalysis], creator: CreatorProfile) -> float:
    if analysis is None:
        return 0.0

    parts = []
    if analysis.ideal_creator_types and creator.content_categories:
        parts.append(_overlap_ratio(analysis.ideal_creator_types, creator.content_categories))

    audience = analysis.target_audience
    demographics = creator.primary_demographics
    if audience is not None and (demographics or creator.audience_interests):
        audience_parts = []
        if audience.age_groups and demographics:
            audience_parts.append(
                age_overlap(audience.age_groups, demographics, PRODUCT_AUDIENCE_SHARE_THRESHOLD)
            )
        if audience.interests and creator.audience_interests:
            audience_parts.append(_overlap_ratio(audience.interests, creator.audience_interests))
        if audience_parts:
            parts.append(_mean(audience_parts))

    return _mean(parts)


def brand_alignment_fraction(brand_values: Sequence[str], personality: Optional[Mapping]) -> float:
    if not brand_values or not personality:
        return NEUTRAL

    brand_text = " ".join(_lower(brand_values))
    style_text = " ".join(
        str(personality.get(key) or "") for key in ("content_style", "communication_tone")
    ).lower()

    alignment = NEUTRAL
    for brand_word, style_word in BRAND_STYLE_PAIRS:
        if brand_word in brand_text and style_word in style_text:
            alignment += BRAND_PAIR_BONUS
    return min(alignment, 1.0)


def location_relevance_fraction(location: Optional[str], city: Optional[str], country: Optional[str]) -> float:
    """City match 1.0, country match 0.6, anywhere else 0.2."""
    if not location or not (city or country):
        return 0.0
    wanted = location.lower()
    if city:
        creator_loc = f"{city} {country or ''}".lower()
        if wanted in creator_loc or city.lower() in wanted:
            return 1.0
    if country and country.lower() in wanted:
        return 0.6
    return 0.2


# ----------------------------
# Scorer
# ----------------------------
class CampaignFitScorer:
    """
    Scores candidates against one campaign with one weight table.

    Sub-scores with a zero weight are not computed. ``enhanced`` selects the
    enhanced cost model; the weight table decides which sub-scores count.
    """

    def __init__(
        self,
        weights: ScoringWeights,
        reason_thresholds: Optional[ReasonThresholds] = None,
        satisfaction_bonus_threshold: float = 4.5,
        enhanced: bool = False
    ):
        self.weights = weights
        self.reason_thresholds = reason_thresholds or ReasonThresholds()
        self.satisfaction_bonus_threshold = satisfaction_bonus_threshold
        self.enhanced = enhanced

    def _fractions(
        self,
        candidate: Candidate,
        campaign: Optional[CampaignDescriptor],
        brand: Optional[BrandDescriptor]
    ) -> dict:
        creator = candidate.creator
        metrics = creator.primary_metrics or {}
        pricing = creator.primary_pricing or {}
        w = self.weights
        fractions = {}

        if w.similarity:
            fractions['similarity'] = normalize_similarity(candidate.similarity)
        if w.engagement:
            fractions['engagement'] = engagement_fraction(metrics.get('engagement_rate'))
        if w.followers:
            fractions['followers'] = followers_fraction(metrics.get('follower_count'))
        if w.satisfaction:
            fractions['satisfaction'] = satisfaction_fraction(creator.client_satisfaction_score)
        if w.experience:
            fractions['experience'] = experience_fraction(creator.total_collaborations)

        if campaign is not None:
            if w.budget_fit:
                fractions['budget_fit'] = budget_fit_fraction(
                    campaign.budget, pricing.get('sponsored_post_rate')
                )
            if w.audience_alignment:
                fractions['audience_alignment'] = audience_alignment_fraction(
                    campaign.target_audience, creator
                )
            if w.content_fit:
                fractions['content_fit'] = content_fit_fraction(
                    campaign.requirements.content_type, creator.content_categories
                )
            if w.product_affinity:
                fractions['product_affinity'] = product_affinity_fraction(
                    campaign.product_analysis, creator
                )
            if w.location_relevance and campaign.campaign_type == 'event_coverage' and campaign.location:
                fractions['location_relevance'] = location_relevance_fraction(
                    campaign.location, creator.location_city, creator.location_country
                )
        elif w.budget_fit:
            fractions['budget_fit'] = NEUTRAL

        if w.brand_alignment:
            fractions['brand_alignment'] = brand_alignment_fraction(
                brand.brand_values if brand else [], creator.personality_profile
            )

        return fractions

    def score(
        self,
        candidate: Candidate,
        campaign: Optional[CampaignDescriptor] = None,
        brand: Optional[BrandDescriptor] = None
    ) -> ScoredCandidate:
        weights = self.weights.factors()
        fractions = self._fractions(candidate, campaign, brand)

        breakdown = ScoreBreakdown(
            scale=self.weights.scale,
            cosine_similarity_raw=candidate.similarity,
        )
        for name, fraction in fractions.items():
            setattr(breakdown, name, clamp(fraction, 0.0, 1.0) * weights[name])

        total = clamp(breakdown.total, 0.0, self.weights.scale)

        creator = candidate.creator
        campaign_type = campaign.campaign_type if campaign else None
        if self.enhanced and campaign is not None:
            cost = estimate_enhanced_cost(creator, campaign)
        else:
            cost = estimate_cost(creator, campaign_type)

        reasons = build_reasons(
            creator,
            breakdown,
            self.weights,
            self.reason_thresholds,
            self.satisfaction_bonus_threshold,
            enhanced=self.enhanced
        )

        return ScoredCandidate(
            candidate=candidate,
            campaign_fit_score=total,
            score_breakdown=breakdown,
            estimated_cost=cost,
            recommendation_reasons=reasons,
            price_per_1k_followers=price_per_1k_followers(creator),
        )

    def score_all(
        self,
        candidates: Iterable[Candidate],
        campaign: Optional[CampaignDescriptor] = None,
        brand: Optional[BrandDescriptor] = None
    ) -> List[ScoredCandidate]:
        return [self.score(c, campaign, brand) for c in candidates]
