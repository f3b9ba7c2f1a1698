from creator_match.scorer.models import (
    CONTACT_FOR_PRICING,
    CostEstimate,
    RecommendationResult,
    ScoreBreakdown,
    ScoredCandidate,
)
from creator_match.scorer.fit_score import CampaignFitScorer
from creator_match.scorer.cost import estimate_cost, estimate_enhanced_cost, price_per_1k_followers
from creator_match.scorer.reasons import build_reasons
from creator_match.scorer.ranker import RecommendationRanker
from creator_match.scorer.service import RecommendationOptions, RecommendationService

__all__ = [
    'CONTACT_FOR_PRICING',
    'CostEstimate',
    'RecommendationResult',
    'ScoreBreakdown',
    'ScoredCandidate',
    'CampaignFitScorer',
    'estimate_cost',
    'estimate_enhanced_cost',
    'price_per_1k_followers',
    'build_reasons',
    'RecommendationRanker',
    'RecommendationOptions',
    'RecommendationService',
]
