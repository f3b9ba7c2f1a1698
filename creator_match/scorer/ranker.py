#!/usr/bin/env python3
"""
Recommendation Ranker - order, budget-filter and truncate scored candidates.

Order: campaign_fit_score descending, creator id ascending on ties.
Budget: a candidate is dropped only when its cost is known and exceeds
budget x tolerance; "Contact for pricing" always passes.
"""

import logging
from typing import Any, Dict, List, Optional

from creator_match.scorer.models import RecommendationResult, ScoredCandidate

logger = logging.getLogger(__name__)

DEFAULT_BUDGET_TOLERANCE = 1.2


def sort_by_fit(scored: List[ScoredCandidate]) -> List[ScoredCandidate]:
    return sorted(scored, key=lambda s: (-s.campaign_fit_score, s.creator_id))


def within_budget(scored: ScoredCandidate, budget: Optional[float], tolerance: float = DEFAULT_BUDGET_TOLERANCE) -> bool:
    if not budget:
        return True
    cost = scored.estimated_cost
    if cost is None or not cost.is_priced:
        return True
    return cost.cost <= budget * tolerance


class RecommendationRanker:
    def __init__(self, budget_tolerance: float = DEFAULT_BUDGET_TOLERANCE):
        self.budget_tolerance = budget_tolerance

    def filter_by_budget(self, scored: List[ScoredCandidate], budget: Optional[float]) -> List[ScoredCandidate]:
        kept = [s for s in scored if within_budget(s, budget, self.budget_tolerance)]
        dropped = len(scored) - len(kept)
        if dropped:
            logger.info(f"Budget filter dropped {dropped} of {len(scored)} candidates (budget={budget})")
        return kept

    def rank(
        self,
        scored: List[ScoredCandidate],
        budget: Optional[float],
        max_results: int,
        search_query: str,
        filters: Dict[str, Any],
        product_context: Optional[Dict[str, Any]] = None
    ) -> RecommendationResult:
        """
        Sort, apply the budget envelope and keep the top ``max_results``.

        ``total_found`` counts every scored candidate; ``budget_filtered``
        counts those left after the budget filter, before truncation.
        """
        if max_results < 0:
            raise ValueError(f"max_results must be >= 0, got {max_results}")

        ordered = sort_by_fit(scored)
        affordable = self.filter_by_budget(ordered, budget)

        return RecommendationResult(
            recommendations=affordable[:max_results],
            search_query_used=search_query,
            filters_applied=dict(filters),
            total_found=len(scored),
            budget_filtered=len(affordable),
            product_context=product_context,
        )
