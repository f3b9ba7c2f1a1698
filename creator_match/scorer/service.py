#!/usr/bin/env python3
"""
Recommendation Service - campaign in, ranked and explained creators out.

Stages:
    query    -> CampaignQueryBuilder (unless the caller supplies a query)
    filters  -> SearchFilterBuilder (standard or enhanced)
    search   -> HybridSearchEngine
    scoring  -> CampaignFitScorer (one weight table per pass)
    ranking  -> RecommendationRanker

A failure in any stage is re-raised as RecommendationError carrying the
stage name; nothing is retried or substituted.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from creator_match.config_loader import ScoringConfig, SearchConfig
from creator_match.exceptions import RecommendationError
from creator_match.matcher.filters import build_enhanced_search_filters, build_search_filters
from creator_match.matcher.models import BrandDescriptor, CampaignDescriptor
from creator_match.matcher.query_builder import build_campaign_query
from creator_match.matcher.search import HybridSearchEngine
from creator_match.scorer.fit_score import CampaignFitScorer
from creator_match.scorer.models import RecommendationResult
from creator_match.scorer.ranker import RecommendationRanker

logger = logging.getLogger(__name__)


@dataclass
class RecommendationOptions:
    max_results: int = 20
    search_query: Optional[str] = None
    enhanced: bool = False
    candidate_pool_size: Optional[int] = None


class RecommendationService:
    """
    Args:
        search_engine: HybridSearchEngine bound to an open repository
        scoring_config: Weight presets, budget tolerance and reason thresholds
        search_config: Default candidate pool size
    """

    def __init__(
        self,
        search_engine: HybridSearchEngine,
        scoring_config: Optional[ScoringConfig] = None,
        search_config: Optional[SearchConfig] = None
    ):
        self.search_engine = search_engine
        self.scoring_config = scoring_config or ScoringConfig()
        self.search_config = search_config or SearchConfig()

    def _scorer(self, enhanced: bool) -> CampaignFitScorer:
        cfg = self.scoring_config
        return CampaignFitScorer(
            weights=cfg.resolve_weights(enhanced=enhanced),
            reason_thresholds=cfg.reason_thresholds,
            satisfaction_bonus_threshold=cfg.satisfaction_bonus_threshold,
            enhanced=enhanced,
        )

    def recommend(
        self,
        campaign: CampaignDescriptor,
        brand: BrandDescriptor,
        options: Optional[RecommendationOptions] = None
    ) -> RecommendationResult:
        options = options or RecommendationOptions()
        logger.info(
            f"Generating {'enhanced ' if options.enhanced else ''}recommendations "
            f"for campaign: {campaign.campaign_name or '<unnamed>'}"
        )

        stage = "query"
        try:
            query = options.search_query or build_campaign_query(campaign, brand)
            logger.info(f"Search query: \"{query}\"")

            stage = "filters"
            if options.enhanced:
                filters = build_enhanced_search_filters(campaign, brand)
            else:
                filters = build_search_filters(campaign, brand)
            logger.debug(f"Filters: {filters}")

            stage = "search"
            pool_size = options.candidate_pool_size or self.search_config.candidate_pool_size
            candidates = self.search_engine.search(
                query, filters, limit=max(pool_size, options.max_results, 1)
            )

            stage = "scoring"
            scored = self._scorer(options.enhanced).score_all(candidates, campaign, brand)

            stage = "ranking"
            product_context = None
            if options.enhanced and campaign.product_info is not None:
                product_context = campaign.product_info.model_dump()

            result = RecommendationRanker(self.scoring_config.budget_tolerance).rank(
                scored,
                budget=campaign.budget,
                max_results=options.max_results,
                search_query=query,
                filters=filters,
                product_context=product_context,
            )
        except RecommendationError:
            raise
        except Exception as e:
            logger.error(f"Recommendation failed at stage '{stage}': {e}")
            raise RecommendationError(stage, e) from e

        logger.info(
            f"Recommendations ready: {len(result.recommendations)} returned, "
            f"{result.total_found} found, {result.budget_filtered} within budget"
        )
        return result
