#!/usr/bin/env python3
"""
Hybrid Search - ANN retrieval over creator embeddings with relational filters.

1. Embed the query text
2. Translate filters into ANDed predicates
3. Nearest creators by cosine distance (ties by creator id), limited
4. Raw similarity = 1 - cosine distance, in [-1, 1]
"""
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError

from creator_match.config_loader import SearchConfig
from creator_match.exceptions import MatchingError
from creator_match.llm.interfaces import EmbeddingProvider
from creator_match.matcher.filters import predicates_from_filters
from creator_match.matcher.models import Candidate, SearchResponse
from creator_match.utils import cosine_similarity_from_distance

logger = logging.getLogger(__name__)


class HybridSearchEngine:
    """
    Stateless search over the creator vector store.

    Args:
        repo: CreatorRepository bound to an open session
        provider: Embedding provider for the query text
        config: Default limit
    """

    def __init__(self, repo, provider: EmbeddingProvider, config: Optional[SearchConfig] = None):
        self.repo = repo
        self.provider = provider
        self.config = config or SearchConfig()

    def search(
        self,
        query_text: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None
    ) -> List[Candidate]:
        """
        Find the creators nearest to ``query_text`` that satisfy every filter.

        Raises:
            ValueError: blank query or non-positive limit
            ProviderError: the query could not be embedded
        """
        if not query_text or not query_text.strip():
            raise ValueError("Search query must not be empty")

        limit = self.config.default_limit if limit is None else limit
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        predicates = predicates_from_filters(filters)
        query_vector = self.provider.generate_embedding(query_text)

        rows = self.repo.query_candidates(predicates, query_vector, limit)

        candidates = [
            Candidate(
                creator=profile,
                similarity=cosine_similarity_from_distance(distance),
                distance=distance
            )
            for profile, distance in rows
        ]

        logger.info(
            f"Search returned {len(candidates)} candidates "
            f"(limit={limit}, predicates={len(predicates)})"
        )
        return candidates

    def search_safe(
        self,
        query_text: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None
    ) -> SearchResponse:
        """Like search(), but reports failure in the response instead of raising."""
        try:
            results = self.search(query_text, filters, limit)
        except (MatchingError, ValueError, SQLAlchemyError) as e:
            logger.error(f"Search failed: {e}")
            return SearchResponse(success=False, error=str(e))
        return SearchResponse(success=True, results=results)
