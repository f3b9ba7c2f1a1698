#!/usr/bin/env python3
"""
Test Mock Implementations - in-memory stand-ins for the provider and repository.

These mocks provide deterministic behavior for unit tests without a database
or network access.
"""
import contextlib
import hashlib
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from creator_match.exceptions import ProviderError
from creator_match.llm.interfaces import EmbeddingProvider
from creator_match.matcher.models import Candidate, CreatorProfile, Predicate


class MockEmbeddingProvider(EmbeddingProvider):
    """
    Deterministic embeddings derived from a hash of the text.

    Texts listed in ``fail_on`` (substring match) raise ProviderError.
    """

    def __init__(self, dimensions: int = 8, fail_on: Sequence[str] = ()):
        self._dimensions = dimensions
        self.fail_on = list(fail_on)
        self.calls: List[str] = []

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def generate_embedding(self, text: str) -> List[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise ProviderError(f"Mock provider refused: {text[:30]}")
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [digest[i % len(digest)] / 255.0 for i in range(self._dimensions)]


class FakeCreatorRepository:
    """In-memory CreatorRepository covering the methods the engine calls."""

    def __init__(self, records: Optional[Dict[int, Dict[str, Any]]] = None):
        self.records: Dict[int, Dict[str, Any]] = records or {}
        self.embeddings: Dict[int, List[float]] = {}
        self.candidates: List[Tuple[CreatorProfile, float]] = []
        self.queries: List[Tuple[List[Predicate], List[float], int]] = []

    def get_creator_record(self, creator_id: int) -> Optional[Dict[str, Any]]:
        record = self.records.get(creator_id)
        return dict(record) if record is not None else None

    def get_creator_ids_without_embedding(self) -> List[int]:
        return sorted(cid for cid in self.records if cid not in self.embeddings)

    def save_creator_embedding(self, creator_id: int, embedding: Sequence[float]) -> bool:
        if creator_id not in self.records:
            return False
        self.embeddings[creator_id] = list(embedding)
        return True

    def count_creators(self, embedded_only: bool = False) -> int:
        return len(self.embeddings) if embedded_only else len(self.records)

    def query_candidates(self, predicates, query_vector, limit):
        self.queries.append((list(predicates), list(query_vector), limit))
        return self.candidates[:limit]


def fake_uow_factory(repo: FakeCreatorRepository):
    """A creator_uow stand-in that always yields the same repository."""
    @contextlib.contextmanager
    def _uow():
        yield repo
    return _uow


def make_profile(creator_id: int = 1, **overrides: Any) -> CreatorProfile:
    """A creator on instagram with metrics, pricing and demographics filled in."""
    data: Dict[str, Any] = dict(
        id=creator_id,
        creator_name=f"Creator {creator_id}",
        niche="beauty_fashion",
        tier="micro",
        primary_platform="instagram",
        content_categories=["makeup tutorials", "skincare"],
        location_city="Austin",
        location_country="USA",
        verification_status="unverified",
        client_satisfaction_score=4.0,
        total_collaborations=12,
        platform_metrics={"instagram": {"follower_count": 80_000, "engagement_rate": 4.0}},
        pricing={"instagram": {"sponsored_post_rate": 1_000.0, "currency": "USD"}},
        audience_demographics={"instagram": {"age_18_24": 45.0, "age_25_34": 35.0}},
        audience_interests=["beauty", "fashion"],
    )
    data.update(overrides)
    return CreatorProfile(**data)


def make_candidate(creator_id: int = 1, similarity: float = 0.5, **overrides: Any) -> Candidate:
    return Candidate(
        creator=make_profile(creator_id, **overrides),
        similarity=similarity,
        distance=1.0 - similarity,
    )
