from creator_match.matcher.models import (
    BrandDescriptor,
    CampaignDescriptor,
    Candidate,
    CreatorProfile,
    MaintenanceReport,
    Predicate,
    SearchResponse,
)
from creator_match.matcher.profile_text import SCHEMA_VERSION, ProfileField, build_profile_text
from creator_match.matcher.filters import (
    build_enhanced_search_filters,
    build_search_filters,
    predicates_from_filters,
)
from creator_match.matcher.query_builder import build_campaign_query
from creator_match.matcher.vector_store import VectorStore
from creator_match.matcher.maintenance import EmbeddingMaintenanceJob
from creator_match.matcher.search import HybridSearchEngine

__all__ = [
    'BrandDescriptor',
    'CampaignDescriptor',
    'Candidate',
    'CreatorProfile',
    'MaintenanceReport',
    'Predicate',
    'SearchResponse',
    'SCHEMA_VERSION',
    'ProfileField',
    'build_profile_text',
    'build_search_filters',
    'build_enhanced_search_filters',
    'predicates_from_filters',
    'build_campaign_query',
    'VectorStore',
    'EmbeddingMaintenanceJob',
    'HybridSearchEngine',
]
