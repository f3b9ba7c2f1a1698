from creator_match.llm.interfaces import EmbeddingProvider
from creator_match.llm.openai_service import OpenAIEmbeddingService
from creator_match.llm.rate_limiter import TokenBucket

__all__ = ['EmbeddingProvider', 'OpenAIEmbeddingService', 'TokenBucket']
