"""
OpenAI Embedding Service - EmbeddingProvider implementation using the OpenAI API.

A failed call surfaces as ProviderError. By default nothing is retried, so the
caller decides whether to retry; setting ``max_attempts`` above 1 opts into
retrying transient failures inside the adapter.
"""
from typing import Any, Dict, List, Optional
import logging

import openai
from openai import OpenAI
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity import RetryCallState

from creator_match.exceptions import ProviderError
from creator_match.llm.interfaces import EmbeddingProvider
from creator_match.llm.rate_limiter import TokenBucket

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
)

MAX_RETRY_WAIT_SECONDS = 60.0

_backoff = wait_exponential(multiplier=1, min=2, max=MAX_RETRY_WAIT_SECONDS)


def _retry_wait(retry_state: RetryCallState) -> float:
    """Retry-After on rate limits when the server sends one, else exponential backoff."""
    exc = retry_state.outcome.exception()
    headers = getattr(getattr(exc, "response", None), "headers", None) or {}
    retry_after = headers.get("retry-after")
    if isinstance(exc, openai.RateLimitError) and retry_after:
        try:
            return min(float(retry_after), MAX_RETRY_WAIT_SECONDS)
        except ValueError:
            pass
    return _backoff(retry_state)


def _log_retry(retry_state: RetryCallState) -> None:
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        f"Transient embedding error (attempt {retry_state.attempt_number}), "
        f"retrying in {wait:.1f}s: {retry_state.outcome.exception()}"
    )


class OpenAIEmbeddingService(EmbeddingProvider):
    """
    OpenAI embedding provider.

    Paces calls with a TokenBucket (when requests_per_minute is set) and raises
    ProviderError on failure. The SDK's own retries are switched off so that
    ``max_attempts`` is the only retry policy in play.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model_config: Optional[Dict[str, Any]] = None,
        rate_limiter: Optional[TokenBucket] = None,
        client: Optional[OpenAI] = None
    ):
        self.model_config = model_config or {}
        self.embedding_model = self.model_config.get('embedding_model', 'text-embedding-3-large')
        self.embedding_dimensions = self.model_config.get('embedding_dimensions', 3072)
        self.max_attempts = self.model_config.get('max_attempts', 1)
        timeout = self.model_config.get('request_timeout_seconds', 30.0)

        if client is None:
            client_kwargs = {'timeout': timeout, 'max_retries': 0}
            if api_key:
                client_kwargs['api_key'] = api_key
            if base_url:
                client_kwargs['base_url'] = base_url
            client = OpenAI(**client_kwargs)

        self.client = client
        self.rate_limiter = rate_limiter

    @classmethod
    def from_config(cls, embedding_config) -> "OpenAIEmbeddingService":
        """Build the service from an EmbeddingConfig section."""
        rate_limiter = None
        if embedding_config.requests_per_minute:
            rate_limiter = TokenBucket.per_minute(embedding_config.requests_per_minute)

        return cls(
            api_key=embedding_config.api_key,
            base_url=embedding_config.base_url,
            model_config={
                'embedding_model': embedding_config.embedding_model,
                'embedding_dimensions': embedding_config.embedding_dimensions,
                'max_attempts': embedding_config.max_attempts,
                'request_timeout_seconds': embedding_config.request_timeout_seconds,
            },
            rate_limiter=rate_limiter
        )

    @property
    def dimensions(self) -> int:
        return self.embedding_dimensions

    def generate_embedding(self, text: str) -> List[float]:
        """Generate embedding vector for text.

        Raises:
            ProviderError: input is empty, the API call failed,
                or the response has the wrong dimension
        """
        if not text or not text.strip():
            raise ProviderError("Cannot embed empty text")

        try:
            embedding = self._create_embedding(text)
        except openai.OpenAIError as e:
            logger.error(f"Embedding failed: {e}")
            raise ProviderError(f"Embedding request failed: {e}") from e

        if len(embedding) != self.embedding_dimensions:
            raise ProviderError(
                f"Embedding has {len(embedding)} dimensions, expected {self.embedding_dimensions}"
            )
        return embedding

    def _create_embedding(self, text: str) -> List[float]:
        @retry(
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            wait=_retry_wait,
            stop=stop_after_attempt(self.max_attempts),
            before_sleep=_log_retry,
            reraise=True,
        )
        def _call() -> List[float]:
            if self.rate_limiter is not None:
                self.rate_limiter.acquire()
            response = self.client.embeddings.create(
                input=text,
                model=self.embedding_model,
                dimensions=self.embedding_dimensions,
                encoding_format="float"
            )
            return list(response.data[0].embedding)

        return _call()
