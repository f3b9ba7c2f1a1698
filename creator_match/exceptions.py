"""
Exception taxonomy for the matching engine.

- ProviderError: the embedding provider failed (network, quota, invalid input).
- SchemaError: the vector column or ANN index is in an unexpected state.
- DataError: a creator record is missing or malformed.
- RecommendationError: a recommendation stage failed; carries the stage name.
"""
from typing import Optional


class MatchingError(Exception):
    """Base exception for matching engine errors."""
    pass


class ProviderError(MatchingError):
    """Raised when the embedding provider call fails."""
    pass


class SchemaError(MatchingError):
    """Raised when the embedding column or index cannot be brought to the expected state."""
    pass


class DataError(MatchingError):
    """Raised when a creator row is missing or lacks expected fields."""
    pass


class RecommendationError(MatchingError):
    """Raised when a stage of the recommendation pipeline fails."""

    def __init__(self, stage: str, cause: Optional[BaseException] = None):
        self.stage = stage
        self.cause = cause
        message = f"Recommendation failed at stage '{stage}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
