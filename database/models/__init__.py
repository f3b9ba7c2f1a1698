from .base import Base
from .creator import (
    EMBEDDING_DIMENSIONS,
    Creator,
    CreatorPlatformMetrics,
    CreatorPricing,
    CreatorAudienceDemographics,
    CreatorCollaboration,
    CreatorPersonality,
)

__all__ = [
    'Base',
    'EMBEDDING_DIMENSIONS',
    'Creator',
    'CreatorPlatformMetrics',
    'CreatorPricing',
    'CreatorAudienceDemographics',
    'CreatorCollaboration',
    'CreatorPersonality',
]
