"""Collaboration cost estimates from a creator's primary-platform pricing."""

import logging
import math
from typing import Optional

from creator_match.matcher.models import CampaignDescriptor, CreatorProfile
from creator_match.scorer.models import CONTACT_FOR_PRICING, CostEstimate
from creator_match.utils import to_float

logger = logging.getLogger(__name__)

# campaign type -> (dedicated rate column, multiplier on the sponsored post rate when that rate is missing)
CAMPAIGN_RATE_RULES = {
    'brand_ambassador': ('brand_ambassadorship_monthly_rate', 3.0),
    'product_review': (None, 0.8),
    'event_coverage': ('event_coverage_rate', 1.2),
    'content_collaboration': ('video_integration_rate', 1.5),
}

ENHANCED_MULTIPLIERS = {
    'brand_ambassador': 3.0,
    'product_review': 0.8,
    'event_coverage': 1.3,
    'content_collaboration': 1.5,
    'sponsored_post': 1.0,
}
EVENT_DELIVERABLES_THRESHOLD = 2
EVENT_DELIVERABLES_MULTIPLIER = 1.2
EVENT_LOCATION_MULTIPLIER = 1.1


def _contact(currency: str) -> CostEstimate:
    return CostEstimate(cost=CONTACT_FOR_PRICING, currency=currency)


def estimate_cost(creator: CreatorProfile, campaign_type: Optional[str], default_currency: str = "USD") -> CostEstimate:
    """Dedicated rate for the campaign type, else the sponsored post rate times its multiplier."""
    pricing = creator.primary_pricing
    if not pricing:
        return _contact(default_currency)

    currency = pricing.get('currency') or default_currency
    base = to_float(pricing.get('sponsored_post_rate'))
    rate_column, multiplier = CAMPAIGN_RATE_RULES.get(campaign_type, (None, 1.0))

    cost = to_float(pricing.get(rate_column)) if rate_column else None
    if not cost:
        cost = base * multiplier if base is not None else None

    if cost is None:
        return _contact(currency)

    return CostEstimate(
        cost=cost,
        currency=currency,
        breakdown={
            'base_rate': base,
            'campaign_multiplier': cost / (base or 1),
            'campaign_type': campaign_type,
        },
    )


def estimate_enhanced_cost(creator: CreatorProfile, campaign: CampaignDescriptor) -> CostEstimate:
    """Fixed per-type multipliers plus event surcharges, rounded to whole currency units."""
    pricing = creator.primary_pricing
    if not pricing:
        return _contact(campaign.currency)

    currency = pricing.get('currency') or campaign.currency
    base = to_float(pricing.get('sponsored_post_rate'))
    if base is None:
        return _contact(currency)

    multiplier = ENHANCED_MULTIPLIERS.get(campaign.campaign_type, 1.0)
    cost = base * multiplier
    additional = []

    if campaign.campaign_type == 'event_coverage':
        if len(campaign.requirements.deliverables) > EVENT_DELIVERABLES_THRESHOLD:
            cost *= EVENT_DELIVERABLES_MULTIPLIER
            additional.append('Multiple deliverables')
        if campaign.location:
            cost *= EVENT_LOCATION_MULTIPLIER
            additional.append('Event attendance')

    return CostEstimate(
        cost=float(math.floor(cost + 0.5)),  # half-up, not banker's rounding
        currency=currency,
        breakdown={
            'base_rate': base,
            'campaign_multiplier': multiplier,
            'campaign_type': campaign.campaign_type,
            'additional_factors': additional,
        },
    )


def price_per_1k_followers(creator: CreatorProfile) -> Optional[float]:
    pricing = creator.primary_pricing or {}
    metrics = creator.primary_metrics or {}
    rate = to_float(pricing.get('sponsored_post_rate'))
    followers = to_float(metrics.get('follower_count'))
    if not rate or not followers or followers <= 0:
        return None
    return round(rate / followers * 1000, 2)
