#!/usr/bin/env python3
"""
Search Filters - campaign/brand descriptors to search filters, filters to predicates.

A filter dict is what callers see (it is echoed back as ``filters_applied``);
predicates are what the repository turns into SQL. Absent filters produce no
predicate.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from creator_match.matcher.models import BrandDescriptor, CampaignDescriptor, Predicate

logger = logging.getLogger(__name__)

# filter key -> (predicate field, op)
FILTER_PREDICATES: Dict[str, Tuple[str, str]] = {
    'platform': ('platform', 'eq'),
    'primary_platform': ('platform', 'eq'),
    'min_engagement_rate': ('engagement_rate', 'gte'),
    'max_engagement_rate': ('engagement_rate', 'lte'),
    'max_price': ('sponsored_post_rate', 'lte'),
    'max_budget': ('sponsored_post_rate', 'lte'),
    'min_followers': ('follower_count', 'gte'),
    'max_followers': ('follower_count', 'lte'),
    'tier': ('tier', 'eq'),
    'niche': ('niche', 'eq'),
    'location_country': ('location_country', 'eq'),
    'verification_status': ('verification_status', 'eq'),
    'min_satisfaction_score': ('client_satisfaction_score', 'gte'),
    'audience_age_primary': ('audience_age_primary', 'eq'),
    'audience_gender_primary': ('audience_gender_primary', 'eq'),
}

AGE_GROUP_BUCKETS = {
    '13-17': 'age_13_17',
    '18-24': 'age_18_24',
    '25-34': 'age_25_34',
    '35-44': 'age_35_44',
    '45+': 'age_45_plus',
    '45-54': 'age_45_plus',
    '55+': 'age_45_plus',
    '45_plus': 'age_45_plus',
}

GENDER_BUCKETS = {
    'male': 'gender_male',
    'men': 'gender_male',
    'female': 'gender_female',
    'women': 'gender_female',
    'other': 'gender_other',
    'non-binary': 'gender_other',
}

# Ordered: first match wins
NICHE_KEYWORDS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (('tech',), 'tech_gaming'),
    (('beauty', 'cosmetic'), 'beauty_fashion'),
    (('fitness', 'health'), 'fitness_health'),
    (('food', 'beverage'), 'food_cooking'),
    (('travel', 'lifestyle'), 'lifestyle_travel'),
)

PRODUCT_NICHE_KEYWORDS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (('tech', 'electronic'), 'tech_gaming'),
) + NICHE_KEYWORDS[1:]

INDUSTRY_NICHE_KEYWORDS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (('technology',), 'tech_gaming'),
    (('beauty',), 'beauty_fashion'),
    (('fitness',), 'fitness_health'),
    (('food',), 'food_cooking'),
)

DEFAULT_MIN_ENGAGEMENT_RATE = 2.0
EVENT_MIN_ENGAGEMENT_RATE = 3.0
ENHANCED_MIN_SATISFACTION_SCORE = 3.5


def infer_niche(text: Optional[str], table=NICHE_KEYWORDS) -> Optional[str]:
    """First niche whose keywords appear in ``text`` (case-insensitive)."""
    if not text:
        return None
    lowered = text.lower()
    for keywords, niche in table:
        if any(keyword in lowered for keyword in keywords):
            return niche
    return None


def _apply_audience(filters: Dict[str, Any], campaign: CampaignDescriptor, include_gender: bool) -> None:
    """Add audience filters whose value maps onto a demographics bucket; others are left out."""
    audience = campaign.target_audience
    if audience.age_groups:
        age = audience.age_groups[0]
        if _bucket(AGE_GROUP_BUCKETS, age) is not None:
            filters['audience_age_primary'] = age
        else:
            logger.info(f"Age group {age!r} has no audience bucket, not filtering on it")
    if include_gender and audience.gender and audience.gender.lower() != 'any':
        if _bucket(GENDER_BUCKETS, audience.gender) is not None:
            filters['audience_gender_primary'] = audience.gender
        else:
            logger.info(f"Gender {audience.gender!r} has no audience bucket, not filtering on it")


def _min_engagement(campaign: CampaignDescriptor) -> float:
    if campaign.campaign_type == 'event_coverage':
        return EVENT_MIN_ENGAGEMENT_RATE
    return DEFAULT_MIN_ENGAGEMENT_RATE


def build_search_filters(campaign: CampaignDescriptor, brand: BrandDescriptor) -> Dict[str, Any]:
    """Standard campaign filters: platform, budget-derived follower bounds, audience, niche."""
    filters: Dict[str, Any] = {}

    if campaign.requirements.platforms:
        filters['primary_platform'] = campaign.requirements.platforms[0]

    if campaign.budget:
        budget = campaign.budget
        if budget < 500:
            filters['tier'] = 'micro'
            filters['max_followers'] = 50_000
        elif budget < 2_000:
            filters['max_followers'] = 500_000
        else:
            filters['min_followers'] = 100_000

    _apply_audience(filters, campaign, include_gender=True)

    analysis = campaign.product_analysis
    niche = infer_niche(analysis.category if analysis else None) or infer_niche(brand.ideal_creators)
    if niche:
        filters['niche'] = niche

    filters['min_engagement_rate'] = _min_engagement(campaign)
    return filters


def build_enhanced_search_filters(campaign: CampaignDescriptor, brand: BrandDescriptor) -> Dict[str, Any]:
    """Enhanced filters: finer budget bands, follower_range override, product/industry niche, quality floors."""
    filters: Dict[str, Any] = {}

    if campaign.requirements.platforms:
        filters['primary_platform'] = campaign.requirements.platforms[0]

    if campaign.budget:
        budget = campaign.budget
        if budget < 1_000:
            filters['tier'] = 'micro'
            filters['max_followers'] = 50_000
        elif budget < 5_000:
            filters['max_followers'] = 500_000
        elif budget < 20_000:
            filters['min_followers'] = 100_000
            filters['max_followers'] = 1_000_000
        else:
            filters['min_followers'] = 500_000

    _apply_audience(filters, campaign, include_gender=False)

    follower_range = (campaign.target_audience.follower_range or '').lower()
    if '100' in follower_range and '300' in follower_range:
        filters['min_followers'] = 100_000
        filters['max_followers'] = 300_000
    elif 'micro' in follower_range:
        filters['tier'] = 'micro'
    elif 'macro' in follower_range:
        filters['tier'] = 'macro'

    analysis = campaign.product_analysis
    niche = (
        infer_niche(analysis.category if analysis else None, PRODUCT_NICHE_KEYWORDS)
        or infer_niche(brand.industry, INDUSTRY_NICHE_KEYWORDS)
    )
    if niche:
        filters['niche'] = niche

    filters['min_engagement_rate'] = _min_engagement(campaign)
    filters['min_satisfaction_score'] = ENHANCED_MIN_SATISFACTION_SCORE
    return filters


def _bucket(mapping: Mapping[str, str], value: Any) -> Optional[str]:
    key = str(value).strip().lower().replace(' ', '')
    if key in mapping.values():
        return key
    return mapping.get(key)


def predicates_from_filters(filters: Optional[Mapping[str, Any]]) -> List[Predicate]:
    """
    Translate a filter dict into ANDed predicates.

    None/blank values are ignored. Unknown keys and unrecognised audience
    buckets are logged and ignored.
    """
    predicates: List[Predicate] = []
    for key, value in (filters or {}).items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue

        mapping = FILTER_PREDICATES.get(key)
        if mapping is None:
            logger.warning(f"Ignoring unsupported search filter: {key}")
            continue

        field, op = mapping
        if field == 'audience_age_primary':
            value = _bucket(AGE_GROUP_BUCKETS, value)
        elif field == 'audience_gender_primary':
            value = _bucket(GENDER_BUCKETS, value)
        if value is None:
            logger.warning(f"Ignoring {key}={filters[key]!r}: unknown audience bucket")
            continue

        predicate = Predicate(field=field, op=op, value=value)
        if predicate not in predicates:
            predicates.append(predicate)
    return predicates
