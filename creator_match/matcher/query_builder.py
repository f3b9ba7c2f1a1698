"""Deterministic search text for a campaign, built from its descriptors."""

import logging
from typing import List

from creator_match.matcher.models import BrandDescriptor, CampaignDescriptor

logger = logging.getLogger(__name__)

PART_SEPARATOR = " | "


def _join(values: List[str]) -> str:
    return ", ".join(v.strip() for v in values if v and v.strip())


def build_campaign_query(campaign: CampaignDescriptor, brand: BrandDescriptor) -> str:
    """
    Compose the query text embedded for a campaign search.

    Parts with no data are left out; when nothing is known a generic
    "<industry> creators for <type> campaign" sentence is returned.
    """
    parts = []

    if brand.brand_name:
        brand_part = f"Brand: {brand.brand_name}"
        if brand.industry:
            brand_part += f" ({brand.industry})"
        parts.append(brand_part)

    if campaign.campaign_type or campaign.description:
        campaign_part = "Campaign: " + (campaign.campaign_type or "collaboration")
        if campaign.description:
            campaign_part += f" - {campaign.description.strip()}"
        parts.append(campaign_part)

    if campaign.objectives:
        parts.append(f"Objectives: {campaign.objectives.strip()}")

    audience = campaign.target_audience
    audience_bits = [_join(audience.age_groups), _join(audience.interests)]
    if audience.gender and audience.gender.lower() != "any":
        audience_bits.append(audience.gender)
    audience_text = _join(audience_bits)
    if audience_text:
        parts.append(f"Target audience: {audience_text}")

    content_types = _join(campaign.requirements.content_type)
    if content_types:
        parts.append(f"Content type: {content_types}")

    analysis = campaign.product_analysis
    if analysis and analysis.category:
        parts.append(f"Product: {analysis.category}")

    # A single brand or type part is too thin to search on
    if len(parts) <= 1 and not campaign.description:
        fallback = (
            f"{brand.industry or 'lifestyle'} creators for "
            f"{campaign.campaign_type or 'collaboration'} campaign"
        )
        logger.debug(f"Campaign query fell back to: {fallback}")
        return fallback

    return PART_SEPARATOR.join(parts)
