"""Human-readable reasons attached to each recommendation."""

from typing import List

from creator_match.config_loader import ReasonThresholds, ScoringWeights
from creator_match.matcher.models import CreatorProfile
from creator_match.scorer.models import ScoreBreakdown
from creator_match.utils import to_float

# Order here is the order reasons appear in
REASON_TEXT = {
    'similarity': "Profile closely matches the campaign brief",
    'audience_alignment': "Strong audience alignment with target demographics",
    'product_affinity': "High affinity for product category and target market",
    'content_fit': "Creates content that matches campaign requirements",
    'budget_fit': "Pricing fits within campaign budget",
    'brand_alignment': "Brand values alignment with creator personality",
    'location_relevance': "Geographic proximity to campaign/event location",
    'experience': "Proven track record with brand collaborations",
    'engagement': "High engagement rate indicates active audience",
    'followers': "Large, established follower base",
    'satisfaction': "Consistently well rated by past clients",
}

VERIFIED_REASON = "Verified creator with established credibility"
SATISFACTION_REASON = "Excellent client satisfaction ratings"
FALLBACK_REASON = "Good overall match for your campaign goals"

# Enhanced recommendations word a few reasons differently
ENHANCED_REASON_TEXT = {
    **REASON_TEXT,
    'audience_alignment': "Strong audience alignment with campaign demographics",
    'budget_fit': "Pricing aligns well with campaign budget",
    'engagement': "High engagement rate indicates active, engaged audience",
}
ENHANCED_SATISFACTION_REASON = "Excellent track record with previous brand collaborations"
ENHANCED_FALLBACK_REASON = "Good overall match for campaign objectives"


def build_reasons(
    creator: CreatorProfile,
    breakdown: ScoreBreakdown,
    weights: ScoringWeights,
    thresholds: ReasonThresholds,
    satisfaction_bonus_threshold: float = 4.5,
    enhanced: bool = False
) -> List[str]:
    """
    One reason per sub-score whose contribution exceeds its threshold share of
    its weight, then the verification and satisfaction bonuses.
    """
    reasons = []
    factor_weights = weights.factors()

    texts = ENHANCED_REASON_TEXT if enhanced else REASON_TEXT
    for name, text in texts.items():
        fraction = getattr(thresholds, name)
        weight = factor_weights.get(name, 0.0)
        if fraction is None or weight <= 0:
            continue
        if getattr(breakdown, name) > fraction * weight:
            reasons.append(text)

    if (creator.verification_status or "").lower() == "verified":
        reasons.append(VERIFIED_REASON)

    satisfaction = to_float(creator.client_satisfaction_score)
    if satisfaction is not None and satisfaction > satisfaction_bonus_threshold:
        reasons.append(ENHANCED_SATISFACTION_REASON if enhanced else SATISFACTION_REASON)

    if not reasons:
        return [ENHANCED_FALLBACK_REASON if enhanced else FALLBACK_REASON]
    return reasons
