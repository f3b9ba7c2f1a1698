#!/usr/bin/env python3
"""
Profile Text - turns a creator record into the text that gets embedded.

The output must stay byte-stable for a given record: any change to labels,
ordering or rendering changes every stored embedding, so such changes bump
SCHEMA_VERSION.

Format:
    "Label: value | Label: value | ..."

Known fields render in PROFILE_SCHEMA order; any other key follows in sorted
order with a Title Case label derived from the key.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Tuple

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"

FIELD_SEPARATOR = " | "
LIST_SEPARATOR = ", "
MAX_JSON_LENGTH = 250
TRUNCATION_SUFFIX = "... (truncated)"

EXCLUDED_FIELDS = frozenset({"id", "created_at", "updated_at", "profile_embedding"})


# ----------------------------
# Renderers
# ----------------------------
# Every renderer returns "" when the value should not appear at all.

def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def render_list(value: Iterable[Any]) -> str:
    """Flatten one level, drop null/blank items, comma-join."""
    flat = []
    for item in value:
        if isinstance(item, (list, tuple)):
            flat.extend(item)
        else:
            flat.append(item)
    kept = [str(item) for item in flat if not _is_blank(item)]
    return LIST_SEPARATOR.join(kept)


def render_json(value: Any) -> str:
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    if text in ("{}", "[]"):
        return ""
    if len(text) > MAX_JSON_LENGTH:
        return text[:MAX_JSON_LENGTH] + TRUNCATION_SUFFIX
    return text


def render_bool(value: bool) -> str:
    return "Yes" if value else "No"


def render_scalar(value: Any) -> str:
    return str(value).strip()


def render_value(value: Any) -> str:
    """Type-dispatched rendering used for every field without a dedicated renderer."""
    if isinstance(value, (list, tuple)):
        return render_list(value)
    if isinstance(value, dict):
        return render_json(value)
    if isinstance(value, bool):
        return render_bool(value)
    return render_scalar(value)


def render_date(value: Any) -> str:
    """YYYY-MM-DD; falls back to the raw text when the value is not a date."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    raw = str(value).strip()
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw
    return render_date(parsed)


# ----------------------------
# Schema
# ----------------------------

@dataclass(frozen=True)
class ProfileField:
    name: str
    label: str
    renderer: Callable[[Any], str] = render_value


PROFILE_SCHEMA: Tuple[ProfileField, ...] = (
    ProfileField("creator_name", "Creator Name"),
    ProfileField("username", "Username"),
    ProfileField("bio", "Bio"),
    ProfileField("email", "Email"),
    ProfileField("business_email", "Business Email"),
    ProfileField("profile_image_url", "Profile Image URL"),
    ProfileField("verification_status", "Verification Status"),
    ProfileField("account_created_date", "Account Created On", render_date),
    ProfileField("last_active_date", "Last Active On", render_date),
    ProfileField("location_country", "Country"),
    ProfileField("location_city", "City"),
    ProfileField("location_timezone", "Timezone"),
    ProfileField("languages", "Languages"),
    ProfileField("niche", "Niche"),
    ProfileField("content_categories", "Content Categories"),
    ProfileField("tier", "Creator Tier"),
    ProfileField("primary_platform", "Primary Platform"),
    ProfileField("total_collaborations", "Total Collaborations"),
    ProfileField("avg_response_time_hours", "Average Response Time (Hours)"),
    ProfileField("response_rate_percentage", "Response Rate (%)"),
    ProfileField("avg_delivery_time_days", "Average Delivery Time (Days)"),
    ProfileField("client_satisfaction_score", "Client Satisfaction Score"),
    ProfileField("content_examples", "Content Examples"),
    ProfileField("personality_profile", "Personality Profile"),
    ProfileField("ai_enhanced", "AI Enhanced"),
    # Aggregated from child tables
    ProfileField("audience_interests", "Audience Interests"),
    ProfileField("past_brands", "Past Brand Collaborations"),
)


def default_label(key: str) -> str:
    """snake_case -> Title Case (each word capitalised, rest unchanged)."""
    return " ".join(word[:1].upper() + word[1:] for word in key.replace("_", " ").split(" "))


def _render_part(label: str, renderer: Callable[[Any], str], value: Any) -> str:
    if _is_blank(value):
        return ""
    rendered = renderer(value)
    if rendered in ("", "{}", "[]"):
        return ""
    return f"{label}: {rendered}"


def build_profile_text(record: Mapping[str, Any], schema: Tuple[ProfileField, ...] = PROFILE_SCHEMA) -> str:
    """
    Serialize a creator record for embedding.

    Args:
        record: Creator columns plus joined aggregates (audience_interests, past_brands)
        schema: Ordered field definitions

    Returns:
        The " | "-joined profile text; "" when nothing renders
    """
    parts = []
    known = set()

    for field_def in schema:
        known.add(field_def.name)
        if field_def.name in EXCLUDED_FIELDS or field_def.name not in record:
            continue
        part = _render_part(field_def.label, field_def.renderer, record[field_def.name])
        if part:
            parts.append(part)

    for key in sorted(k for k in record if k not in known and k not in EXCLUDED_FIELDS):
        part = _render_part(default_label(key), render_value, record[key])
        if part:
            parts.append(part)

    return FIELD_SEPARATOR.join(parts)
