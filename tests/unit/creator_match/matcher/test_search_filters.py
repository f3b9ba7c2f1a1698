"""
Unit tests for campaign search filters and their translation into predicates.
"""
import pytest

from creator_match.matcher.filters import (
    build_enhanced_search_filters,
    build_search_filters,
    infer_niche,
    predicates_from_filters,
)
from creator_match.matcher.models import BrandDescriptor, CampaignDescriptor, Predicate


def _campaign(**kwargs):
    return CampaignDescriptor(**kwargs)


@pytest.fixture
def brand():
    return BrandDescriptor(brand_name="Glow", industry="Beauty")


class TestBuildSearchFilters:

    @pytest.mark.parametrize("budget,expected", [
        (300, {'tier': 'micro', 'max_followers': 50_000}),
        (1_500, {'max_followers': 500_000}),
        (5_000, {'min_followers': 100_000}),
    ])
    def test_budget_bands(self, brand, budget, expected):
        filters = build_search_filters(_campaign(budget=budget), brand)

        for key, value in expected.items():
            assert filters[key] == value
        assert not ({'tier', 'max_followers', 'min_followers'} - set(expected)) & set(filters)

    def test_no_budget_no_follower_bounds(self, brand):
        filters = build_search_filters(_campaign(), brand)

        assert 'min_followers' not in filters
        assert 'max_followers' not in filters
        assert filters['min_engagement_rate'] == 2.0

    def test_event_coverage_raises_engagement_floor(self, brand):
        filters = build_search_filters(_campaign(campaign_type='event_coverage'), brand)

        assert filters['min_engagement_rate'] == 3.0

    def test_platform_and_audience(self, brand):
        campaign = _campaign(
            requirements={'platforms': ['tiktok', 'instagram']},
            target_audience={'age_groups': ['18-24', '25-34'], 'gender': 'female'},
        )

        filters = build_search_filters(campaign, brand)

        assert filters['primary_platform'] == 'tiktok'
        assert filters['audience_age_primary'] == '18-24'
        assert filters['audience_gender_primary'] == 'female'

    def test_any_gender_not_filtered(self, brand):
        campaign = _campaign(target_audience={'gender': 'Any'})

        assert 'audience_gender_primary' not in build_search_filters(campaign, brand)

    def test_unmapped_audience_values_not_reported(self, brand):
        campaign = _campaign(target_audience={'age_groups': ['all ages'], 'gender': 'all'})

        filters = build_search_filters(campaign, brand)

        assert 'audience_age_primary' not in filters
        assert 'audience_gender_primary' not in filters
        # every reported filter is one that actually constrains the query
        assert len(predicates_from_filters(filters)) == len(filters)

    def test_product_category_beats_brand_overview(self):
        brand = BrandDescriptor(
            brand_name="Glow",
            ai_generated_overview='{"collaboration_fit": {"ideal_creators": "fitness coaches"}}'
        )
        campaign = _campaign(product_info={'analysis': {'category': 'Consumer Tech'}})

        assert build_search_filters(campaign, brand)['niche'] == 'tech_gaming'

    def test_niche_from_brand_overview(self):
        brand = BrandDescriptor(
            brand_name="Glow",
            ai_generated_overview={"collaboration_fit": {"ideal_creators": ["Health", "wellness creators"]}}
        )

        assert build_search_filters(_campaign(), brand)['niche'] == 'fitness_health'


class TestBuildEnhancedSearchFilters:

    @pytest.mark.parametrize("budget,expected", [
        (800, {'tier': 'micro', 'max_followers': 50_000}),
        (4_000, {'max_followers': 500_000}),
        (10_000, {'min_followers': 100_000, 'max_followers': 1_000_000}),
        (25_000, {'min_followers': 500_000}),
    ])
    def test_budget_bands(self, brand, budget, expected):
        filters = build_enhanced_search_filters(_campaign(budget=budget), brand)

        for key, value in expected.items():
            assert filters[key] == value

    def test_quality_floors(self, brand):
        filters = build_enhanced_search_filters(_campaign(), brand)

        assert filters['min_satisfaction_score'] == 3.5
        assert filters['min_engagement_rate'] == 2.0

    def test_follower_range_overrides_budget_band(self, brand):
        campaign = _campaign(budget=25_000, target_audience={'follower_range': '100K-300K'})

        filters = build_enhanced_search_filters(campaign, brand)

        assert filters['min_followers'] == 100_000
        assert filters['max_followers'] == 300_000

    def test_follower_range_tier(self, brand):
        campaign = _campaign(target_audience={'follower_range': 'Macro influencers'})

        assert build_enhanced_search_filters(campaign, brand)['tier'] == 'macro'

    def test_gender_not_filtered(self, brand):
        campaign = _campaign(target_audience={'gender': 'female'})

        assert 'audience_gender_primary' not in build_enhanced_search_filters(campaign, brand)

    def test_electronics_product_maps_to_tech(self, brand):
        campaign = _campaign(product_info={'analysis': {'category': 'Electronics'}})

        assert build_enhanced_search_filters(campaign, brand)['niche'] == 'tech_gaming'

    def test_industry_fallback(self, brand):
        assert build_enhanced_search_filters(_campaign(), brand)['niche'] == 'beauty_fashion'


class TestInferNiche:

    def test_first_keyword_group_wins(self):
        # "tech" is checked before "lifestyle"
        assert infer_niche("Lifestyle tech gadgets") == 'tech_gaming'

    def test_case_insensitive(self):
        assert infer_niche("COSMETICS") == 'beauty_fashion'

    @pytest.mark.parametrize("text", [None, "", "Industrial bolts"])
    def test_no_match(self, text):
        assert infer_niche(text) is None


class TestPredicatesFromFilters:

    def test_field_and_operator_mapping(self):
        predicates = predicates_from_filters({
            'primary_platform': 'instagram',
            'min_followers': 10_000,
            'max_price': 500,
            'tier': 'micro',
        })

        assert predicates == [
            Predicate('platform', 'eq', 'instagram'),
            Predicate('follower_count', 'gte', 10_000),
            Predicate('sponsored_post_rate', 'lte', 500),
            Predicate('tier', 'eq', 'micro'),
        ]

    def test_absent_and_blank_values_produce_nothing(self):
        assert predicates_from_filters({'tier': None, 'niche': '  '}) == []
        assert predicates_from_filters(None) == []

    def test_unknown_key_ignored(self):
        assert predicates_from_filters({'favourite_colour': 'blue'}) == []

    def test_audience_buckets_normalized(self):
        predicates = predicates_from_filters({
            'audience_age_primary': '45+',
            'audience_gender_primary': 'Women',
        })

        assert predicates == [
            Predicate('audience_age_primary', 'eq', 'age_45_plus'),
            Predicate('audience_gender_primary', 'eq', 'gender_female'),
        ]

    def test_column_names_accepted_as_buckets(self):
        predicates = predicates_from_filters({'audience_age_primary': 'age_18_24'})

        assert predicates == [Predicate('audience_age_primary', 'eq', 'age_18_24')]

    def test_unknown_bucket_ignored(self):
        assert predicates_from_filters({'audience_age_primary': 'toddlers'}) == []

    def test_synonym_keys_deduplicated(self):
        predicates = predicates_from_filters({'platform': 'youtube', 'primary_platform': 'youtube'})

        assert predicates == [Predicate('platform', 'eq', 'youtube')]
