# tests/test_leader_matching.py

"""
Leader Matching Tests - sub-scores, tiers, pricing and ranking
"""

from datetime import timedelta

import pytest

from conftest import FIXED_TODAY
from zzik.models.enumerations import LeaderTier, Priority
from zzik.models.leader import Leader, LeaderPerformance, PopupCampaign
from zzik.scoring.leader_matching import (
    MATCH_WEIGHTS,
    TIER_PRICING,
    calculate_audience_score,
    calculate_category_score,
    calculate_engagement_score,
    calculate_performance_score,
    estimate_campaign_cost,
    find_best_leader,
    get_leader_tier,
    get_tier_pricing,
    match_leader,
    match_leaders_to_campaign,
)


# =============================================================================
# SUB-SCORES
# =============================================================================

class TestAudienceScore:

    def test_strong_overlap(self, micro_fashion_leader, fashion_campaign):
        # age .9, gender .9, interest 1.0, location match
        expected = 0.35 * 0.9 + 0.15 * 0.9 + 0.35 * 1.0 + 0.15 * 1.0
        assert calculate_audience_score(micro_fashion_leader, fashion_campaign) == pytest.approx(expected)

    def test_empty_target_scores_zero(self, micro_fashion_leader):
        campaign = PopupCampaign(id="c", category="fashion")
        assert calculate_audience_score(micro_fashion_leader, campaign) == 0.0

    def test_location_matches_target_top_locations(self, macro_kpop_leader, fashion_campaign):
        campaign = fashion_campaign.model_copy(deep=True)
        campaign.target_audience.top_locations.append("Hongdae station")
        with_location = calculate_audience_score(macro_kpop_leader, campaign)
        without = calculate_audience_score(macro_kpop_leader, fashion_campaign)
        assert with_location == pytest.approx(without + 0.15)


class TestEngagementScore:

    def test_micro_tier_weights_engagement(self, micro_fashion_leader):
        import math
        reach = math.log10(8_001) / 6
        expected = 0.8 * 0.9 + 0.2 * reach
        assert calculate_engagement_score(micro_fashion_leader) == pytest.approx(expected)

    def test_small_engaged_and_large_reach_both_score_well(self):
        small = Leader(id="s", follower_count=3_000, avg_engagement_rate=0.09)
        large = Leader(id="l", follower_count=2_000_000, avg_engagement_rate=0.02)
        assert calculate_engagement_score(small) > 0.7
        assert calculate_engagement_score(large) > 0.55

    def test_engagement_capped(self):
        leader = Leader(id="x", follower_count=1_000_000, avg_engagement_rate=0.5)
        assert calculate_engagement_score(leader) == pytest.approx(1.0)


class TestCategoryScore:

    def test_exact_match(self, micro_fashion_leader, fashion_campaign):
        assert calculate_category_score(micro_fashion_leader, fashion_campaign) == 1.0

    def test_related_match(self, fashion_campaign):
        leader = Leader(id="x", categories=["Lifestyle"])
        assert calculate_category_score(leader, fashion_campaign) == 0.6

    def test_unrelated(self, macro_kpop_leader, fashion_campaign):
        assert calculate_category_score(macro_kpop_leader, fashion_campaign) == 0.1

    def test_unknown_campaign_category(self, micro_fashion_leader):
        campaign = PopupCampaign(id="c", category="pets")
        assert calculate_category_score(micro_fashion_leader, campaign) == 0.1


class TestPerformanceScore:

    def test_maxed_out(self, micro_fashion_leader):
        assert calculate_performance_score(micro_fashion_leader, as_of=FIXED_TODAY) == pytest.approx(1.0)

    def test_no_history(self, nano_tech_leader):
        # only recency contributes when no date is known
        assert calculate_performance_score(nano_tech_leader) == pytest.approx(0.1)

    def test_recency_decays_smoothly(self):
        def leader(days_ago):
            return Leader(
                id="x",
                performance=LeaderPerformance(last_campaign_date=FIXED_TODAY - timedelta(days=days_ago)),
            )

        at_30 = calculate_performance_score(leader(30), as_of=FIXED_TODAY)
        at_60 = calculate_performance_score(leader(60), as_of=FIXED_TODAY)
        at_400 = calculate_performance_score(leader(400), as_of=FIXED_TODAY)
        assert at_30 == pytest.approx(0.1)
        assert at_60 == pytest.approx(0.1 * 0.8 ** 2)
        assert at_400 == pytest.approx(0.05)


# =============================================================================
# TIERS & COST
# =============================================================================

class TestTiers:

    @pytest.mark.parametrize(
        "followers, tier",
        [
            (0, LeaderTier.NANO),
            (500, LeaderTier.NANO),
            (999, LeaderTier.NANO),
            (1_000, LeaderTier.MICRO),
            (5_000, LeaderTier.MICRO),
            (50_000, LeaderTier.MID),
            (500_000, LeaderTier.MACRO),
            (1_000_000, LeaderTier.MEGA),
            (5_000_000, LeaderTier.MEGA),
        ],
    )
    def test_tier_boundaries(self, followers, tier):
        assert get_leader_tier(followers) == tier

    def test_pricing_table(self):
        assert get_tier_pricing(LeaderTier.NANO).min == 50_000
        assert get_tier_pricing("mega").max == 50_000_000
        assert set(TIER_PRICING) == set(LeaderTier)


class TestCampaignCost:

    def test_premium_category(self, micro_fashion_leader, fashion_campaign):
        cost = estimate_campaign_cost(micro_fashion_leader, fashion_campaign)
        assert cost.tier == LeaderTier.MICRO
        assert cost.multiplier == pytest.approx(1.2)
        assert cost.range.min == 240_000
        assert cost.range.max == 600_000
        assert cost.estimated == 420_000

    def test_priority_strictly_increases_cost(self, micro_fashion_leader, fashion_campaign):
        costs = [
            estimate_campaign_cost(
                micro_fashion_leader, fashion_campaign.model_copy(update={"priority": p})
            ).estimated
            for p in (Priority.LOW, Priority.MEDIUM, Priority.HIGH)
        ]
        assert costs[0] < costs[1] < costs[2]

    def test_fashion_costs_at_least_tech(self, micro_fashion_leader, fashion_campaign):
        tech = fashion_campaign.model_copy(update={"category": "tech"})
        assert (
            estimate_campaign_cost(micro_fashion_leader, fashion_campaign).estimated
            >= estimate_campaign_cost(micro_fashion_leader, tech).estimated
        )

    def test_estimate_within_range(self, leaders, fashion_campaign):
        for leader in leaders:
            cost = estimate_campaign_cost(leader, fashion_campaign)
            assert cost.range.min <= cost.estimated <= cost.range.max


# =============================================================================
# MATCHING
# =============================================================================

class TestMatching:

    def test_match_weights_sum_to_one(self):
        assert sum(MATCH_WEIGHTS.values()) == pytest.approx(1.0)

    def test_single_match(self, micro_fashion_leader, fashion_campaign):
        result = match_leader(fashion_campaign, micro_fashion_leader, as_of=FIXED_TODAY)
        b = result.breakdown
        expected = 0.4 * b.audience + 0.3 * b.engagement + 0.2 * b.category + 0.1 * b.performance
        assert result.match_score == pytest.approx(expected)
        assert result.leader_name == "style_jin"
        assert result.estimated_participants == 234
        assert result.estimated_cost == 420_000
        assert "category match: fashion" in result.reasons

    def test_ranked_descending(self, leaders, fashion_campaign):
        results = match_leaders_to_campaign(fashion_campaign, leaders, as_of=FIXED_TODAY)
        assert [r.leader_id for r in results] == [
            "leader-micro-fashion",
            "leader-macro-kpop",
            "leader-nano-tech",
        ]
        scores = [r.match_score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_limit(self, leaders, fashion_campaign):
        assert len(match_leaders_to_campaign(fashion_campaign, leaders, limit=2)) == 2
        assert match_leaders_to_campaign(fashion_campaign, leaders, limit=0) == []

    def test_best_leader(self, leaders, fashion_campaign):
        best = find_best_leader(fashion_campaign, leaders, as_of=FIXED_TODAY)
        assert best is not None
        assert best.leader_id == "leader-micro-fashion"

    def test_best_leader_empty(self, fashion_campaign):
        assert find_best_leader(fashion_campaign, []) is None

    def test_fallback_reason(self, nano_tech_leader, fashion_campaign):
        result = match_leader(fashion_campaign, nano_tech_leader)
        assert result.reasons == ["matched leader"]
