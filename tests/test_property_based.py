# tests/test_property_based.py
"""
Property-Based Tests - scoring invariants

Hypothesis tests covering:
  - recommendation sub-scores and blend stay in [0, 1], ranking properties
  - leader sub-scores stay in [0, 1], tiers are a step function, cost bounds
  - prediction probability bounds and at-risk filtering
"""

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from zzik.models.enumerations import Category, LeaderTier, Priority
from zzik.models.leader import (
    AudienceDemographics,
    GenderRatio,
    Leader,
    LeaderPerformance,
    PopupCampaign,
)
from zzik.models.popup import PopupFeatures, UserPreferences
from zzik.models.prediction import PredictionInput
from zzik.scoring.leader_matching import (
    calculate_audience_score,
    calculate_category_score,
    calculate_engagement_score,
    calculate_performance_score,
    estimate_campaign_cost,
    get_leader_tier,
    match_leader,
)
from zzik.scoring.prediction import get_at_risk_popups, predict_success
from zzik.scoring.recommendation import (
    generate_recommendations,
    score_popup,
)

# ---------------------------------------------------------------------------
# Shared strategies
# ---------------------------------------------------------------------------

CATEGORIES = [c.value for c in Category] + ["unknown"]

unit_st = st.floats(min_value=0.0, max_value=1.0, allow_nan=False, allow_infinity=False)
vector_st = st.lists(
    st.floats(min_value=-10.0, max_value=10.0, allow_nan=False, allow_infinity=False),
    min_size=0,
    max_size=6,
)
share_map_st = st.dictionaries(
    st.sampled_from(["13-17", "18-24", "25-34", "35-44", "45+"]), unit_st, max_size=5
)
interest_map_st = st.dictionaries(st.sampled_from(CATEGORIES), unit_st, max_size=5)


@st.composite
def popup_st(draw, popup_id=None):
    return PopupFeatures(
        id=popup_id or draw(st.text(alphabet="abcdef0123456789", min_size=1, max_size=8)),
        category=draw(st.sampled_from(CATEGORIES)),
        participant_count=draw(st.integers(min_value=0, max_value=10_000)),
        goal_participants=draw(st.integers(min_value=0, max_value=10_000)),
        momentum=draw(st.floats(min_value=0.0, max_value=1_000.0, allow_nan=False)),
        days_left=draw(st.integers(min_value=0, max_value=90)),
        location=draw(st.sampled_from(["", "Seongsu", "Gangnam-gu", "Busan"])),
        vibe_vector=draw(st.one_of(st.none(), vector_st)),
    )


@st.composite
def prefs_st(draw):
    return UserPreferences(
        categories=draw(interest_map_st),
        vibes=draw(vector_st),
        participation_history=draw(st.lists(st.sampled_from(["p0", "p1", "p2", "p3"]), max_size=4)),
        preferred_locations=draw(st.lists(st.sampled_from(["seongsu", "gangnam", "hongdae"]), max_size=3)),
    )


@st.composite
def demographics_st(draw):
    return AudienceDemographics(
        age_groups=draw(share_map_st),
        gender_ratio=GenderRatio(male=draw(unit_st), female=draw(unit_st), other=draw(unit_st)),
        top_locations=draw(st.lists(st.sampled_from(["Seongsu", "Hongdae", "Gangnam"]), max_size=3)),
        interests=draw(interest_map_st),
    )


@st.composite
def leader_st(draw):
    return Leader(
        id="leader",
        categories=draw(st.lists(st.sampled_from(CATEGORIES), max_size=3)),
        follower_count=draw(st.integers(min_value=0, max_value=50_000_000)),
        avg_engagement_rate=draw(unit_st),
        audience_demo=draw(demographics_st()),
        performance=LeaderPerformance(
            total_campaigns=draw(st.integers(min_value=0, max_value=100)),
            success_rate=draw(unit_st),
            avg_conversion_rate=draw(unit_st),
        ),
    )


@st.composite
def campaign_st(draw):
    return PopupCampaign(
        id="camp",
        category=draw(st.sampled_from(CATEGORIES)),
        target_audience=draw(demographics_st()),
        location=draw(st.sampled_from(["", "Seongsu-dong", "Hongdae"])),
        priority=draw(st.sampled_from(list(Priority))),
    )


@st.composite
def prediction_input_st(draw, popup_id="p"):
    return PredictionInput(
        popup_id=popup_id,
        category=draw(st.sampled_from(CATEGORIES)),
        location=draw(st.sampled_from(["", "Seongsu", "Itaewon", "Busan"])),
        current_participants=draw(st.integers(min_value=0, max_value=5_000)),
        goal_participants=draw(st.integers(min_value=0, max_value=5_000)),
        days_remaining=draw(st.integers(min_value=0, max_value=30)),
        daily_momentum=draw(st.lists(st.floats(min_value=0.0, max_value=500.0, allow_nan=False), max_size=10)),
        has_leader=draw(st.booleans()),
        leader_follower_count=draw(st.one_of(st.none(), st.integers(min_value=0, max_value=10_000_000))),
        brand_previous_campaigns=draw(st.one_of(st.none(), st.integers(min_value=0, max_value=50))),
        brand_success_rate=draw(st.one_of(st.none(), unit_st)),
    )


# ---------------------------------------------------------------------------
# Recommendation Property Tests
# ---------------------------------------------------------------------------


class TestRecommendationPropertyBased:

    @given(popup_st(), prefs_st())
    @settings(max_examples=300)
    def test_scores_bounded(self, popup, prefs):
        result = score_popup(popup, prefs)
        assert 0.0 <= result.score <= 1.0
        for value in result.breakdown.as_dict().values():
            assert 0.0 <= value <= 1.0

    @given(popup_st(), prefs_st())
    @settings(max_examples=200)
    def test_scoring_is_deterministic(self, popup, prefs):
        assert score_popup(popup, prefs) == score_popup(popup, prefs)

    @given(
        st.lists(st.sampled_from(["p0", "p1", "p2", "p3", "p4", "p5"]), min_size=0, max_size=6, unique=True),
        prefs_st(),
        st.data(),
    )
    @settings(max_examples=200)
    def test_recommendations_exclude_history_and_are_sorted(self, ids, prefs, data):
        popups = [data.draw(popup_st(popup_id=popup_id)) for popup_id in ids]
        results = generate_recommendations(popups, prefs, limit=10)

        returned = [r.popup_id for r in results]
        assert not set(returned) & set(prefs.participation_history)
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    @given(st.lists(popup_st(), max_size=8), prefs_st(), st.integers(min_value=-3, max_value=10))
    @settings(max_examples=200)
    def test_limit_respected(self, popups, prefs, limit):
        results = generate_recommendations(popups, prefs, limit=limit)
        assert len(results) <= max(limit, 0)


# ---------------------------------------------------------------------------
# Leader Matching Property Tests
# ---------------------------------------------------------------------------


class TestLeaderMatchingPropertyBased:

    @given(leader_st(), campaign_st())
    @settings(max_examples=300)
    def test_sub_scores_bounded(self, leader, campaign):
        assert 0.0 <= calculate_audience_score(leader, campaign) <= 1.0
        assert 0.0 <= calculate_engagement_score(leader) <= 1.0
        assert calculate_category_score(leader, campaign) in (1.0, 0.6, 0.1)
        assert 0.0 <= calculate_performance_score(leader) <= 1.0
        assert 0.0 <= match_leader(campaign, leader).match_score <= 1.0

    @given(leader_st(), campaign_st())
    @settings(max_examples=300)
    def test_cost_within_range(self, leader, campaign):
        cost = estimate_campaign_cost(leader, campaign)
        assert cost.range.min <= cost.estimated <= cost.range.max

    @given(leader_st(), campaign_st())
    @settings(max_examples=200)
    def test_cost_monotone_in_priority(self, leader, campaign):
        costs = [
            estimate_campaign_cost(leader, campaign.model_copy(update={"priority": p})).estimated
            for p in (Priority.LOW, Priority.MEDIUM, Priority.HIGH)
        ]
        assert costs[0] < costs[1] < costs[2]

    @given(st.integers(min_value=0, max_value=100_000_000), st.integers(min_value=0, max_value=100_000_000))
    @settings(max_examples=500)
    def test_tier_is_monotone_step_function(self, a, b):
        assume(a <= b)
        order = list(LeaderTier)
        assert order.index(get_leader_tier(a)) <= order.index(get_leader_tier(b))


# ---------------------------------------------------------------------------
# Prediction Property Tests
# ---------------------------------------------------------------------------


class TestPredictionPropertyBased:

    @given(prediction_input_st())
    @settings(max_examples=300)
    def test_probability_and_confidence_bounded(self, data):
        result = predict_success(data)
        assert 0.0 <= result.success_probability <= 1.0
        assert 0.5 <= result.confidence <= 0.95
        assert len(result.recommendations) <= 3
        assert all(-1.0 <= f.score <= 1.0 for f in result.factors)
        assert result.estimated_final_participants >= data.current_participants

    @given(
        st.lists(st.integers(min_value=0, max_value=10_000), max_size=6, unique=True),
        unit_st,
        st.data(),
    )
    @settings(max_examples=150)
    def test_at_risk_filtered_and_sorted(self, ids, threshold, data):
        inputs = [data.draw(prediction_input_st(popup_id=f"p{i}")) for i in ids]
        results = get_at_risk_popups(inputs, threshold=threshold)

        probabilities = [r.success_probability for r in results]
        assert all(p < threshold for p in probabilities)
        assert probabilities == sorted(probabilities)
