# zzik/scoring/leader_matching.py
"""
Leader Matching Scorer
-----------------------
Matches pop-up campaigns with influencers ("leaders").

Formula:
    match = 0.40 × audience + 0.30 × engagement + 0.20 × category + 0.10 × performance

Sub-scores (each in [0, 1]):
    audience     0.35 × age overlap + 0.15 × gender overlap
                 + 0.35 × interest overlap + 0.15 × location match
    engagement   tier-weighted blend of engagement rate (10% = max)
                 and reach (log10 followers, 1M = max)
    category     1.0 exact / 0.6 related / 0.1 otherwise
    performance  0.4 × success + 0.2 × experience + 0.3 × conversion + 0.1 × recency

Tier pricing (KRW, before multipliers):
    nano   50K – 200K        micro 200K – 500K      mid 500K – 2M
    macro  2M – 10M          mega  10M – 50M
"""
import math
import structlog
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence

from zzik.models.enumerations import Category, LeaderTier, Priority
from zzik.models.leader import Leader, PopupCampaign
from zzik.scoring.utils import (
    clamp,
    format_followers,
    histogram_overlap,
    round_half_up,
    weighted_sum,
)

logger = structlog.get_logger(__name__)

MATCH_WEIGHTS: Dict[str, float] = {
    "audience":    0.4,
    "engagement":  0.3,
    "category":    0.2,
    "performance": 0.1,
}

_AUDIENCE_WEIGHTS: Dict[str, float] = {
    "age":      0.35,
    "gender":   0.15,
    "interest": 0.35,
    "location": 0.15,
}

# (engagement weight, reach weight) per tier
_ENGAGEMENT_BLEND: Dict[LeaderTier, tuple] = {
    LeaderTier.NANO:  (0.8, 0.2),
    LeaderTier.MICRO: (0.8, 0.2),
    LeaderTier.MID:   (0.7, 0.3),
    LeaderTier.MACRO: (0.5, 0.5),
    LeaderTier.MEGA:  (0.5, 0.5),
}

RELATED_CATEGORIES: Dict[Category, FrozenSet[Category]] = {
    Category.FASHION: frozenset({Category.BEAUTY, Category.LIFESTYLE}),
    Category.BEAUTY:  frozenset({Category.FASHION, Category.LIFESTYLE}),
    Category.KPOP:    frozenset({Category.CULTURE, Category.LIFESTYLE, Category.ENTERTAINMENT}),
    Category.FOOD:    frozenset({Category.CAFE, Category.LIFESTYLE, Category.TRAVEL}),
    Category.CAFE:    frozenset({Category.FOOD, Category.LIFESTYLE}),
    Category.CULTURE: frozenset({Category.KPOP, Category.LIFESTYLE, Category.ART}),
    Category.TECH:    frozenset({Category.LIFESTYLE, Category.GAMING}),
}

CATEGORY_EXACT = 1.0
CATEGORY_RELATED = 0.6
CATEGORY_BASELINE = 0.1


@dataclass(frozen=True)
class PriceRange:
    min: int
    max: int


# Lower bound (inclusive) of followers for each tier, checked largest first
_TIER_THRESHOLDS = (
    (1_000_000, LeaderTier.MEGA),
    (100_000, LeaderTier.MACRO),
    (10_000, LeaderTier.MID),
    (1_000, LeaderTier.MICRO),
)

PRIORITY_MULTIPLIER: Dict[Priority, float] = {
    Priority.LOW: 0.8,
    Priority.MEDIUM: 1.0,
    Priority.HIGH: 1.3,
}

PREMIUM_CATEGORIES: FrozenSet[Category] = frozenset({Category.FASHION, Category.BEAUTY})
CATEGORY_PREMIUM = 1.2

RECENCY_WINDOW_DAYS = 30
RECENCY_FLOOR = 0.5

TIER_PRICING: Dict[LeaderTier, PriceRange] = {
    LeaderTier.NANO:  PriceRange(min=50_000, max=200_000),
    LeaderTier.MICRO: PriceRange(min=200_000, max=500_000),
    LeaderTier.MID:   PriceRange(min=500_000, max=2_000_000),
    LeaderTier.MACRO: PriceRange(min=2_000_000, max=10_000_000),
    LeaderTier.MEGA:  PriceRange(min=10_000_000, max=50_000_000),
}


@dataclass
class CostEstimate:
    """Output of estimate_campaign_cost(). Invariant: range.min <= estimated <= range.max."""
    estimated: int
    range: PriceRange
    tier: LeaderTier
    multiplier: float


@dataclass
class MatchBreakdown:
    audience: float
    engagement: float
    category: float
    performance: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "audience": self.audience,
            "engagement": self.engagement,
            "category": self.category,
            "performance": self.performance,
        }


@dataclass
class LeaderMatchResult:
    """One ranked leader for a campaign."""
    leader_id: str
    leader_name: str
    match_score: float            # [0, 1]
    breakdown: MatchBreakdown
    estimated_participants: int
    estimated_cost: Optional[int] = None
    tier: Optional[LeaderTier] = None
    reasons: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------

def _location_overlap(leader: Leader, campaign: PopupCampaign) -> bool:
    places = [campaign.location, *campaign.target_audience.top_locations]
    places = [p.lower() for p in places if p]
    for loc in leader.audience_demo.top_locations:
        needle = loc.lower()
        if needle and any(needle in place for place in places):
            return True
    return False


def calculate_audience_score(leader: Leader, campaign: PopupCampaign) -> float:
    """Demographic fit between a leader's audience and the campaign target."""
    target = campaign.target_audience
    audience = leader.audience_demo

    parts = {
        "age": histogram_overlap(target.age_groups, audience.age_groups),
        "gender": histogram_overlap(target.gender_ratio.as_dict(), audience.gender_ratio.as_dict()),
        "interest": histogram_overlap(target.interests, audience.interests),
        "location": 1.0 if _location_overlap(leader, campaign) else 0.0,
    }
    return clamp(weighted_sum(parts, _AUDIENCE_WEIGHTS))


def calculate_engagement_score(leader: Leader) -> float:
    """
    Quality (engagement rate) against quantity (reach).

    Smaller creators are weighted toward engagement and larger ones toward
    reach, so a 3K-follower creator at 9% and a 2M-follower creator at 2%
    can both score well.
    """
    engagement = min(1.0, leader.avg_engagement_rate / 0.1)
    reach = min(1.0, math.log10(leader.follower_count + 1) / 6)
    engagement_w, reach_w = _ENGAGEMENT_BLEND[get_leader_tier(leader.follower_count)]
    return clamp(engagement * engagement_w + reach * reach_w)


def calculate_category_score(leader: Leader, campaign: PopupCampaign) -> float:
    """Deterministic table lookup: exact 1.0, related 0.6, otherwise 0.1."""
    if campaign.category in leader.categories:
        return CATEGORY_EXACT

    related = RELATED_CATEGORIES.get(campaign.category, frozenset())
    if any(category in related for category in leader.categories):
        return CATEGORY_RELATED

    return CATEGORY_BASELINE


def _recency_score(last_campaign: Optional[date], as_of: date) -> float:
    if last_campaign is None:
        return 1.0
    days_since = (as_of - last_campaign).days
    if days_since <= RECENCY_WINDOW_DAYS:
        return 1.0
    return max(RECENCY_FLOOR, 0.8 ** (days_since / RECENCY_WINDOW_DAYS))


def calculate_performance_score(leader: Leader, as_of: Optional[date] = None) -> float:
    """Historical campaign performance with a recency penalty after 30 idle days."""
    perf = leader.performance

    success = min(1.0, perf.success_rate / 0.8)          # 80%+ success = max
    experience = min(1.0, perf.total_campaigns / 10)     # 10+ campaigns = max
    conversion = min(1.0, perf.avg_conversion_rate / 0.02)  # 2%+ conversion = max
    recency = _recency_score(perf.last_campaign_date, as_of or date.today())

    return clamp(success * 0.4 + experience * 0.2 + conversion * 0.3 + recency * 0.1)


# ---------------------------------------------------------------------------
# Tiers & cost
# ---------------------------------------------------------------------------

def get_leader_tier(follower_count: int) -> LeaderTier:
    for threshold, tier in _TIER_THRESHOLDS:
        if follower_count >= threshold:
            return tier
    return LeaderTier.NANO


def get_tier_pricing(tier: LeaderTier) -> PriceRange:
    return TIER_PRICING[LeaderTier(tier)]


def estimate_campaign_cost(leader: Leader, campaign: PopupCampaign) -> CostEstimate:
    """
    Campaign cost for a leader in KRW.

    multiplier = priority (low .8 / medium 1.0 / high 1.3)
               × category premium (fashion, beauty 1.2)
    estimated  = midpoint of the tier range × multiplier
    """
    tier = get_leader_tier(leader.follower_count)
    pricing = get_tier_pricing(tier)

    priority_mult = PRIORITY_MULTIPLIER[Priority(campaign.priority)]
    category_mult = CATEGORY_PREMIUM if campaign.category in PREMIUM_CATEGORIES else 1.0
    multiplier = priority_mult * category_mult

    low = round_half_up(pricing.min * multiplier)
    high = round_half_up(pricing.max * multiplier)
    estimated = round_half_up((pricing.min + pricing.max) / 2 * multiplier)

    return CostEstimate(
        estimated=min(high, max(low, estimated)),
        range=PriceRange(min=low, max=high),
        tier=tier,
        multiplier=multiplier,
    )


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

def generate_match_reasons(
    leader: Leader,
    campaign: PopupCampaign,
    breakdown: MatchBreakdown,
) -> List[str]:
    reasons: List[str] = []

    if breakdown.category >= CATEGORY_EXACT:
        reasons.append(f"category match: {campaign.category}")
    elif breakdown.category >= CATEGORY_RELATED:
        reasons.append(f"related category: {campaign.category}")

    if breakdown.audience >= 0.7:
        reasons.append("strong target audience fit")

    if breakdown.engagement >= 0.8:
        reasons.append(f"{leader.avg_engagement_rate * 100:.1f}% average engagement")

    if leader.performance.success_rate >= 0.8:
        reasons.append(f"{round(leader.performance.success_rate * 100)}% campaign success rate")

    if leader.follower_count >= 100_000:
        reasons.append(f"{format_followers(leader.follower_count)} followers")

    return reasons or ["matched leader"]


def match_leader(
    campaign: PopupCampaign,
    leader: Leader,
    weights: Optional[Mapping[str, float]] = None,
    as_of: Optional[date] = None,
) -> LeaderMatchResult:
    """Score a single leader against a campaign."""
    breakdown = MatchBreakdown(
        audience=calculate_audience_score(leader, campaign),
        engagement=calculate_engagement_score(leader),
        category=calculate_category_score(leader, campaign),
        performance=calculate_performance_score(leader, as_of),
    )
    score = clamp(weighted_sum(breakdown.as_dict(), weights or MATCH_WEIGHTS))

    estimated_participants = round_half_up(
        leader.follower_count
        * leader.performance.avg_conversion_rate
        * (breakdown.audience + breakdown.category)
        / 2
    )
    cost = estimate_campaign_cost(leader, campaign)

    return LeaderMatchResult(
        leader_id=leader.id,
        leader_name=leader.nickname,
        match_score=score,
        breakdown=breakdown,
        estimated_participants=estimated_participants,
        estimated_cost=cost.estimated,
        tier=cost.tier,
        reasons=generate_match_reasons(leader, campaign, breakdown),
    )


def match_leaders_to_campaign(
    campaign: PopupCampaign,
    leaders: Sequence[Leader],
    limit: int = 5,
    weights: Optional[Mapping[str, float]] = None,
    as_of: Optional[date] = None,
) -> List[LeaderMatchResult]:
    """Score every leader, sort descending by match score and keep the first `limit`."""
    if limit <= 0:
        return []

    results = [match_leader(campaign, leader, weights, as_of) for leader in leaders]
    results.sort(key=lambda r: r.match_score, reverse=True)
    top = results[:limit]

    logger.info(
        "leaders_matched",
        campaign_id=campaign.id,
        category=campaign.category,
        candidates=len(leaders),
        returned=len(top),
        best_leader=top[0].leader_id if top else None,
    )
    return top


def find_best_leader(
    campaign: PopupCampaign,
    leaders: Sequence[Leader],
    weights: Optional[Mapping[str, float]] = None,
    as_of: Optional[date] = None,
) -> Optional[LeaderMatchResult]:
    """Top match, or None when there are no leaders."""
    matches = match_leaders_to_campaign(campaign, leaders, 1, weights, as_of)
    return matches[0] if matches else None
