"""
scoring/prediction.py

Estimates the probability that a pop-up campaign reaches its participant goal.

Formula:
    weighted = 0.30 × momentum + 0.25 × progress + 0.15 × brand
             + 0.10 × category + 0.10 × location + 0.10 × leader
    P(success) = sigmoid(2 × weighted)

Every factor is scored in [-1, 1] (negative hurts, positive helps).
Campaigns are assumed to run 14 days.

Risk buckets:
    low     P >= 0.8
    medium  P >= 0.5 with >= 5 days left, or P >= 0.3 with >= 7 days left
    high    otherwise
"""

import math
import structlog
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from zzik.models.enumerations import Category, ImpactLevel, RiskLevel
from zzik.models.prediction import PredictionInput
from zzik.scoring.utils import average, clamp, format_followers, round_half_up, sigmoid

logger = structlog.get_logger(__name__)

FEATURE_WEIGHTS: Dict[str, float] = {
    "momentum": 0.30,
    "progress": 0.25,
    "brand":    0.15,
    "category": 0.10,
    "location": 0.10,
    "leader":   0.10,
}

CAMPAIGN_DAYS = 14
MAX_RECOMMENDATIONS = 3

CATEGORY_BASE_RATES: Dict[Category, float] = {
    Category.KPOP: 0.85,
    Category.FASHION: 0.75,
    Category.BEAUTY: 0.72,
    Category.FOOD: 0.68,
    Category.CAFE: 0.65,
    Category.CULTURE: 0.60,
    Category.LIFESTYLE: 0.55,
    Category.TECH: 0.50,
}
DEFAULT_CATEGORY_RATE = 0.5

# Seoul districts, checked in order; first substring match wins
LOCATION_SCORES: Dict[str, float] = {
    "seongsu": 0.90,
    "gangnam": 0.85,
    "hongdae": 0.82,
    "hannam": 0.80,
    "apgujeong": 0.78,
    "itaewon": 0.75,
    "yongsan": 0.72,
    "ikseon": 0.70,
    "samcheong": 0.68,
    "yeonnam": 0.65,
}


@dataclass
class PredictionFactor:
    name: str
    score: float              # [-1, 1]
    impact: ImpactLevel
    description: str


@dataclass
class PredictionResult:
    """Output of predict_success()."""
    popup_id: str
    success_probability: float             # [0, 1]
    confidence: float                      # [0.5, 0.95]
    estimated_final_participants: int
    estimated_days_to_goal: Optional[int]  # None if unreachable at current pace
    risk: RiskLevel
    factors: List[PredictionFactor] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


# ------------------------------------------------------------------ #
# Factor scores                                                        #
# ------------------------------------------------------------------ #

def calculate_momentum_score(daily_momentum: Sequence[float], goal_participants: int) -> float:
    """Observed daily rate against the rate needed to finish in 14 days, plus trend terms."""
    if not daily_momentum:
        return 0.0

    avg_momentum = average(daily_momentum)
    recent_momentum = average(daily_momentum[-3:])
    trend = (
        (daily_momentum[-1] - daily_momentum[0]) / len(daily_momentum)
        if len(daily_momentum) >= 2
        else 0.0
    )

    expected_rate = max(goal_participants, 1) / CAMPAIGN_DAYS
    rate_score = (avg_momentum / expected_rate - 1) * 0.5
    trend_score = 0.2 if trend > 0 else -0.1
    accel_score = 0.1 if recent_momentum > avg_momentum else 0.0

    return clamp(rate_score + trend_score + accel_score, -1.0, 1.0)


def calculate_progress_score(current: int, goal: int, days_remaining: int) -> float:
    """Ahead of a linear schedule is positive, behind is negative."""
    progress_rate = current / max(goal, 1)
    days_passed = CAMPAIGN_DAYS - days_remaining
    expected_progress = days_passed / CAMPAIGN_DAYS
    return clamp((progress_rate - expected_progress) * 3, -1.0, 1.0)


def calculate_brand_score(
    previous_campaigns: Optional[int],
    success_rate: Optional[float],
) -> float:
    """Track record of the brand; neutral (0) for a first campaign."""
    if not previous_campaigns:
        return 0.0

    experience_bonus = min(0.2, previous_campaigns * 0.02)
    success_bonus = (success_rate - 0.5) * 0.8 if success_rate else 0.0
    return clamp(experience_bonus + success_bonus, -0.5, 0.5)


def category_base_rate(category: str, historical: Optional[float] = None) -> float:
    if historical is not None:
        return historical
    return CATEGORY_BASE_RATES.get(category, DEFAULT_CATEGORY_RATE)


def calculate_category_score(category: str, historical: Optional[float] = None) -> float:
    return clamp((category_base_rate(category, historical) - 0.5) * 2, -1.0, 1.0)


def calculate_location_score(location: str) -> float:
    """Known hot districts score positive; unknown locations are neutral."""
    location_lower = location.lower()
    for district, score in LOCATION_SCORES.items():
        if district in location_lower:
            return (score - 0.5) * 2
    return 0.0


def calculate_leader_score(has_leader: bool, follower_count: Optional[int] = None) -> float:
    if not has_leader:
        return -0.2
    if not follower_count:
        return 0.3
    follower_score = min(1.0, math.log10(follower_count + 1) / 6)
    return 0.3 + follower_score * 0.7


# ------------------------------------------------------------------ #
# Derived outputs                                                      #
# ------------------------------------------------------------------ #

def calculate_confidence(data: PredictionInput) -> float:
    """More history supplied → more confidence, capped at 0.95."""
    confidence = 0.5

    if len(data.daily_momentum) >= 7:
        confidence += 0.2
    elif len(data.daily_momentum) >= 3:
        confidence += 0.1

    if data.brand_previous_campaigns and data.brand_previous_campaigns >= 3:
        confidence += 0.1

    if data.historical_category_success is not None:
        confidence += 0.1

    if data.has_leader:
        confidence += 0.1

    return min(0.95, confidence)


def _average_daily(data: PredictionInput) -> float:
    if data.daily_momentum:
        return average(data.daily_momentum)
    return data.current_participants / max(1, CAMPAIGN_DAYS - data.days_remaining)


def estimate_final_participants(data: PredictionInput) -> int:
    return round_half_up(data.current_participants + _average_daily(data) * data.days_remaining)


def estimate_days_to_goal(data: PredictionInput) -> Optional[int]:
    remaining = data.goal_participants - data.current_participants
    if remaining <= 0:
        return 0

    avg_daily = average(data.daily_momentum)
    if avg_daily <= 0:
        return None

    days_needed = math.ceil(remaining / avg_daily)
    return None if days_needed > data.days_remaining else days_needed


def get_risk_level(probability: float, days_remaining: int) -> RiskLevel:
    if probability >= 0.8:
        return RiskLevel.LOW
    if probability >= 0.5 and days_remaining >= 5:
        return RiskLevel.MEDIUM
    if probability >= 0.3 and days_remaining >= 7:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def _major_impact(score: float) -> ImpactLevel:
    return ImpactLevel.HIGH if abs(score) > 0.5 else ImpactLevel.MEDIUM


def _minor_impact(score: float) -> ImpactLevel:
    return ImpactLevel.MEDIUM if abs(score) > 0.3 else ImpactLevel.LOW


def build_factors(data: PredictionInput) -> List[PredictionFactor]:
    """Score all six factors and attach impact buckets and descriptions."""
    momentum = calculate_momentum_score(data.daily_momentum, data.goal_participants)
    progress = calculate_progress_score(
        data.current_participants, data.goal_participants, data.days_remaining
    )
    brand = calculate_brand_score(data.brand_previous_campaigns, data.brand_success_rate)
    base_rate = category_base_rate(data.category, data.historical_category_success)
    category = calculate_category_score(data.category, data.historical_category_success)
    location = calculate_location_score(data.location)
    leader = calculate_leader_score(data.has_leader, data.leader_follower_count)

    progress_pct = round(data.current_participants / max(data.goal_participants, 1) * 100)

    if data.brand_previous_campaigns:
        brand_desc = (
            f"{data.brand_name} - {round((data.brand_success_rate or 0) * 100)}% success rate"
        )
    else:
        brand_desc = f"{data.brand_name} - first campaign"

    if data.has_leader:
        leader_impact = ImpactLevel.HIGH if leader > 0.5 else ImpactLevel.MEDIUM
        leader_desc = f"leader attached ({format_followers(data.leader_follower_count or 0)} followers)"
    else:
        leader_impact = ImpactLevel.LOW
        leader_desc = "no leader attached"

    return [
        PredictionFactor(
            name="momentum",
            score=momentum,
            impact=_major_impact(momentum),
            description=(
                f"{round(average(data.daily_momentum))} joining per day - healthy pace"
                if momentum > 0
                else "slow participation pace"
            ),
        ),
        PredictionFactor(
            name="progress",
            score=progress,
            impact=_major_impact(progress),
            description=f"{progress_pct}% of goal reached",
        ),
        PredictionFactor(
            name="brand",
            score=brand,
            impact=_minor_impact(brand),
            description=brand_desc,
        ),
        PredictionFactor(
            name="category",
            score=category,
            impact=_minor_impact(category),
            description=f"{data.category or 'unknown'} - {round(base_rate * 100)}% average success rate",
        ),
        PredictionFactor(
            name="location",
            score=location,
            impact=_minor_impact(location),
            description=(
                f"{data.location} - {'popular district' if location > 0 else 'regular district'}"
            ),
        ),
        PredictionFactor(
            name="leader",
            score=leader,
            impact=leader_impact,
            description=leader_desc,
        ),
    ]


def generate_recommendations(factors: Sequence[PredictionFactor], data: PredictionInput) -> List[str]:
    """Up to three actionable suggestions derived from the weakest factors."""
    by_name = {f.name: f for f in factors}
    recommendations: List[str] = []

    momentum = by_name.get("momentum")
    if momentum is not None and momentum.score < 0:
        recommendations.append("Boost social media promotion to raise participation")
        if not data.has_leader:
            recommendations.append("Consider an influencer partnership")

    progress = by_name.get("progress")
    if progress is not None and progress.score < -0.3 and data.days_remaining <= 5:
        recommendations.append("Run a last-chance event to stress the deadline")
        recommendations.append("Use FOMO messaging in campaign posts")

    if not data.has_leader and data.days_remaining >= 5:
        recommendations.append("Use leader matching to extend reach")

    if data.category == Category.KPOP:
        recommendations.append("Promote actively in fandom communities")
    elif data.category in (Category.FASHION, Category.BEAUTY):
        recommendations.append("Run Instagram story ads")

    return recommendations[:MAX_RECOMMENDATIONS]


# ------------------------------------------------------------------ #
# Public API                                                           #
# ------------------------------------------------------------------ #

def predict_success(data: PredictionInput) -> PredictionResult:
    """
    Predict whether a popup reaches its participant goal.

    Examples:
        >>> result = predict_success(PredictionInput(
        ...     popup_id="p1", category="kpop", location="Seongsu",
        ...     current_participants=90, goal_participants=100, days_remaining=10,
        ...     daily_momentum=[15] * 7, has_leader=True, leader_follower_count=1_000_000,
        ... ))
        >>> result.risk
        <RiskLevel.MEDIUM: 'medium'>
    """
    factors = build_factors(data)
    scores = {f.name: f.score for f in factors}

    weighted = sum(scores[name] * weight for name, weight in FEATURE_WEIGHTS.items())
    probability = clamp(sigmoid(weighted * 2))
    risk = get_risk_level(probability, data.days_remaining)

    result = PredictionResult(
        popup_id=data.popup_id,
        success_probability=probability,
        confidence=calculate_confidence(data),
        estimated_final_participants=estimate_final_participants(data),
        estimated_days_to_goal=estimate_days_to_goal(data),
        risk=risk,
        factors=factors,
        recommendations=generate_recommendations(factors, data),
    )

    logger.info(
        "success_predicted",
        popup_id=data.popup_id,
        weighted_score=round(weighted, 4),
        success_probability=round(probability, 4),
        risk=risk.value,
    )
    return result


def batch_predict(inputs: Sequence[PredictionInput]) -> List[PredictionResult]:
    """predict_success over a list, preserving input order."""
    return [predict_success(data) for data in inputs]


def get_at_risk_popups(
    inputs: Sequence[PredictionInput],
    threshold: float = 0.5,
) -> List[PredictionResult]:
    """Predictions below `threshold`, worst first."""
    at_risk = [r for r in batch_predict(inputs) if r.success_probability < threshold]
    at_risk.sort(key=lambda r: r.success_probability)
    return at_risk
