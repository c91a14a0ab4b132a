# zzik/scoring/recommendation.py
"""
Hybrid Recommendation Scorer
-----------------------------
Ranks pop-up campaigns for a user by blending five sub-scores.

Formula:
    score = 0.35 × collaborative
          + 0.25 × content
          + 0.20 × popularity
          + 0.10 × trending
          + 0.10 × ai_boost

Sub-scores (each in [0, 1]):
    collaborative  share of similar users who joined the popup
    content        0.5 × category match + 0.3 × vibe cosine + 0.2 × location match
    popularity     participants / goal, +0.2 when ≤ 3 days remain
    trending       0.7 × min(1, momentum / 50) + 0.3 × e^(−age / 10)
    ai_boost       cosine(popup.vibe, user.vibes) rescaled from [−1, 1] to [0, 1]

Weights sum to 1.0, so the blended score stays in [0, 1].
"""
import math
import structlog
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from zzik.models.enumerations import Category, InteractionType, RecommendationStrategy
from zzik.models.popup import Interaction, PopupFeatures, UserPreferences
from zzik.scoring.utils import clamp, cosine_similarity, weighted_sum

logger = structlog.get_logger(__name__)

HYBRID_WEIGHTS: Dict[str, float] = {
    "collaborative": 0.35,
    "content":       0.25,
    "popularity":    0.20,
    "trending":      0.10,
    "ai_boost":      0.10,
}

# Symmetric-ish category similarity; keys are the user's preferred category
CATEGORY_SIMILARITY: Dict[Category, Dict[Category, float]] = {
    Category.FASHION:   {Category.FASHION: 1.0, Category.BEAUTY: 0.6, Category.LIFESTYLE: 0.4},
    Category.BEAUTY:    {Category.BEAUTY: 1.0, Category.FASHION: 0.6, Category.LIFESTYLE: 0.5},
    Category.KPOP:      {Category.KPOP: 1.0, Category.CULTURE: 0.5, Category.LIFESTYLE: 0.3},
    Category.FOOD:      {Category.FOOD: 1.0, Category.CAFE: 0.7, Category.LIFESTYLE: 0.4},
    Category.CAFE:      {Category.CAFE: 1.0, Category.FOOD: 0.7, Category.LIFESTYLE: 0.5},
    Category.LIFESTYLE: {Category.LIFESTYLE: 1.0, Category.CULTURE: 0.4, Category.FOOD: 0.3},
    Category.CULTURE:   {Category.CULTURE: 1.0, Category.KPOP: 0.5, Category.LIFESTYLE: 0.4},
    Category.TECH:      {Category.TECH: 1.0, Category.LIFESTYLE: 0.3},
}

# Content score component weights
_CONTENT_CATEGORY_W = 0.5
_CONTENT_VIBE_W = 0.3
_CONTENT_LOCATION_W = 0.2

URGENCY_DAYS = 3
URGENCY_BOOST = 0.2
HOT_MOMENTUM = 50.0        # daily participants considered "hot"
CAMPAIGN_LENGTH_DAYS = 30
TREND_DECAY_DAYS = 10.0

MAX_HISTORY = 100
MAX_PREFERRED_LOCATIONS = 10

_INTERACTION_MULTIPLIER: Dict[InteractionType, float] = {
    InteractionType.VIEW: 0.1,
    InteractionType.PARTICIPATE: 0.5,
    InteractionType.COMPLETE: 1.0,
}


@dataclass
class ScoreBreakdown:
    """Named sub-scores behind a recommendation, each in [0, 1]."""
    collaborative: float = 0.0
    content: float = 0.0
    popularity: float = 0.0
    trending: float = 0.0
    ai_boost: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "collaborative": self.collaborative,
            "content": self.content,
            "popularity": self.popularity,
            "trending": self.trending,
            "ai_boost": self.ai_boost,
        }


@dataclass
class RecommendationScore:
    """One ranked popup for a user."""
    popup_id: str
    score: float                  # final blended score in [0, 1]
    breakdown: ScoreBreakdown
    reasons: List[str] = field(default_factory=list)
    strategy: RecommendationStrategy = RecommendationStrategy.HYBRID


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------

def calculate_collaborative_score(
    popup: PopupFeatures,
    similar_users: Sequence[str],
    user_participations: Mapping[str, Set[str]],
) -> float:
    """
    User-based collaborative filtering.

    Returns matches / len(similar_users), where a match is a similar user
    whose participation set contains popup.id. Empty similar_users → 0.
    """
    if not similar_users:
        return 0.0

    matches = 0
    for user_id in similar_users:
        if popup.id in user_participations.get(user_id, ()):
            matches += 1

    return matches / len(similar_users)


def _category_similarity(preferred: str, candidate: str) -> float:
    return CATEGORY_SIMILARITY.get(preferred, {}).get(candidate, 0.0)


def _location_matches(location: str, candidates: Iterable[str]) -> bool:
    location_lower = location.lower()
    return any(loc and loc.lower() in location_lower for loc in candidates)


def calculate_content_score(popup: PopupFeatures, prefs: UserPreferences) -> float:
    """
    Content-based match of a popup against a user profile.

    category  Σ(similarity(pref_cat, popup.category) × weight) / Σ weight
    vibe      cosine(prefs.vibes, popup.vibe_vector), 0 if either is missing
    location  1 if any preferred location appears in popup.location
    """
    total_weight = sum(prefs.categories.values())
    if total_weight > 0:
        category_score = sum(
            _category_similarity(category, popup.category) * weight
            for category, weight in prefs.categories.items()
        ) / total_weight
    else:
        category_score = 0.0

    vibe_score = 0.0
    if prefs.vibes and popup.vibe_vector:
        vibe_score = cosine_similarity(prefs.vibes, popup.vibe_vector)

    location_score = 1.0 if _location_matches(popup.location, prefs.preferred_locations) else 0.0

    return clamp(
        category_score * _CONTENT_CATEGORY_W
        + vibe_score * _CONTENT_VIBE_W
        + location_score * _CONTENT_LOCATION_W
    )


def calculate_popularity_score(popup: PopupFeatures) -> float:
    """Goal progress plus an urgency boost near the deadline, capped at 1."""
    progress_rate = popup.participant_count / max(popup.goal_participants, 1)
    urgency_boost = URGENCY_BOOST if popup.days_left <= URGENCY_DAYS else 0.0
    return clamp(progress_rate + urgency_boost)


def calculate_trending_score(popup: PopupFeatures) -> float:
    """Momentum against a fixed ceiling, plus a freshness term that decays with campaign age."""
    normalized_momentum = min(1.0, popup.momentum / HOT_MOMENTUM)
    age_in_days = max(0, CAMPAIGN_LENGTH_DAYS - popup.days_left)
    time_decay = math.exp(-age_in_days / TREND_DECAY_DAYS)
    return clamp(normalized_momentum * 0.7 + time_decay * 0.3)


def calculate_ai_boost(popup: PopupFeatures, prefs: UserPreferences) -> float:
    """Embedding similarity rescaled to [0, 1]; 0 when either vector is absent."""
    if not popup.vibe_vector or not prefs.vibes:
        return 0.0
    similarity = cosine_similarity(popup.vibe_vector, prefs.vibes)
    return clamp((similarity + 1.0) / 2.0)


def blend_scores(breakdown: ScoreBreakdown, weights: Optional[Mapping[str, float]] = None) -> float:
    """Weighted sum of the breakdown, clamped to [0, 1]."""
    return clamp(weighted_sum(breakdown.as_dict(), weights or HYBRID_WEIGHTS))


# ---------------------------------------------------------------------------
# Reasons
# ---------------------------------------------------------------------------

def generate_reasons(popup: PopupFeatures, breakdown: ScoreBreakdown) -> List[str]:
    reasons: List[str] = []

    if breakdown.ai_boost > 0.7:
        reasons.append("matches your vibe")
    elif breakdown.ai_boost > 0.5:
        reasons.append("a vibe you might like")

    if breakdown.content > 0.5:
        reasons.append(f"interested in {popup.category}")

    if breakdown.popularity > 0.7:
        percent = round(popup.participant_count / max(popup.goal_participants, 1) * 100)
        reasons.append(f"{percent}% of goal reached")

    if popup.days_left <= URGENCY_DAYS:
        reasons.append(f"ends in {popup.days_left} days")

    if breakdown.trending > 0.6:
        reasons.append("trending now")

    if breakdown.collaborative > 0.5:
        reasons.append("popular with similar users")

    return reasons or ["recommended pop-up"]


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

def score_popup(
    popup: PopupFeatures,
    prefs: UserPreferences,
    similar_users: Sequence[str] = (),
    user_participations: Optional[Mapping[str, Set[str]]] = None,
    weights: Optional[Mapping[str, float]] = None,
) -> RecommendationScore:
    """Compute every sub-score for one popup and blend them."""
    breakdown = ScoreBreakdown(
        collaborative=calculate_collaborative_score(popup, similar_users, user_participations or {}),
        content=calculate_content_score(popup, prefs),
        popularity=calculate_popularity_score(popup),
        trending=calculate_trending_score(popup),
        ai_boost=calculate_ai_boost(popup, prefs),
    )
    return RecommendationScore(
        popup_id=popup.id,
        score=blend_scores(breakdown, weights),
        breakdown=breakdown,
        reasons=generate_reasons(popup, breakdown),
        strategy=RecommendationStrategy.HYBRID,
    )


def rank(scores: List[RecommendationScore], limit: int) -> List[RecommendationScore]:
    """Sort descending by score (stable for ties) and keep the first `limit`."""
    if limit <= 0:
        return []
    return sorted(scores, key=lambda s: s.score, reverse=True)[:limit]


def generate_recommendations(
    popups: Sequence[PopupFeatures],
    prefs: UserPreferences,
    similar_users: Sequence[str] = (),
    user_participations: Optional[Mapping[str, Set[str]]] = None,
    limit: int = 10,
    weights: Optional[Mapping[str, float]] = None,
) -> List[RecommendationScore]:
    """
    Hybrid recommendations for a user.

    Popups already in prefs.participation_history are skipped. The rest are
    scored, sorted by descending blended score and truncated to `limit`.

    Examples:
        >>> generate_recommendations([], UserPreferences())
        []
    """
    already_joined = set(prefs.participation_history)
    participations = user_participations or {}

    scores = [
        score_popup(popup, prefs, similar_users, participations, weights)
        for popup in popups
        if popup.id not in already_joined
    ]
    ranked = rank(scores, limit)

    logger.info(
        "recommendations_generated",
        candidates=len(popups),
        scored=len(scores),
        returned=len(ranked),
        top_score=ranked[0].score if ranked else None,
    )
    return ranked


def generate_strategy_recommendations(
    strategy: RecommendationStrategy,
    popups: Sequence[PopupFeatures],
    prefs: UserPreferences,
    similar_users: Sequence[str] = (),
    user_participations: Optional[Mapping[str, Set[str]]] = None,
    limit: int = 10,
    weights: Optional[Mapping[str, float]] = None,
) -> List[RecommendationScore]:
    """
    Recommendations driven by a single strategy.

    hybrid         full blend (generate_recommendations)
    collaborative  collaborative score only
    content        0.7 × content + 0.3 × ai_boost
    popular        popularity only, history not excluded
    trending       trending only, history not excluded
    """
    strategy = RecommendationStrategy(strategy)
    if strategy == RecommendationStrategy.HYBRID:
        return generate_recommendations(
            popups, prefs, similar_users, user_participations, limit, weights
        )

    already_joined = set(prefs.participation_history)
    participations = user_participations or {}
    results: List[RecommendationScore] = []

    for popup in popups:
        if strategy == RecommendationStrategy.COLLABORATIVE:
            if popup.id in already_joined:
                continue
            collaborative = calculate_collaborative_score(popup, similar_users, participations)
            breakdown = ScoreBreakdown(collaborative=collaborative)
            score = collaborative
            reasons = ["popular with similar users"]

        elif strategy == RecommendationStrategy.CONTENT:
            if popup.id in already_joined:
                continue
            content = calculate_content_score(popup, prefs)
            ai_boost = calculate_ai_boost(popup, prefs)
            breakdown = ScoreBreakdown(content=content, ai_boost=ai_boost)
            score = clamp(content * 0.7 + ai_boost * 0.3)
            reasons = [f"interested in {popup.category}"]

        elif strategy == RecommendationStrategy.POPULAR:
            popularity = calculate_popularity_score(popup)
            breakdown = ScoreBreakdown(popularity=popularity)
            score = popularity
            percent = round(popup.participant_count / max(popup.goal_participants, 1) * 100)
            reasons = [f"{percent}% of goal reached"]
            if popup.days_left <= URGENCY_DAYS:
                reasons.append(f"ends in {popup.days_left} days")

        else:
            trending = calculate_trending_score(popup)
            breakdown = ScoreBreakdown(trending=trending)
            score = trending
            reasons = ["trending now", f"{popup.momentum:g} joining per day"]

        results.append(RecommendationScore(
            popup_id=popup.id,
            score=score,
            breakdown=breakdown,
            reasons=reasons,
            strategy=strategy,
        ))

    ranked = rank(results, limit)
    logger.info(
        "strategy_recommendations_generated",
        strategy=strategy.value,
        candidates=len(popups),
        returned=len(ranked),
    )
    return ranked


# ---------------------------------------------------------------------------
# Profile helpers
# ---------------------------------------------------------------------------

def find_similar_users(
    user_id: str,
    history: Iterable[str],
    user_participations: Mapping[str, Set[str]],
    limit: int = 10,
) -> List[str]:
    """
    Other users ranked by how many popups they share with `history`.

    Users with no overlap are dropped; ties keep the mapping's order.
    """
    joined = set(history)
    if not joined or limit <= 0:
        return []

    overlap = {
        other: len(joined & popups)
        for other, popups in user_participations.items()
        if other != user_id
    }
    ranked = sorted(
        (other for other, count in overlap.items() if count > 0),
        key=lambda other: overlap[other],
        reverse=True,
    )
    return ranked[:limit]


def derive_category_weights(categories: Iterable[str]) -> Dict[str, float]:
    """Category weights from a participation history, normalized by the most frequent category."""
    counts = Counter(c.strip().lower() for c in categories if c)
    if not counts:
        return {}
    max_count = max(counts.values())
    return {category: count / max_count for category, count in counts.items()}


def get_default_preferences(
    age: Optional[int] = None,
    location: Optional[str] = None,
) -> UserPreferences:
    """Cold-start profile for users with no history."""
    categories = {
        Category.FASHION.value: 0.3,
        Category.BEAUTY.value: 0.25,
        Category.KPOP.value: 0.2,
        Category.FOOD.value: 0.15,
        Category.CAFE.value: 0.1,
    }
    if age is not None and age < 25:
        categories[Category.KPOP.value] = 0.35
        categories[Category.FASHION.value] = 0.35

    return UserPreferences(
        categories=categories,
        vibes=[],
        participation_history=[],
        avg_participation_time=12,
        preferred_locations=[location] if location else ["seongsu", "gangnam", "hongdae"],
    )


def update_preferences_from_interaction(
    prefs: UserPreferences,
    interaction: Interaction,
) -> UserPreferences:
    """
    Nudge a profile toward an interaction and return the updated copy.

    category weight  old × 0.8 + multiplier × 0.2   (view .1, participate .5, complete 1)
    vibes            old × 0.7 + new × 0.3, or adopted as-is when the profile has none
    history          participate appends popup_id, keeping the newest 100
    locations        new locations appended, keeping the newest 10
    """
    updated = prefs.model_copy(deep=True)
    multiplier = _INTERACTION_MULTIPLIER[InteractionType(interaction.interaction_type)]

    current = updated.categories.get(interaction.category, 0.0)
    updated.categories[interaction.category] = min(1.0, current * 0.8 + multiplier * 0.2)

    new_vibe = interaction.vibe_vector or []
    if new_vibe and not updated.vibes:
        updated.vibes = list(new_vibe)
    elif new_vibe and len(updated.vibes) == len(new_vibe):
        updated.vibes = [old * 0.7 + new * 0.3 for old, new in zip(updated.vibes, new_vibe)]

    if interaction.interaction_type == InteractionType.PARTICIPATE:
        updated.participation_history.append(interaction.popup_id)
        updated.participation_history = updated.participation_history[-MAX_HISTORY:]

    if interaction.location and interaction.location not in updated.preferred_locations:
        updated.preferred_locations.append(interaction.location)
        updated.preferred_locations = updated.preferred_locations[-MAX_PREFERRED_LOCATIONS:]

    return updated
