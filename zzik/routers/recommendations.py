"""
routers/recommendations.py - Popup Recommendation Endpoints

Endpoints:
  POST /api/v1/recommendations/score                - Score a supplied candidate list for a profile
  POST /api/v1/recommendations/preferences/update   - Apply one interaction to a profile
  GET  /api/v1/recommendations/preferences/default  - Cold-start profile
  GET  /api/v1/recommendations/{user_id}            - Recommendations from the configured data source
                                                      (?limit=&strategy=&exclude_ids=...)
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from zzik.config import Settings, get_settings
from zzik.core.dependencies import get_recommendation_service
from zzik.core.error_handlers import ErrorResponse
from zzik.core.exceptions import InvalidScoringInputException
from zzik.models.enumerations import RecommendationStrategy
from zzik.models.popup import Interaction, PopupFeatures, UserPreferences
from zzik.scoring.recommendation import (
    RecommendationScore,
    generate_strategy_recommendations,
    get_default_preferences,
    update_preferences_from_interaction,
)
from zzik.services.recommendation_service import RecommendationService

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


# =====================================================================
# Request / Response Models
# =====================================================================

class ScoreRequest(BaseModel):
    """Stateless scoring: the caller supplies candidates and the profile."""
    popups: List[PopupFeatures]
    preferences: UserPreferences
    similar_users: List[str] = Field(default_factory=list)
    user_participations: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="user_id -> popup ids that user joined",
    )
    limit: Optional[int] = Field(default=None, ge=1, description="Defaults to DEFAULT_RECOMMENDATION_LIMIT")
    strategy: RecommendationStrategy = RecommendationStrategy.HYBRID


class RecommendationListResponse(BaseModel):
    user_id: Optional[str] = None
    strategy: RecommendationStrategy
    count: int
    recommendations: List[RecommendationScore]


class PreferenceUpdateRequest(BaseModel):
    preferences: UserPreferences
    interaction: Interaction


# =====================================================================
# Endpoints
# =====================================================================

@router.post(
    "/score",
    response_model=RecommendationListResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Limit above MAX_RESULT_LIMIT or malformed JSON"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
    summary="Score popups for a profile",
)
def score_popups(
    payload: ScoreRequest,
    settings: Settings = Depends(get_settings),
) -> RecommendationListResponse:
    limit = settings.DEFAULT_RECOMMENDATION_LIMIT if payload.limit is None else payload.limit
    if limit > settings.MAX_RESULT_LIMIT:
        raise InvalidScoringInputException("limit", f"must be between 1 and {settings.MAX_RESULT_LIMIT}")

    participations = {
        user_id: set(popup_ids) for user_id, popup_ids in payload.user_participations.items()
    }
    results = generate_strategy_recommendations(
        payload.strategy,
        payload.popups,
        payload.preferences,
        similar_users=payload.similar_users,
        user_participations=participations,
        limit=limit,
        weights=settings.hybrid_weights,
    )
    return RecommendationListResponse(
        strategy=payload.strategy,
        count=len(results),
        recommendations=results,
    )


@router.post(
    "/preferences/update",
    response_model=UserPreferences,
    responses={422: {"model": ErrorResponse, "description": "Validation error"}},
    summary="Update a profile from an interaction",
)
def update_preferences(payload: PreferenceUpdateRequest) -> UserPreferences:
    return update_preferences_from_interaction(payload.preferences, payload.interaction)


@router.get(
    "/preferences/default",
    response_model=UserPreferences,
    summary="Cold-start profile",
)
def default_preferences(
    age: Optional[int] = Query(default=None, ge=0, le=120),
    location: Optional[str] = Query(default=None, min_length=1),
) -> UserPreferences:
    return get_default_preferences(age=age, location=location)


@router.get(
    "/{user_id}",
    response_model=RecommendationListResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid limit or strategy"},
        503: {"model": ErrorResponse, "description": "Popup feed unavailable"},
    },
    summary="Recommendations for a stored user",
)
def recommend_for_user(
    user_id: str,
    limit: Optional[int] = Query(default=None),
    strategy: str = Query(default=RecommendationStrategy.HYBRID.value),
    exclude_ids: Optional[List[str]] = Query(
        default=None,
        description="Popup ids to leave out of the feed (repeat the parameter)",
    ),
    service: RecommendationService = Depends(get_recommendation_service),
) -> RecommendationListResponse:
    # limit and strategy are range-checked by the service (400 on failure)
    results = service.recommend(
        user_id,
        limit=limit,
        strategy=strategy,
        exclude_ids=exclude_ids or (),
    )
    return RecommendationListResponse(
        user_id=user_id,
        strategy=RecommendationStrategy(strategy),
        count=len(results),
        recommendations=results,
    )
