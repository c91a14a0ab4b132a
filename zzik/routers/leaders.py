"""
routers/leaders.py - Leader Matching Endpoints

Endpoints:
  POST /api/v1/leaders/match                 - Rank leaders for a campaign
  POST /api/v1/leaders/best                  - Single best leader for a campaign
  POST /api/v1/leaders/cost                  - Cost estimate for one leader on one campaign
  GET  /api/v1/leaders/tier/{follower_count} - Tier and KRW price range for a follower count
"""

from datetime import date
from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field
from typing import List, Optional

from zzik.config import Settings, get_settings
from zzik.core.error_handlers import ErrorResponse
from zzik.core.exceptions import InvalidScoringInputException
from zzik.models.enumerations import LeaderTier
from zzik.models.leader import Leader, PopupCampaign
from zzik.scoring.leader_matching import (
    CostEstimate,
    LeaderMatchResult,
    PriceRange,
    estimate_campaign_cost,
    find_best_leader,
    get_leader_tier,
    get_tier_pricing,
    match_leaders_to_campaign,
)
from zzik.scoring.utils import format_followers

router = APIRouter(prefix="/leaders", tags=["Leader Matching"])


# =====================================================================
# Request / Response Models
# =====================================================================

class MatchRequest(BaseModel):
    campaign: PopupCampaign
    leaders: List[Leader]
    limit: Optional[int] = Field(default=None, ge=1, description="Defaults to DEFAULT_LEADER_MATCH_LIMIT")
    as_of: Optional[date] = Field(
        default=None,
        description="Reference date for campaign recency (defaults to today)",
    )


class MatchListResponse(BaseModel):
    campaign_id: str
    count: int
    matches: List[LeaderMatchResult]


class BestLeaderResponse(BaseModel):
    campaign_id: str
    match: Optional[LeaderMatchResult] = None


class CostRequest(BaseModel):
    leader: Leader
    campaign: PopupCampaign


class TierResponse(BaseModel):
    follower_count: int
    followers_display: str
    tier: LeaderTier
    pricing: PriceRange


# =====================================================================
# Endpoints
# =====================================================================

@router.post(
    "/match",
    response_model=MatchListResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Limit above MAX_RESULT_LIMIT or malformed JSON"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
    summary="Rank leaders for a campaign",
)
def match_leaders(
    payload: MatchRequest,
    settings: Settings = Depends(get_settings),
) -> MatchListResponse:
    limit = settings.DEFAULT_LEADER_MATCH_LIMIT if payload.limit is None else payload.limit
    if limit > settings.MAX_RESULT_LIMIT:
        raise InvalidScoringInputException("limit", f"must be between 1 and {settings.MAX_RESULT_LIMIT}")
    matches = match_leaders_to_campaign(
        payload.campaign,
        payload.leaders,
        limit=limit,
        weights=settings.match_weights,
        as_of=payload.as_of,
    )
    return MatchListResponse(campaign_id=payload.campaign.id, count=len(matches), matches=matches)


@router.post("/best", response_model=BestLeaderResponse, summary="Best leader for a campaign")
def best_leader(
    payload: MatchRequest,
    settings: Settings = Depends(get_settings),
) -> BestLeaderResponse:
    match = find_best_leader(
        payload.campaign,
        payload.leaders,
        weights=settings.match_weights,
        as_of=payload.as_of,
    )
    return BestLeaderResponse(campaign_id=payload.campaign.id, match=match)


@router.post("/cost", response_model=CostEstimate, summary="Estimate campaign cost")
def campaign_cost(payload: CostRequest) -> CostEstimate:
    return estimate_campaign_cost(payload.leader, payload.campaign)


@router.get("/tier/{follower_count}", response_model=TierResponse, summary="Leader tier")
def leader_tier(follower_count: int = Path(..., ge=0)) -> TierResponse:
    tier = get_leader_tier(follower_count)
    return TierResponse(
        follower_count=follower_count,
        followers_display=format_followers(follower_count),
        tier=tier,
        pricing=get_tier_pricing(tier),
    )
