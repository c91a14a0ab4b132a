"""
routers/predictions.py - Campaign Success Prediction Endpoints

Endpoints:
  POST /api/v1/predictions           - Predict one campaign
  POST /api/v1/predictions/batch     - Predict many campaigns (input order kept)
  POST /api/v1/predictions/at-risk   - Campaigns below a success threshold, worst first
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from typing import List, Optional

from zzik.config import Settings, get_settings
from zzik.core.error_handlers import ErrorResponse
from zzik.models.prediction import PredictionInput
from zzik.scoring.prediction import (
    PredictionResult,
    batch_predict,
    get_at_risk_popups,
    predict_success,
)

router = APIRouter(prefix="/predictions", tags=["Success Prediction"])


# =====================================================================
# Request / Response Models
# =====================================================================

class BatchPredictionRequest(BaseModel):
    popups: List[PredictionInput] = Field(..., max_length=500)


class BatchPredictionResponse(BaseModel):
    count: int
    predictions: List[PredictionResult]


class AtRiskResponse(BaseModel):
    threshold: float
    evaluated: int
    count: int
    predictions: List[PredictionResult]


# =====================================================================
# Endpoints
# =====================================================================

@router.post(
    "",
    response_model=PredictionResult,
    responses={422: {"model": ErrorResponse, "description": "Validation error"}},
    summary="Predict campaign success",
)
def predict(payload: PredictionInput) -> PredictionResult:
    return predict_success(payload)


@router.post("/batch", response_model=BatchPredictionResponse, summary="Batch prediction")
def predict_batch(payload: BatchPredictionRequest) -> BatchPredictionResponse:
    results = batch_predict(payload.popups)
    return BatchPredictionResponse(count=len(results), predictions=results)


@router.post("/at-risk", response_model=AtRiskResponse, summary="At-risk campaigns")
def at_risk(
    payload: BatchPredictionRequest,
    threshold: Optional[float] = Query(default=None, ge=0.0, le=1.0),
    settings: Settings = Depends(get_settings),
) -> AtRiskResponse:
    threshold = settings.AT_RISK_THRESHOLD if threshold is None else threshold
    results = get_at_risk_popups(payload.popups, threshold=threshold)
    return AtRiskResponse(
        threshold=threshold,
        evaluated=len(payload.popups),
        count=len(results),
        predictions=results,
    )
