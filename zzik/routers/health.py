"""
Health Check Router - ZZIK Scoring Service
zzik/routers/health.py

Reports the status of the popup data source and the embedding provider.
The embedding provider is optional, so its absence never degrades health.
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Dict, Optional
from datetime import datetime, timezone

from zzik.config import Settings, get_settings
from zzik.core.dependencies import get_data_source, get_embedding_provider
from zzik.services.data_sources import PopupDataSource
from zzik.services.embedding import EmbeddingProvider

router = APIRouter(tags=["Health"])



#  Schemas


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: Dict[str, str]



#  Dependency Checks


def check_data_source(source: PopupDataSource) -> str:
    """Check the candidate feed."""
    try:
        popups = source.list_available_popups()
        return f"healthy ({len(popups)} active popups)"
    except Exception as e:
        error_msg = str(e)[:100] + "..." if len(str(e)) > 100 else str(e)
        return f"unhealthy: {error_msg}"


def check_embedding_provider(provider: Optional[EmbeddingProvider]) -> str:
    if provider is None:
        return "healthy (not configured, AI boost disabled)"
    return "healthy (configured)"



#  Main Health Check Route


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "All dependencies healthy"},
        503: {"description": "Data source unhealthy"},
    },
    summary="Health check",
    description="Check health of the data source and embedding provider.",
)
def health_check(
    source: PopupDataSource = Depends(get_data_source),
    provider: Optional[EmbeddingProvider] = Depends(get_embedding_provider),
    settings: Settings = Depends(get_settings),
):
    dependencies = {
        "data_source": check_data_source(source),
        "embedding_provider": check_embedding_provider(provider),
    }

    all_healthy = all(v.startswith("healthy") for v in dependencies.values())

    response = HealthResponse(
        status="healthy" if all_healthy else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        dependencies=dependencies,
    )

    if all_healthy:
        return response
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(mode="json"),
    )
