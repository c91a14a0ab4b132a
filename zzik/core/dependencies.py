"""
Dependencies - ZZIK Scoring Service
zzik/core/dependencies.py

FastAPI dependency injection for the data source, embedding provider and
recommendation service.
"""

from functools import lru_cache
from typing import Optional

from zzik.config import get_settings
from zzik.services.data_sources import InMemoryPopupDataSource, PopupDataSource
from zzik.services.embedding import HttpEmbeddingProvider
from zzik.services.recommendation_service import RecommendationService


@lru_cache()
def get_data_source() -> PopupDataSource:
    """Seeded in-memory source when SEED_DATA_PATH is set, else an empty one."""
    settings = get_settings()
    if settings.SEED_DATA_PATH:
        return InMemoryPopupDataSource.from_json_file(settings.SEED_DATA_PATH)
    return InMemoryPopupDataSource()


@lru_cache()
def get_embedding_provider() -> Optional[HttpEmbeddingProvider]:
    """HTTP embedding client, or None when EMBEDDING_API_URL is unset."""
    settings = get_settings()
    if not settings.EMBEDDING_API_URL:
        return None
    api_key = settings.EMBEDDING_API_KEY.get_secret_value() if settings.EMBEDDING_API_KEY else None
    return HttpEmbeddingProvider(
        settings.EMBEDDING_API_URL,
        api_key=api_key,
        timeout=settings.EMBEDDING_TIMEOUT_SECONDS,
    )


@lru_cache()
def get_recommendation_service() -> RecommendationService:
    """Get cached RecommendationService instance."""
    return RecommendationService(
        get_data_source(),
        embedding_provider=get_embedding_provider(),
        settings=get_settings(),
    )


def close_embedding_provider() -> None:
    """Close the cached HTTP client, if one was created, and drop the cached instances."""
    if get_embedding_provider.cache_info().currsize:
        provider = get_embedding_provider()
        if provider is not None:
            provider.close()
    get_embedding_provider.cache_clear()
    get_recommendation_service.cache_clear()
