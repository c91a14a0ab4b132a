"""
Services module for the ZZIK scoring service.
"""

from zzik.services.data_sources import (
    InMemoryPopupDataSource,
    PopupDataSource,
    popup_features_from_record,
)
from zzik.services.embedding import EmbeddingProvider, HttpEmbeddingProvider
from zzik.services.recommendation_service import RecommendationService

__all__ = [
    "InMemoryPopupDataSource",
    "PopupDataSource",
    "popup_features_from_record",
    "EmbeddingProvider",
    "HttpEmbeddingProvider",
    "RecommendationService",
]
