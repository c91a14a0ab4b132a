"""
Core Package - ZZIK Scoring Service
zzik/core/__init__.py

Core infrastructure: dependencies, exceptions, logging.
"""

from zzik.core.dependencies import (
    close_embedding_provider,
    get_data_source,
    get_embedding_provider,
    get_recommendation_service,
)
from zzik.core.exceptions import (
    DataSourceException,
    EmbeddingProviderError,
    InvalidScoringInputException,
    ScoringException,
)
from zzik.core.logging import configure_logging

__all__ = [
    # Dependencies
    "close_embedding_provider",
    "get_data_source",
    "get_embedding_provider",
    "get_recommendation_service",
    # Exceptions
    "DataSourceException",
    "EmbeddingProviderError",
    "InvalidScoringInputException",
    "ScoringException",
    # Logging
    "configure_logging",
]
