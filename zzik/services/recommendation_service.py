# zzik/services/recommendation_service.py
"""
Recommendation Service
----------------------
Loads a user's profile, the candidate feed and the participation graph
from an injected PopupDataSource, then hands them to the pure scorers in
zzik.scoring.recommendation.

Failure policy:
    preferences fetch fails      → cold-start defaults
    participations fetch fails   → no collaborative signal
    any embedding failure        → popup scored without a vibe vector
    candidate feed fails         → DataSourceException (propagates)

Usage:
    svc = RecommendationService(data_source, settings=get_settings())
    results = svc.recommend("user-1", limit=10, strategy="hybrid")
"""
from typing import Dict, Iterable, List, Optional, Set

import structlog

from zzik.config import Settings, get_settings
from zzik.core.exceptions import (
    DataSourceException,
    EmbeddingProviderError,
    InvalidScoringInputException,
)
from zzik.models.enumerations import RecommendationStrategy
from zzik.models.popup import PopupFeatures, UserPreferences
from zzik.scoring.recommendation import (
    RecommendationScore,
    find_similar_users,
    generate_strategy_recommendations,
    get_default_preferences,
)
from zzik.services.data_sources import PopupDataSource
from zzik.services.embedding import EmbeddingProvider

logger = structlog.get_logger(__name__)


class RecommendationService:
    """Data access + strategy selection around the recommendation scorers."""

    def __init__(
        self,
        data_source: PopupDataSource,
        embedding_provider: Optional[EmbeddingProvider] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._source = data_source
        self._embedder = embedding_provider
        self._settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def recommend(
        self,
        user_id: str,
        limit: Optional[int] = None,
        strategy: RecommendationStrategy = RecommendationStrategy.HYBRID,
        exclude_ids: Iterable[str] = (),
    ) -> List[RecommendationScore]:
        limit = self._validate_limit(limit)
        strategy = self._validate_strategy(strategy)

        prefs = self.load_preferences(user_id)
        participations = self._load_participations(user_id)
        similar_users = find_similar_users(user_id, prefs.participation_history, participations)

        popups = self._load_popups(exclude_ids)
        if prefs.vibes:
            popups = self._fill_vibe_vectors(popups)

        results = generate_strategy_recommendations(
            strategy,
            popups,
            prefs,
            similar_users=similar_users,
            user_participations=participations,
            limit=limit,
            weights=self._settings.hybrid_weights,
        )

        logger.info(
            "user_recommendations_served",
            user_id=user_id,
            strategy=strategy.value,
            similar_users=len(similar_users),
            returned=len(results),
        )
        return results

    def load_preferences(self, user_id: str) -> UserPreferences:
        """Stored profile, or cold-start defaults when missing or unreadable."""
        try:
            prefs = self._source.get_user_preferences(user_id)
        except Exception as e:
            logger.warning("preferences_fetch_failed_using_defaults", user_id=user_id, error=str(e))
            return get_default_preferences()

        if prefs is None:
            logger.debug("preferences_missing_using_defaults", user_id=user_id)
            return get_default_preferences()
        return prefs

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _validate_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self._settings.DEFAULT_RECOMMENDATION_LIMIT
        if limit < 1 or limit > self._settings.MAX_RESULT_LIMIT:
            raise InvalidScoringInputException(
                "limit", f"must be between 1 and {self._settings.MAX_RESULT_LIMIT}"
            )
        return limit

    @staticmethod
    def _validate_strategy(strategy) -> RecommendationStrategy:
        try:
            return RecommendationStrategy(strategy)
        except ValueError:
            allowed = ", ".join(s.value for s in RecommendationStrategy)
            raise InvalidScoringInputException("strategy", f"must be one of: {allowed}") from None

    def _load_participations(self, user_id: str) -> Dict[str, Set[str]]:
        try:
            return self._source.get_participations()
        except Exception as e:
            logger.warning("participations_fetch_failed", user_id=user_id, error=str(e))
            return {}

    def _load_popups(self, exclude_ids: Iterable[str] = ()) -> List[PopupFeatures]:
        try:
            return self._source.list_available_popups(exclude_ids=tuple(exclude_ids))
        except DataSourceException:
            raise
        except Exception as e:
            logger.error("popup_feed_unavailable", error=str(e))
            raise DataSourceException("list_available_popups", str(e)) from e

    def _fill_vibe_vectors(self, popups: List[PopupFeatures]) -> List[PopupFeatures]:
        """Request embeddings for popups that have a description but no vector."""
        if self._embedder is None:
            return popups

        filled: List[PopupFeatures] = []
        for popup in popups:
            if popup.vibe_vector or not popup.description:
                filled.append(popup)
                continue
            try:
                vector = self._embedder.embed(popup.description)
            except Exception as e:
                # providers are injected; any failure only drops the AI boost
                error = e.message if isinstance(e, EmbeddingProviderError) else str(e)
                logger.warning("embedding_failed_soft_degrade", popup_id=popup.id, error=error)
                filled.append(popup)
                continue
            filled.append(popup.model_copy(update={"vibe_vector": vector}))
        return filled
