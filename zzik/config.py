"""Application configuration with validation."""
from typing import Optional, Literal, Dict
from functools import lru_cache
from pydantic import Field, field_validator, model_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Scoring service settings, read from the environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "ZZIK Scoring Service"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Hybrid recommendation weights
    W_COLLABORATIVE: float = Field(default=0.35, ge=0.0, le=1.0)
    W_CONTENT: float = Field(default=0.25, ge=0.0, le=1.0)
    W_POPULARITY: float = Field(default=0.20, ge=0.0, le=1.0)
    W_TRENDING: float = Field(default=0.10, ge=0.0, le=1.0)
    W_AI_BOOST: float = Field(default=0.10, ge=0.0, le=1.0)

    # Leader match weights
    W_AUDIENCE: float = Field(default=0.40, ge=0.0, le=1.0)
    W_ENGAGEMENT: float = Field(default=0.30, ge=0.0, le=1.0)
    W_CATEGORY: float = Field(default=0.20, ge=0.0, le=1.0)
    W_PERFORMANCE: float = Field(default=0.10, ge=0.0, le=1.0)

    # Result limits
    DEFAULT_RECOMMENDATION_LIMIT: int = Field(default=10, ge=1, le=100)
    DEFAULT_LEADER_MATCH_LIMIT: int = Field(default=5, ge=1, le=100)
    AT_RISK_THRESHOLD: float = Field(default=0.5, ge=0.0, le=1.0)
    MAX_RESULT_LIMIT: int = Field(default=100, ge=1, le=1000)

    # Embedding provider (optional; no AI boost when unset)
    EMBEDDING_API_URL: Optional[str] = None
    EMBEDDING_API_KEY: Optional[SecretStr] = None
    EMBEDDING_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0, le=60)

    # Seed data for the in-memory data source
    SEED_DATA_PATH: Optional[str] = None

    @field_validator("EMBEDDING_API_URL")
    @classmethod
    def validate_embedding_url(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("EMBEDDING_API_URL must be an http(s) URL")
        return v

    @model_validator(mode="after")
    def validate_hybrid_weights(self):
        """Validate recommendation weights sum to 1.0."""
        total = sum(self.hybrid_weights.values())
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"Recommendation weights must sum to 1.0, got {total}")
        return self

    @model_validator(mode="after")
    def validate_match_weights(self):
        """Validate leader match weights sum to 1.0."""
        total = sum(self.match_weights.values())
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"Leader match weights must sum to 1.0, got {total}")
        return self

    @model_validator(mode="after")
    def validate_default_limits(self):
        """Default result limits must not exceed MAX_RESULT_LIMIT."""
        for name in ("DEFAULT_RECOMMENDATION_LIMIT", "DEFAULT_LEADER_MATCH_LIMIT"):
            if getattr(self, name) > self.MAX_RESULT_LIMIT:
                raise ValueError(f"{name} must not exceed MAX_RESULT_LIMIT ({self.MAX_RESULT_LIMIT})")
        return self

    @model_validator(mode="after")
    def validate_production_settings(self):
        if self.APP_ENV == "production" and self.DEBUG:
            raise ValueError("DEBUG must be False in production")
        return self

    @property
    def hybrid_weights(self) -> Dict[str, float]:
        return {
            "collaborative": self.W_COLLABORATIVE,
            "content": self.W_CONTENT,
            "popularity": self.W_POPULARITY,
            "trending": self.W_TRENDING,
            "ai_boost": self.W_AI_BOOST,
        }

    @property
    def match_weights(self) -> Dict[str, float]:
        return {
            "audience": self.W_AUDIENCE,
            "engagement": self.W_ENGAGEMENT,
            "category": self.W_CATEGORY,
            "performance": self.W_PERFORMANCE,
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
