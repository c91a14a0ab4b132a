from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class PredictionInput(BaseModel):
    """
    Campaign state fed to the success predictor.
    """

    popup_id: str = Field(..., min_length=1)
    brand_name: str = ""
    category: str = ""
    location: str = ""

    current_participants: int = Field(default=0, ge=0)
    goal_participants: int = Field(default=0, ge=0)
    days_remaining: int = Field(default=0, ge=0)

    daily_momentum: List[float] = Field(
        default_factory=list,
        description="Daily new participants, oldest first (usually the last 7 days)"
    )

    has_leader: bool = False
    leader_follower_count: Optional[int] = Field(default=None, ge=0)

    historical_category_success: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Observed success rate for the category; overrides the built-in table"
    )

    brand_previous_campaigns: Optional[int] = Field(default=None, ge=0)
    brand_success_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    @field_validator("category")
    @classmethod
    def lowercase_category(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("daily_momentum")
    @classmethod
    def non_negative_momentum(cls, value: List[float]) -> List[float]:
        if any(v < 0 for v in value):
            raise ValueError("daily_momentum values must be >= 0")
        return value
