from pydantic import BaseModel, Field, field_validator
from datetime import date
from typing import Dict, List, Optional

from zzik.models.enumerations import Priority


class GenderRatio(BaseModel):
    male: float = Field(default=0.0, ge=0.0, le=1.0)
    female: float = Field(default=0.0, ge=0.0, le=1.0)
    other: float = Field(default=0.0, ge=0.0, le=1.0)

    def as_dict(self) -> Dict[str, float]:
        return {"male": self.male, "female": self.female, "other": self.other}


class AudienceDemographics(BaseModel):
    """
    Demographic histogram of a leader's audience or a campaign's target.
    """

    age_groups: Dict[str, float] = Field(
        default_factory=dict,
        description="Age band -> share, e.g. {'18-24': 0.4}"
    )

    gender_ratio: GenderRatio = Field(default_factory=GenderRatio)

    top_locations: List[str] = Field(default_factory=list)

    interests: Dict[str, float] = Field(
        default_factory=dict,
        description="Category -> interest weight"
    )


class LeaderPerformance(BaseModel):
    total_campaigns: int = Field(default=0, ge=0)

    success_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Share of campaigns that reached their goal"
    )

    avg_participants_generated: float = Field(default=0.0, ge=0.0)

    avg_conversion_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Share of followers who participated"
    )

    last_campaign_date: Optional[date] = None


class Leader(BaseModel):
    """
    An influencer who can be matched to a campaign.
    """

    id: str = Field(..., min_length=1)
    nickname: str = ""
    categories: List[str] = Field(
        default_factory=list,
        description="Expertise categories"
    )
    follower_count: int = Field(default=0, ge=0)
    avg_engagement_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    audience_demo: AudienceDemographics = Field(default_factory=AudienceDemographics)
    performance: LeaderPerformance = Field(default_factory=LeaderPerformance)
    location: Optional[str] = None

    @field_validator("categories")
    @classmethod
    def lowercase_categories(cls, value: List[str]) -> List[str]:
        return [c.strip().lower() for c in value]


class PopupCampaign(BaseModel):
    """
    Campaign brief a leader is matched against.
    """

    id: str = Field(..., min_length=1)
    brand_name: str = ""
    category: str
    target_audience: AudienceDemographics = Field(default_factory=AudienceDemographics)
    goal_participants: int = Field(default=0, ge=0)
    budget: Optional[float] = Field(default=None, ge=0)
    location: str = ""
    priority: Priority = Priority.MEDIUM

    @field_validator("category")
    @classmethod
    def lowercase_category(cls, value: str) -> str:
        return value.strip().lower()
