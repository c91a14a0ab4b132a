from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

from zzik.models.enumerations import InteractionType


class PopupFeatures(BaseModel):
    """
    Snapshot of a pop-up campaign as seen by the recommendation scorers.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque popup identifier"
    )

    category: str = Field(
        ...,
        description="Popup category (fashion, beauty, kpop, ...)"
    )

    participant_count: int = Field(
        default=0,
        ge=0,
        description="Current number of participants"
    )

    goal_participants: int = Field(
        default=0,
        ge=0,
        description="Participants required for the popup to open"
    )

    momentum: float = Field(
        default=0.0,
        ge=0.0,
        description="Daily new participants"
    )

    days_left: int = Field(
        default=0,
        ge=0,
        description="Days until the funding deadline"
    )

    location: str = Field(
        default="",
        description="Venue location (district name)"
    )

    vibe_vector: Optional[List[float]] = Field(
        default=None,
        description="Optional embedding vector"
    )

    leader_id: Optional[str] = None

    description: Optional[str] = Field(
        default=None,
        description="Free text used to request an embedding when vibe_vector is missing"
    )

    @field_validator("category")
    @classmethod
    def lowercase_category(cls, value: str) -> str:
        return value.strip().lower()


class UserPreferences(BaseModel):
    """
    User profile consumed by the content, collaborative and AI-boost scorers.
    """

    categories: Dict[str, float] = Field(
        default_factory=dict,
        description="Category -> preference weight in [0, 1]"
    )

    vibes: List[float] = Field(
        default_factory=list,
        description="Preference embedding vector (empty when unknown)"
    )

    participation_history: List[str] = Field(
        default_factory=list,
        description="Popup ids the user already joined, oldest first"
    )

    avg_participation_time: int = Field(
        default=12,
        ge=0,
        le=23,
        description="Hour of day the user usually engages"
    )

    preferred_locations: List[str] = Field(default_factory=list)

    @field_validator("categories")
    @classmethod
    def validate_category_weights(cls, value: Dict[str, float]) -> Dict[str, float]:
        """Keys are lowercased like PopupFeatures.category; duplicates keep the max weight."""
        normalized: Dict[str, float] = {}
        for category, weight in value.items():
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"weight for '{category}' must be in [0, 1], got {weight}")
            key = category.strip().lower()
            normalized[key] = max(weight, normalized.get(key, 0.0))
        return normalized


class Interaction(BaseModel):
    """A single user interaction used to nudge UserPreferences."""

    popup_id: str = Field(..., min_length=1)
    category: str
    vibe_vector: Optional[List[float]] = None
    location: str = ""
    interaction_type: InteractionType = InteractionType.VIEW

    @field_validator("category")
    @classmethod
    def lowercase_category(cls, value: str) -> str:
        return value.strip().lower()
