# tests/conftest.py

"""
Pytest Fixtures - Shared test data for the scoring core, services and API

FIXTURE DATA REFERENCE:
- Popups:  pop-fashion-seongsu, pop-kpop-hongdae, pop-food-gangnam, pop-tech-pangyo
- Users:   user-1 (fashion fan, joined pop-old-1), user-2 / user-3 (overlap with user-1)
- Leaders: leader-micro-fashion, leader-macro-kpop, leader-nano-tech
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from fastapi.testclient import TestClient

from zzik.core.dependencies import get_data_source, get_embedding_provider, get_recommendation_service
from zzik.main import app
from zzik.models.leader import (
    AudienceDemographics,
    GenderRatio,
    Leader,
    LeaderPerformance,
    PopupCampaign,
)
from zzik.models.popup import PopupFeatures, UserPreferences
from zzik.models.prediction import PredictionInput
from zzik.services.data_sources import InMemoryPopupDataSource


FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
FIXED_TODAY = date(2026, 3, 1)


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture
def seeded_source(popup_records, stored_users, participations):
    return InMemoryPopupDataSource(
        popups=popup_records,
        users=stored_users,
        participations=participations,
        now=FIXED_NOW,
    )


@pytest.fixture
def client(seeded_source):
    """TestClient with the in-memory data source and no embedding provider."""
    from zzik.services.recommendation_service import RecommendationService

    service = RecommendationService(seeded_source)
    app.dependency_overrides[get_data_source] = lambda: seeded_source
    app.dependency_overrides[get_embedding_provider] = lambda: None
    app.dependency_overrides[get_recommendation_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# RECOMMENDATION FIXTURES
# =============================================================================

@pytest.fixture
def sample_popups():
    return [
        PopupFeatures(
            id="pop-fashion-seongsu",
            category="fashion",
            participant_count=80,
            goal_participants=100,
            momentum=30,
            days_left=2,
            location="Seongsu-dong",
            vibe_vector=[0.9, 0.1, 0.3],
        ),
        PopupFeatures(
            id="pop-kpop-hongdae",
            category="kpop",
            participant_count=20,
            goal_participants=100,
            momentum=60,
            days_left=25,
            location="Hongdae",
            vibe_vector=[0.1, 0.9, 0.2],
        ),
        PopupFeatures(
            id="pop-food-gangnam",
            category="food",
            participant_count=10,
            goal_participants=200,
            momentum=2,
            days_left=14,
            location="Gangnam",
        ),
        PopupFeatures(
            id="pop-tech-pangyo",
            category="tech",
            participant_count=0,
            goal_participants=50,
            momentum=0,
            days_left=20,
            location="Pangyo",
        ),
    ]


@pytest.fixture
def fashion_prefs():
    return UserPreferences(
        categories={"fashion": 0.9, "beauty": 0.5},
        vibes=[1.0, 0.0, 0.2],
        participation_history=["pop-old-1"],
        avg_participation_time=19,
        preferred_locations=["seongsu"],
    )


@pytest.fixture
def participations():
    """user_id -> popup ids joined."""
    return {
        "user-1": ["pop-old-1"],
        "user-2": ["pop-old-1", "pop-fashion-seongsu"],
        "user-3": ["pop-old-1", "pop-fashion-seongsu", "pop-kpop-hongdae"],
        "user-4": ["pop-food-gangnam"],
    }


# =============================================================================
# DATA SOURCE FIXTURES
# =============================================================================

@pytest.fixture
def popup_records():
    """Rows as stored by the platform, relative to FIXED_NOW."""
    return [
        {
            "id": "pop-fashion-seongsu",
            "category": "Fashion",
            "current_participants": 80,
            "goal_participants": 100,
            "created_at": (FIXED_NOW - timedelta(days=4)).isoformat(),
            "deadline_at": (FIXED_NOW + timedelta(days=1, hours=6)).isoformat(),
            "location": "Seongsu-dong",
            "status": "funding",
        },
        {
            "id": "pop-kpop-hongdae",
            "category": "kpop",
            "current_participants": 20,
            "goal_participants": 100,
            "created_at": (FIXED_NOW - timedelta(days=2)).isoformat(),
            "deadline_at": (FIXED_NOW + timedelta(days=25)).isoformat(),
            "location": "Hongdae",
            "status": "confirmed",
        },
        {
            "id": "pop-old-1",
            "category": "beauty",
            "current_participants": 150,
            "goal_participants": 100,
            "created_at": (FIXED_NOW - timedelta(days=40)).isoformat(),
            "deadline_at": (FIXED_NOW - timedelta(days=10)).isoformat(),
            "location": "Gangnam",
            "status": "completed",
        },
    ]


@pytest.fixture
def stored_users(fashion_prefs):
    return {"user-1": fashion_prefs}


# =============================================================================
# LEADER FIXTURES
# =============================================================================

@pytest.fixture
def fashion_campaign():
    return PopupCampaign(
        id="camp-1",
        brand_name="Maison Kitsune",
        category="fashion",
        target_audience=AudienceDemographics(
            age_groups={"18-24": 0.5, "25-34": 0.5},
            gender_ratio=GenderRatio(male=0.3, female=0.7),
            top_locations=["Seongsu", "Hannam"],
            interests={"fashion": 0.8, "beauty": 0.2},
        ),
        goal_participants=300,
        location="Seongsu-dong",
        priority="medium",
    )


@pytest.fixture
def micro_fashion_leader():
    return Leader(
        id="leader-micro-fashion",
        nickname="style_jin",
        categories=["fashion", "beauty"],
        follower_count=8_000,
        avg_engagement_rate=0.09,
        audience_demo=AudienceDemographics(
            age_groups={"18-24": 0.6, "25-34": 0.4},
            gender_ratio=GenderRatio(male=0.2, female=0.8),
            top_locations=["Seongsu"],
            interests={"fashion": 0.9, "beauty": 0.4},
        ),
        performance=LeaderPerformance(
            total_campaigns=12,
            success_rate=0.85,
            avg_participants_generated=60,
            avg_conversion_rate=0.03,
            last_campaign_date=FIXED_TODAY - timedelta(days=10),
        ),
    )


@pytest.fixture
def macro_kpop_leader():
    return Leader(
        id="leader-macro-kpop",
        nickname="kpop_daily",
        categories=["kpop"],
        follower_count=400_000,
        avg_engagement_rate=0.03,
        audience_demo=AudienceDemographics(
            age_groups={"13-17": 0.5, "18-24": 0.5},
            gender_ratio=GenderRatio(male=0.4, female=0.6),
            top_locations=["Hongdae"],
            interests={"kpop": 1.0},
        ),
        performance=LeaderPerformance(
            total_campaigns=4,
            success_rate=0.5,
            avg_conversion_rate=0.01,
            last_campaign_date=FIXED_TODAY - timedelta(days=200),
        ),
    )


@pytest.fixture
def nano_tech_leader():
    return Leader(
        id="leader-nano-tech",
        nickname="gadget_lee",
        categories=["tech"],
        follower_count=500,
        avg_engagement_rate=0.02,
    )


@pytest.fixture
def leaders(micro_fashion_leader, macro_kpop_leader, nano_tech_leader):
    return [nano_tech_leader, macro_kpop_leader, micro_fashion_leader]


# =============================================================================
# PREDICTION FIXTURES
# =============================================================================

@pytest.fixture
def strong_campaign_input():
    return PredictionInput(
        popup_id="pred-strong",
        brand_name="Hybe Pop",
        category="kpop",
        location="Seongsu",
        current_participants=90,
        goal_participants=100,
        days_remaining=10,
        daily_momentum=[15] * 7,
        has_leader=True,
        leader_follower_count=1_000_000,
    )


@pytest.fixture
def weak_campaign_input():
    return PredictionInput(
        popup_id="pred-weak",
        brand_name="Gadget Co",
        category="tech",
        location="Pangyo",
        current_participants=10,
        goal_participants=100,
        days_remaining=2,
        daily_momentum=[1] * 7,
        has_leader=False,
    )
