"""Pytest fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from challenge_engine.core.security import create_access_token  # noqa: E402
from challenge_engine.db.base import Base  # noqa: E402
from challenge_engine.db.session import build_engine, get_db  # noqa: E402
from challenge_engine.main import app  # noqa: E402
from challenge_engine.models import (  # noqa: E402
    Achievement,
    BadgeCondition,
    ChallengeHealthRisk,
    ChallengeMilestone,
    ChallengeType,
    RewardRule,
)
from challenge_engine.services.categories import refresh_category_schema  # noqa: E402

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)



def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_db():
    """Fresh tables and category cache for every test."""
    Base.metadata.create_all(bind=engine)
    refresh_category_schema()
    yield
    refresh_category_schema()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client():
    """Test client with overridden DB."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer headers for an opaque user id."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers


@pytest.fixture
def smoking_type(db):
    """Smoking challenge type that starts in tracking mode."""
    challenge_type = ChallengeType(
        name="Smoke-free",
        description="Cut down and quit smoking",
        default_mode="tracking",
        primary_category="cigarette_count",
        required_observation_types=["cigarette_count"],
        observation_categories=[],
        show_health_risks=True,
    )
    db.add(challenge_type)
    db.commit()
    return challenge_type


@pytest.fixture
def make_milestone(db):
    def _make(challenge_type, name="One week", days_required=7, points_awarded=50, target_value=None, **kwargs):
        milestone = ChallengeMilestone(
            challenge_type_id=challenge_type.id,
            name=name,
            description=f"{name} reached",
            days_required=days_required,
            target_value=target_value,
            points_awarded=points_awarded,
            **kwargs,
        )
        db.add(milestone)
        db.commit()
        return milestone

    return _make


@pytest.fixture
def make_health_risk(db):
    def _make(challenge_type, name="Heart attack risk", fade_start_days=1, fade_end_days=365, **kwargs):
        risk = ChallengeHealthRisk(
            challenge_type_id=challenge_type.id,
            name=name,
            fade_start_days=fade_start_days,
            fade_end_days=fade_end_days,
            **kwargs,
        )
        db.add(risk)
        db.commit()
        return risk

    return _make


@pytest.fixture
def make_rule(db):
    def _make(activity_type, points=10, frequency="per_event", is_active=True):
        rule = RewardRule(activity_type=activity_type, points=points, frequency=frequency, is_active=is_active)
        db.add(rule)
        db.commit()
        return rule

    return _make


@pytest.fixture
def make_achievement(db):
    def _make(name, points_required=0, min_points_threshold=None, conditions=None, **kwargs):
        achievement = Achievement(
            name=name,
            description=f"{name} unlocked",
            points_required=points_required,
            min_points_threshold=min_points_threshold,
            **kwargs,
        )
        db.add(achievement)
        db.flush()
        for activity_type, required_count in (conditions or {}).items():
            db.add(
                BadgeCondition(
                    achievement_id=achievement.id,
                    activity_type=activity_type,
                    required_count=required_count,
                )
            )
        db.commit()
        return achievement

    return _make
