"""
Shared fixtures: in-memory SQLite session, catalog data and date helpers.
"""
import os
import tempfile

os.environ.setdefault("ECOTRACK_DATABASE_URL", "sqlite://")
os.environ.setdefault("ECOTRACK_LOG_DIR", tempfile.mkdtemp(prefix="ecotrack-logs-"))
os.environ.setdefault("ECOTRACK_SCHEDULER_ENABLED", "false")
os.environ.setdefault("ECOTRACK_VERIFIER_API_KEY", "test-verifier-key")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ecotrack.database import Base  # noqa: E402
from ecotrack import models  # noqa: E402,F401
from ecotrack.models import User, MarketplaceReward  # noqa: E402
from ecotrack.repositories.user_repository import UserRepository  # noqa: E402
from ecotrack.services.rewards_service import RewardsService  # noqa: E402
from ecotrack.services.achievement_service import AchievementService  # noqa: E402
from ecotrack.services.date_service import DateService  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """Fresh schema per test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def badges(db_session):
    AchievementService(db_session).seed_badge_catalog()
    return AchievementService(db_session).badge_repo.get_all(db_session)


def create_user(session, **ledger_values) -> User:
    """User with an empty ledger; ledger_values override its columns"""
    user = UserRepository.create(session)
    ledger = RewardsService(session).create_ledger(user.id)
    for key, value in ledger_values.items():
        setattr(ledger, key, value)
    session.commit()
    session.refresh(user)
    return user


def create_reward(session, **overrides) -> MarketplaceReward:
    values = {
        "partner_name": "CityBike",
        "title": "Day pass",
        "description": "24 hours of rides",
        "terms_conditions": "Valid in participating cities",
        "point_cost": 100,
        "level_requirement": 1,
        "stock_available": 5,
        "is_active": True,
    }
    values.update(overrides)
    reward = MarketplaceReward(**values)
    session.add(reward)
    session.commit()
    session.refresh(reward)
    return reward


@pytest.fixture
def make_user(db_session):
    return lambda **ledger_values: create_user(db_session, **ledger_values)


@pytest.fixture
def make_reward(db_session):
    return lambda **overrides: create_reward(db_session, **overrides)


@pytest.fixture
def user(db_session):
    return create_user(db_session)


@pytest.fixture
def today():
    return DateService.get_today()


@pytest.fixture
def yesterday(today):
    return DateService.get_yesterday(today)
