from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, Date, Text, ForeignKey, UniqueConstraint
)

from ecotrack.database import Base
from ecotrack.constants import (
    ACTION_STATUS_AWAITING_PROOF,
    DEFAULT_THEME,
    DEFAULT_LANGUAGE,
    DEFAULT_NOTIFICATIONS_ENABLED,
    DEFAULT_PRIVACY_PROFILE,
)
from ecotrack.services.date_service import utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    display_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=utc_now)


class CarbonAssessment(Base):
    __tablename__ = "carbon_assessments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Raw survey answers (JSON)
    assessment_data = Column(Text, nullable=False)

    # Derived emissions, metric tons
    monthly_emissions = Column(Float, nullable=False, default=0.0)
    yearly_emissions = Column(Float, nullable=False, default=0.0)
    transportation_emissions = Column(Float, nullable=False, default=0.0)
    energy_emissions = Column(Float, nullable=False, default=0.0)
    diet_emissions = Column(Float, nullable=False, default=0.0)
    shopping_emissions = Column(Float, nullable=False, default=0.0)
    waste_emissions = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime, default=utc_now, index=True)


class EcoAction(Base):
    __tablename__ = "eco_actions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    action_type = Column(String, nullable=False)
    description = Column(String, nullable=False)
    co2_impact = Column(Float, nullable=False)  # kg CO2 saved
    points_earned = Column(Integer, nullable=False, default=0)

    # Proof of the action (photo, receipt, ...)
    proof_url = Column(String, nullable=True)
    proof_type = Column(String, nullable=True)

    verification_status = Column(String, nullable=False, default=ACTION_STATUS_AWAITING_PROOF, index=True)
    verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, index=True)


class UserRewards(Base):
    __tablename__ = "user_rewards"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    total_points = Column(Integer, nullable=False, default=0)
    current_level = Column(Integer, nullable=False, default=1)  # total_points // 500 + 1
    current_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)
    total_co2_saved = Column(Float, nullable=False, default=0.0)  # kg
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class Badge(Base):
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    rarity = Column(String, nullable=False, default="common")
    requirement_type = Column(String, nullable=False, index=True)
    requirement_value = Column(Integer, nullable=False, default=1)


class UserAchievement(Base):
    __tablename__ = "user_achievements"
    __table_args__ = (UniqueConstraint("user_id", "badge_id", name="uq_user_achievement_badge"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    badge_id = Column(Integer, ForeignKey("badges.id", ondelete="CASCADE"), nullable=False)
    progress = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)  # Set once, never cleared


class MarketplaceReward(Base):
    __tablename__ = "marketplace_rewards"

    id = Column(Integer, primary_key=True, index=True)
    partner_name = Column(String, nullable=False)
    partner_logo = Column(String, nullable=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True)
    point_cost = Column(Integer, nullable=False)
    level_requirement = Column(Integer, nullable=False, default=1)
    original_value = Column(Float, nullable=True)
    discount_percentage = Column(Integer, nullable=True)
    terms_conditions = Column(String, nullable=True)
    expiry_date = Column(Date, nullable=True)
    stock_available = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utc_now)


class RewardRedemption(Base):
    __tablename__ = "user_reward_redemptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reward_id = Column(Integer, ForeignKey("marketplace_rewards.id"), nullable=False, index=True)
    points_spent = Column(Integer, nullable=False)
    redemption_code = Column(String(8), nullable=False, unique=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utc_now)


class UserSettings(Base):
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    theme = Column(String, nullable=False, default=DEFAULT_THEME)
    language = Column(String, nullable=False, default=DEFAULT_LANGUAGE)
    notifications_enabled = Column(Boolean, nullable=False, default=DEFAULT_NOTIFICATIONS_ENABLED)
    privacy_profile = Column(String, nullable=False, default=DEFAULT_PRIVACY_PROFILE)

    # Updated timestamp
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
