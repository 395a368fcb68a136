from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, date
from typing import Any, Dict, List, Optional

from ecotrack.constants import THEMES, PRIVACY_PROFILES


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# Carbon footprint schemas
class AssessmentRequest(CamelModel):
    answers: Optional[Dict[str, Any]] = None


class EmissionsBreakdown(CamelModel):
    """Emissions in metric tons CO2, rounded to 2 decimals"""
    yearly: float = 0.0
    monthly: float = 0.0
    transportation: float = 0.0
    energy: float = 0.0
    diet: float = 0.0
    shopping: float = 0.0
    waste: float = 0.0


class AssessmentResponse(CamelModel):
    assessment_id: int
    user_id: int
    emissions: EmissionsBreakdown


class CurrentFootprintResponse(CamelModel):
    user_id: int
    monthly_emissions: float
    yearly_emissions: float
    transportation_emissions: float
    energy_emissions: float
    diet_emissions: float
    shopping_emissions: float
    waste_emissions: float
    trend: str = "flat"  # down, up, flat (vs previous assessment)
    trend_percentage: int = 0
    current_streak: int = 0
    total_points: int = 0
    current_level: int = 1
    today_savings: float = 0.0
    created_at: datetime


# Action schemas
class ActionCreate(CamelModel):
    action_type: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = Field(None, max_length=500)
    proof_url: Optional[str] = Field(None, max_length=2048)
    proof_type: Optional[str] = Field(None, max_length=32)


class ActionResponse(CamelModel):
    id: int
    action_type: str
    description: str
    co2_impact: float
    points_earned: int
    verification_status: str
    proof_url: Optional[str] = None
    proof_type: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_at: datetime


class TodayActionResponse(CamelModel):
    action_type: str
    description: str
    co2_impact: float
    created_at: datetime


class ActionListResponse(CamelModel):
    actions: List[ActionResponse]
    today_actions: List[TodayActionResponse]


class ActionHistoryResponse(CamelModel):
    actions: List[ActionResponse]


class ProofSubmit(CamelModel):
    proof_url: str = Field(..., min_length=1, max_length=2048)
    proof_type: Optional[str] = Field(None, max_length=32)


class VerificationRequest(CamelModel):
    approved: bool


# Ledger schemas
class LedgerResponse(CamelModel):
    user_id: int
    total_points: int
    current_level: int
    current_streak: int
    last_activity_date: Optional[date] = None
    total_co2_saved: float = 0.0


class VerificationResponse(CamelModel):
    action: ActionResponse
    ledger: Optional[LedgerResponse] = None
    completed_badges: List[str] = []


class EarnedBadgeResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    rarity: str
    earned_at: Optional[datetime] = None


class AchievementProgressResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    rarity: str
    progress: int
    target: int
    percentage: int


class RewardsSummaryResponse(CamelModel):
    current_points: int = 0
    current_level: int = 1
    current_streak: int = 0
    points_to_next: int = 0
    badges: List[EarnedBadgeResponse] = []
    achievements: List[AchievementProgressResponse] = []


# Marketplace schemas
class MarketplaceRewardResponse(CamelModel):
    id: int
    partner_name: str
    partner_logo: Optional[str] = None
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    point_cost: int
    level_requirement: int
    original_value: Optional[float] = None
    discount_percentage: Optional[int] = None
    terms_conditions: Optional[str] = None
    expiry_date: Optional[date] = None
    stock_available: int
    created_at: datetime


class MarketplaceListResponse(CamelModel):
    rewards: List[MarketplaceRewardResponse]


class RedemptionRequest(CamelModel):
    reward_id: Optional[int] = None


class RedeemedRewardInfo(CamelModel):
    title: str
    partner_name: str
    description: Optional[str] = None
    terms_conditions: Optional[str] = None


class RedemptionResponse(CamelModel):
    redemption_id: int
    redemption_code: str
    points_spent: int
    expires_at: datetime
    reward: RedeemedRewardInfo


# Settings schemas
class SettingsUpdate(CamelModel):
    """Explicit update struct: only fields present in the request are applied"""
    theme: Optional[str] = Field(None, pattern="^(" + "|".join(THEMES) + ")$")
    language: Optional[str] = Field(None, min_length=2, max_length=10)
    notifications: Optional[bool] = None
    privacy: Optional[str] = Field(None, pattern="^(" + "|".join(PRIVACY_PROFILES) + ")$")


class SettingsResponse(CamelModel):
    theme: str
    language: str
    notifications: bool
    privacy: str
