"""
Rewards ledger service.
Keeps each user's point total, level and daily streak.
"""
import logging
from datetime import date, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from ecotrack.models import UserRewards
from ecotrack.repositories.rewards_repository import UserRewardsRepository, AchievementRepository
from ecotrack.schemas import (
    RewardsSummaryResponse, EarnedBadgeResponse, AchievementProgressResponse
)
from ecotrack.constants import POINTS_PER_LEVEL, RARITY_ORDER

logger = logging.getLogger("ecotrack.rewards")


def level_for_points(total_points: int) -> int:
    """Levels start at 1; each level spans POINTS_PER_LEVEL points"""
    return max(0, total_points) // POINTS_PER_LEVEL + 1


def calculate_streak(current_streak: int, last_activity: Optional[date], action_date: date) -> int:
    """
    Streak after an action on action_date.

    - no activity yet, or last activity before yesterday: 1
    - last activity yesterday: +1
    - last activity today (or later): unchanged
    """
    yesterday = action_date - timedelta(days=1)
    if last_activity is None or last_activity < yesterday:
        return 1
    if last_activity == yesterday:
        return current_streak + 1
    return current_streak


class RewardsService:
    """Service for the per-user rewards ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.ledger_repo = UserRewardsRepository()
        self.achievement_repo = AchievementRepository()

    def create_ledger(self, user_id: int) -> UserRewards:
        """Create the empty ledger row for a new user (not committed)"""
        ledger = UserRewards(
            user_id=user_id,
            total_points=0,
            current_level=1,
            current_streak=0,
            total_co2_saved=0.0
        )
        return self.ledger_repo.create(self.db, ledger)

    def apply_action(
        self,
        user_id: int,
        points_earned: int,
        co2_impact: float,
        action_date: date,
        commit: bool = True
    ) -> UserRewards:
        """
        Credit a verified action to the user's ledger.

        Args:
            user_id: Owner of the action
            points_earned: Points to add
            co2_impact: kg CO2 saved by the action
            action_date: UTC day the action counts for
            commit: Commit the transaction (False when part of a larger one)

        Returns:
            Updated ledger snapshot
        """
        # The increment takes the row's write lock before anything is read back
        if not self.ledger_repo.credit_points(self.db, user_id, points_earned, co2_impact):
            ledger = UserRewards(
                user_id=user_id,
                total_points=points_earned,
                current_level=level_for_points(points_earned),
                current_streak=1,
                last_activity_date=action_date,
                total_co2_saved=co2_impact
            )
            self.ledger_repo.create(self.db, ledger)
        else:
            ledger = self.ledger_repo.get_by_user_for_update(self.db, user_id)
            ledger.current_level = level_for_points(ledger.total_points)
            ledger.current_streak = calculate_streak(
                ledger.current_streak or 0, ledger.last_activity_date, action_date
            )
            # A late-verified older action never moves the activity date back
            if ledger.last_activity_date is None or action_date > ledger.last_activity_date:
                ledger.last_activity_date = action_date
            self.db.flush()

        if commit:
            self.db.commit()
            self.db.refresh(ledger)

        logger.info(
            f"Ledger user={user_id}: +{points_earned} pts -> total={ledger.total_points}, "
            f"level={ledger.current_level}, streak={ledger.current_streak}"
        )
        return ledger

    def get_ledger(self, user_id: int) -> Optional[UserRewards]:
        return self.ledger_repo.get_by_user(self.db, user_id)

    def get_summary(self, user_id: int) -> RewardsSummaryResponse:
        """
        Points, level, streak, earned badges and in-progress achievements.

        Users without a ledger get the level-1 defaults.
        """
        ledger = self.ledger_repo.get_by_user(self.db, user_id)
        total_points = ledger.total_points if ledger else 0
        current_level = ledger.current_level if ledger else 1
        current_streak = ledger.current_streak if ledger else 0

        rows = self.achievement_repo.get_for_user_with_badges(self.db, user_id)
        rows.sort(key=lambda row: (
            not row[0].completed,
            -RARITY_ORDER.get(row[1].rarity, 0),
            -row[0].progress
        ))

        badges = []
        achievements = []
        for achievement, badge in rows:
            if achievement.completed:
                badges.append(EarnedBadgeResponse(
                    id=badge.id,
                    name=badge.name,
                    description=badge.description,
                    icon=badge.icon,
                    rarity=badge.rarity,
                    earned_at=achievement.completed_at
                ))
            else:
                target = badge.requirement_value
                percentage = round(achievement.progress / target * 100) if target > 0 else 100
                achievements.append(AchievementProgressResponse(
                    id=achievement.id,
                    name=badge.name,
                    description=badge.description,
                    icon=badge.icon,
                    rarity=badge.rarity,
                    progress=achievement.progress,
                    target=target,
                    percentage=percentage
                ))

        return RewardsSummaryResponse(
            current_points=total_points,
            current_level=current_level,
            current_streak=current_streak,
            points_to_next=max(0, current_level * POINTS_PER_LEVEL - total_points),
            badges=badges,
            achievements=achievements
        )
