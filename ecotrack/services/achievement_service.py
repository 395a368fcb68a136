"""
Badge progress service.
Advances per-user achievement counters when a verified action is credited.
"""
import logging
from typing import List
from sqlalchemy.orm import Session

from ecotrack.models import Badge, UserAchievement
from ecotrack.repositories.rewards_repository import BadgeRepository, AchievementRepository
from ecotrack.services.date_service import utc_now
from ecotrack.constants import (
    ACTION_REQUIREMENT_TYPES, REQUIREMENT_ACTION_COUNT, DEFAULT_BADGES
)

logger = logging.getLogger("ecotrack.achievements")


class AchievementService:
    """Service for badge catalog and per-user achievement progress"""

    def __init__(self, db: Session):
        self.db = db
        self.badge_repo = BadgeRepository()
        self.achievement_repo = AchievementRepository()

    def seed_badge_catalog(self) -> int:
        """
        Insert the default badge catalog if no badges exist.

        Returns:
            Number of badges created
        """
        if self.badge_repo.count(self.db) > 0:
            return 0
        for data in DEFAULT_BADGES:
            self.badge_repo.create(self.db, Badge(**data))
        self.db.commit()
        logger.info(f"Seeded {len(DEFAULT_BADGES)} badges")
        return len(DEFAULT_BADGES)

    def init_user_achievements(self, user_id: int) -> List[UserAchievement]:
        """Create a zero-progress row for every badge (not committed)"""
        created = []
        for badge in self.badge_repo.get_all(self.db):
            created.append(self.achievement_repo.create(
                self.db,
                UserAchievement(user_id=user_id, badge_id=badge.id, progress=0, completed=False)
            ))
        return created

    def advance_achievements(self, user_id: int, action_type: str, commit: bool = True) -> List[Badge]:
        """
        Count one action towards the user's badges.

        Badges of the requirement type mapped from the action type advance,
        and so does every "action_count" badge, whatever the action type.
        A badge is completed (and stamped) only on the transition from
        incomplete to complete.

        Args:
            user_id: Owner of the action
            action_type: Category tag of the action
            commit: Commit the transaction (False when part of a larger one)

        Returns:
            Badges completed by this action
        """
        requirement_types = [REQUIREMENT_ACTION_COUNT]
        mapped_type = ACTION_REQUIREMENT_TYPES.get(action_type)
        if mapped_type:
            requirement_types.append(mapped_type)

        now = utc_now()
        newly_completed = []
        for badge in self.badge_repo.get_by_requirement_types(self.db, requirement_types):
            achievement = self.achievement_repo.get_for_user_badge(self.db, user_id, badge.id)
            if achievement is None:
                # Badge added to the catalog after the user signed up
                achievement = self.achievement_repo.create(
                    self.db,
                    UserAchievement(user_id=user_id, badge_id=badge.id, progress=0, completed=False)
                )

            achievement.progress = (achievement.progress or 0) + 1

            if not achievement.completed and achievement.progress >= badge.requirement_value:
                achievement.completed = True
                if achievement.completed_at is None:
                    achievement.completed_at = now
                newly_completed.append(badge)

        self.db.flush()
        if commit:
            self.db.commit()

        if newly_completed:
            logger.info(
                f"User {user_id} completed badges: {[badge.name for badge in newly_completed]}"
            )
        return newly_completed
