"""
Rewards repository - Data access layer for the ledger, badges and achievements.
"""
from datetime import date
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_

from ecotrack.models import UserRewards, Badge, UserAchievement


class UserRewardsRepository:
    """Repository for UserRewards (ledger) data access"""

    @staticmethod
    def get_by_user(db: Session, user_id: int) -> Optional[UserRewards]:
        """Get ledger row for user"""
        return db.query(UserRewards).filter(UserRewards.user_id == user_id).first()

    @staticmethod
    def get_by_user_for_update(db: Session, user_id: int) -> Optional[UserRewards]:
        """Get ledger row for user, locking it until the transaction ends"""
        return db.query(UserRewards).filter(
            UserRewards.user_id == user_id
        ).with_for_update().populate_existing().first()

    @staticmethod
    def create(db: Session, ledger: UserRewards) -> UserRewards:
        """Create new ledger row"""
        db.add(ledger)
        db.flush()
        return ledger

    @staticmethod
    def credit_points(db: Session, user_id: int, points: int, co2_saved: float) -> bool:
        """
        Add points and CO2 in the database, not from a value read earlier.

        Returns:
            True if the user's ledger row exists and was updated
        """
        updated = db.query(UserRewards).filter(
            UserRewards.user_id == user_id
        ).update(
            {
                UserRewards.total_points: UserRewards.total_points + points,
                UserRewards.total_co2_saved: UserRewards.total_co2_saved + co2_saved,
            },
            synchronize_session=False
        )
        return updated == 1

    @staticmethod
    def debit_points(db: Session, user_id: int, amount: int) -> bool:
        """
        Subtract points only if the balance covers them.

        Returns:
            True if the row was updated
        """
        updated = db.query(UserRewards).filter(
            and_(
                UserRewards.user_id == user_id,
                UserRewards.total_points >= amount
            )
        ).update(
            {UserRewards.total_points: UserRewards.total_points - amount},
            synchronize_session=False
        )
        return updated == 1

    @staticmethod
    def reset_stale_streaks(db: Session, yesterday: date) -> int:
        """Zero the streak of every ledger with no activity since before yesterday"""
        return db.query(UserRewards).filter(
            and_(
                UserRewards.current_streak > 0,
                or_(
                    UserRewards.last_activity_date == None,  # noqa: E711
                    UserRewards.last_activity_date < yesterday
                )
            )
        ).update({UserRewards.current_streak: 0}, synchronize_session=False)


class BadgeRepository:
    """Repository for Badge catalog data access"""

    @staticmethod
    def get_all(db: Session) -> List[Badge]:
        """Get all badges"""
        return db.query(Badge).order_by(Badge.id).all()

    @staticmethod
    def get_by_requirement_types(db: Session, requirement_types: List[str]) -> List[Badge]:
        """Get badges whose requirement type is one of the given tags"""
        return db.query(Badge).filter(
            Badge.requirement_type.in_(requirement_types)
        ).order_by(Badge.id).all()

    @staticmethod
    def count(db: Session) -> int:
        return db.query(Badge).count()

    @staticmethod
    def create(db: Session, badge: Badge) -> Badge:
        """Create new badge"""
        db.add(badge)
        db.flush()
        return badge


class AchievementRepository:
    """Repository for UserAchievement data access"""

    @staticmethod
    def get_for_user_badge(db: Session, user_id: int, badge_id: int) -> Optional[UserAchievement]:
        """Get user's progress row for one badge"""
        return db.query(UserAchievement).filter(
            and_(
                UserAchievement.user_id == user_id,
                UserAchievement.badge_id == badge_id
            )
        ).first()

    @staticmethod
    def get_for_user_with_badges(db: Session, user_id: int) -> List[Tuple[UserAchievement, Badge]]:
        """Get all of the user's progress rows joined with their badge"""
        return db.query(UserAchievement, Badge).join(
            Badge, UserAchievement.badge_id == Badge.id
        ).filter(UserAchievement.user_id == user_id).all()

    @staticmethod
    def create(db: Session, achievement: UserAchievement) -> UserAchievement:
        """Create new progress row"""
        db.add(achievement)
        db.flush()
        return achievement
