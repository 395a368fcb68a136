"""
Marketplace repository - Data access layer for rewards and redemptions.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_

from ecotrack.models import MarketplaceReward, RewardRedemption


class MarketplaceRewardRepository:
    """Repository for MarketplaceReward data access"""

    @staticmethod
    def get_available(db: Session, today: date) -> List[MarketplaceReward]:
        """Get active, unexpired rewards ordered by level requirement then cost"""
        return db.query(MarketplaceReward).filter(
            and_(
                MarketplaceReward.is_active == True,  # noqa: E712
                or_(
                    MarketplaceReward.expiry_date == None,  # noqa: E711
                    MarketplaceReward.expiry_date > today
                )
            )
        ).order_by(
            MarketplaceReward.level_requirement.asc(),
            MarketplaceReward.point_cost.asc(),
            MarketplaceReward.id.asc()
        ).all()

    @staticmethod
    def get_by_id(db: Session, reward_id: int) -> Optional[MarketplaceReward]:
        """Get reward by ID"""
        return db.query(MarketplaceReward).filter(MarketplaceReward.id == reward_id).first()

    @staticmethod
    def count(db: Session) -> int:
        return db.query(MarketplaceReward).count()

    @staticmethod
    def create(db: Session, reward: MarketplaceReward) -> MarketplaceReward:
        """Create new reward"""
        db.add(reward)
        db.flush()
        return reward

    @staticmethod
    def decrement_stock(db: Session, reward_id: int) -> bool:
        """
        Take one unit of stock only if some is left.

        Returns:
            True if the row was updated
        """
        updated = db.query(MarketplaceReward).filter(
            and_(
                MarketplaceReward.id == reward_id,
                MarketplaceReward.stock_available > 0
            )
        ).update(
            {MarketplaceReward.stock_available: MarketplaceReward.stock_available - 1},
            synchronize_session=False
        )
        return updated == 1

    @staticmethod
    def deactivate_expired(db: Session, today: date) -> int:
        """Deactivate active rewards whose expiry date has been reached"""
        return db.query(MarketplaceReward).filter(
            and_(
                MarketplaceReward.is_active == True,  # noqa: E712
                MarketplaceReward.expiry_date != None,  # noqa: E711
                MarketplaceReward.expiry_date <= today
            )
        ).update({MarketplaceReward.is_active: False}, synchronize_session=False)


class RedemptionRepository:
    """Repository for RewardRedemption data access"""

    @staticmethod
    def get_for_reward(db: Session, reward_id: int) -> List[RewardRedemption]:
        """Get all redemptions of a reward"""
        return db.query(RewardRedemption).filter(RewardRedemption.reward_id == reward_id).all()

    @staticmethod
    def create(db: Session, redemption: RewardRedemption) -> RewardRedemption:
        """Create new redemption"""
        db.add(redemption)
        db.flush()
        return redemption
