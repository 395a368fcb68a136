"""
Marketplace service.
Lists partner rewards and exchanges points for them.
"""
import logging
import secrets
from datetime import timedelta
from typing import List
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from ecotrack.models import MarketplaceReward, RewardRedemption
from ecotrack.repositories.marketplace_repository import (
    MarketplaceRewardRepository, RedemptionRepository
)
from ecotrack.repositories.rewards_repository import UserRewardsRepository
from ecotrack.services.rewards_service import level_for_points
from ecotrack.services.date_service import DateService, utc_now
from ecotrack.exceptions import (
    RewardNotFoundException,
    LedgerNotFoundException,
    InsufficientPointsException,
    LevelRequirementException,
    OutOfStockException,
    DatabaseException,
)
from ecotrack.constants import (
    REDEMPTION_CODE_ALPHABET,
    REDEMPTION_CODE_LENGTH,
    REDEMPTION_EXPIRY_DAYS,
    DEFAULT_MARKETPLACE_REWARDS,
)

logger = logging.getLogger("ecotrack.marketplace")


def generate_redemption_code() -> str:
    """Random 8-character code from A-Z and 0-9"""
    return "".join(secrets.choice(REDEMPTION_CODE_ALPHABET) for _ in range(REDEMPTION_CODE_LENGTH))


class MarketplaceService:
    """Service for marketplace rewards and redemptions"""

    def __init__(self, db: Session):
        self.db = db
        self.reward_repo = MarketplaceRewardRepository()
        self.redemption_repo = RedemptionRepository()
        self.ledger_repo = UserRewardsRepository()
        self.date_service = DateService()

    def seed_catalog(self) -> int:
        """Insert the default rewards if the marketplace is empty"""
        if self.reward_repo.count(self.db) > 0:
            return 0
        for data in DEFAULT_MARKETPLACE_REWARDS:
            self.reward_repo.create(self.db, MarketplaceReward(**data))
        self.db.commit()
        logger.info(f"Seeded {len(DEFAULT_MARKETPLACE_REWARDS)} marketplace rewards")
        return len(DEFAULT_MARKETPLACE_REWARDS)

    def list_rewards(self) -> List[MarketplaceReward]:
        """Active, unexpired rewards"""
        return self.reward_repo.get_available(self.db, self.date_service.get_today())

    def redeem(self, user_id: int, reward_id: int) -> RewardRedemption:
        """
        Exchange points for a reward.

        Preconditions are checked before anything is written. The redemption
        insert, the points debit and the stock decrement then run in one
        transaction; the debit and decrement are guarded updates, so a
        concurrent redemption that got there first makes this one roll back
        instead of overselling or overdrawing.

        Raises:
            RewardNotFoundException: missing, inactive or expired reward
            LedgerNotFoundException: user has no ledger
            InsufficientPointsException, LevelRequirementException, OutOfStockException
        """
        today = self.date_service.get_today()

        reward = self.reward_repo.get_by_id(self.db, reward_id)
        if not reward or not reward.is_active or (reward.expiry_date and reward.expiry_date <= today):
            raise RewardNotFoundException(reward_id)

        ledger = self.ledger_repo.get_by_user(self.db, user_id)
        if not ledger:
            raise LedgerNotFoundException(user_id)

        if ledger.total_points < reward.point_cost:
            raise InsufficientPointsException(ledger.total_points, reward.point_cost)
        if ledger.current_level < reward.level_requirement:
            raise LevelRequirementException(ledger.current_level, reward.level_requirement)
        if reward.stock_available <= 0:
            raise OutOfStockException(reward_id)

        point_cost = reward.point_cost
        try:
            redemption = self.redemption_repo.create(self.db, RewardRedemption(
                user_id=user_id,
                reward_id=reward_id,
                points_spent=point_cost,
                redemption_code=generate_redemption_code(),
                expires_at=utc_now() + timedelta(days=REDEMPTION_EXPIRY_DAYS)
            ))

            if not self.ledger_repo.debit_points(self.db, user_id, point_cost):
                self.db.rollback()
                self.db.refresh(ledger)
                raise InsufficientPointsException(ledger.total_points, point_cost)

            if not self.reward_repo.decrement_stock(self.db, reward_id):
                self.db.rollback()
                raise OutOfStockException(reward_id)

            # Level always follows the balance
            self.db.refresh(ledger)
            ledger.current_level = level_for_points(ledger.total_points)

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Redemption of reward {reward_id} by user {user_id} failed: {e}")
            raise DatabaseException("redemption", str(e))

        self.db.refresh(redemption)
        self.db.refresh(reward)
        logger.info(
            f"User {user_id} redeemed reward {reward_id} for {point_cost} pts "
            f"(code {redemption.redemption_code}, stock left {reward.stock_available})"
        )
        return redemption
