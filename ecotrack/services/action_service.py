"""
Eco action service.
Logs actions, attaches proof and runs the verification transition that
credits the rewards ledger.
"""
import logging
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from ecotrack.models import EcoAction, UserRewards, Badge
from ecotrack.repositories.action_repository import ActionRepository
from ecotrack.repositories.user_repository import UserRepository
from ecotrack.services.rewards_service import RewardsService
from ecotrack.services.achievement_service import AchievementService
from ecotrack.services.date_service import DateService, utc_now
from ecotrack.exceptions import (
    ValidationException,
    UserNotFoundException,
    ActionNotFoundException,
    InvalidVerificationTransitionException,
    DatabaseException,
)
from ecotrack.constants import (
    ACTION_TYPES,
    DEFAULT_ACTION,
    ACTION_STATUSES,
    ACTION_STATUS_AWAITING_PROOF,
    ACTION_STATUS_PENDING,
    ACTION_STATUS_VERIFIED,
    ACTION_STATUS_REJECTED,
)

logger = logging.getLogger("ecotrack.actions")

# Statuses from which a verification decision can be taken
OPEN_STATUSES = (ACTION_STATUS_AWAITING_PROOF, ACTION_STATUS_PENDING)


def get_action_data(action_type: str) -> Tuple[str, float, int]:
    """Default description, kg CO2 saved and points for an action type"""
    return ACTION_TYPES.get(action_type, DEFAULT_ACTION)


class ActionService:
    """Service for logging and verifying eco actions"""

    def __init__(self, db: Session):
        self.db = db
        self.action_repo = ActionRepository()
        self.user_repo = UserRepository()
        self.date_service = DateService()

    def log_action(
        self,
        user_id: int,
        action_type: Optional[str],
        description: Optional[str] = None,
        proof_url: Optional[str] = None,
        proof_type: Optional[str] = None
    ) -> EcoAction:
        """
        Store a new action awaiting verification.

        Points and CO2 are looked up from the static action table; nothing
        is credited to the ledger until the action is verified.
        """
        if not action_type:
            raise ValidationException("actionType", "Action type is required")
        if not self.user_repo.get_by_id(self.db, user_id):
            raise UserNotFoundException(user_id)

        default_description, co2_impact, points = get_action_data(action_type)

        action = EcoAction(
            user_id=user_id,
            action_type=action_type,
            description=description or default_description,
            co2_impact=co2_impact,
            points_earned=points,
            proof_url=proof_url or None,
            proof_type=proof_type or None,
            verification_status=ACTION_STATUS_PENDING if proof_url else ACTION_STATUS_AWAITING_PROOF
        )
        try:
            self.action_repo.create(self.db, action)
            self.db.commit()
            self.db.refresh(action)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store action for user {user_id}: {e}")
            raise DatabaseException("action insert", str(e))

        logger.info(f"Action {action.id} ({action_type}) logged for user {user_id}: {action.verification_status}")
        return action

    def get_actions(self, user_id: int) -> Tuple[List[EcoAction], List[EcoAction]]:
        """All of the user's actions and today's subset (UTC day)"""
        actions = self.action_repo.get_for_user(self.db, user_id)
        today_actions = self.action_repo.get_for_day(self.db, user_id, self.date_service.get_today())
        return actions, today_actions

    def get_history(self, user_id: int, status: Optional[str] = None, limit: int = 100) -> List[EcoAction]:
        """User's actions, newest first, optionally filtered by verification status"""
        if status is not None and status not in ACTION_STATUSES:
            raise ValidationException("status", f"Unknown verification status: {status}")
        return self.action_repo.get_for_user(self.db, user_id, status=status, limit=limit)

    def _get_owned_action(self, user_id: int, action_id: int) -> EcoAction:
        action = self.action_repo.get_by_id(self.db, action_id)
        if not action or action.user_id != user_id:
            raise ActionNotFoundException(action_id)
        return action

    def submit_proof(
        self,
        user_id: int,
        action_id: int,
        proof_url: str,
        proof_type: Optional[str] = None
    ) -> EcoAction:
        """Attach (or replace) proof on an open action; it becomes pending review"""
        action = self._get_owned_action(user_id, action_id)
        if action.verification_status not in OPEN_STATUSES:
            raise InvalidVerificationTransitionException(
                action.id, action.verification_status, ACTION_STATUS_PENDING
            )

        if not self.action_repo.transition_status(self.db, action.id, OPEN_STATUSES, {
            EcoAction.proof_url: proof_url,
            EcoAction.proof_type: proof_type,
            EcoAction.verification_status: ACTION_STATUS_PENDING,
        }):
            # Decided by a concurrent request since it was loaded
            self.db.rollback()
            self.db.refresh(action)
            raise InvalidVerificationTransitionException(
                action.id, action.verification_status, ACTION_STATUS_PENDING
            )
        self.db.commit()
        self.db.refresh(action)
        return action

    def verify_action(
        self,
        action_id: int,
        approved: bool
    ) -> Tuple[EcoAction, Optional[UserRewards], List[Badge]]:
        """
        Decide an open action.

        The status change is a guarded update that only matches an open
        action, so of two concurrent decisions exactly one wins. Approval
        credits the ledger and badge progress in the same transaction.

        Returns:
            (action, ledger or None if rejected, badges completed)
        """
        action = self.action_repo.get_by_id(self.db, action_id)
        if not action:
            raise ActionNotFoundException(action_id)

        target_status = ACTION_STATUS_VERIFIED if approved else ACTION_STATUS_REJECTED
        if action.verification_status not in OPEN_STATUSES:
            raise InvalidVerificationTransitionException(
                action.id, action.verification_status, target_status
            )

        values = {EcoAction.verification_status: target_status}
        if approved:
            values[EcoAction.verified_at] = utc_now()

        ledger = None
        completed_badges = []
        try:
            if not self.action_repo.transition_status(self.db, action.id, OPEN_STATUSES, values):
                self.db.rollback()
                self.db.refresh(action)
                raise InvalidVerificationTransitionException(
                    action.id, action.verification_status, target_status
                )

            if approved:
                ledger = RewardsService(self.db).apply_action(
                    action.user_id,
                    action.points_earned,
                    action.co2_impact,
                    self.date_service.to_utc_date(action.created_at),
                    commit=False
                )
                completed_badges = AchievementService(self.db).advance_achievements(
                    action.user_id, action.action_type, commit=False
                )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to verify action {action_id}: {e}")
            raise DatabaseException("action verification", str(e))

        self.db.refresh(action)
        if ledger is not None:
            self.db.refresh(ledger)

        logger.info(f"Action {action.id} {target_status} for user {action.user_id}")
        return action, ledger, completed_badges
