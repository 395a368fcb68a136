"""
Carbon assessment service.
Stores survey submissions with their computed emissions and builds the
"current footprint" view for the dashboard.
"""
import json
import logging
from typing import Any, Mapping, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from ecotrack.models import CarbonAssessment, User
from ecotrack.repositories.user_repository import UserRepository, AssessmentRepository
from ecotrack.repositories.action_repository import ActionRepository
from ecotrack.schemas import AssessmentResponse, CurrentFootprintResponse
from ecotrack.services.emissions_service import EmissionsService
from ecotrack.services.rewards_service import RewardsService
from ecotrack.services.achievement_service import AchievementService
from ecotrack.services.date_service import DateService
from ecotrack.exceptions import (
    ValidationException, UserNotFoundException, AssessmentNotFoundException, DatabaseException
)

logger = logging.getLogger("ecotrack.assessments")


class AssessmentService:
    """Service for carbon footprint assessments"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()
        self.assessment_repo = AssessmentRepository()
        self.action_repo = ActionRepository()
        self.date_service = DateService()

    def submit_assessment(
        self,
        answers: Optional[Mapping[str, Any]],
        user_id: Optional[int] = None
    ) -> AssessmentResponse:
        """
        Calculate and store an assessment.

        Without a user_id a new user is created, with an empty ledger and a
        zero-progress achievement row per badge.

        Args:
            answers: Survey answers (required, may be empty)
            user_id: Existing user submitting a new assessment

        Returns:
            Stored assessment id, user id and emissions
        """
        if answers is None:
            raise ValidationException("answers", "Assessment answers are required")

        emissions = EmissionsService.calculate_emissions(answers)

        try:
            user = self._get_or_create_user(user_id)
            assessment = self.assessment_repo.create(self.db, CarbonAssessment(
                user_id=user.id,
                assessment_data=json.dumps(dict(answers)),
                monthly_emissions=emissions.monthly,
                yearly_emissions=emissions.yearly,
                transportation_emissions=emissions.transportation,
                energy_emissions=emissions.energy,
                diet_emissions=emissions.diet,
                shopping_emissions=emissions.shopping,
                waste_emissions=emissions.waste,
            ))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store assessment: {e}")
            raise DatabaseException("assessment insert", str(e))

        logger.info(
            f"Assessment {assessment.id} stored for user {user.id}: {emissions.yearly} t/year"
        )
        return AssessmentResponse(
            assessment_id=assessment.id,
            user_id=user.id,
            emissions=emissions
        )

    def _get_or_create_user(self, user_id: Optional[int]) -> User:
        rewards_service = RewardsService(self.db)

        if user_id is None:
            user = self.user_repo.create(self.db)
            rewards_service.create_ledger(user.id)
            AchievementService(self.db).init_user_achievements(user.id)
            return user

        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        if rewards_service.get_ledger(user.id) is None:
            rewards_service.create_ledger(user.id)
        return user

    def get_current_footprint(self, user_id: int) -> CurrentFootprintResponse:
        """
        Latest assessment joined with the ledger snapshot.

        Trend compares the latest yearly figure with the previous assessment.
        """
        recent = self.assessment_repo.get_recent(self.db, user_id, limit=2)
        if not recent:
            raise AssessmentNotFoundException(user_id)

        latest = recent[0]
        previous = recent[1] if len(recent) > 1 else None
        trend, trend_percentage = self._calculate_trend(latest, previous)

        ledger = RewardsService(self.db).get_ledger(user_id)
        today = self.date_service.get_today()

        return CurrentFootprintResponse(
            user_id=user_id,
            monthly_emissions=latest.monthly_emissions,
            yearly_emissions=latest.yearly_emissions,
            transportation_emissions=latest.transportation_emissions,
            energy_emissions=latest.energy_emissions,
            diet_emissions=latest.diet_emissions,
            shopping_emissions=latest.shopping_emissions,
            waste_emissions=latest.waste_emissions,
            trend=trend,
            trend_percentage=trend_percentage,
            current_streak=ledger.current_streak if ledger else 0,
            total_points=ledger.total_points if ledger else 0,
            current_level=ledger.current_level if ledger else 1,
            today_savings=round(self.action_repo.sum_co2_for_day(self.db, user_id, today), 2),
            created_at=latest.created_at,
        )

    def _calculate_trend(
        self,
        latest: CarbonAssessment,
        previous: Optional[CarbonAssessment]
    ) -> Tuple[str, int]:
        """Returns (direction, whole percent change) vs previous assessment"""
        if previous is None or not previous.yearly_emissions:
            return "flat", 0

        change = (latest.yearly_emissions - previous.yearly_emissions) / previous.yearly_emissions * 100
        percentage = int(round(abs(change)))
        if percentage == 0:
            return "flat", 0
        return ("down" if change < 0 else "up"), percentage
