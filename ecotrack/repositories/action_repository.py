"""
Action repository - Data access layer for EcoAction model.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.orm import Session
from sqlalchemy import and_, func

from ecotrack.models import EcoAction
from ecotrack.services.date_service import DateService


class ActionRepository:
    """Repository for EcoAction data access"""

    @staticmethod
    def get_by_id(db: Session, action_id: int) -> Optional[EcoAction]:
        """Get action by ID"""
        return db.query(EcoAction).filter(EcoAction.id == action_id).first()

    @staticmethod
    def get_for_user(
        db: Session,
        user_id: int,
        status: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[EcoAction]:
        """Get user's actions, newest first, optionally filtered by verification status"""
        query = db.query(EcoAction).filter(EcoAction.user_id == user_id)
        if status:
            query = query.filter(EcoAction.verification_status == status)
        query = query.order_by(EcoAction.created_at.desc(), EcoAction.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_for_day(db: Session, user_id: int, target_date: date) -> List[EcoAction]:
        """Get user's actions logged on a UTC calendar day"""
        day_start, day_end = DateService.get_day_range(target_date)
        return db.query(EcoAction).filter(
            and_(
                EcoAction.user_id == user_id,
                EcoAction.created_at >= day_start,
                EcoAction.created_at < day_end
            )
        ).order_by(EcoAction.created_at.desc(), EcoAction.id.desc()).all()

    @staticmethod
    def sum_co2_for_day(db: Session, user_id: int, target_date: date) -> float:
        """Total kg CO2 of actions logged on a UTC calendar day"""
        day_start, day_end = DateService.get_day_range(target_date)
        total = db.query(func.sum(EcoAction.co2_impact)).filter(
            and_(
                EcoAction.user_id == user_id,
                EcoAction.created_at >= day_start,
                EcoAction.created_at < day_end
            )
        ).scalar()
        return float(total or 0.0)

    @staticmethod
    def transition_status(
        db: Session,
        action_id: int,
        from_statuses: Sequence[str],
        values: Dict[Any, Any]
    ) -> bool:
        """
        Update an action only while its status is one of from_statuses.

        Returns:
            True if the row was updated
        """
        updated = db.query(EcoAction).filter(
            and_(
                EcoAction.id == action_id,
                EcoAction.verification_status.in_(from_statuses)
            )
        ).update(values, synchronize_session=False)
        return updated == 1

    @staticmethod
    def create(db: Session, action: EcoAction) -> EcoAction:
        """Create new action"""
        db.add(action)
        db.flush()
        return action
