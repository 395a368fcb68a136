"""
User and assessment repositories - Data access layer for users and carbon assessments.
Repositories flush but never commit; services own the transaction.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from ecotrack.models import User, CarbonAssessment


class UserRepository:
    """Repository for User data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def create(db: Session, display_name: Optional[str] = None) -> User:
        """Create new user"""
        user = User(display_name=display_name)
        db.add(user)
        db.flush()
        return user


class AssessmentRepository:
    """Repository for CarbonAssessment data access"""

    @staticmethod
    def get_recent(db: Session, user_id: int, limit: int = 2) -> List[CarbonAssessment]:
        """Get the user's most recent assessments, newest first"""
        return db.query(CarbonAssessment).filter(
            CarbonAssessment.user_id == user_id
        ).order_by(
            CarbonAssessment.created_at.desc(), CarbonAssessment.id.desc()
        ).limit(limit).all()

    @staticmethod
    def create(db: Session, assessment: CarbonAssessment) -> CarbonAssessment:
        """Create new assessment"""
        db.add(assessment)
        db.flush()
        return assessment
