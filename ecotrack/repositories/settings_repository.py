"""
Settings repository - Data access layer for UserSettings model.
"""
from typing import Optional
from sqlalchemy.orm import Session
from ecotrack.models import UserSettings


class SettingsRepository:
    """Repository for UserSettings data access"""

    @staticmethod
    def get_by_user(db: Session, user_id: int) -> Optional[UserSettings]:
        """Get settings row for user (None if never created)"""
        return db.query(UserSettings).filter(UserSettings.user_id == user_id).first()

    @staticmethod
    def create(db: Session, settings: UserSettings) -> UserSettings:
        """
        Create settings row.

        Args:
            db: Database session
            settings: UserSettings object with initial values

        Returns:
            Created settings
        """
        db.add(settings)
        db.flush()
        return settings
