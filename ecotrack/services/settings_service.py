"""
User settings service.
"""
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from ecotrack.models import UserSettings
from ecotrack.repositories.settings_repository import SettingsRepository
from ecotrack.schemas import SettingsUpdate, SettingsResponse
from ecotrack.exceptions import ValidationException, DatabaseException

logger = logging.getLogger("ecotrack.settings")

# Wire field -> column
SETTINGS_FIELD_MAP = {
    "theme": "theme",
    "language": "language",
    "notifications": "notifications_enabled",
    "privacy": "privacy_profile",
}


def to_response(settings: UserSettings) -> SettingsResponse:
    return SettingsResponse(
        theme=settings.theme,
        language=settings.language,
        notifications=settings.notifications_enabled,
        privacy=settings.privacy_profile
    )


class SettingsService:
    """Service for per-user preferences"""

    def __init__(self, db: Session):
        self.db = db
        self.settings_repo = SettingsRepository()

    def _get_or_create(self, user_id: int) -> UserSettings:
        settings = self.settings_repo.get_by_user(self.db, user_id)
        if settings:
            return settings
        try:
            settings = self.settings_repo.create(self.db, UserSettings(user_id=user_id))
            self.db.commit()
        except IntegrityError as e:
            # Another request inserted the row first
            self.db.rollback()
            settings = self.settings_repo.get_by_user(self.db, user_id)
            if not settings:
                logger.error(f"Failed to create settings for user {user_id}: {e}")
                raise DatabaseException("settings insert", str(e))
            return settings
        self.db.refresh(settings)
        return settings

    def get_settings(self, user_id: int) -> UserSettings:
        """Get settings, creating the default row on first access"""
        return self._get_or_create(user_id)

    def update_settings(self, user_id: int, settings_update: SettingsUpdate) -> UserSettings:
        """
        Apply the fields present in the update.

        Raises:
            ValidationException: no field to update
        """
        update_data = {
            SETTINGS_FIELD_MAP[key]: value
            for key, value in settings_update.model_dump(exclude_none=True).items()
        }
        if not update_data:
            raise ValidationException("settings", "No valid fields to update")

        settings = self._get_or_create(user_id)
        for key, value in update_data.items():
            setattr(settings, key, value)
        self.db.commit()
        self.db.refresh(settings)

        logger.info(f"Settings updated for user {user_id}: {sorted(update_data)}")
        return settings
