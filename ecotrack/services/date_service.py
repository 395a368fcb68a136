"""
Date calculation service.
All day boundaries are UTC midnight; timestamps are stored as naive UTC.
"""
from datetime import datetime, date, timedelta, timezone
from typing import Optional, Tuple


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (storage format)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def get_today() -> date:
        """Current UTC calendar date"""
        return utc_now().date()

    @staticmethod
    def get_yesterday(today: Optional[date] = None) -> date:
        if today is None:
            today = DateService.get_today()
        return today - timedelta(days=1)

    @staticmethod
    def get_day_range(target_date: date) -> Tuple[datetime, datetime]:
        """
        Get [start, end) datetimes for a UTC calendar day.

        Args:
            target_date: Day to get range for

        Returns:
            Tuple of (day_start, day_end)
        """
        day_start = datetime.combine(target_date, datetime.min.time())
        return day_start, day_start + timedelta(days=1)

    @staticmethod
    def to_utc_date(moment: datetime) -> date:
        """Calendar date of a timestamp in UTC (naive values are taken as UTC)"""
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.date()
