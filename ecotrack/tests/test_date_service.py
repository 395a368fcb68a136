"""
Tests for DateService.
"""
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

from ecotrack.services.date_service import DateService, utc_now


class TestToday:

    def test_today_is_utc_date(self):
        """Late evening in UTC-5 is already tomorrow in UTC"""
        with patch('ecotrack.services.date_service.datetime') as mock_dt:
            mock_dt.now.return_value = datetime(2026, 1, 31, 2, 30, tzinfo=timezone.utc)
            result = DateService.get_today()

        assert result == date(2026, 1, 31)

    def test_yesterday(self):
        assert DateService.get_yesterday(date(2026, 3, 1)) == date(2026, 2, 28)

    def test_utc_now_is_naive(self):
        assert utc_now().tzinfo is None


class TestDayRange:

    def test_range_spans_one_day(self):
        start, end = DateService.get_day_range(date(2026, 1, 30))

        assert start == datetime(2026, 1, 30, 0, 0)
        assert end == datetime(2026, 1, 31, 0, 0)
        assert end - start == timedelta(days=1)


class TestToUtcDate:

    def test_naive_taken_as_utc(self):
        assert DateService.to_utc_date(datetime(2026, 1, 30, 23, 59)) == date(2026, 1, 30)

    def test_aware_converted_to_utc(self):
        moment = datetime(2026, 1, 30, 21, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert DateService.to_utc_date(moment) == date(2026, 1, 31)
