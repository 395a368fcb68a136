"""
Tests for the daily maintenance jobs.
"""
from datetime import timedelta

from ecotrack.models import UserRewards, MarketplaceReward
from ecotrack.services.scheduler_service import reset_stale_streaks, expire_rewards, _parse_time


def _streak(db_session, user_id):
    return db_session.query(UserRewards).filter(UserRewards.user_id == user_id).one().current_streak


class TestStreakMaintenance:

    def test_stale_streaks_reset(self, db_session, make_user, today, yesterday):
        active_today = make_user(current_streak=5, last_activity_date=today)
        active_yesterday = make_user(current_streak=3, last_activity_date=yesterday)
        lapsed = make_user(current_streak=8, last_activity_date=today - timedelta(days=2))

        count = reset_stale_streaks(db_session)
        db_session.expire_all()

        assert count == 1
        assert _streak(db_session, active_today.id) == 5
        assert _streak(db_session, active_yesterday.id) == 3
        assert _streak(db_session, lapsed.id) == 0

    def test_nothing_to_reset(self, db_session, user):
        assert reset_stale_streaks(db_session) == 0


class TestRewardExpiry:

    def test_expired_rewards_deactivated(self, db_session, make_reward, today):
        expired = make_reward(expiry_date=today)
        future = make_reward(expiry_date=today + timedelta(days=1))
        open_ended = make_reward(expiry_date=None)

        count = expire_rewards(db_session)
        db_session.expire_all()

        def is_active(reward_id):
            return db_session.query(MarketplaceReward).filter(MarketplaceReward.id == reward_id).one().is_active

        assert count == 1
        assert not is_active(expired.id)
        assert is_active(future.id)
        assert is_active(open_ended.id)


def test_parse_time():
    assert _parse_time("00:05") == (0, 5)
    assert _parse_time("23:10") == (23, 10)
