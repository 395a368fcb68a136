"""
Tests for AchievementService.
"""
from ecotrack.models import Badge, UserAchievement
from ecotrack.services.achievement_service import AchievementService
from ecotrack.constants import DEFAULT_BADGES


def _progress(db_session, user_id, badge_name):
    return db_session.query(UserAchievement).join(
        Badge, UserAchievement.badge_id == Badge.id
    ).filter(
        UserAchievement.user_id == user_id, Badge.name == badge_name
    ).first()


class TestBadgeCatalog:

    def test_seeds_once(self, db_session):
        service = AchievementService(db_session)

        assert service.seed_badge_catalog() == len(DEFAULT_BADGES)
        assert service.seed_badge_catalog() == 0
        assert db_session.query(Badge).count() == len(DEFAULT_BADGES)

    def test_init_creates_zero_progress_rows(self, db_session, badges, user):
        AchievementService(db_session).init_user_achievements(user.id)
        db_session.commit()

        rows = db_session.query(UserAchievement).filter(UserAchievement.user_id == user.id).all()
        assert len(rows) == len(badges)
        assert all(row.progress == 0 and not row.completed for row in rows)


class TestAdvanceAchievements:

    def test_first_action_completes_first_step(self, db_session, badges, user):
        completed = AchievementService(db_session).advance_achievements(user.id, "recycling")

        assert [badge.name for badge in completed] == ["First Step"]
        assert _progress(db_session, user.id, "First Step").completed
        assert _progress(db_session, user.id, "Recycling Hero").progress == 1

    def test_only_matching_category_advances(self, db_session, badges, user):
        AchievementService(db_session).advance_achievements(user.id, "plant_based_meal")

        assert _progress(db_session, user.id, "Plant Powered").progress == 1
        assert _progress(db_session, user.id, "Power Saver") is None

    def test_unknown_type_still_counts_as_action(self, db_session, badges, user):
        service = AchievementService(db_session)
        service.init_user_achievements(user.id)
        db_session.commit()

        service.advance_achievements(user.id, "planted_a_tree")

        assert _progress(db_session, user.id, "First Step").progress == 1
        assert _progress(db_session, user.id, "Eco Regular").progress == 1
        assert _progress(db_session, user.id, "Recycling Hero").progress == 0

    def test_transport_types_share_badge(self, db_session, badges, user):
        service = AchievementService(db_session)
        service.advance_achievements(user.id, "public_transport")
        service.advance_achievements(user.id, "active_transport")

        assert _progress(db_session, user.id, "Green Commuter").progress == 2

    def test_completion_is_stamped_once(self, db_session, badges, user):
        """Further progress never re-completes or re-stamps a badge"""
        service = AchievementService(db_session)
        service.advance_achievements(user.id, "recycling")
        first_step = _progress(db_session, user.id, "First Step")
        completed_at = first_step.completed_at

        completed = service.advance_achievements(user.id, "recycling")

        first_step = _progress(db_session, user.id, "First Step")
        assert completed == []
        assert first_step.completed
        assert first_step.completed_at == completed_at
        assert first_step.progress == 2

    def test_completes_at_requirement_value(self, db_session, badges, user):
        service = AchievementService(db_session)
        for _ in range(14):
            service.advance_achievements(user.id, "recycling")
        assert not _progress(db_session, user.id, "Recycling Hero").completed

        completed = service.advance_achievements(user.id, "recycling")

        assert "Recycling Hero" in [badge.name for badge in completed]
        assert _progress(db_session, user.id, "Recycling Hero").completed_at is not None
