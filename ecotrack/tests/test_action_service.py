"""
Tests for ActionService.

Tests cover:
1. Logging actions
2. Proof submission
3. Verification (ledger credited exactly once)
4. History filters
5. Concurrent decisions (file-backed database, two sessions)
"""
import pytest
from datetime import timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ecotrack.database import Base
from ecotrack.models import EcoAction, UserRewards
from ecotrack.services.action_service import ActionService
from ecotrack.services.rewards_service import RewardsService
from ecotrack.exceptions import (
    ValidationException,
    UserNotFoundException,
    ActionNotFoundException,
    InvalidVerificationTransitionException,
)
from ecotrack.tests.conftest import create_user


class TestLogAction:

    def test_known_type_uses_action_table(self, db_session, user):
        action = ActionService(db_session).log_action(user.id, "public_transport")

        assert action.co2_impact == pytest.approx(2.3)
        assert action.points_earned == 25
        assert action.description == "Used public transport instead of driving"
        assert action.verification_status == "awaiting_proof"

    def test_unknown_type_uses_default(self, db_session, user):
        action = ActionService(db_session).log_action(user.id, "planted_a_tree")

        assert action.co2_impact == pytest.approx(1.0)
        assert action.points_earned == 10
        assert action.description == "Eco-friendly action"

    def test_custom_description_kept(self, db_session, user):
        action = ActionService(db_session).log_action(user.id, "recycling", description="Sorted glass")
        assert action.description == "Sorted glass"

    def test_proof_makes_action_pending(self, db_session, user):
        action = ActionService(db_session).log_action(
            user.id, "recycling", proof_url="https://img.example/1.jpg", proof_type="photo"
        )
        assert action.verification_status == "pending"
        assert action.proof_type == "photo"

    def test_logging_does_not_credit_ledger(self, db_session, user):
        ActionService(db_session).log_action(user.id, "active_transport")

        ledger = RewardsService(db_session).get_ledger(user.id)
        assert ledger.total_points == 0
        assert ledger.current_streak == 0

    @pytest.mark.parametrize("action_type", [None, ""])
    def test_missing_type_rejected(self, db_session, user, action_type):
        with pytest.raises(ValidationException):
            ActionService(db_session).log_action(user.id, action_type)
        assert db_session.query(EcoAction).count() == 0

    def test_unknown_user_rejected(self, db_session):
        with pytest.raises(UserNotFoundException):
            ActionService(db_session).log_action(404, "recycling")


class TestListActions:

    def test_today_subset(self, db_session, user):
        service = ActionService(db_session)
        old = service.log_action(user.id, "recycling")
        old.created_at = old.created_at - timedelta(days=2)
        db_session.commit()
        service.log_action(user.id, "energy_saving")

        actions, today_actions = service.get_actions(user.id)

        assert len(actions) == 2
        assert [a.action_type for a in today_actions] == ["energy_saving"]

    def test_history_filters_by_status(self, db_session, user):
        service = ActionService(db_session)
        service.log_action(user.id, "recycling")
        service.log_action(user.id, "recycling", proof_url="https://img.example/2.jpg")

        pending = service.get_history(user.id, status="pending")
        everything = service.get_history(user.id)

        assert len(pending) == 1
        assert len(everything) == 2

    def test_history_limit(self, db_session, user):
        service = ActionService(db_session)
        for _ in range(5):
            service.log_action(user.id, "recycling")

        assert len(service.get_history(user.id, limit=3)) == 3

    def test_history_rejects_unknown_status(self, db_session, user):
        with pytest.raises(ValidationException):
            ActionService(db_session).get_history(user.id, status="approved-ish")

    def test_other_users_actions_hidden(self, db_session, user, make_user):
        other = make_user()
        ActionService(db_session).log_action(other.id, "recycling")

        actions, today_actions = ActionService(db_session).get_actions(user.id)
        assert actions == []
        assert today_actions == []


class TestSubmitProof:

    def test_awaiting_proof_becomes_pending(self, db_session, user):
        service = ActionService(db_session)
        action = service.log_action(user.id, "recycling")

        updated = service.submit_proof(user.id, action.id, "https://img.example/3.jpg", "photo")

        assert updated.verification_status == "pending"
        assert updated.proof_url == "https://img.example/3.jpg"

    def test_pending_proof_can_be_replaced(self, db_session, user):
        service = ActionService(db_session)
        action = service.log_action(user.id, "recycling", proof_url="https://img.example/old.jpg")

        updated = service.submit_proof(user.id, action.id, "https://img.example/new.jpg")

        assert updated.proof_url == "https://img.example/new.jpg"
        assert updated.verification_status == "pending"

    def test_decided_action_rejects_proof(self, db_session, user):
        service = ActionService(db_session)
        action = service.log_action(user.id, "recycling")
        service.verify_action(action.id, approved=False)

        with pytest.raises(InvalidVerificationTransitionException):
            service.submit_proof(user.id, action.id, "https://img.example/late.jpg")

    def test_other_users_action_not_found(self, db_session, user, make_user):
        other = make_user()
        action = ActionService(db_session).log_action(other.id, "recycling")

        with pytest.raises(ActionNotFoundException):
            ActionService(db_session).submit_proof(user.id, action.id, "https://img.example/x.jpg")


class TestVerifyAction:

    def test_approval_credits_ledger(self, db_session, user, badges, today):
        service = ActionService(db_session)
        action = service.log_action(user.id, "public_transport", proof_url="https://img.example/bus.jpg")

        verified, ledger, completed = service.verify_action(action.id, approved=True)

        assert verified.verification_status == "verified"
        assert verified.verified_at is not None
        assert ledger.total_points == 25
        assert ledger.current_streak == 1
        assert ledger.last_activity_date == today
        assert ledger.total_co2_saved == pytest.approx(2.3)
        assert [badge.name for badge in completed] == ["First Step"]

    def test_credited_exactly_once(self, db_session, user, badges):
        """A second decision is refused and the ledger is unchanged"""
        service = ActionService(db_session)
        action = service.log_action(user.id, "public_transport")
        service.verify_action(action.id, approved=True)

        with pytest.raises(InvalidVerificationTransitionException):
            service.verify_action(action.id, approved=True)

        ledger = RewardsService(db_session).get_ledger(user.id)
        assert ledger.total_points == 25

    def test_rejection_credits_nothing(self, db_session, user):
        service = ActionService(db_session)
        action = service.log_action(user.id, "public_transport")

        rejected, ledger, completed = service.verify_action(action.id, approved=False)

        assert rejected.verification_status == "rejected"
        assert rejected.verified_at is None
        assert ledger is None
        assert completed == []
        assert RewardsService(db_session).get_ledger(user.id).total_points == 0

    def test_rejected_action_cannot_be_approved(self, db_session, user):
        service = ActionService(db_session)
        action = service.log_action(user.id, "public_transport")
        service.verify_action(action.id, approved=False)

        with pytest.raises(InvalidVerificationTransitionException):
            service.verify_action(action.id, approved=True)

    def test_streak_counts_action_day(self, db_session, make_user, today, yesterday):
        """Streak uses the day the action was logged, not the review day"""
        user = make_user(current_streak=1, last_activity_date=yesterday - timedelta(days=1))
        service = ActionService(db_session)
        action = service.log_action(user.id, "recycling")
        action.created_at = action.created_at - timedelta(days=1)
        db_session.commit()

        _, ledger, _ = service.verify_action(action.id, approved=True)

        assert ledger.last_activity_date == yesterday
        assert ledger.current_streak == 2

    def test_missing_action(self, db_session):
        with pytest.raises(ActionNotFoundException):
            ActionService(db_session).verify_action(12345, approved=True)


class TestConcurrentVerification:
    """
    Two sessions load the same open action, then decide it one after the
    other. The second decision is based on stale data and must be refused
    by the guarded status update, leaving the ledger credited once.
    """

    @pytest.fixture
    def session_factory(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'race.db'}",
            connect_args={"check_same_thread": False}
        )
        Base.metadata.create_all(bind=engine)
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
        engine.dispose()

    @pytest.fixture
    def open_action(self, session_factory):
        setup = session_factory()
        user = create_user(setup)
        action = ActionService(setup).log_action(user.id, "public_transport")
        ids = (user.id, action.id)
        setup.close()
        return ids

    def _check(self, session_factory, user_id, action_id):
        check = session_factory()
        try:
            action = check.query(EcoAction).filter(EcoAction.id == action_id).one()
            ledger = check.query(UserRewards).filter(UserRewards.user_id == user_id).one()
            return action.verification_status, ledger.total_points, ledger.total_co2_saved
        finally:
            check.close()

    def test_double_approval_credits_once(self, session_factory, open_action):
        user_id, action_id = open_action
        session_a = session_factory()
        session_b = session_factory()
        try:
            service_a = ActionService(session_a)
            service_b = ActionService(session_b)

            # B sees the action still open before A commits
            assert service_b.action_repo.get_by_id(session_b, action_id).verification_status == "awaiting_proof"

            service_a.verify_action(action_id, approved=True)
            with pytest.raises(InvalidVerificationTransitionException):
                service_b.verify_action(action_id, approved=True)
        finally:
            session_a.close()
            session_b.close()

        status, total_points, co2_saved = self._check(session_factory, user_id, action_id)
        assert status == "verified"
        assert total_points == 25
        assert co2_saved == pytest.approx(2.3)

    def test_approval_after_rejection_refused(self, session_factory, open_action):
        user_id, action_id = open_action
        session_a = session_factory()
        session_b = session_factory()
        try:
            service_b = ActionService(session_b)
            assert service_b.action_repo.get_by_id(session_b, action_id).verification_status == "awaiting_proof"

            ActionService(session_a).verify_action(action_id, approved=False)
            with pytest.raises(InvalidVerificationTransitionException):
                service_b.verify_action(action_id, approved=True)
        finally:
            session_a.close()
            session_b.close()

        status, total_points, _ = self._check(session_factory, user_id, action_id)
        assert status == "rejected"
        assert total_points == 0

    def test_proof_after_decision_refused(self, session_factory, open_action):
        """Proof submitted from a stale view cannot reopen a decided action"""
        user_id, action_id = open_action
        session_a = session_factory()
        session_b = session_factory()
        try:
            service_b = ActionService(session_b)
            assert service_b.action_repo.get_by_id(session_b, action_id).verification_status == "awaiting_proof"

            ActionService(session_a).verify_action(action_id, approved=True)
            with pytest.raises(InvalidVerificationTransitionException):
                service_b.submit_proof(user_id, action_id, "https://img.example/late.jpg")
        finally:
            session_a.close()
            session_b.close()

        status, total_points, _ = self._check(session_factory, user_id, action_id)
        assert status == "verified"
        assert total_points == 25
