"""Tests for the authorization policy table."""

import uuid
from types import SimpleNamespace

import pytest

from grh.core.errors import ForbiddenError
from grh.services.authorization import POLICY, Action, Actor, authorize, require

ADMIN = Actor(uuid.uuid4(), frozenset({"Admin"}))
COMPANY = Actor(uuid.uuid4(), frozenset({"Company"}))
OTHER_COMPANY = Actor(uuid.uuid4(), frozenset({"Company"}))
CANDIDATE = Actor(uuid.uuid4(), frozenset({"Candidate"}))
TRAINER = Actor(uuid.uuid4(), role="Coach")


class TestActor:
    def test_profile_flags(self):
        """Profile flags should reflect the profiles held."""
        actor = Actor(uuid.uuid4(), frozenset({"Admin", "Company"}))
        assert actor.is_admin
        assert actor.is_company
        assert not actor.is_candidate
        assert not actor.is_trainer

    @pytest.mark.parametrize("role,expected", [("Coach", True), ("Trainer", True), (None, False)])
    def test_trainer_role(self, role, expected):
        """Coaches and trainers should be trainers."""
        assert Actor(uuid.uuid4(), role=role).is_trainer is expected


class TestPolicyTable:
    def test_every_action_has_a_rule(self):
        """Every Action should be covered by the policy table."""
        assert set(POLICY) == set(Action)


class TestPostingPolicy:
    def test_owner_only_actions(self):
        """Only the owner should update, delete, save or publish a posting."""
        posting = SimpleNamespace(owner_candidate_id=CANDIDATE.user_id)
        for action in (
            Action.POSTING_UPDATE,
            Action.POSTING_DELETE,
            Action.POSTING_TOGGLE_SAVE,
            Action.POSTING_TOGGLE_PUBLISH,
        ):
            assert authorize(CANDIDATE, action, posting).allowed
            assert not authorize(ADMIN, action, posting).allowed

    def test_denial_reason(self):
        """A denied decision should carry the policy's reason."""
        posting = SimpleNamespace(owner_candidate_id=CANDIDATE.user_id)
        decision = authorize(COMPANY, Action.POSTING_UPDATE, posting)
        assert decision.reason == "Only the owner of this posting can perform this action"

    def test_admin_validates(self):
        """Validation and rejection should be admin-only."""
        assert authorize(ADMIN, Action.POSTING_VALIDATE).allowed
        assert not authorize(CANDIDATE, Action.POSTING_REJECT).allowed


class TestOfferPolicy:
    def test_admin_reviews(self):
        """Offer validation and rejection should be admin-only."""
        assert authorize(ADMIN, Action.OFFER_VALIDATE).allowed
        assert authorize(ADMIN, Action.OFFER_REJECT).allowed
        assert not authorize(COMPANY, Action.OFFER_VALIDATE).allowed

    def test_owner_closes(self):
        """Only the owning company should close an offer."""
        offer = SimpleNamespace(company_id=COMPANY.user_id)
        assert authorize(COMPANY, Action.OFFER_CLOSE, offer).allowed
        assert not authorize(OTHER_COMPANY, Action.OFFER_CLOSE, offer).allowed
        assert not authorize(ADMIN, Action.OFFER_CLOSE, offer).allowed


class TestTimesheetPolicy:
    def test_employee_records_company_reviews(self):
        """The contract's employee records time; its company reviews it."""
        contract = SimpleNamespace(employee_id=CANDIDATE.user_id, company_id=COMPANY.user_id)
        assert authorize(CANDIDATE, Action.TIMESHEET_RECORD, contract).allowed
        assert not authorize(COMPANY, Action.TIMESHEET_RECORD, contract).allowed
        assert authorize(COMPANY, Action.TIMESHEET_REVIEW, contract).allowed
        assert not authorize(OTHER_COMPANY, Action.TIMESHEET_VALIDATE_MONTH, contract).allowed
        assert not authorize(ADMIN, Action.TIMESHEET_REVIEW, contract).allowed

    def test_parties_and_admin_read(self):
        """Both parties and admins should read a timesheet."""
        contract = SimpleNamespace(employee_id=CANDIDATE.user_id, company_id=COMPANY.user_id)
        for actor in (CANDIDATE, COMPANY, ADMIN):
            assert authorize(actor, Action.TIMESHEET_READ, contract).allowed
        assert not authorize(OTHER_COMPANY, Action.TIMESHEET_READ, contract).allowed


class TestInterviewPolicy:
    def test_company_schedules_on_own_offer(self):
        """A company should schedule interviews on its own offers only."""
        offer = SimpleNamespace(company_id=COMPANY.user_id)
        assert authorize(COMPANY, Action.INTERVIEW_SCHEDULE, offer).allowed
        assert not authorize(OTHER_COMPANY, Action.INTERVIEW_SCHEDULE, offer).allowed

    def test_posting_interviews_need_company_or_admin(self):
        """Without an offer any company or admin should schedule."""
        assert authorize(OTHER_COMPANY, Action.INTERVIEW_SCHEDULE).allowed
        assert authorize(ADMIN, Action.INTERVIEW_SCHEDULE).allowed
        assert not authorize(CANDIDATE, Action.INTERVIEW_SCHEDULE).allowed

    def test_participants_read(self):
        """The company, the candidate and admins should read an interview."""
        interview = SimpleNamespace(
            company_id=COMPANY.user_id, candidate_id=CANDIDATE.user_id
        )
        assert authorize(COMPANY, Action.INTERVIEW_READ, interview).allowed
        assert authorize(CANDIDATE, Action.INTERVIEW_READ, interview).allowed
        assert authorize(ADMIN, Action.INTERVIEW_READ, interview).allowed
        assert not authorize(OTHER_COMPANY, Action.INTERVIEW_READ, interview).allowed


class TestMissionPolicy:
    @pytest.fixture
    def mission(self):
        return SimpleNamespace(company_id=COMPANY.user_id, employee_id=CANDIDATE.user_id)

    def test_company_manages(self, mission):
        """Only the owning company should update or validate."""
        assert authorize(COMPANY, Action.MISSION_VALIDATE, mission).allowed
        assert not authorize(OTHER_COMPANY, Action.MISSION_UPDATE, mission).allowed
        assert not authorize(CANDIDATE, Action.MISSION_VALIDATE, mission).allowed

    def test_employee_progresses(self, mission):
        """Only the assigned employee should change status or submit a report."""
        assert authorize(CANDIDATE, Action.MISSION_CHANGE_STATUS, mission).allowed
        assert authorize(CANDIDATE, Action.MISSION_SUBMIT_REPORT, mission).allowed
        assert not authorize(COMPANY, Action.MISSION_CHANGE_STATUS, mission).allowed

    def test_cancel(self, mission):
        """The company or an admin should cancel."""
        assert authorize(COMPANY, Action.MISSION_CANCEL, mission).allowed
        assert authorize(ADMIN, Action.MISSION_CANCEL, mission).allowed
        assert not authorize(CANDIDATE, Action.MISSION_CANCEL, mission).allowed


class TestTrainingPolicy:
    def test_participants_read(self):
        """Company, employee and trainer should read a training."""
        training = SimpleNamespace(
            company_id=COMPANY.user_id,
            employee_id=CANDIDATE.user_id,
            trainer_id=TRAINER.user_id,
        )
        for actor in (COMPANY, CANDIDATE, TRAINER):
            assert authorize(actor, Action.TRAINING_READ, training).allowed
        assert not authorize(OTHER_COMPANY, Action.TRAINING_READ, training).allowed

    def test_trainer_listing(self):
        """Only trainers should list trainings as trainer."""
        assert authorize(TRAINER, Action.TRAINING_LIST_AS_TRAINER).allowed
        assert not authorize(COMPANY, Action.TRAINING_LIST_AS_TRAINER).allowed


class TestNotificationPolicy:
    def test_access_and_mark(self):
        """The sender company should access the thread but not mark it read."""
        notification = SimpleNamespace(
            recipient_user_id=CANDIDATE.user_id, sender_company_id=COMPANY.user_id
        )
        assert authorize(COMPANY, Action.NOTIFICATION_ACCESS, notification).allowed
        assert authorize(CANDIDATE, Action.NOTIFICATION_MARK_READ, notification).allowed
        assert not authorize(COMPANY, Action.NOTIFICATION_MARK_READ, notification).allowed


class TestRequire:
    def test_raises_forbidden(self):
        """require() should raise ForbiddenError with the reason."""
        with pytest.raises(ForbiddenError) as exc_info:
            require(CANDIDATE, Action.CONTRACT_CREATE)
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Admin access required"

    def test_missing_resource_denies(self):
        """Ownership checks against a missing resource should deny."""
        with pytest.raises(ForbiddenError):
            require(COMPANY, Action.MISSION_UPDATE, None)

    def test_allowed_returns_none(self):
        """require() should return silently when allowed."""
        assert require(ADMIN, Action.CONTRACT_PUBLISH) is None
