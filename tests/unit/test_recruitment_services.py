"""Tests for offers, applications, interviews and contracts."""

import uuid
from datetime import date, timedelta

import pytest
import pytest_asyncio

from grh.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from grh.models import User
from grh.models.enums import (
    ApplicationStatus,
    ContractState,
    InterviewOutcome,
    InterviewStatus,
    NotificationType,
)
from grh.services.contract_service import ContractService
from grh.services.interview_service import InterviewService
from grh.services.offer_service import ApplicationService, OfferService
from grh.services.status_transitions import InvalidStatusTransitionError, TerminalStatusError
from tests.conftest import FIXED_NOW, fixed_clock

WHEN = FIXED_NOW + timedelta(days=3)
MEET = "https://meet.example.com/abc-defg-hij"


def _types(repos) -> list[str]:
    return [n.type for n in repos.notifications.all()]


@pytest.fixture
def offers(repos, dispatcher) -> OfferService:
    return OfferService(repos, dispatcher, clock=fixed_clock)


@pytest.fixture
def applications(repos, dispatcher) -> ApplicationService:
    return ApplicationService(repos, dispatcher, clock=fixed_clock)


@pytest.fixture
def interviews(repos, dispatcher) -> InterviewService:
    return InterviewService(repos, dispatcher, clock=fixed_clock)


@pytest.fixture
def contracts(repos, dispatcher) -> ContractService:
    return ContractService(repos, dispatcher, clock=fixed_clock)


@pytest_asyncio.fixture
async def offer(offers, company):
    return await offers.create(
        company,
        {
            "title": "Backend developer",
            "description": "Build the billing platform",
            "location": "Lyon",
            "contract_type": "permanent",
        },
    )


@pytest_asyncio.fixture
async def application(applications, candidate, offer):
    return await applications.apply(candidate, offer.id, cover_note="Motivated")


# =============================================================================
# Offers and applications
# =============================================================================


class TestOffers:
    @pytest.mark.asyncio
    async def test_create_requires_company(self, offers, candidate):
        """Only companies may publish offers."""
        with pytest.raises(ForbiddenError):
            await offers.create(candidate, {"title": "x"})

    @pytest.mark.asyncio
    async def test_create_validates(self, offers, company):
        """Missing fields should be reported."""
        with pytest.raises(ValidationError) as exc_info:
            await offers.create(company, {"title": "Dev", "contract_type": "gig"})
        fields = {d["field"] for d in exc_info.value.details}
        assert {"description", "location", "contract_type"} <= fields

    @pytest.mark.asyncio
    async def test_listing(self, offers, company, offer):
        """New offers should be open and listed."""
        items, total = await offers.list_open(offset=0, limit=10)
        assert [o.id for o in items] == [offer.id]
        assert total == 1
        assert [o.id for o in await offers.list_mine(company)] == [offer.id]


class TestOfferReview:
    @pytest.mark.asyncio
    async def test_validate_with_comment(self, offers, admin, offer):
        """Admins should validate an offer and keep a stripped comment."""
        validated = await offers.validate(admin, offer.id, "  Clear and complete  ")

        assert validated.is_validated is True
        assert validated.validation_comment == "Clear and complete"
        assert validated.status == "open"

    @pytest.mark.asyncio
    async def test_validate_twice(self, offers, admin, offer):
        """A validated offer cannot be validated again."""
        await offers.validate(admin, offer.id)
        with pytest.raises(ConflictError) as exc_info:
            await offers.validate(admin, offer.id)
        assert exc_info.value.code == "ALREADY_VALIDATED"

    @pytest.mark.asyncio
    async def test_review_is_admin_only(self, offers, company, offer):
        """Companies cannot review their own offers."""
        with pytest.raises(ForbiddenError, match="Admin access required"):
            await offers.validate(company, offer.id)
        with pytest.raises(ForbiddenError):
            await offers.reject(company, offer.id)

    @pytest.mark.asyncio
    async def test_reject_notifies_company(self, offers, admin, company, offer, repos):
        """Rejecting should close the offer to candidates and tell its company."""
        rejected = await offers.reject(admin, offer.id)

        assert rejected.status == "rejected"
        [notification] = repos.notifications.all()
        assert notification.type == NotificationType.OFFRE_REJETEE.value
        assert notification.recipient_user_id == company.user_id
        assert notification.offer_id == offer.id
        items, total = await offers.list_open(offset=0, limit=10)
        assert (items, total) == ([], 0)

    @pytest.mark.asyncio
    async def test_reject_validated_offer(self, offers, admin, offer):
        """Validated offers cannot be rejected."""
        await offers.validate(admin, offer.id)
        with pytest.raises(ConflictError) as exc_info:
            await offers.reject(admin, offer.id)
        assert exc_info.value.code == "ALREADY_VALIDATED"

    @pytest.mark.asyncio
    async def test_reject_twice(self, offers, admin, offer):
        """A rejected offer cannot be rejected or validated afterwards."""
        await offers.reject(admin, offer.id)
        with pytest.raises(ConflictError) as exc_info:
            await offers.reject(admin, offer.id)
        assert exc_info.value.code == "ALREADY_REJECTED"
        with pytest.raises(ConflictError) as exc_info:
            await offers.validate(admin, offer.id)
        assert exc_info.value.code == "OFFER_REJECTED"

    @pytest.mark.asyncio
    async def test_close(self, offers, applications, company, candidate, offer):
        """The owning company should close its offer, after which applying fails."""
        closed = await offers.close(company, offer.id)
        assert closed.status == "closed"

        with pytest.raises(ConflictError) as exc_info:
            await applications.apply(candidate, offer.id)
        assert exc_info.value.code == "OFFER_CLOSED"
        with pytest.raises(TerminalStatusError):
            await offers.close(company, offer.id)

    @pytest.mark.asyncio
    async def test_other_company_cannot_close(self, offers, other_company, offer):
        """Only the owning company closes an offer."""
        with pytest.raises(ForbiddenError, match="owning this offer"):
            await offers.close(other_company, offer.id)


class TestApplications:
    @pytest.mark.asyncio
    async def test_apply(self, application, candidate):
        """A candidate's application should start pending."""
        assert application.status == ApplicationStatus.PENDING.value
        assert application.candidate_id == candidate.user_id

    @pytest.mark.asyncio
    async def test_duplicate(self, applications, candidate, offer, application):
        """Applying twice should be refused."""
        with pytest.raises(ConflictError) as exc_info:
            await applications.apply(candidate, offer.id)
        assert exc_info.value.code == "DUPLICATE_APPLICATION"

    @pytest.mark.asyncio
    async def test_closed_offer(self, applications, candidate, offer):
        """Closed offers should not accept applications."""
        offer.status = "closed"
        with pytest.raises(ConflictError) as exc_info:
            await applications.apply(candidate, offer.id)
        assert exc_info.value.code == "OFFER_CLOSED"

    @pytest.mark.asyncio
    async def test_company_cannot_apply(self, applications, company, offer):
        """Companies may not apply."""
        with pytest.raises(ForbiddenError):
            await applications.apply(company, offer.id)

    @pytest.mark.asyncio
    async def test_refuse_notifies_candidate(
        self, applications, company, application, repos, candidate
    ):
        """Refusing should notify the candidate once."""
        refused = await applications.refuse(company, application.id)

        assert refused.status == ApplicationStatus.REFUSED.value
        stored = repos.notifications.all()
        assert [n.type for n in stored] == [NotificationType.CANDIDATURE_REFUSEE.value]
        assert stored[0].recipient_user_id == candidate.user_id

        with pytest.raises(ConflictError) as exc_info:
            await applications.refuse(company, application.id)
        assert exc_info.value.code == "APPLICATION_CLOSED"

    @pytest.mark.asyncio
    async def test_other_company_cannot_refuse(
        self, applications, other_company, application
    ):
        """Only the offer's company may refuse."""
        with pytest.raises(ForbiddenError):
            await applications.refuse(other_company, application.id)

    @pytest.mark.asyncio
    async def test_list_for_offer(self, applications, company, offer, application):
        """The offer's company should see its applications."""
        found = await applications.list_for_offer(company, offer.id)
        assert [a.id for a in found] == [application.id]


# =============================================================================
# Interviews
# =============================================================================


class TestScheduleFromPosting:
    @pytest.mark.asyncio
    async def test_missing_posting_reference(self, interviews, company, candidate):
        """A posting interview without a posting should fail validation."""
        with pytest.raises(ValidationError, match="Posting reference required"):
            await interviews.schedule_from_posting(
                company,
                {"candidate_id": candidate.user_id, "scheduled_at": WHEN, "meeting_link": MEET},
            )

    @pytest.mark.asyncio
    async def test_schedules_and_links(
        self, interviews, company, candidate, published_posting, repos
    ):
        """Scheduling should link the posting and notify the candidate."""
        interview = await interviews.schedule_from_posting(
            company,
            {
                "posting_id": published_posting.id,
                "candidate_id": candidate.user_id,
                "scheduled_at": WHEN,
                "meeting_link": MEET,
            },
        )

        assert interview.status == InterviewStatus.SCHEDULED.value
        assert interview.outcome == InterviewOutcome.PENDING.value
        assert interview.company_id == company.user_id
        assert published_posting.linked_interview_id == interview.id
        assert _types(repos) == [NotificationType.ENTRETIEN_PLANIFIE.value]
        assert await interviews.check_for_posting(published_posting.id) is interview

    @pytest.mark.asyncio
    async def test_second_interview_refused(
        self, interviews, company, candidate, published_posting
    ):
        """Only one scheduled interview per posting is allowed."""
        data = {
            "posting_id": published_posting.id,
            "candidate_id": candidate.user_id,
            "scheduled_at": WHEN,
            "meeting_link": MEET,
        }
        await interviews.schedule_from_posting(company, data)
        with pytest.raises(ConflictError) as exc_info:
            await interviews.schedule_from_posting(company, data)
        assert exc_info.value.code == "INTERVIEW_EXISTS"

    @pytest.mark.asyncio
    async def test_candidate_must_own_posting(
        self, interviews, company, published_posting
    ):
        """The candidate must be the posting owner."""
        with pytest.raises(ValidationError, match="does not own"):
            await interviews.schedule_from_posting(
                company,
                {
                    "posting_id": published_posting.id,
                    "candidate_id": uuid.uuid4(),
                    "scheduled_at": WHEN,
                    "meeting_link": MEET,
                },
            )

    @pytest.mark.asyncio
    async def test_unpublished_posting(
        self, interviews, company, candidate, published_posting
    ):
        """Pending postings cannot get interviews."""
        published_posting.status = "pending"
        with pytest.raises(ConflictError) as exc_info:
            await interviews.schedule_from_posting(
                company,
                {
                    "posting_id": published_posting.id,
                    "candidate_id": candidate.user_id,
                    "scheduled_at": WHEN,
                    "meeting_link": MEET,
                },
            )
        assert exc_info.value.code == "POSTING_NOT_PUBLISHED"

    @pytest.mark.asyncio
    async def test_candidate_cannot_schedule(
        self, interviews, candidate, published_posting
    ):
        """Candidates may not schedule interviews."""
        with pytest.raises(ForbiddenError):
            await interviews.schedule_from_posting(
                candidate,
                {
                    "posting_id": published_posting.id,
                    "candidate_id": candidate.user_id,
                    "scheduled_at": WHEN,
                    "meeting_link": MEET,
                },
            )


class TestScheduleFromApplication:
    @pytest.mark.asyncio
    async def test_accepts_application(self, interviews, company, application, repos):
        """Scheduling should accept and link the application."""
        interview = await interviews.schedule_from_application(
            company,
            {"application_id": application.id, "scheduled_at": WHEN, "meeting_link": MEET},
        )

        assert application.status == ApplicationStatus.ACCEPTED.value
        assert application.interview_id == interview.id
        assert interview.offer_id == application.offer_id
        assert await interviews.check_for_application(application.id) is interview
        assert _types(repos) == [
            NotificationType.ENTRETIEN_PLANIFIE.value,
            NotificationType.CANDIDATURE_ACCEPTEE.value,
        ]

    @pytest.mark.asyncio
    async def test_rescheduling_after_cancel_accepts_once(
        self, interviews, company, application, repos
    ):
        """A second interview for an accepted application should not re-send acceptance."""
        first = await interviews.schedule_from_application(
            company,
            {"application_id": application.id, "scheduled_at": WHEN, "meeting_link": MEET},
        )
        await interviews.cancel(company, first.id)
        await interviews.schedule_from_application(
            company,
            {"application_id": application.id, "scheduled_at": WHEN, "meeting_link": MEET},
        )

        accepted = [
            t for t in _types(repos) if t == NotificationType.CANDIDATURE_ACCEPTEE.value
        ]
        assert len(accepted) == 1

    @pytest.mark.asyncio
    async def test_refused_application(self, interviews, applications, company, application):
        """Refused applications cannot be interviewed."""
        await applications.refuse(company, application.id)
        with pytest.raises(ConflictError) as exc_info:
            await interviews.schedule_from_application(
                company,
                {"application_id": application.id, "scheduled_at": WHEN, "meeting_link": MEET},
            )
        assert exc_info.value.code == "APPLICATION_REFUSED"

    @pytest.mark.asyncio
    async def test_invalid_link(self, interviews, company, application):
        """Meeting links must be http(s) URLs."""
        with pytest.raises(ValidationError, match="http"):
            await interviews.schedule_from_application(
                company,
                {
                    "application_id": application.id,
                    "scheduled_at": WHEN,
                    "meeting_link": "ftp://example.com",
                },
            )

    @pytest.mark.asyncio
    async def test_other_company_forbidden(self, interviews, other_company, application):
        """Companies may only schedule on their own offers."""
        with pytest.raises(ForbiddenError):
            await interviews.schedule_from_application(
                other_company,
                {"application_id": application.id, "scheduled_at": WHEN, "meeting_link": MEET},
            )


@pytest_asyncio.fixture
async def posting_interview(interviews, company, candidate, published_posting):
    return await interviews.schedule_from_posting(
        company,
        {
            "posting_id": published_posting.id,
            "candidate_id": candidate.user_id,
            "scheduled_at": WHEN,
            "meeting_link": MEET,
        },
    )


class TestInterviewTransitions:
    @pytest.mark.asyncio
    async def test_positive_evaluation_notifies_admins(
        self, interviews, company, posting_interview, repos, admin_user
    ):
        """A positive outcome should notify the candidate and each admin."""
        second_admin = await repos.users.add(
            User(email="bob@example.com", name="Bob Admin")
        )
        await repos.users.assign_profile(second_admin.id, "Admin")
        repos.notifications.rows.clear()

        interview = await interviews.evaluate(
            company, posting_interview.id, InterviewOutcome.POSITIVE, "Strong fit"
        )

        assert interview.status == InterviewStatus.COMPLETED.value
        assert interview.outcome == InterviewOutcome.POSITIVE.value
        assert interview.notes == "Strong fit"
        stored = repos.notifications.all()
        assert sorted(n.type for n in stored) == sorted(
            [NotificationType.ENTRETIEN_EVALUE.value]
            + [NotificationType.PREPARER_CONTRAT.value] * 2
        )
        prepare = [n for n in stored if n.type == NotificationType.PREPARER_CONTRAT.value]
        assert {n.recipient_user_id for n in prepare} == {admin_user.id, second_admin.id}

    @pytest.mark.asyncio
    async def test_outcome_required(self, interviews, company, posting_interview):
        """Evaluating with a pending outcome should be refused."""
        with pytest.raises(ConflictError) as exc_info:
            await interviews.evaluate(company, posting_interview.id, "pending")
        assert exc_info.value.code == "OUTCOME_REQUIRED"

    @pytest.mark.asyncio
    async def test_completed_is_terminal(self, interviews, company, posting_interview):
        """A completed interview cannot be evaluated or rescheduled again."""
        await interviews.evaluate(company, posting_interview.id, "negative")
        with pytest.raises(TerminalStatusError):
            await interviews.evaluate(company, posting_interview.id, "positive")
        with pytest.raises(TerminalStatusError):
            await interviews.reschedule(company, posting_interview.id, WHEN, MEET)

    @pytest.mark.asyncio
    async def test_reschedule(self, interviews, company, posting_interview, repos):
        """Rescheduling should update the slot and notify again."""
        later = WHEN + timedelta(days=1)
        interview = await interviews.reschedule(
            company, posting_interview.id, later, "https://meet.example.com/new"
        )
        assert interview.scheduled_at == later
        latest = repos.notifications.all()[-1]
        assert latest.type == NotificationType.ENTRETIEN_PLANIFIE.value

    @pytest.mark.asyncio
    async def test_reschedule_date_only(self, interviews, company, posting_interview):
        """Moving only the date should keep the meeting link."""
        later = WHEN + timedelta(days=2)
        interview = await interviews.reschedule(company, posting_interview.id, later, None)

        assert (interview.scheduled_at, interview.meeting_link) == (later, MEET)

    @pytest.mark.asyncio
    async def test_reschedule_needs_a_change(self, interviews, company, posting_interview):
        """Rescheduling with neither a date nor a link should fail validation."""
        with pytest.raises(ValidationError, match="date or meeting link"):
            await interviews.reschedule(company, posting_interview.id, None, None)

    @pytest.mark.asyncio
    async def test_cancel_unlinks_posting(
        self, interviews, company, posting_interview, published_posting, repos
    ):
        """Cancelling should free the posting for a new interview."""
        interview = await interviews.cancel(company, posting_interview.id)

        assert interview.status == InterviewStatus.CANCELLED.value
        assert published_posting.linked_interview_id is None
        assert repos.notifications.all()[-1].type == NotificationType.ENTRETIEN_ANNULE.value

    @pytest.mark.asyncio
    async def test_only_owning_company(self, interviews, other_company, posting_interview):
        """Other companies may not evaluate."""
        with pytest.raises(ForbiddenError):
            await interviews.evaluate(other_company, posting_interview.id, "positive")

    @pytest.mark.asyncio
    async def test_read_access(
        self, interviews, candidate, other_company, posting_interview
    ):
        """The candidate may read the interview; outsiders may not."""
        assert (await interviews.get(candidate, posting_interview.id)) is posting_interview
        with pytest.raises(ForbiddenError):
            await interviews.get(other_company, posting_interview.id)

    @pytest.mark.asyncio
    async def test_list_positive(self, interviews, admin, company, posting_interview):
        """Admins should list positively evaluated interviews by kind."""
        await interviews.evaluate(company, posting_interview.id, "positive")
        assert [i.id for i in await interviews.list_positive(admin, "posting")] == [
            posting_interview.id
        ]
        assert await interviews.list_positive(admin, "application") == []
        with pytest.raises(ValidationError):
            await interviews.list_positive(admin, "phone")


# =============================================================================
# Contracts
# =============================================================================


def _contract_data(employee_id, company_id, **overrides):
    data = {
        "title": "Backend developer contract",
        "employee_id": employee_id,
        "company_id": company_id,
        "contract_type": "permanent",
        "position": "Backend developer",
        "start_date": date(2026, 4, 1),
        "salary": 52000,
    }
    data.update(overrides)
    return data


class TestContracts:
    @pytest.mark.asyncio
    async def test_lifecycle(self, contracts, admin, candidate, company_user, repos):
        """Draft, publish and sign should notify the employee on publish."""
        contract = await contracts.create(
            admin, _contract_data(candidate.user_id, company_user.id)
        )
        assert contract.state == ContractState.DRAFT.value

        await contracts.publish(admin, contract.id)
        assert _types(repos) == [NotificationType.CONTRAT_PUBLIE.value]

        signed = await contracts.sign(candidate, contract.id)
        assert signed.state == ContractState.SIGNED.value
        assert [c.id for c in await contracts.list_mine(candidate)] == [contract.id]

    @pytest.mark.asyncio
    async def test_reject_notifies_admins(
        self, contracts, admin, candidate, company_user, repos, admin_user
    ):
        """A rejected contract should notify the admins."""
        contract = await contracts.create(
            admin, _contract_data(candidate.user_id, company_user.id)
        )
        await contracts.publish(admin, contract.id)

        await contracts.reject(candidate, contract.id)

        latest = repos.notifications.all()[-1]
        assert latest.type == NotificationType.CONTRAT_REJETE_CANDIDAT.value
        assert latest.recipient_user_id == admin_user.id

    @pytest.mark.asyncio
    async def test_sign_draft_refused(self, contracts, admin, candidate, company_user):
        """Drafts must be published before signing."""
        contract = await contracts.create(
            admin, _contract_data(candidate.user_id, company_user.id)
        )
        with pytest.raises(InvalidStatusTransitionError):
            await contracts.sign(candidate, contract.id)

    @pytest.mark.asyncio
    async def test_admin_only(self, contracts, company, candidate, company_user):
        """Only admins draft contracts."""
        with pytest.raises(ForbiddenError):
            await contracts.create(company, _contract_data(candidate.user_id, company_user.id))

    @pytest.mark.asyncio
    async def test_end_before_start(self, contracts, admin, candidate, company_user):
        """End date before start date should fail validation."""
        with pytest.raises(ValidationError, match="End date must be after start date"):
            await contracts.create(
                admin,
                _contract_data(
                    candidate.user_id, company_user.id, end_date=date(2026, 3, 1)
                ),
            )

    @pytest.mark.asyncio
    async def test_interview_must_be_positive(
        self, contracts, admin, candidate, company_user, posting_interview
    ):
        """A pending interview cannot back a contract."""
        with pytest.raises(ConflictError) as exc_info:
            await contracts.create(
                admin,
                _contract_data(
                    candidate.user_id, company_user.id, interview_id=posting_interview.id
                ),
            )
        assert exc_info.value.code == "INTERVIEW_NOT_POSITIVE"

    @pytest.mark.asyncio
    async def test_unknown_employee(self, contracts, admin, company_user):
        """Unknown employees should raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await contracts.create(admin, _contract_data(uuid.uuid4(), company_user.id))

    @pytest.mark.asyncio
    async def test_other_candidate_cannot_sign(
        self, contracts, admin, candidate, company_user, company
    ):
        """Only the named employee can answer the contract."""
        contract = await contracts.create(
            admin, _contract_data(candidate.user_id, company_user.id)
        )
        await contracts.publish(admin, contract.id)
        with pytest.raises(ForbiddenError):
            await contracts.sign(company, contract.id)
