"""Interview scheduling and evaluation.

Interviews come from two sources: an application to a company offer, or a
candidate's own job posting. Both notify the candidate; a positive evaluation
also asks every admin to prepare a contract.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from grh.core.errors import ConflictError, ValidationError
from grh.models import Interview
from grh.models.enums import (
    ApplicationStatus,
    InterviewKind,
    InterviewOutcome,
    InterviewStatus,
    PostingStatus,
    ProfileName,
)
from grh.services.authorization import Action, Actor, require
from grh.services.base import WorkflowService
from grh.services.notifier import (
    ApplicationAccepted,
    InterviewCancelled,
    InterviewEvaluated,
    InterviewRescheduled,
    InterviewScheduled,
)
from grh.services.status_transitions import (
    ActorRole,
    LifecycleEntity,
    apply_changes,
    apply_transition,
    reconcile_expiry,
)
from grh.services.validation_rules import EntityKind, snapshot, validate

logger = logging.getLogger(__name__)

NOTES_MAX = 1000

_RULE_FIELDS = (
    "kind",
    "candidate_id",
    "related_posting_id",
    "related_application_id",
    "scheduled_at",
    "meeting_link",
)


def _check_notes(notes: str | None) -> None:
    if notes is not None and len(notes) > NOTES_MAX:
        raise ValidationError(
            message=f"Notes must be at most {NOTES_MAX} characters",
            details=[{"field": "notes", "message": f"At most {NOTES_MAX} characters"}],
        )


class InterviewService(WorkflowService):
    """Schedules, reschedules, evaluates and cancels interviews."""

    # -----------------------------------------------------------------------
    # Scheduling
    # -----------------------------------------------------------------------

    async def schedule_from_application(
        self, actor: Actor, data: Mapping[str, Any]
    ) -> Interview:
        """Schedule an interview for an application to an offer.

        The application is accepted and linked to the interview.

        Raises:
            ValidationError: If interview fields are invalid.
            NotFoundError: If the application, offer or candidate is missing.
            ForbiddenError: If a company actor does not own the offer.
            ConflictError: If the application is refused or already has a
                scheduled interview.
        """
        application_id = data.get("application_id")
        application = None
        if application_id is not None:
            application = await self._get_or_404(
                self._repos.applications, application_id, "Application"
            )
        fields = {
            "kind": InterviewKind.APPLICATION.value,
            "candidate_id": application.candidate_id if application else None,
            "related_application_id": application_id,
            "related_posting_id": None,
            "scheduled_at": data.get("scheduled_at"),
            "meeting_link": data.get("meeting_link"),
        }
        validate(EntityKind.INTERVIEW, fields, now=self.now())
        _check_notes(data.get("notes"))

        offer = await self._get_or_404(self._repos.offers, application.offer_id, "Offer")
        candidate = await self._get_or_404(
            self._repos.users, application.candidate_id, "Candidate"
        )
        require(actor, Action.INTERVIEW_SCHEDULE, offer)

        if application.status == ApplicationStatus.REFUSED.value:
            raise ConflictError("This application was refused", code="APPLICATION_REFUSED")
        existing = await self._repos.interviews.get_for_application(application.id)
        if existing is not None and existing.status == InterviewStatus.SCHEDULED.value:
            raise ConflictError(
                "An interview is already scheduled for this application",
                code="INTERVIEW_EXISTS",
            )

        interview = await self._repos.interviews.add(
            Interview(
                kind=InterviewKind.APPLICATION.value,
                candidate_id=candidate.id,
                company_id=offer.company_id,
                created_by=actor.user_id,
                offer_id=offer.id,
                related_application_id=application.id,
                scheduled_at=fields["scheduled_at"],
                meeting_link=fields["meeting_link"],
                status=InterviewStatus.SCHEDULED.value,
                outcome=InterviewOutcome.PENDING.value,
                notes=data.get("notes"),
            )
        )
        newly_accepted = application.status != ApplicationStatus.ACCEPTED.value
        application.status = ApplicationStatus.ACCEPTED.value
        application.interview_id = interview.id
        await self._repos.applications.save(application)
        logger.info("Interview %s scheduled for application %s", interview.id, application.id)

        await self._dispatcher.dispatch(
            InterviewScheduled(
                interview_id=interview.id,
                candidate_id=interview.candidate_id,
                company_id=interview.company_id,
                kind=InterviewKind.APPLICATION,
                scheduled_at=interview.scheduled_at,
                meeting_link=interview.meeting_link,
                application_id=application.id,
                offer_id=offer.id,
                offer_title=offer.title,
            )
        )
        if newly_accepted:
            await self._dispatcher.dispatch(
                ApplicationAccepted(
                    application_id=application.id,
                    candidate_id=application.candidate_id,
                    company_id=offer.company_id,
                    offer_id=offer.id,
                    offer_title=offer.title,
                )
            )
        return interview

    async def schedule_from_posting(self, actor: Actor, data: Mapping[str, Any]) -> Interview:
        """Schedule an interview with the owner of a published posting.

        Raises:
            ValidationError: If fields are invalid (e.g. no posting reference)
                or the candidate does not own the posting.
            NotFoundError: If the posting does not exist.
            ConflictError: If the posting is not published or already has a
                scheduled interview.
        """
        require(actor, Action.INTERVIEW_SCHEDULE)
        fields = {
            "kind": InterviewKind.POSTING.value,
            "candidate_id": data.get("candidate_id"),
            "related_posting_id": data.get("posting_id"),
            "related_application_id": None,
            "scheduled_at": data.get("scheduled_at"),
            "meeting_link": data.get("meeting_link"),
        }
        now = self.now()
        validate(EntityKind.INTERVIEW, fields, now=now)
        _check_notes(data.get("notes"))

        posting = await self._get_or_404(
            self._repos.postings, fields["related_posting_id"], "Job posting"
        )
        expiry = reconcile_expiry(posting, now)
        if expiry:
            apply_changes(posting, expiry)
            await self._repos.postings.save(posting)
        if posting.owner_candidate_id != fields["candidate_id"]:
            raise ValidationError(
                message="The candidate does not own this posting",
                details=[{"field": "candidate_id", "message": "Must be the posting owner"}],
            )
        if posting.status != PostingStatus.PUBLISHED.value:
            raise ConflictError(
                "Interviews can only be scheduled on published postings",
                code="POSTING_NOT_PUBLISHED",
            )
        if await self._repos.interviews.get_scheduled_for_posting(posting.id) is not None:
            raise ConflictError(
                "An interview is already scheduled for this posting",
                code="INTERVIEW_EXISTS",
            )

        interview = await self._repos.interviews.add(
            Interview(
                kind=InterviewKind.POSTING.value,
                candidate_id=posting.owner_candidate_id,
                company_id=actor.user_id,
                created_by=actor.user_id,
                offer_id=None,
                related_posting_id=posting.id,
                scheduled_at=fields["scheduled_at"],
                meeting_link=fields["meeting_link"],
                status=InterviewStatus.SCHEDULED.value,
                outcome=InterviewOutcome.PENDING.value,
                notes=data.get("notes"),
            )
        )
        posting.linked_interview_id = interview.id
        await self._repos.postings.save(posting)
        logger.info("Interview %s scheduled for posting %s", interview.id, posting.id)

        await self._dispatcher.dispatch(
            InterviewScheduled(
                interview_id=interview.id,
                candidate_id=interview.candidate_id,
                company_id=interview.company_id,
                kind=InterviewKind.POSTING,
                scheduled_at=interview.scheduled_at,
                meeting_link=interview.meeting_link,
                posting_id=posting.id,
            )
        )
        return interview

    # -----------------------------------------------------------------------
    # Transitions
    # -----------------------------------------------------------------------

    async def evaluate(
        self,
        actor: Actor,
        interview_id: uuid.UUID,
        outcome: InterviewOutcome | str,
        notes: str | None = None,
    ) -> Interview:
        """Complete an interview with a positive or negative outcome.

        Raises:
            ForbiddenError: If the actor is not the interview's company.
            ConflictError: If the interview is not scheduled or the outcome is
                not positive or negative.
        """
        interview = await self._get_or_404(self._repos.interviews, interview_id, "Interview")
        require(actor, Action.INTERVIEW_EVALUATE, interview)
        _check_notes(notes)

        result = apply_transition(
            LifecycleEntity.INTERVIEW,
            interview.status,
            InterviewStatus.COMPLETED,
            ActorRole.COMPANY,
            context={"outcome": outcome},
            now=self.now(),
        )
        apply_changes(interview, result.changes)
        if notes is not None:
            interview.notes = notes
        interview = await self._repos.interviews.save(interview)
        logger.info("Interview %s evaluated: %s", interview.id, interview.outcome)

        evaluated = InterviewOutcome.from_string(interview.outcome)
        admin_ids: tuple[uuid.UUID, ...] = ()
        candidate_name = None
        if evaluated == InterviewOutcome.POSITIVE:
            admin_ids = tuple(
                await self._repos.users.list_ids_with_profile(ProfileName.ADMIN.value)
            )
            candidate = await self._repos.users.get(interview.candidate_id)
            candidate_name = candidate.name if candidate else None

        await self._dispatcher.dispatch(
            InterviewEvaluated(
                interview_id=interview.id,
                candidate_id=interview.candidate_id,
                company_id=interview.company_id,
                outcome=evaluated,
                admin_ids=admin_ids,
                candidate_name=candidate_name,
                posting_id=interview.related_posting_id,
                offer_id=interview.offer_id,
            )
        )
        return interview

    async def reschedule(
        self,
        actor: Actor,
        interview_id: uuid.UUID,
        scheduled_at: datetime | None,
        meeting_link: str | None,
    ) -> Interview:
        """Move a scheduled interview to a new time, link, or both.

        Fields left as None keep their current value.
        """
        interview = await self._get_or_404(self._repos.interviews, interview_id, "Interview")
        require(actor, Action.INTERVIEW_RESCHEDULE, interview)

        proposed = {
            name: value
            for name, value in (("scheduled_at", scheduled_at), ("meeting_link", meeting_link))
            if value is not None
        }
        if not proposed:
            raise ValidationError(
                message="A new date or meeting link is required",
                details=[{"field": "scheduled_at", "message": "Nothing to reschedule"}],
            )
        validate(
            EntityKind.INTERVIEW,
            proposed,
            snapshot(interview, _RULE_FIELDS),
            now=self.now(),
        )
        result = apply_transition(
            LifecycleEntity.INTERVIEW,
            interview.status,
            InterviewStatus.SCHEDULED,
            ActorRole.COMPANY,
            now=self.now(),
        )
        apply_changes(interview, {**result.changes, **proposed})
        interview = await self._repos.interviews.save(interview)
        logger.info("Interview %s rescheduled to %s", interview.id, interview.scheduled_at)

        await self._dispatcher.dispatch(
            InterviewRescheduled(
                interview_id=interview.id,
                candidate_id=interview.candidate_id,
                company_id=interview.company_id,
                scheduled_at=interview.scheduled_at,
                meeting_link=interview.meeting_link,
                posting_id=interview.related_posting_id,
                offer_id=interview.offer_id,
            )
        )
        return interview

    async def cancel(self, actor: Actor, interview_id: uuid.UUID) -> Interview:
        """Cancel a scheduled interview and unlink it from its posting."""
        interview = await self._get_or_404(self._repos.interviews, interview_id, "Interview")
        require(actor, Action.INTERVIEW_CANCEL, interview)

        result = apply_transition(
            LifecycleEntity.INTERVIEW,
            interview.status,
            InterviewStatus.CANCELLED,
            ActorRole.COMPANY,
            now=self.now(),
        )
        apply_changes(interview, result.changes)
        interview = await self._repos.interviews.save(interview)

        if interview.related_posting_id is not None:
            posting = await self._repos.postings.get(interview.related_posting_id)
            if posting is not None and posting.linked_interview_id == interview.id:
                posting.linked_interview_id = None
                await self._repos.postings.save(posting)
        logger.info("Interview %s cancelled by %s", interview.id, actor.user_id)

        await self._dispatcher.dispatch(
            InterviewCancelled(
                interview_id=interview.id,
                candidate_id=interview.candidate_id,
                company_id=interview.company_id,
            )
        )
        return interview

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def get(self, actor: Actor, interview_id: uuid.UUID) -> Interview:
        interview = await self._get_or_404(self._repos.interviews, interview_id, "Interview")
        require(actor, Action.INTERVIEW_READ, interview)
        return interview

    async def list_for_company(self, actor: Actor) -> list[Interview]:
        return await self._repos.interviews.list_for_company(actor.user_id)

    async def list_positive(self, actor: Actor, kind: str | None = None) -> list[Interview]:
        require(actor, Action.INTERVIEW_LIST_POSITIVE)
        if kind is not None and kind not in InterviewKind.values():
            raise ValidationError(
                message="Invalid interview kind",
                details=[{"field": "kind", "message": f"Must be one of {InterviewKind.values()}"}],
            )
        return await self._repos.interviews.list_positive(kind)

    async def check_for_application(self, application_id: uuid.UUID) -> Interview | None:
        return await self._repos.interviews.get_for_application(application_id)

    async def check_for_posting(self, posting_id: uuid.UUID) -> Interview | None:
        """Return the scheduled interview of a posting, if any."""
        return await self._repos.interviews.get_scheduled_for_posting(posting_id)
