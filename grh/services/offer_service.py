"""Company job offers and candidate applications."""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from grh.core.errors import ConflictError, ForbiddenError, NotFoundError
from grh.models import Application, JobOffer
from grh.models.enums import ApplicationStatus, OfferStatus
from grh.services.authorization import Action, Actor, require
from grh.services.base import WorkflowService
from grh.services.notifier import ApplicationRefused, OfferRejected
from grh.services.status_transitions import (
    ActorRole,
    LifecycleEntity,
    apply_changes,
    apply_transition,
)
from grh.services.validation_rules import EntityKind, validate

logger = logging.getLogger(__name__)

OFFER_FIELDS: tuple[str, ...] = ("title", "description", "location", "contract_type")


class OfferService(WorkflowService):
    """Offers published by companies."""

    async def create(self, actor: Actor, data: Mapping[str, Any]) -> JobOffer:
        require(actor, Action.OFFER_CREATE)
        fields = {name: data.get(name) for name in OFFER_FIELDS}
        validate(EntityKind.JOB_OFFER, fields)
        offer = await self._repos.offers.add(
            JobOffer(company_id=actor.user_id, status=OfferStatus.OPEN.value, **fields)
        )
        logger.info("Offer %s created by %s", offer.id, actor.user_id)
        return offer

    async def list_open(self, *, offset: int, limit: int) -> tuple[list[JobOffer], int]:
        return await self._repos.offers.list_open(offset=offset, limit=limit)

    async def list_mine(self, actor: Actor) -> list[JobOffer]:
        return await self._repos.offers.list_for_company(actor.user_id)

    # -----------------------------------------------------------------------
    # Review
    # -----------------------------------------------------------------------

    async def validate(
        self, actor: Actor, offer_id: uuid.UUID, comment: str | None = None
    ) -> JobOffer:
        """Mark an offer as validated by an admin.

        Raises:
            ConflictError: If the offer is rejected or already validated.
        """
        require(actor, Action.OFFER_VALIDATE)
        offer = await self._get_or_404(self._repos.offers, offer_id, "Offer")
        if offer.status == OfferStatus.REJECTED.value:
            raise ConflictError("A rejected offer cannot be validated", code="OFFER_REJECTED")
        if offer.is_validated:
            raise ConflictError("Offer is already validated", code="ALREADY_VALIDATED")

        offer.is_validated = True
        if comment and comment.strip():
            offer.validation_comment = comment.strip()
        offer = await self._repos.offers.save(offer)
        logger.info("Offer %s validated by %s", offer.id, actor.user_id)
        return offer

    async def reject(self, actor: Actor, offer_id: uuid.UUID) -> JobOffer:
        """Reject an offer and notify its company.

        Raises:
            ConflictError: If the offer is already rejected or validated, or
                was closed by its company.
        """
        require(actor, Action.OFFER_REJECT)
        offer = await self._get_or_404(self._repos.offers, offer_id, "Offer")
        if offer.status == OfferStatus.REJECTED.value:
            raise ConflictError("Offer is already rejected", code="ALREADY_REJECTED")

        result = apply_transition(
            LifecycleEntity.JOB_OFFER,
            offer.status,
            OfferStatus.REJECTED,
            ActorRole.ADMIN,
            context={"is_validated": offer.is_validated},
        )
        apply_changes(offer, result.changes)
        offer = await self._repos.offers.save(offer)
        logger.info("Offer %s rejected by %s", offer.id, actor.user_id)
        await self._dispatcher.dispatch(
            OfferRejected(offer_id=offer.id, company_id=offer.company_id, title=offer.title)
        )
        return offer

    async def close(self, actor: Actor, offer_id: uuid.UUID) -> JobOffer:
        """Stop accepting applications. Pending applications are kept."""
        offer = await self._get_or_404(self._repos.offers, offer_id, "Offer")
        require(actor, Action.OFFER_CLOSE, offer)
        result = apply_transition(
            LifecycleEntity.JOB_OFFER, offer.status, OfferStatus.CLOSED, ActorRole.COMPANY
        )
        apply_changes(offer, result.changes)
        offer = await self._repos.offers.save(offer)
        logger.info("Offer %s closed", offer.id)
        return offer


class ApplicationService(WorkflowService):
    """Candidate applications to offers."""

    async def apply(
        self,
        actor: Actor,
        offer_id: uuid.UUID,
        cv_profile_id: uuid.UUID | None = None,
        cover_note: str | None = None,
    ) -> Application:
        """Apply to an open offer.

        Raises:
            ForbiddenError: If the actor is not a candidate or the CV profile
                belongs to someone else.
            NotFoundError: If the offer or CV profile does not exist.
            ConflictError: If the offer is closed or the actor already applied.
        """
        require(actor, Action.APPLICATION_CREATE)
        offer = await self._get_or_404(self._repos.offers, offer_id, "Offer")
        if offer.status != OfferStatus.OPEN.value:
            raise ConflictError("This offer is no longer open", code="OFFER_CLOSED")
        if cv_profile_id is not None:
            profile = await self._repos.cv_profiles.get(cv_profile_id)
            if profile is None:
                raise NotFoundError("CV profile", str(cv_profile_id))
            if profile.user_id != actor.user_id:
                raise ForbiddenError("This CV profile does not belong to you")
        existing = await self._repos.applications.get_for_offer_and_candidate(
            offer.id, actor.user_id
        )
        if existing is not None:
            raise ConflictError("You already applied to this offer", code="DUPLICATE_APPLICATION")

        application = await self._repos.applications.add(
            Application(
                offer_id=offer.id,
                candidate_id=actor.user_id,
                cv_profile_id=cv_profile_id,
                cover_note=cover_note,
                status=ApplicationStatus.PENDING.value,
            )
        )
        logger.info("Application %s to offer %s", application.id, offer.id)
        return application

    async def list_mine(self, actor: Actor) -> list[Application]:
        return await self._repos.applications.list_for_candidate(actor.user_id)

    async def list_for_offer(self, actor: Actor, offer_id: uuid.UUID) -> list[Application]:
        offer = await self._get_or_404(self._repos.offers, offer_id, "Offer")
        require(actor, Action.APPLICATION_LIST_FOR_OFFER, offer)
        return await self._repos.applications.list_for_offer(offer.id)

    async def refuse(self, actor: Actor, application_id: uuid.UUID) -> Application:
        """Refuse an application and notify the candidate.

        Raises:
            ConflictError: If the application is already accepted or refused.
        """
        application = await self._get_or_404(
            self._repos.applications, application_id, "Application"
        )
        offer = await self._get_or_404(self._repos.offers, application.offer_id, "Offer")
        require(actor, Action.APPLICATION_REFUSE, offer)
        if application.status in (
            ApplicationStatus.ACCEPTED.value,
            ApplicationStatus.REFUSED.value,
        ):
            raise ConflictError(
                f"Application is already {application.status}",
                code="APPLICATION_CLOSED",
            )

        application.status = ApplicationStatus.REFUSED.value
        application = await self._repos.applications.save(application)
        logger.info("Application %s refused", application.id)
        await self._dispatcher.dispatch(
            ApplicationRefused(
                application_id=application.id,
                candidate_id=application.candidate_id,
                company_id=offer.company_id,
                offer_id=offer.id,
                offer_title=offer.title,
            )
        )
        return application
