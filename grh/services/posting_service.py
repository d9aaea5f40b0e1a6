"""Candidate job postings.

Postings are created pending, published by their owner once a CV profile is
linked, validated or rejected by an admin, and expire after
``settings.posting_lifetime_days``. Expiry is reconciled on every read and
before every write.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from grh.core.config import settings
from grh.core.errors import ConflictError, ForbiddenError, NotFoundError
from grh.models import JobPosting
from grh.models.enums import PostingStatus
from grh.repositories.interfaces import PostingFilters, Repositories
from grh.services.authorization import Action, Actor, require
from grh.services.base import Clock, WorkflowService, utc_now
from grh.services.blob_store import BlobStore, StoredBlob
from grh.services.notification_dispatch import NotificationDispatcher
from grh.services.notifier import PostingPublishToggled, PostingRejected, PostingValidated
from grh.services.status_transitions import (
    ActorRole,
    LifecycleEntity,
    apply_changes,
    apply_transition,
    reconcile_expiry,
)
from grh.services.validation_rules import EntityKind, snapshot, validate

logger = logging.getLogger(__name__)

# Fields a candidate may set on create and update.
EDITABLE_FIELDS: tuple[str, ...] = (
    "title",
    "profession",
    "description",
    "contract_type",
    "location",
    "required_skills",
    "desired_salary",
    "linked_cv_profile_id",
)


class PostingService(WorkflowService):
    """Operations on candidate job postings.

    Args:
        repos: Per-request repositories.
        cv_store: Blob store holding CV files.
        dispatcher: Notification dispatcher.
        clock: Current-time provider.
    """

    def __init__(
        self,
        repos: Repositories,
        cv_store: BlobStore,
        dispatcher: NotificationDispatcher | None = None,
        *,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(repos, dispatcher, clock=clock)
        self._cv_store = cv_store

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _reconcile(self, posting: JobPosting) -> JobPosting:
        changes = reconcile_expiry(posting, self.now())
        if changes:
            old_status = posting.status
            apply_changes(posting, changes)
            await self._repos.postings.save(posting)
            logger.info(
                "Job posting %s reconciled: %s -> %s",
                posting.id,
                old_status,
                posting.status,
            )
        return posting

    async def _load(self, posting_id: uuid.UUID) -> JobPosting:
        posting = await self._get_or_404(self._repos.postings, posting_id, "Job posting")
        return await self._reconcile(posting)

    async def _check_cv_profile(self, actor: Actor, cv_profile_id: uuid.UUID | None) -> None:
        if cv_profile_id is None:
            return
        profile = await self._repos.cv_profiles.get(cv_profile_id)
        if profile is None:
            raise NotFoundError("CV profile", str(cv_profile_id))
        if profile.user_id != actor.user_id:
            raise ForbiddenError("This CV profile does not belong to you")

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    async def create(self, actor: Actor, data: Mapping[str, Any]) -> JobPosting:
        """Create a pending posting owned by the actor.

        Raises:
            ValidationError: If any field rule is violated.
            NotFoundError: If the linked CV profile does not exist.
            ForbiddenError: If the CV profile belongs to someone else.
        """
        fields = {name: data.get(name) for name in EDITABLE_FIELDS}
        if fields["required_skills"] is None:
            fields["required_skills"] = []
        now = self.now()
        validate(EntityKind.JOB_POSTING, fields, now=now)
        await self._check_cv_profile(actor, fields["linked_cv_profile_id"])

        posting = JobPosting(
            owner_candidate_id=actor.user_id,
            status=PostingStatus.PENDING.value,
            is_validated=False,
            expiration_date=now + timedelta(days=settings.posting_lifetime_days),
            **fields,
        )
        posting = await self._repos.postings.add(posting)
        logger.info("Job posting %s created by %s", posting.id, actor.user_id)
        return posting

    async def update(
        self, actor: Actor, posting_id: uuid.UUID, data: Mapping[str, Any]
    ) -> JobPosting:
        """Update editable fields. Status only changes through transitions."""
        posting = await self._load(posting_id)
        require(actor, Action.POSTING_UPDATE, posting)

        proposed = {name: value for name, value in data.items() if name in EDITABLE_FIELDS}
        current = snapshot(posting, (*EDITABLE_FIELDS, "rejection_reason"))
        validate(EntityKind.JOB_POSTING, proposed, current, now=self.now())

        if "linked_cv_profile_id" in proposed:
            new_cv = proposed["linked_cv_profile_id"]
            if new_cv is None and posting.status == PostingStatus.PUBLISHED.value:
                raise ConflictError(
                    "A published posting must keep its CV profile",
                    code="CV_PROFILE_REQUIRED",
                )
            if new_cv != posting.linked_cv_profile_id:
                await self._check_cv_profile(actor, new_cv)

        apply_changes(posting, proposed)
        return await self._repos.postings.save(posting)

    async def delete(self, actor: Actor, posting_id: uuid.UUID) -> None:
        posting = await self._get_or_404(self._repos.postings, posting_id, "Job posting")
        require(actor, Action.POSTING_DELETE, posting)
        await self._repos.postings.delete(posting)
        logger.info("Job posting %s deleted by %s", posting_id, actor.user_id)

    async def toggle_save(self, actor: Actor, posting_id: uuid.UUID) -> tuple[JobPosting, bool]:
        """Save or unsave a posting.

        Returns:
            Tuple of (posting, saved) where saved is the new membership.

        Raises:
            ConflictError: If the posting has no CV profile.
        """
        posting = await self._load(posting_id)
        require(actor, Action.POSTING_TOGGLE_SAVE, posting)
        if posting.linked_cv_profile_id is None:
            raise ConflictError("CV profile required to save", code="CV_PROFILE_REQUIRED")

        postings = self._repos.postings
        if await postings.is_saved(posting.id, actor.user_id):
            await postings.remove_save(posting.id, actor.user_id)
            return posting, False
        await postings.add_save(posting.id, actor.user_id)
        return posting, True

    async def toggle_publish(self, actor: Actor, posting_id: uuid.UUID) -> JobPosting:
        """Move a posting between pending and published.

        Raises:
            ConflictError: If the posting is expired, rejected, or has no CV
                profile when publishing.
        """
        posting = await self._load(posting_id)
        require(actor, Action.POSTING_TOGGLE_PUBLISH, posting)

        target = (
            PostingStatus.PENDING
            if posting.status == PostingStatus.PUBLISHED.value
            else PostingStatus.PUBLISHED
        )
        old_status = posting.status
        result = apply_transition(
            LifecycleEntity.JOB_POSTING,
            posting.status,
            target,
            ActorRole.OWNER,
            context={
                "expiration_date": posting.expiration_date,
                "linked_cv_profile_id": posting.linked_cv_profile_id,
                "lifetime_days": settings.posting_lifetime_days,
            },
            now=self.now(),
        )
        apply_changes(posting, result.changes)
        posting = await self._repos.postings.save(posting)
        logger.info("Job posting %s: %s -> %s", posting.id, old_status, posting.status)
        await self._dispatcher.dispatch(
            PostingPublishToggled(
                posting_id=posting.id,
                owner_id=posting.owner_candidate_id,
                published=posting.status == PostingStatus.PUBLISHED.value,
            )
        )
        return posting

    async def validate(self, actor: Actor, posting_id: uuid.UUID) -> JobPosting:
        """Mark a posting as validated by an admin.

        Raises:
            ConflictError: If already validated, or rejected.
        """
        require(actor, Action.POSTING_VALIDATE)
        posting = await self._load(posting_id)
        if posting.status == PostingStatus.REJECTED.value:
            raise ConflictError("A rejected posting cannot be validated", code="POSTING_REJECTED")
        if posting.is_validated:
            raise ConflictError("Posting is already validated", code="ALREADY_VALIDATED")

        posting.is_validated = True
        posting = await self._repos.postings.save(posting)
        logger.info("Job posting %s validated by %s", posting.id, actor.user_id)
        await self._dispatcher.dispatch(
            PostingValidated(posting_id=posting.id, owner_id=posting.owner_candidate_id)
        )
        return posting

    async def reject(self, actor: Actor, posting_id: uuid.UUID, reason: str | None) -> JobPosting:
        """Reject a posting with a reason. Notifies nobody.

        Raises:
            ValidationError: If the reason is blank or too long.
            ConflictError: If the posting is already rejected or expired.
        """
        require(actor, Action.POSTING_REJECT)
        validate(EntityKind.REJECTION, {"rejection_reason": reason})
        posting = await self._load(posting_id)
        if posting.status == PostingStatus.REJECTED.value:
            raise ConflictError("Posting is already rejected", code="ALREADY_REJECTED")

        old_status = posting.status
        result = apply_transition(
            LifecycleEntity.JOB_POSTING,
            posting.status,
            PostingStatus.REJECTED,
            ActorRole.ADMIN,
            context={"rejection_reason": reason.strip() if reason else reason},
            now=self.now(),
        )
        apply_changes(posting, result.changes)
        posting = await self._repos.postings.save(posting)
        logger.info("Job posting %s: %s -> rejected", posting.id, old_status)
        await self._dispatcher.dispatch(
            PostingRejected(
                posting_id=posting.id,
                owner_id=posting.owner_candidate_id,
                reason=posting.rejection_reason or "",
            )
        )
        return posting

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def get(self, posting_id: uuid.UUID) -> JobPosting:
        return await self._load(posting_id)

    async def search(
        self, filters: PostingFilters, *, offset: int, limit: int
    ) -> tuple[list[JobPosting], int]:
        """Published postings matching the filters.

        Postings found expired during reconciliation are dropped from the page.
        """
        items, total = await self._repos.postings.search(filters, offset=offset, limit=limit)
        visible = []
        for posting in items:
            await self._reconcile(posting)
            if posting.status == PostingStatus.PUBLISHED.value:
                visible.append(posting)
        return visible, total - (len(items) - len(visible))

    async def list_mine(
        self, actor: Actor, *, offset: int, limit: int
    ) -> tuple[list[JobPosting], int]:
        items, total = await self._repos.postings.list_for_owner(
            actor.user_id, offset=offset, limit=limit
        )
        for posting in items:
            await self._reconcile(posting)
        return items, total

    async def list_saved(
        self, actor: Actor, *, offset: int, limit: int
    ) -> tuple[list[JobPosting], int]:
        items, total = await self._repos.postings.list_saved_by(
            actor.user_id, offset=offset, limit=limit
        )
        for posting in items:
            await self._reconcile(posting)
        return items, total

    async def list_published(self) -> list[JobPosting]:
        postings = []
        for posting in await self._repos.postings.list_published():
            await self._reconcile(posting)
            if posting.status == PostingStatus.PUBLISHED.value:
                postings.append(posting)
        return postings

    async def save_counts(self, postings: list[JobPosting]) -> dict[uuid.UUID, int]:
        return await self._repos.postings.count_saves([p.id for p in postings])

    async def get_cv(self, posting_id: uuid.UUID) -> StoredBlob:
        """Download the CV file linked to a posting.

        Raises:
            NotFoundError: If the posting has no CV profile or no CV file.
        """
        posting = await self._load(posting_id)
        if posting.linked_cv_profile_id is None:
            raise NotFoundError("CV profile")
        profile = await self._get_or_404(
            self._repos.cv_profiles, posting.linked_cv_profile_id, "CV profile"
        )
        if not profile.cv_file_handle:
            raise NotFoundError("CV file")
        blob = await self._cv_store.get(profile.cv_file_handle)
        return StoredBlob(
            data=blob.data,
            content_type=profile.cv_mimetype or blob.content_type,
            filename=profile.cv_filename or blob.filename,
        )
