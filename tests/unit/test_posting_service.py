"""Tests for PostingService.

Covers creation rules, the owner's publish toggle, admin validation and
rejection, saves, search, and time-driven expiry.
"""

import uuid
from datetime import timedelta

import pytest

from grh.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from grh.models import CvProfile
from grh.models.enums import PostingStatus
from grh.repositories.interfaces import PostingFilters
from grh.services.posting_service import PostingService
from grh.services.status_transitions import TerminalStatusError
from tests.conftest import FIXED_NOW, LONG_DESCRIPTION, MINIMAL_PDF, fixed_clock


def _posting_data(**overrides):
    data = {
        "title": "Data engineer",
        "profession": "Engineer",
        "description": LONG_DESCRIPTION,
        "contract_type": "permanent",
        "location": "Paris",
        "required_skills": ["python", "spark"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def service(repos, blob_store, dispatcher) -> PostingService:
    return PostingService(repos, blob_store, dispatcher, clock=fixed_clock)


# =============================================================================
# Create / update
# =============================================================================


class TestCreate:
    @pytest.mark.asyncio
    async def test_creates_pending_posting(self, service, candidate):
        """A new posting should be pending, unvalidated and expire in 30 days."""
        posting = await service.create(candidate, _posting_data())

        assert posting.status == PostingStatus.PENDING.value
        assert posting.is_validated is False
        assert posting.owner_candidate_id == candidate.user_id
        assert posting.expiration_date == FIXED_NOW + timedelta(days=30)

    @pytest.mark.asyncio
    async def test_short_description_rejected(self, service, candidate, repos):
        """A 40-character description should fail the 50-character minimum."""
        with pytest.raises(ValidationError, match="at least 50 characters") as exc_info:
            await service.create(candidate, _posting_data(description="x" * 40))

        assert [d["field"] for d in exc_info.value.details] == ["description"]
        assert repos.postings.all() == []

    @pytest.mark.asyncio
    async def test_every_violation_reported(self, service, candidate):
        """All violated fields should be listed at once."""
        with pytest.raises(ValidationError) as exc_info:
            await service.create(
                candidate, _posting_data(title="", location="", required_skills=[])
            )
        fields = {d["field"] for d in exc_info.value.details}
        assert {"title", "location", "required_skills"} <= fields

    @pytest.mark.asyncio
    async def test_foreign_cv_profile_rejected(
        self, service, repos, candidate, company_user
    ):
        """Linking another user's CV profile should be forbidden."""
        foreign = await repos.cv_profiles.add(
            CvProfile(user_id=company_user.id, name="Other", profession="HR", skills=["x"])
        )
        with pytest.raises(ForbiddenError):
            await service.create(candidate, _posting_data(linked_cv_profile_id=foreign.id))

    @pytest.mark.asyncio
    async def test_unknown_cv_profile(self, service, candidate):
        """Linking a missing CV profile should raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await service.create(candidate, _posting_data(linked_cv_profile_id=uuid.uuid4()))


class TestUpdate:
    @pytest.mark.asyncio
    async def test_owner_updates_fields(self, service, candidate, published_posting):
        """The owner should be able to edit fields; status keys are ignored."""
        updated = await service.update(
            candidate, published_posting.id, {"title": "Senior Python developer", "status": "x"}
        )
        assert updated.title == "Senior Python developer"
        assert updated.status == PostingStatus.PUBLISHED.value

    @pytest.mark.asyncio
    async def test_non_owner_forbidden(self, service, company, published_posting):
        """Only the owner may edit a posting."""
        with pytest.raises(ForbiddenError):
            await service.update(company, published_posting.id, {"title": "Hijacked"})

    @pytest.mark.asyncio
    async def test_published_keeps_cv(self, service, candidate, published_posting):
        """Unlinking the CV of a published posting should be refused."""
        with pytest.raises(ConflictError) as exc_info:
            await service.update(
                candidate, published_posting.id, {"linked_cv_profile_id": None}
            )
        assert exc_info.value.code == "CV_PROFILE_REQUIRED"

    @pytest.mark.asyncio
    async def test_delete(self, service, candidate, published_posting, repos):
        """The owner should be able to delete the posting."""
        await service.delete(candidate, published_posting.id)
        assert await repos.postings.get(published_posting.id) is None


# =============================================================================
# Publish toggle
# =============================================================================


class TestTogglePublish:
    @pytest.mark.asyncio
    async def test_publish_requires_cv_profile(self, service, candidate, repos):
        """Publishing without a CV profile should fail and leave the status alone."""
        posting = await service.create(candidate, _posting_data())

        with pytest.raises(ConflictError, match="CV profile is required") as exc_info:
            await service.toggle_publish(candidate, posting.id)

        assert exc_info.value.code == "CV_PROFILE_REQUIRED"
        assert (await repos.postings.get(posting.id)).status == PostingStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_publish_resets_expiration(self, repos, blob_store, dispatcher, candidate, cv_profile):
        """Publishing should push the expiration date a full lifetime ahead."""
        creating = PostingService(
            repos, blob_store, dispatcher, clock=lambda: FIXED_NOW - timedelta(days=10)
        )
        posting = await creating.create(
            candidate, _posting_data(linked_cv_profile_id=cv_profile.id)
        )
        service = PostingService(repos, blob_store, dispatcher, clock=fixed_clock)

        published = await service.toggle_publish(candidate, posting.id)

        assert published.status == PostingStatus.PUBLISHED.value
        assert published.expiration_date == FIXED_NOW + timedelta(days=30)

    @pytest.mark.asyncio
    async def test_toggle_back_to_pending(self, service, candidate, published_posting):
        """A second toggle should unpublish."""
        posting = await service.toggle_publish(candidate, published_posting.id)
        assert posting.status == PostingStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_non_owner_forbidden(self, service, company, published_posting):
        """A company may not publish a candidate's posting."""
        with pytest.raises(ForbiddenError):
            await service.toggle_publish(company, published_posting.id)

    @pytest.mark.asyncio
    async def test_expired_posting_cannot_publish(
        self, service, candidate, published_posting, repos
    ):
        """A posting past its expiration should be expired and stay so."""
        published_posting.expiration_date = FIXED_NOW - timedelta(days=1)

        with pytest.raises(TerminalStatusError):
            await service.toggle_publish(candidate, published_posting.id)

        stored = await repos.postings.get(published_posting.id)
        assert stored.status == PostingStatus.EXPIRED.value

    @pytest.mark.asyncio
    async def test_toggle_emits_no_notification(
        self, service, candidate, published_posting, repos
    ):
        """Publish toggles should not notify anybody."""
        await service.toggle_publish(candidate, published_posting.id)
        assert repos.notifications.all() == []


# =============================================================================
# Admin review
# =============================================================================


class TestAdminReview:
    @pytest.mark.asyncio
    async def test_validate(self, service, admin, published_posting):
        """An admin should validate a posting once."""
        posting = await service.validate(admin, published_posting.id)
        assert posting.is_validated is True

        with pytest.raises(ConflictError) as exc_info:
            await service.validate(admin, published_posting.id)
        assert exc_info.value.code == "ALREADY_VALIDATED"

    @pytest.mark.asyncio
    async def test_validate_requires_admin(self, service, company, published_posting):
        """Non-admins may not validate."""
        with pytest.raises(ForbiddenError):
            await service.validate(company, published_posting.id)

    @pytest.mark.parametrize("reason", ["", "   ", None])
    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, service, admin, published_posting, reason):
        """A blank rejection reason should fail validation."""
        with pytest.raises(ValidationError, match="rejection reason is required"):
            await service.reject(admin, published_posting.id, reason)
        assert published_posting.status == PostingStatus.PUBLISHED.value

    @pytest.mark.asyncio
    async def test_reject_clears_validation_silently(
        self, service, admin, published_posting, repos
    ):
        """Rejection should set the reason, clear validation and notify nobody."""
        await service.validate(admin, published_posting.id)

        posting = await service.reject(admin, published_posting.id, "  Duplicate posting ")

        assert posting.status == PostingStatus.REJECTED.value
        assert posting.is_validated is False
        assert posting.rejection_reason == "Duplicate posting"
        assert repos.notifications.all() == []
        assert repos.outbox.rows == []

    @pytest.mark.asyncio
    async def test_rejected_cannot_be_validated_or_rejected_again(
        self, service, admin, published_posting
    ):
        """Rejection is final for both review actions."""
        await service.reject(admin, published_posting.id, "Spam")

        with pytest.raises(ConflictError) as validated:
            await service.validate(admin, published_posting.id)
        with pytest.raises(ConflictError) as rejected:
            await service.reject(admin, published_posting.id, "Spam again")

        assert validated.value.code == "POSTING_REJECTED"
        assert rejected.value.code == "ALREADY_REJECTED"

    @pytest.mark.asyncio
    async def test_rejection_beats_expiry(self, service, admin, published_posting):
        """A rejected posting past its expiry should stay rejected."""
        await service.reject(admin, published_posting.id, "Spam")
        published_posting.expiration_date = FIXED_NOW - timedelta(days=1)

        posting = await service.get(published_posting.id)

        assert posting.status == PostingStatus.REJECTED.value


# =============================================================================
# Saves
# =============================================================================


class TestToggleSave:
    @pytest.mark.asyncio
    async def test_toggle_save_round_trip(self, service, candidate, published_posting, repos):
        """Saving twice should add then remove the membership."""
        _, saved = await service.toggle_save(candidate, published_posting.id)
        assert saved is True
        assert await service.save_counts([published_posting]) == {published_posting.id: 1}

        _, saved = await service.toggle_save(candidate, published_posting.id)
        assert saved is False
        assert repos.postings.saves == []

    @pytest.mark.asyncio
    async def test_requires_cv_profile(self, service, candidate):
        """Postings without a CV profile cannot be saved."""
        posting = await service.create(candidate, _posting_data())
        with pytest.raises(ConflictError) as exc_info:
            await service.toggle_save(candidate, posting.id)
        assert exc_info.value.code == "CV_PROFILE_REQUIRED"

    @pytest.mark.asyncio
    async def test_list_saved(self, service, candidate, published_posting):
        """Saved postings should be listed for the saver."""
        await service.toggle_save(candidate, published_posting.id)
        items, total = await service.list_saved(candidate, offset=0, limit=10)
        assert [p.id for p in items] == [published_posting.id]
        assert total == 1


# =============================================================================
# Reads
# =============================================================================


class TestReads:
    @pytest.mark.asyncio
    async def test_search_filters(self, service, published_posting):
        """Search should match published postings on the given filters."""
        found, total = await service.search(
            PostingFilters(location="lyon", skills=("python",)), offset=0, limit=10
        )
        assert [p.id for p in found] == [published_posting.id]
        assert total == 1

        found, total = await service.search(
            PostingFilters(contract_type="internship"), offset=0, limit=10
        )
        assert (found, total) == ([], 0)

    @pytest.mark.asyncio
    async def test_search_hides_expired(self, service, published_posting):
        """Postings found expired on read should drop out of results."""
        published_posting.expiration_date = FIXED_NOW - timedelta(minutes=1)

        found, total = await service.search(PostingFilters(), offset=0, limit=10)

        assert (found, total) == ([], 0)
        assert published_posting.status == PostingStatus.EXPIRED.value

    @pytest.mark.asyncio
    async def test_list_mine(self, service, candidate, published_posting):
        """Owners should see their own postings whatever the status."""
        items, total = await service.list_mine(candidate, offset=0, limit=10)
        assert [p.id for p in items] == [published_posting.id]
        assert total == 1

    @pytest.mark.asyncio
    async def test_get_missing(self, service):
        """Unknown ids should raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await service.get(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_get_cv(self, service, blob_store, published_posting, cv_profile):
        """The linked CV file should be returned with its stored name."""
        cv_profile.cv_file_handle = await blob_store.put(
            MINIMAL_PDF, content_type="application/pdf", filename="stored.pdf"
        )
        cv_profile.cv_filename = "Camille_CV.pdf"
        cv_profile.cv_mimetype = "application/pdf"

        blob = await service.get_cv(published_posting.id)

        assert blob.data == MINIMAL_PDF
        assert blob.filename == "Camille_CV.pdf"

    @pytest.mark.asyncio
    async def test_get_cv_without_file(self, service, published_posting):
        """A CV profile without a file should raise NotFoundError."""
        with pytest.raises(NotFoundError, match="CV file"):
            await service.get_cv(published_posting.id)
