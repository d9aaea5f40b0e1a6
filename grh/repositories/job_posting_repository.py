"""Repository for candidate job postings and their saves."""

import uuid
from collections.abc import Sequence

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert

from grh.models import JobPosting, PostingSave
from grh.models.enums import PostingStatus
from grh.repositories.base import SqlRepository, contains
from grh.repositories.interfaces import PostingFilters


class JobPostingRepository(SqlRepository[JobPosting]):
    model = JobPosting

    async def list_for_owner(
        self, owner_id: uuid.UUID, *, offset: int, limit: int
    ) -> tuple[list[JobPosting], int]:
        stmt = (
            select(JobPosting)
            .where(JobPosting.owner_candidate_id == owner_id)
            .order_by(JobPosting.created_at.desc())
        )
        return await self._page(stmt, offset=offset, limit=limit)

    async def search(
        self, filters: PostingFilters, *, offset: int, limit: int
    ) -> tuple[list[JobPosting], int]:
        """Published postings matching every given filter, newest first."""
        conditions = [JobPosting.status == PostingStatus.PUBLISHED.value]
        if filters.contract_type:
            conditions.append(JobPosting.contract_type == filters.contract_type)
        if filters.location:
            conditions.append(JobPosting.location.ilike(contains(filters.location)))
        if filters.profession:
            conditions.append(JobPosting.profession.ilike(contains(filters.profession)))
        if filters.skills:
            conditions.append(
                or_(*(JobPosting.required_skills.contains([skill]) for skill in filters.skills))
            )
        if filters.search:
            pattern = contains(filters.search)
            conditions.append(
                or_(
                    JobPosting.title.ilike(pattern),
                    JobPosting.description.ilike(pattern),
                )
            )
        stmt = (
            select(JobPosting)
            .where(and_(*conditions))
            .order_by(JobPosting.created_at.desc())
        )
        return await self._page(stmt, offset=offset, limit=limit)

    async def list_published(self) -> list[JobPosting]:
        return await self._scalars(
            select(JobPosting)
            .where(JobPosting.status == PostingStatus.PUBLISHED.value)
            .order_by(JobPosting.created_at.desc())
        )

    async def list_saved_by(
        self, user_id: uuid.UUID, *, offset: int, limit: int
    ) -> tuple[list[JobPosting], int]:
        stmt = (
            select(JobPosting)
            .join(PostingSave, PostingSave.posting_id == JobPosting.id)
            .where(PostingSave.user_id == user_id)
            .order_by(PostingSave.created_at.desc())
        )
        return await self._page(stmt, offset=offset, limit=limit)

    async def is_saved(self, posting_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(PostingSave.id).where(
                PostingSave.posting_id == posting_id,
                PostingSave.user_id == user_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def add_save(self, posting_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Record a save; a concurrent duplicate is ignored by the unique key."""
        await self.db.execute(
            pg_insert(PostingSave)
            .values(posting_id=posting_id, user_id=user_id)
            .on_conflict_do_nothing(constraint="uq_posting_saves_posting_user")
        )

    async def remove_save(self, posting_id: uuid.UUID, user_id: uuid.UUID) -> None:
        await self.db.execute(
            delete(PostingSave).where(
                PostingSave.posting_id == posting_id,
                PostingSave.user_id == user_id,
            )
        )

    async def count_saves(self, posting_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, int]:
        """Save counts keyed by posting id; postings without saves map to 0."""
        counts = {posting_id: 0 for posting_id in posting_ids}
        if not counts:
            return counts
        result = await self.db.execute(
            select(PostingSave.posting_id, func.count())
            .where(PostingSave.posting_id.in_(list(counts)))
            .group_by(PostingSave.posting_id)
        )
        for posting_id, count in result.all():
            counts[posting_id] = count
        return counts
