"""Repository for trainings, their contents and per-employee progress."""

import uuid

from sqlalchemy import or_, select

from grh.models import Training, TrainingContent, TrainingProgress
from grh.repositories.base import SqlRepository, contains
from grh.repositories.interfaces import TrainingFilters


class TrainingRepository(SqlRepository[Training]):
    model = Training

    async def search(
        self, filters: TrainingFilters, *, offset: int, limit: int
    ) -> tuple[list[Training], int]:
        """Trainings where any given participant id matches, plus attribute filters."""
        stmt = select(Training)
        participants = []
        if filters.company_id:
            participants.append(Training.company_id == filters.company_id)
        if filters.employee_id:
            participants.append(Training.employee_id == filters.employee_id)
        if filters.trainer_id:
            participants.append(Training.trainer_id == filters.trainer_id)
        if participants:
            stmt = stmt.where(or_(*participants))
        if filters.statuses:
            stmt = stmt.where(Training.status.in_(filters.statuses))
        if filters.modality:
            stmt = stmt.where(Training.modality == filters.modality)
        if filters.training_type:
            stmt = stmt.where(Training.training_type == filters.training_type)
        if filters.search:
            pattern = contains(filters.search)
            stmt = stmt.where(
                or_(Training.title.ilike(pattern), Training.description.ilike(pattern))
            )
        stmt = stmt.order_by(Training.created_at.desc(), Training.id)
        return await self._page(stmt, offset=offset, limit=limit)

    async def add_content(self, content: TrainingContent) -> TrainingContent:
        self.db.add(content)
        await self.db.flush()
        await self.db.refresh(content)
        return content

    async def get_content(self, content_id: uuid.UUID) -> TrainingContent | None:
        return await self.db.get(TrainingContent, content_id)

    async def list_contents(self, training_id: uuid.UUID) -> list[TrainingContent]:
        result = await self.db.execute(
            select(TrainingContent)
            .where(TrainingContent.training_id == training_id)
            .order_by(TrainingContent.added_at, TrainingContent.id)
        )
        return list(result.scalars().all())

    async def get_progress(
        self, training_id: uuid.UUID, employee_id: uuid.UUID, content_id: uuid.UUID
    ) -> TrainingProgress | None:
        result = await self.db.execute(
            select(TrainingProgress).where(
                TrainingProgress.training_id == training_id,
                TrainingProgress.employee_id == employee_id,
                TrainingProgress.content_id == content_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_progress(self, progress: TrainingProgress) -> TrainingProgress:
        self.db.add(progress)
        await self.db.flush()
        await self.db.refresh(progress)
        return progress

    async def list_progress(
        self, training_id: uuid.UUID, employee_id: uuid.UUID
    ) -> list[TrainingProgress]:
        result = await self.db.execute(
            select(TrainingProgress).where(
                TrainingProgress.training_id == training_id,
                TrainingProgress.employee_id == employee_id,
            )
        )
        return list(result.scalars().all())
