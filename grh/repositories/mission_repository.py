"""Repository for missions and their report feedback."""

import uuid

from sqlalchemy import or_, select

from grh.models import Mission, MissionFeedback
from grh.repositories.base import SqlRepository, contains
from grh.repositories.interfaces import MissionFilters

# Columns a mission list may be sorted on.
SORTABLE_FIELDS: frozenset[str] = frozenset({"title", "start_date", "end_date", "status"})


class MissionRepository(SqlRepository[Mission]):
    model = Mission

    async def list_for_company(
        self,
        company_id: uuid.UUID,
        filters: MissionFilters,
        *,
        offset: int,
        limit: int,
    ) -> tuple[list[Mission], int]:
        """Missions of a company, filtered and sorted.

        Args:
            company_id: Owning company.
            filters: Free text, statuses and start-date range.
            offset: Rows to skip.
            limit: Maximum rows returned.

        Returns:
            Tuple of (missions, total matching count).
        """
        stmt = select(Mission).where(Mission.company_id == company_id)
        if filters.search:
            pattern = contains(filters.search)
            stmt = stmt.where(
                or_(Mission.title.ilike(pattern), Mission.description.ilike(pattern))
            )
        if filters.statuses:
            stmt = stmt.where(Mission.status.in_(filters.statuses))
        if filters.date_from:
            stmt = stmt.where(Mission.start_date >= filters.date_from)
        if filters.date_to:
            stmt = stmt.where(Mission.start_date <= filters.date_to)

        sort_field = filters.sort.field if filters.sort.field in SORTABLE_FIELDS else "start_date"
        column = getattr(Mission, sort_field)
        order = column.desc() if filters.sort.descending else column.asc()
        stmt = stmt.order_by(order, Mission.id)
        return await self._page(stmt, offset=offset, limit=limit)

    async def list_for_employee(self, employee_id: uuid.UUID) -> list[Mission]:
        return await self._scalars(
            select(Mission)
            .where(Mission.employee_id == employee_id)
            .order_by(Mission.start_date.desc())
        )

    async def list_for_contract(self, contract_id: uuid.UUID) -> list[Mission]:
        return await self._scalars(
            select(Mission)
            .where(Mission.contract_id == contract_id)
            .order_by(Mission.start_date.desc())
        )

    async def add_feedback(self, feedback: MissionFeedback) -> MissionFeedback:
        self.db.add(feedback)
        await self.db.flush()
        await self.db.refresh(feedback)
        return feedback

    async def list_feedback(self, mission_id: uuid.UUID) -> list[MissionFeedback]:
        return list(
            (
                await self.db.execute(
                    select(MissionFeedback)
                    .where(MissionFeedback.mission_id == mission_id)
                    .order_by(MissionFeedback.created_at)
                )
            )
            .scalars()
            .all()
        )
