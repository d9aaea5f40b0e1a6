"""Repositories for time entries, absences and closed months."""

import uuid
from datetime import date

from sqlalchemy import Select, select

from grh.models import Absence, TimeEntry, TimesheetMonth
from grh.models.enums import ValidationState
from grh.repositories.base import SqlRepository


class TimeEntryRepository(SqlRepository[TimeEntry]):
    model = TimeEntry

    async def list_for_contract(
        self,
        contract_id: uuid.UUID,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[TimeEntry]:
        """Entries of a contract, oldest day first. Bounds are inclusive."""
        stmt: Select = select(TimeEntry).where(TimeEntry.contract_id == contract_id)
        if date_from is not None:
            stmt = stmt.where(TimeEntry.work_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(TimeEntry.work_date <= date_to)
        return await self._scalars(stmt.order_by(TimeEntry.work_date, TimeEntry.start_time))

    async def list_pending_for_company(self, company_id: uuid.UUID) -> list[TimeEntry]:
        return await self._scalars(
            select(TimeEntry)
            .where(
                TimeEntry.company_id == company_id,
                TimeEntry.status == ValidationState.PENDING.value,
            )
            .order_by(TimeEntry.work_date, TimeEntry.start_time)
        )


class AbsenceRepository(SqlRepository[Absence]):
    model = Absence

    async def list_for_contract(
        self,
        contract_id: uuid.UUID,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[Absence]:
        """Absences of a contract by start date. Bounds are inclusive."""
        stmt: Select = select(Absence).where(Absence.contract_id == contract_id)
        if date_from is not None:
            stmt = stmt.where(Absence.start_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(Absence.start_date <= date_to)
        return await self._scalars(stmt.order_by(Absence.start_date))

    async def list_pending_for_company(self, company_id: uuid.UUID) -> list[Absence]:
        return await self._scalars(
            select(Absence)
            .where(
                Absence.company_id == company_id,
                Absence.status == ValidationState.PENDING.value,
            )
            .order_by(Absence.start_date)
        )


class TimesheetMonthRepository(SqlRepository[TimesheetMonth]):
    model = TimesheetMonth

    async def get_for_period(
        self, contract_id: uuid.UUID, year: int, month: int
    ) -> TimesheetMonth | None:
        result = await self.db.execute(
            select(TimesheetMonth).where(
                TimesheetMonth.contract_id == contract_id,
                TimesheetMonth.year == year,
                TimesheetMonth.month == month,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_contract(self, contract_id: uuid.UUID) -> list[TimesheetMonth]:
        return await self._scalars(
            select(TimesheetMonth)
            .where(TimesheetMonth.contract_id == contract_id)
            .order_by(TimesheetMonth.year, TimesheetMonth.month)
        )
