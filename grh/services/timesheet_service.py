"""Time tracking ("pointage") against signed contracts.

Lifecycle of a time entry or an absence:
    pending -> validated | rejected            (owning company)

The assigned employee edits or deletes an item while it is pending. Once no
item of a month is pending the company closes the month, freezing its
totals; nothing can be recorded in a closed month afterwards. Totals count
validated items only, and an absence counts in the month it starts.
"""

import calendar
import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from grh.core.errors import ConflictError, ValidationError
from grh.models import Absence, Contract, TimeEntry, TimesheetMonth
from grh.models.enums import ContractState, ValidationState
from grh.services.authorization import Action, Actor, require
from grh.services.base import WorkflowService
from grh.services.status_transitions import (
    ActorRole,
    LifecycleEntity,
    TerminalStatusError,
    apply_changes,
    apply_transition,
    is_terminal,
)
from grh.services.validation_rules import EntityKind, hours_between, snapshot, validate

logger = logging.getLogger(__name__)

ENTRY_FIELDS: tuple[str, ...] = (
    "work_date",
    "start_time",
    "end_time",
    "break_hours",
    "overtime_hours",
    "comment",
)
ABSENCE_FIELDS: tuple[str, ...] = (
    "absence_type",
    "start_date",
    "duration_days",
    "justification",
    "comment",
)
DEFAULT_BREAK_HOURS = 1.0
YEAR_MIN, YEAR_MAX = 2000, 2100


@dataclass(frozen=True)
class MonthTotals:
    worked_hours: float
    overtime_hours: float
    absence_days: int


@dataclass(frozen=True)
class Timesheet:
    """Items of a contract, optionally restricted to one month."""

    contract: Contract
    entries: list[TimeEntry]
    absences: list[Absence]
    months: list[TimesheetMonth]
    totals: MonthTotals


@dataclass(frozen=True)
class PendingReview:
    entries: list[TimeEntry]
    absences: list[Absence]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month.

    Raises:
        ValidationError: If the year or month is out of range.
    """
    details = []
    if not YEAR_MIN <= year <= YEAR_MAX:
        details.append({"field": "year", "message": f"Must be between {YEAR_MIN} and {YEAR_MAX}"})
    if not 1 <= month <= 12:
        details.append({"field": "month", "message": "Must be between 1 and 12"})
    if details:
        raise ValidationError(message="Invalid month", details=details)
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def worked_hours(entry: TimeEntry) -> float:
    """Hours between arrival and departure, less the break."""
    return max(hours_between(entry.start_time, entry.end_time) - entry.break_hours, 0.0)


def summarize(entries: Sequence[TimeEntry], absences: Sequence[Absence]) -> MonthTotals:
    """Totals over the validated items."""
    validated = ValidationState.VALIDATED.value
    kept_entries = [e for e in entries if e.status == validated]
    kept_absences = [a for a in absences if a.status == validated]
    return MonthTotals(
        worked_hours=round(sum(worked_hours(e) for e in kept_entries), 2),
        overtime_hours=round(sum(e.overtime_hours for e in kept_entries), 2),
        absence_days=sum(a.duration_days for a in kept_absences),
    )


class TimesheetService(WorkflowService):
    """Recording, review and monthly closing of worked time and absences."""

    # -----------------------------------------------------------------------
    # Guards
    # -----------------------------------------------------------------------

    async def _recordable_contract(self, actor: Actor, contract_id: uuid.UUID) -> Contract:
        contract = await self._get_or_404(self._repos.contracts, contract_id, "Contract")
        require(actor, Action.TIMESHEET_RECORD, contract)
        if contract.state != ContractState.SIGNED.value:
            raise ConflictError(
                "Time can only be recorded against a signed contract",
                code="CONTRACT_NOT_SIGNED",
            )
        return contract

    async def _ensure_month_open(self, contract_id: uuid.UUID, day: date) -> None:
        closed = await self._repos.timesheet_months.get_for_period(
            contract_id, day.year, day.month
        )
        if closed is not None:
            raise ConflictError(
                f"The timesheet of {day.month:02d}/{day.year} is already validated",
                code="MONTH_LOCKED",
            )

    async def _contract_start(self, contract_id: uuid.UUID) -> date:
        contract = await self._get_or_404(self._repos.contracts, contract_id, "Contract")
        return contract.start_date

    # -----------------------------------------------------------------------
    # Recording
    # -----------------------------------------------------------------------

    async def record_entry(
        self, actor: Actor, contract_id: uuid.UUID, data: Mapping[str, Any]
    ) -> TimeEntry:
        """Record one worked day as pending.

        Break defaults to one hour and overtime to zero.

        Raises:
            ForbiddenError: If the actor is not the contract's employee.
            ConflictError: If the contract is not signed or the month is closed.
            ValidationError: If the times are inconsistent, the day is in
                the future or before the contract starts.
        """
        contract = await self._recordable_contract(actor, contract_id)
        fields = {name: data.get(name) for name in ENTRY_FIELDS}
        if fields["break_hours"] is None:
            fields["break_hours"] = DEFAULT_BREAK_HOURS
        if fields["overtime_hours"] is None:
            fields["overtime_hours"] = 0.0
        validate(
            EntityKind.TIME_ENTRY,
            {**fields, "contract_start_date": contract.start_date},
            now=self.now(),
        )
        await self._ensure_month_open(contract.id, fields["work_date"])

        entry = await self._repos.time_entries.add(
            TimeEntry(
                contract_id=contract.id,
                employee_id=contract.employee_id,
                company_id=contract.company_id,
                status=ValidationState.PENDING.value,
                **fields,
            )
        )
        logger.info("Time entry %s recorded on contract %s", entry.id, contract.id)
        return entry

    async def record_absence(
        self, actor: Actor, contract_id: uuid.UUID, data: Mapping[str, Any]
    ) -> Absence:
        """Declare an absence as pending.

        Raises:
            ForbiddenError: If the actor is not the contract's employee.
            ConflictError: If the contract is not signed or the month is closed.
            ValidationError: If the type is unknown, the duration is not
                positive, or the start is before the contract or more than
                three months ahead.
        """
        contract = await self._recordable_contract(actor, contract_id)
        fields = {name: data.get(name) for name in ABSENCE_FIELDS}
        validate(
            EntityKind.ABSENCE,
            {**fields, "contract_start_date": contract.start_date},
            now=self.now(),
        )
        await self._ensure_month_open(contract.id, fields["start_date"])

        absence = await self._repos.absences.add(
            Absence(
                contract_id=contract.id,
                employee_id=contract.employee_id,
                company_id=contract.company_id,
                status=ValidationState.PENDING.value,
                **fields,
            )
        )
        logger.info("Absence %s declared on contract %s", absence.id, contract.id)
        return absence

    # -----------------------------------------------------------------------
    # Employee edits, pending items only
    # -----------------------------------------------------------------------

    async def update_entry(
        self, actor: Actor, entry_id: uuid.UUID, data: Mapping[str, Any]
    ) -> TimeEntry:
        entry = await self._get_or_404(self._repos.time_entries, entry_id, "Time entry")
        require(actor, Action.TIMESHEET_EDIT, entry)
        if is_terminal(LifecycleEntity.TIME_ENTRY, entry.status):
            raise TerminalStatusError(LifecycleEntity.TIME_ENTRY, entry.status)

        proposed = {name: value for name, value in data.items() if name in ENTRY_FIELDS}
        current = snapshot(entry, ENTRY_FIELDS)
        current["contract_start_date"] = await self._contract_start(entry.contract_id)
        validate(EntityKind.TIME_ENTRY, proposed, current, now=self.now())
        if "work_date" in proposed:
            await self._ensure_month_open(entry.contract_id, proposed["work_date"])

        apply_changes(entry, proposed)
        return await self._repos.time_entries.save(entry)

    async def update_absence(
        self, actor: Actor, absence_id: uuid.UUID, data: Mapping[str, Any]
    ) -> Absence:
        absence = await self._get_or_404(self._repos.absences, absence_id, "Absence")
        require(actor, Action.TIMESHEET_EDIT, absence)
        if is_terminal(LifecycleEntity.ABSENCE, absence.status):
            raise TerminalStatusError(LifecycleEntity.ABSENCE, absence.status)

        proposed = {name: value for name, value in data.items() if name in ABSENCE_FIELDS}
        current = snapshot(absence, ABSENCE_FIELDS)
        current["contract_start_date"] = await self._contract_start(absence.contract_id)
        validate(EntityKind.ABSENCE, proposed, current, now=self.now())
        if "start_date" in proposed:
            await self._ensure_month_open(absence.contract_id, proposed["start_date"])

        apply_changes(absence, proposed)
        return await self._repos.absences.save(absence)

    async def delete_entry(self, actor: Actor, entry_id: uuid.UUID) -> None:
        entry = await self._get_or_404(self._repos.time_entries, entry_id, "Time entry")
        require(actor, Action.TIMESHEET_EDIT, entry)
        if is_terminal(LifecycleEntity.TIME_ENTRY, entry.status):
            raise TerminalStatusError(LifecycleEntity.TIME_ENTRY, entry.status)
        await self._repos.time_entries.delete(entry)
        logger.info("Time entry %s deleted by %s", entry_id, actor.user_id)

    async def delete_absence(self, actor: Actor, absence_id: uuid.UUID) -> None:
        absence = await self._get_or_404(self._repos.absences, absence_id, "Absence")
        require(actor, Action.TIMESHEET_EDIT, absence)
        if is_terminal(LifecycleEntity.ABSENCE, absence.status):
            raise TerminalStatusError(LifecycleEntity.ABSENCE, absence.status)
        await self._repos.absences.delete(absence)
        logger.info("Absence %s deleted by %s", absence_id, actor.user_id)

    # -----------------------------------------------------------------------
    # Company review
    # -----------------------------------------------------------------------

    async def review_entry(
        self, actor: Actor, entry_id: uuid.UUID, status: ValidationState | str
    ) -> TimeEntry:
        """Validate or reject a pending entry.

        Raises:
            ForbiddenError: If the actor does not own the contract.
            TerminalStatusError: If the entry was already reviewed.
            InvalidStatusTransitionError: If ``status`` is not a review outcome.
        """
        entry = await self._get_or_404(self._repos.time_entries, entry_id, "Time entry")
        require(actor, Action.TIMESHEET_REVIEW, entry)
        result = apply_transition(
            LifecycleEntity.TIME_ENTRY, entry.status, status, ActorRole.COMPANY, now=self.now()
        )
        apply_changes(entry, result.changes)
        entry = await self._repos.time_entries.save(entry)
        logger.info("Time entry %s %s by %s", entry.id, entry.status, actor.user_id)
        return entry

    async def review_absence(
        self, actor: Actor, absence_id: uuid.UUID, status: ValidationState | str
    ) -> Absence:
        absence = await self._get_or_404(self._repos.absences, absence_id, "Absence")
        require(actor, Action.TIMESHEET_REVIEW, absence)
        result = apply_transition(
            LifecycleEntity.ABSENCE, absence.status, status, ActorRole.COMPANY, now=self.now()
        )
        apply_changes(absence, result.changes)
        absence = await self._repos.absences.save(absence)
        logger.info("Absence %s %s by %s", absence.id, absence.status, actor.user_id)
        return absence

    async def list_pending(self, actor: Actor) -> PendingReview:
        """Items awaiting the actor's review, across all its contracts."""
        require(actor, Action.TIMESHEET_LIST_PENDING)
        return PendingReview(
            entries=await self._repos.time_entries.list_pending_for_company(actor.user_id),
            absences=await self._repos.absences.list_pending_for_company(actor.user_id),
        )

    # -----------------------------------------------------------------------
    # Reading and monthly closing
    # -----------------------------------------------------------------------

    async def get_timesheet(
        self,
        actor: Actor,
        contract_id: uuid.UUID,
        year: int | None = None,
        month: int | None = None,
    ) -> Timesheet:
        """Items of a contract, restricted to one month when both are given.

        Raises:
            ValidationError: If only one of year and month is given.
        """
        contract = await self._get_or_404(self._repos.contracts, contract_id, "Contract")
        require(actor, Action.TIMESHEET_READ, contract)
        date_from = date_to = None
        if year is not None or month is not None:
            if year is None or month is None:
                raise ValidationError(
                    message="Year and month go together",
                    details=[{"field": "month", "message": "Give both year and month"}],
                )
            date_from, date_to = month_bounds(year, month)

        entries = await self._repos.time_entries.list_for_contract(
            contract.id, date_from=date_from, date_to=date_to
        )
        absences = await self._repos.absences.list_for_contract(
            contract.id, date_from=date_from, date_to=date_to
        )
        return Timesheet(
            contract=contract,
            entries=entries,
            absences=absences,
            months=await self._repos.timesheet_months.list_for_contract(contract.id),
            totals=summarize(entries, absences),
        )

    async def validate_month(
        self, actor: Actor, contract_id: uuid.UUID, year: int, month: int
    ) -> TimesheetMonth:
        """Close a month once every item in it has been reviewed.

        Raises:
            ForbiddenError: If the actor does not own the contract.
            ValidationError: If the month is out of range or ends before the
                contract starts.
            ConflictError: If the month is already closed or still holds
                pending items.
        """
        contract = await self._get_or_404(self._repos.contracts, contract_id, "Contract")
        require(actor, Action.TIMESHEET_VALIDATE_MONTH, contract)
        first, last = month_bounds(year, month)
        if last < contract.start_date:
            raise ValidationError(
                message="The contract had not started in this month",
                details=[{"field": "month", "message": "Month ends before the contract starts"}],
            )
        if await self._repos.timesheet_months.get_for_period(contract.id, year, month):
            raise ConflictError(
                f"The timesheet of {month:02d}/{year} is already validated",
                code="MONTH_ALREADY_VALIDATED",
            )

        entries = await self._repos.time_entries.list_for_contract(
            contract.id, date_from=first, date_to=last
        )
        absences = await self._repos.absences.list_for_contract(
            contract.id, date_from=first, date_to=last
        )
        pending = ValidationState.PENDING.value
        pending_count = sum(1 for item in [*entries, *absences] if item.status == pending)
        if pending_count:
            raise ConflictError(
                f"{pending_count} item(s) of {month:02d}/{year} are still pending",
                code="PENDING_ITEMS",
                details=[{"field": "month", "message": f"{pending_count} pending"}],
            )

        totals = summarize(entries, absences)
        closed = await self._repos.timesheet_months.add(
            TimesheetMonth(
                contract_id=contract.id,
                year=year,
                month=month,
                validated_by=actor.user_id,
                validated_at=self.now(),
                entry_count=len(entries),
                absence_count=len(absences),
                worked_hours=totals.worked_hours,
                overtime_hours=totals.overtime_hours,
                absence_days=totals.absence_days,
            )
        )
        logger.info(
            "Timesheet %02d/%d of contract %s validated: %.2fh worked",
            month,
            year,
            contract.id,
            totals.worked_hours,
        )
        return closed
