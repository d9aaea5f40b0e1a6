"""Time tracking API router.

Endpoints:
- GET /timesheets/contracts/{id} - entries, absences and closed months
  (optionally one month with ?year=&month=)
- POST /timesheets/contracts/{id}/entries|absences - record (employee)
- PUT /timesheets/contracts/{id}/months - close a month (company)
- GET /timesheets/pending - items awaiting the company's review
- /timesheets/entries/{id}, /timesheets/absences/{id} - edit, delete
- PUT /timesheets/entries|absences/{id}/validate|reject
"""

import uuid
from typing import Any

from fastapi import APIRouter

from grh.api.deps import CurrentActor, Timesheets
from grh.core.responses import DataResponse
from grh.models import Absence, TimeEntry, TimesheetMonth
from grh.models.enums import ValidationState
from grh.schemas import AbsenceRequest, TimeEntryRequest, ValidateMonthRequest
from grh.services.timesheet_service import MonthTotals, worked_hours

router = APIRouter()


def _entry_to_dict(entry: TimeEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "contract_id": entry.contract_id,
        "employee_id": entry.employee_id,
        "company_id": entry.company_id,
        "work_date": entry.work_date,
        "start_time": entry.start_time,
        "end_time": entry.end_time,
        "break_hours": entry.break_hours,
        "overtime_hours": entry.overtime_hours,
        "worked_hours": round(worked_hours(entry), 2),
        "comment": entry.comment,
        "status": entry.status,
        "created_at": entry.created_at,
        "updated_at": entry.updated_at,
    }


def _absence_to_dict(absence: Absence) -> dict[str, Any]:
    return {
        "id": absence.id,
        "contract_id": absence.contract_id,
        "employee_id": absence.employee_id,
        "company_id": absence.company_id,
        "absence_type": absence.absence_type,
        "start_date": absence.start_date,
        "duration_days": absence.duration_days,
        "justification": absence.justification,
        "comment": absence.comment,
        "status": absence.status,
        "created_at": absence.created_at,
        "updated_at": absence.updated_at,
    }


def _month_to_dict(closed: TimesheetMonth) -> dict[str, Any]:
    return {
        "id": closed.id,
        "contract_id": closed.contract_id,
        "year": closed.year,
        "month": closed.month,
        "validated_by": closed.validated_by,
        "validated_at": closed.validated_at,
        "entry_count": closed.entry_count,
        "absence_count": closed.absence_count,
        "worked_hours": closed.worked_hours,
        "overtime_hours": closed.overtime_hours,
        "absence_days": closed.absence_days,
    }


def _totals_to_dict(totals: MonthTotals) -> dict[str, Any]:
    return {
        "worked_hours": totals.worked_hours,
        "overtime_hours": totals.overtime_hours,
        "absence_days": totals.absence_days,
    }


# =============================================================================
# Per contract
# =============================================================================


@router.get("/contracts/{contract_id}")
async def get_timesheet(
    contract_id: uuid.UUID,
    actor: CurrentActor,
    service: Timesheets,
    year: int | None = None,
    month: int | None = None,
) -> DataResponse[dict]:
    sheet = await service.get_timesheet(actor, contract_id, year, month)
    return DataResponse(
        data={
            "contract_id": sheet.contract.id,
            "entries": [_entry_to_dict(e) for e in sheet.entries],
            "absences": [_absence_to_dict(a) for a in sheet.absences],
            "validated_months": [_month_to_dict(m) for m in sheet.months],
            "totals": _totals_to_dict(sheet.totals),
        }
    )


@router.post("/contracts/{contract_id}/entries", status_code=201)
async def record_entry(
    contract_id: uuid.UUID,
    body: TimeEntryRequest,
    actor: CurrentActor,
    service: Timesheets,
) -> DataResponse[dict]:
    entry = await service.record_entry(actor, contract_id, body.model_dump(exclude_unset=True))
    return DataResponse(message="Time entry recorded", data=_entry_to_dict(entry))


@router.post("/contracts/{contract_id}/absences", status_code=201)
async def record_absence(
    contract_id: uuid.UUID,
    body: AbsenceRequest,
    actor: CurrentActor,
    service: Timesheets,
) -> DataResponse[dict]:
    absence = await service.record_absence(
        actor, contract_id, body.model_dump(exclude_unset=True)
    )
    return DataResponse(message="Absence declared", data=_absence_to_dict(absence))


@router.put("/contracts/{contract_id}/months")
async def validate_month(
    contract_id: uuid.UUID,
    body: ValidateMonthRequest,
    actor: CurrentActor,
    service: Timesheets,
) -> DataResponse[dict]:
    closed = await service.validate_month(actor, contract_id, body.year, body.month)
    return DataResponse(message="Timesheet validated", data=_month_to_dict(closed))


# =============================================================================
# Review queue
# =============================================================================


@router.get("/pending")
async def list_pending(actor: CurrentActor, service: Timesheets) -> DataResponse[dict]:
    pending = await service.list_pending(actor)
    return DataResponse(
        data={
            "entries": [_entry_to_dict(e) for e in pending.entries],
            "absences": [_absence_to_dict(a) for a in pending.absences],
        }
    )


# =============================================================================
# Time entries
# =============================================================================


@router.patch("/entries/{entry_id}")
async def update_entry(
    entry_id: uuid.UUID,
    body: TimeEntryRequest,
    actor: CurrentActor,
    service: Timesheets,
) -> DataResponse[dict]:
    entry = await service.update_entry(actor, entry_id, body.model_dump(exclude_unset=True))
    return DataResponse(message="Time entry updated", data=_entry_to_dict(entry))


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: uuid.UUID, actor: CurrentActor, service: Timesheets
) -> DataResponse[dict]:
    await service.delete_entry(actor, entry_id)
    return DataResponse(message="Time entry deleted", data={"id": entry_id})


@router.put("/entries/{entry_id}/validate")
async def validate_entry(
    entry_id: uuid.UUID, actor: CurrentActor, service: Timesheets
) -> DataResponse[dict]:
    entry = await service.review_entry(actor, entry_id, ValidationState.VALIDATED)
    return DataResponse(message="Time entry validated", data=_entry_to_dict(entry))


@router.put("/entries/{entry_id}/reject")
async def reject_entry(
    entry_id: uuid.UUID, actor: CurrentActor, service: Timesheets
) -> DataResponse[dict]:
    entry = await service.review_entry(actor, entry_id, ValidationState.REJECTED)
    return DataResponse(message="Time entry rejected", data=_entry_to_dict(entry))


# =============================================================================
# Absences
# =============================================================================


@router.patch("/absences/{absence_id}")
async def update_absence(
    absence_id: uuid.UUID,
    body: AbsenceRequest,
    actor: CurrentActor,
    service: Timesheets,
) -> DataResponse[dict]:
    absence = await service.update_absence(
        actor, absence_id, body.model_dump(exclude_unset=True)
    )
    return DataResponse(message="Absence updated", data=_absence_to_dict(absence))


@router.delete("/absences/{absence_id}")
async def delete_absence(
    absence_id: uuid.UUID, actor: CurrentActor, service: Timesheets
) -> DataResponse[dict]:
    await service.delete_absence(actor, absence_id)
    return DataResponse(message="Absence deleted", data={"id": absence_id})


@router.put("/absences/{absence_id}/validate")
async def validate_absence(
    absence_id: uuid.UUID, actor: CurrentActor, service: Timesheets
) -> DataResponse[dict]:
    absence = await service.review_absence(actor, absence_id, ValidationState.VALIDATED)
    return DataResponse(message="Absence validated", data=_absence_to_dict(absence))


@router.put("/absences/{absence_id}/reject")
async def reject_absence(
    absence_id: uuid.UUID, actor: CurrentActor, service: Timesheets
) -> DataResponse[dict]:
    absence = await service.review_absence(actor, absence_id, ValidationState.REJECTED)
    return DataResponse(message="Absence rejected", data=_absence_to_dict(absence))
