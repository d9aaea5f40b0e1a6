"""Time tracking request schemas."""

from datetime import date, time

from pydantic import BaseModel, ConfigDict


class TimeEntryRequest(BaseModel):
    """Request body for recording or editing a worked day.

    On creation omitted break and overtime default to 1h and 0h.
    """

    model_config = ConfigDict(extra="forbid")

    work_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    break_hours: float | None = None
    overtime_hours: float | None = None
    comment: str | None = None


class AbsenceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    absence_type: str | None = None
    start_date: date | None = None
    duration_days: int | None = None
    justification: str | None = None
    comment: str | None = None


class ValidateMonthRequest(BaseModel):
    """Request body for PUT /timesheets/contracts/{id}/months."""

    model_config = ConfigDict(extra="forbid")

    year: int
    month: int
