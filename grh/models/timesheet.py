"""Time tracking models ("pointage").

An employee records worked time and absences against a signed contract. The
company owning the contract validates or rejects each item, then closes the
month once nothing in it is pending.
"""

import uuid
from datetime import date, datetime, time

from sqlalchemy import (
    CheckConstraint,
    Date,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from grh.models.enums import AbsenceType, ValidationState, check_in


def _contract_column() -> Mapped[uuid.UUID]:
    return mapped_column(
        UUID(as_uuid=True),
        ForeignKey("contracts.id", ondelete="CASCADE"),
        nullable=False,
    )


def _user_column() -> Mapped[uuid.UUID]:
    return mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


class TimeEntry(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One worked day.

    Attributes:
        contract_id: Signed contract the time is recorded against.
        employee_id: Employee named in the contract.
        company_id: Company owning the contract; reviews the entry.
        work_date: Day worked.
        start_time: Arrival time.
        end_time: Departure time (after start_time).
        break_hours: Unpaid break, in hours.
        overtime_hours: Declared overtime, in hours.
        comment: Free text from the employee.
        status: pending / validated / rejected.
    """

    __tablename__ = "time_entries"
    __table_args__ = (
        CheckConstraint(check_in("status", ValidationState), name="ck_time_entries_status"),
        CheckConstraint("end_time > start_time", name="ck_time_entries_times"),
        CheckConstraint("break_hours >= 0", name="ck_time_entries_break"),
        CheckConstraint("overtime_hours >= 0", name="ck_time_entries_overtime"),
        Index("ix_time_entries_contract_date", "contract_id", "work_date"),
    )

    contract_id: Mapped[uuid.UUID] = _contract_column()
    employee_id: Mapped[uuid.UUID] = _user_column()
    company_id: Mapped[uuid.UUID] = _user_column()
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    break_hours: Mapped[float] = mapped_column(Float, server_default=text("1"), nullable=False)
    overtime_hours: Mapped[float] = mapped_column(
        Float, server_default=text("0"), nullable=False
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'pending'"),
        nullable=False,
    )


class Absence(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Declared absence of one or more days starting on ``start_date``."""

    __tablename__ = "absences"
    __table_args__ = (
        CheckConstraint(check_in("status", ValidationState), name="ck_absences_status"),
        CheckConstraint(check_in("absence_type", AbsenceType), name="ck_absences_type"),
        CheckConstraint("duration_days >= 1", name="ck_absences_duration"),
        Index("ix_absences_contract_date", "contract_id", "start_date"),
    )

    contract_id: Mapped[uuid.UUID] = _contract_column()
    employee_id: Mapped[uuid.UUID] = _user_column()
    company_id: Mapped[uuid.UUID] = _user_column()
    absence_type: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    justification: Mapped[str | None] = mapped_column(Text, nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'pending'"),
        nullable=False,
    )


class TimesheetMonth(Base, UUIDPrimaryKeyMixin):
    """A month closed by the company, with the totals it was closed on.

    Once a month is validated no time entry or absence can be recorded in it.
    """

    __tablename__ = "timesheet_months"
    __table_args__ = (
        UniqueConstraint("contract_id", "year", "month", name="uq_timesheet_months_period"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_timesheet_months_month"),
    )

    contract_id: Mapped[uuid.UUID] = _contract_column()
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    validated_by: Mapped[uuid.UUID] = _user_column()
    validated_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    entry_count: Mapped[int] = mapped_column(Integer, nullable=False)
    absence_count: Mapped[int] = mapped_column(Integer, nullable=False)
    worked_hours: Mapped[float] = mapped_column(Float, nullable=False)
    overtime_hours: Mapped[float] = mapped_column(Float, nullable=False)
    absence_days: Mapped[int] = mapped_column(Integer, nullable=False)
