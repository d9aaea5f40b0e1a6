"""Mission models - work assigned to an employee under a signed contract.

Missions carry an optional report (one PDF in the large-object blob store)
and the company's feedback on it.
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from grh.models.enums import MissionStatus, ValidationState, check_in


class Mission(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Mission assigned by a company to an employee.

    Attributes:
        title: Mission name.
        description: What the employee has to do.
        start_date: Planned start.
        end_date: Planned end (strictly after start_date when set).
        status: todo / in-progress / done / validated / cancelled.
        company_id: Owning company.
        employee_id: Assigned employee.
        contract_id: Signed contract the mission runs under.
        company_validation: Company review of the delivered work.
        admin_validation: Admin review after company validation.
        report_file_id: Blob handle of the submitted report.
        report_filename: Original report filename.
        report_submitted_at: When the report was submitted.
    """

    __tablename__ = "missions"
    __table_args__ = (
        CheckConstraint(check_in("status", MissionStatus), name="ck_missions_status"),
        CheckConstraint(
            check_in("company_validation", ValidationState),
            name="ck_missions_company_validation",
        ),
        CheckConstraint(
            check_in("admin_validation", ValidationState),
            name="ck_missions_admin_validation",
        ),
        CheckConstraint(
            "end_date IS NULL OR end_date > start_date",
            name="ck_missions_dates",
        ),
        Index("ix_missions_company", "company_id"),
        Index("ix_missions_employee", "employee_id"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[datetime] = mapped_column(nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'todo'"),
        nullable=False,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    contract_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("contracts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    company_validation: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'pending'"),
        nullable=False,
    )
    admin_validation: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'pending'"),
        nullable=False,
    )
    report_file_id: Mapped[str | None] = mapped_column(String(500), nullable=True)
    report_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    report_submitted_at: Mapped[datetime | None] = mapped_column(nullable=True)


class MissionFeedback(Base, UUIDPrimaryKeyMixin):
    """Company feedback on a mission report. Append-only."""

    __tablename__ = "mission_feedback"

    mission_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("missions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )
