"""Create the time tracking tables.

Revision ID: 002_time_tracking
Revises: 001_initial_schema
Create Date: 2026-10-19

Time entries and absences are recorded against a contract and reviewed by
the contract's company. Closed months live in timesheet_months.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "002_time_tracking"
down_revision: str | None = "001_initial_schema"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

VALIDATION_STATES = "'pending', 'validated', 'rejected'"
ABSENCE_TYPES = "'sick', 'paid-leave', 'unpaid-leave', 'other'"


def _id() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def _parties() -> list[sa.Column | sa.ForeignKeyConstraint]:
    return [
        sa.Column("contract_id", sa.UUID(), nullable=False),
        sa.Column("employee_id", sa.UUID(), nullable=False),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["employee_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["company_id"], ["users.id"], ondelete="CASCADE"),
    ]


def upgrade() -> None:
    op.create_table(
        "time_entries",
        _id(),
        *_parties(),
        sa.Column("work_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("break_hours", sa.Float(), nullable=False, server_default="1"),
        sa.Column("overtime_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(f"status IN ({VALIDATION_STATES})", name="ck_time_entries_status"),
        sa.CheckConstraint("end_time > start_time", name="ck_time_entries_times"),
        sa.CheckConstraint("break_hours >= 0", name="ck_time_entries_break"),
        sa.CheckConstraint("overtime_hours >= 0", name="ck_time_entries_overtime"),
    )
    op.create_index(
        "ix_time_entries_contract_date", "time_entries", ["contract_id", "work_date"]
    )

    op.create_table(
        "absences",
        _id(),
        *_parties(),
        sa.Column("absence_type", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("justification", sa.Text(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(f"status IN ({VALIDATION_STATES})", name="ck_absences_status"),
        sa.CheckConstraint(f"absence_type IN ({ABSENCE_TYPES})", name="ck_absences_type"),
        sa.CheckConstraint("duration_days >= 1", name="ck_absences_duration"),
    )
    op.create_index("ix_absences_contract_date", "absences", ["contract_id", "start_date"])

    op.create_table(
        "timesheet_months",
        _id(),
        sa.Column("contract_id", sa.UUID(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("validated_by", sa.UUID(), nullable=False),
        _timestamp("validated_at"),
        sa.Column("entry_count", sa.Integer(), nullable=False),
        sa.Column("absence_count", sa.Integer(), nullable=False),
        sa.Column("worked_hours", sa.Float(), nullable=False),
        sa.Column("overtime_hours", sa.Float(), nullable=False),
        sa.Column("absence_days", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["validated_by"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "contract_id", "year", "month", name="uq_timesheet_months_period"
        ),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_timesheet_months_month"),
    )


def downgrade() -> None:
    op.drop_table("timesheet_months")
    op.drop_table("absences")
    op.drop_table("time_entries")
