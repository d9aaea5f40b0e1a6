"""Employment contract model ("contrat").

Prepared by an admin after a positive interview, published to the employee,
then signed or rejected. Missions can only be created under a signed contract.
"""

import uuid
from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from grh.models.enums import ContractState, ContractType, check_in


class Contract(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Employment contract between a company and an employee."""

    __tablename__ = "contracts"
    __table_args__ = (
        CheckConstraint(check_in("state", ContractState), name="ck_contracts_state"),
        CheckConstraint(
            check_in("contract_type", ContractType), name="ck_contracts_contract_type"
        ),
        CheckConstraint(
            "end_date IS NULL OR end_date > start_date",
            name="ck_contracts_dates",
        ),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    interview_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("interviews.id", ondelete="SET NULL"),
        nullable=True,
    )
    offer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("job_offers.id", ondelete="SET NULL"),
        nullable=True,
    )
    contract_type: Mapped[str] = mapped_column(String(20), nullable=False)
    position: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    salary: Mapped[int | None] = mapped_column(Integer, nullable=True)
    state: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'draft'"),
        nullable=False,
    )
