"""Company job offers and candidate applications to them."""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from grh.models.enums import ApplicationStatus, ContractType, OfferStatus, check_in


class JobOffer(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Job offer published by a company.

    An offer is open until its company closes it or an admin rejects it.
    Admin validation is a separate flag and is never set on a rejected offer.
    """

    __tablename__ = "job_offers"
    __table_args__ = (
        CheckConstraint(check_in("status", OfferStatus), name="ck_job_offers_status"),
        CheckConstraint(
            "status <> 'rejected' OR is_validated = false",
            name="ck_job_offers_rejected_not_validated",
        ),
        CheckConstraint(
            check_in("contract_type", ContractType),
            name="ck_job_offers_contract_type",
        ),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    contract_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'open'"),
        nullable=False,
    )
    is_validated: Mapped[bool] = mapped_column(
        Boolean,
        server_default=text("false"),
        nullable=False,
    )
    validation_comment: Mapped[str | None] = mapped_column(Text, nullable=True)


class Application(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Candidate application to a job offer. Unique per (offer, candidate)."""

    __tablename__ = "applications"
    __table_args__ = (
        CheckConstraint(
            check_in("status", ApplicationStatus), name="ck_applications_status"
        ),
        UniqueConstraint(
            "offer_id", "candidate_id", name="uq_applications_offer_candidate"
        ),
    )

    offer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("job_offers.id", ondelete="CASCADE"),
        nullable=False,
    )
    candidate_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    cv_profile_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("cv_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    cover_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'pending'"),
        nullable=False,
    )
    # use_alter=True handles the applications <-> interviews cycle
    interview_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey(
            "interviews.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_applications_interview",
        ),
        nullable=True,
    )
