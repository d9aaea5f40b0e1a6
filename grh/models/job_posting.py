"""Job posting models - candidate postings ("annonces") and saves.

A candidate publishes a posting describing the job they are looking for.
Postings expire after a configurable lifetime unless they were rejected,
and must be linked to a CV profile before they can be published.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from grh.models.enums import ContractType, PostingStatus, check_in

_ON_DELETE_SET_NULL = "SET NULL"


class JobPosting(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Candidate job posting.

    Attributes:
        owner_candidate_id: Candidate who created the posting.
        title: Posting title (max 100).
        profession: Profession ("metier", max 50).
        description: Free text (min 50).
        contract_type: Wanted contract type.
        location: Wanted location.
        required_skills: Skill list (at least one).
        desired_salary: Wanted salary in [0, 1 000 000], optional.
        status: Lifecycle status.
        is_validated: Admin validation flag; always false when rejected.
        rejection_reason: Admin rejection reason (max 500).
        expiration_date: Posting expires after this instant.
        linked_cv_profile_id: CV profile shown with the posting.
        linked_interview_id: Interview scheduled from this posting.
    """

    __tablename__ = "job_postings"
    __table_args__ = (
        CheckConstraint(check_in("status", PostingStatus), name="ck_job_postings_status"),
        CheckConstraint(
            check_in("contract_type", ContractType),
            name="ck_job_postings_contract_type",
        ),
        CheckConstraint(
            "desired_salary IS NULL OR (desired_salary >= 0 AND desired_salary <= 1000000)",
            name="ck_job_postings_desired_salary",
        ),
        CheckConstraint(
            "status <> 'rejected' OR is_validated = false",
            name="ck_job_postings_rejected_not_validated",
        ),
        Index("ix_job_postings_owner", "owner_candidate_id"),
        Index("ix_job_postings_status", "status"),
    )

    owner_candidate_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    profession: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    contract_type: Mapped[str] = mapped_column(String(20), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    required_skills: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    desired_salary: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'pending'"),
        nullable=False,
    )
    is_validated: Mapped[bool] = mapped_column(
        Boolean,
        server_default=text("false"),
        nullable=False,
    )
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    expiration_date: Mapped[datetime] = mapped_column(nullable=False)
    linked_cv_profile_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("cv_profiles.id", ondelete=_ON_DELETE_SET_NULL),
        nullable=True,
    )
    # use_alter=True handles the job_postings <-> interviews cycle
    linked_interview_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey(
            "interviews.id",
            ondelete=_ON_DELETE_SET_NULL,
            use_alter=True,
            name="fk_job_postings_linked_interview",
        ),
        nullable=True,
    )


class PostingSave(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A user bookmarking a posting. Unique per (posting, user)."""

    __tablename__ = "posting_saves"
    __table_args__ = (
        UniqueConstraint("posting_id", "user_id", name="uq_posting_saves_posting_user"),
    )

    posting_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("job_postings.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
