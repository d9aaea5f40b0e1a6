"""Interview model ("entretien").

An interview is scheduled by a company either from an application to one of
its offers or from a candidate's job posting.
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from grh.models.enums import InterviewKind, InterviewOutcome, InterviewStatus, check_in

_ON_DELETE_SET_NULL = "SET NULL"


class Interview(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Scheduled interview between a company and a candidate.

    Attributes:
        kind: "application" or "posting".
        candidate_id: Interviewed candidate.
        company_id: Owning company (the scheduler).
        created_by: User who scheduled the interview.
        offer_id: Offer applied to (application-based).
        related_application_id: Source application (application-based).
        related_posting_id: Source posting (required when posting-based).
        scheduled_at: Date and time of the interview.
        meeting_link: Video meeting URL.
        status: scheduled / completed / cancelled.
        outcome: positive / negative / pending.
        notes: Evaluation notes (max 1000).
    """

    __tablename__ = "interviews"
    __table_args__ = (
        CheckConstraint(check_in("kind", InterviewKind), name="ck_interviews_kind"),
        CheckConstraint(check_in("status", InterviewStatus), name="ck_interviews_status"),
        CheckConstraint(
            check_in("outcome", InterviewOutcome), name="ck_interviews_outcome"
        ),
        CheckConstraint(
            "kind <> 'posting' OR related_posting_id IS NOT NULL",
            name="ck_interviews_posting_reference",
        ),
        Index("ix_interviews_company", "company_id"),
        Index("ix_interviews_candidate", "candidate_id"),
    )

    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    candidate_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    offer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("job_offers.id", ondelete=_ON_DELETE_SET_NULL),
        nullable=True,
    )
    related_application_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("applications.id", ondelete=_ON_DELETE_SET_NULL),
        nullable=True,
    )
    related_posting_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("job_postings.id", ondelete="CASCADE"),
        nullable=True,
    )
    scheduled_at: Mapped[datetime] = mapped_column(nullable=False)
    meeting_link: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'scheduled'"),
        nullable=False,
    )
    outcome: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'pending'"),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
