"""Training models ("formations"), their content items and progress.

A training is attached to a mission; its employee and company come from the
mission. Progress is tracked per (training, employee, content item).
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from grh.models.enums import (
    ContentType,
    TrainingModality,
    TrainingStatus,
    TrainingType,
    check_in,
)


class Training(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Training session or course.

    Attributes:
        title: Max 100 characters.
        description: Max 500 characters.
        modality: in-person / virtual / hybrid / content.
        training_type: language / certification / other.
        location: Required for in-person and hybrid.
        meeting_link: Google Meet link, required for virtual and hybrid.
        scheduled_date: Session date for virtual and hybrid trainings.
        starts_at: Start of an in-person training.
        ends_at: End of an in-person training.
        status: draft / scheduled / in-progress / completed / cancelled.
        mission_id: Mission the training belongs to.
        company_id: Owning company (from the mission).
        employee_id: Trained employee (from the mission).
        trainer_id: Assigned Coach or Trainer.
    """

    __tablename__ = "trainings"
    __table_args__ = (
        CheckConstraint(
            check_in("modality", TrainingModality), name="ck_trainings_modality"
        ),
        CheckConstraint(check_in("status", TrainingStatus), name="ck_trainings_status"),
        CheckConstraint(
            check_in("training_type", TrainingType), name="ck_trainings_training_type"
        ),
        Index("ix_trainings_company", "company_id"),
        Index("ix_trainings_employee", "employee_id"),
        Index("ix_trainings_trainer", "trainer_id"),
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    modality: Mapped[str] = mapped_column(String(20), nullable=False)
    training_type: Mapped[str] = mapped_column(String(20), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meeting_link: Mapped[str | None] = mapped_column(String(255), nullable=True)
    scheduled_date: Mapped[datetime | None] = mapped_column(nullable=True)
    starts_at: Mapped[datetime | None] = mapped_column(nullable=True)
    ends_at: Mapped[datetime | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'draft'"),
        nullable=False,
    )
    mission_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("missions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
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
    trainer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )


class TrainingContent(Base, UUIDPrimaryKeyMixin):
    """Content item of a training (video, document, quiz...)."""

    __tablename__ = "training_contents"
    __table_args__ = (
        CheckConstraint(
            check_in("content_type", ContentType),
            name="ck_training_contents_content_type",
        ),
    )

    training_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("trainings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content_type: Mapped[str] = mapped_column(String(20), nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    # Blob handle of uploaded material; None for linked content.
    file_handle: Mapped[str | None] = mapped_column(String(300), nullable=True)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    added_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )


class TrainingProgress(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Completion of one content item by the trained employee."""

    __tablename__ = "training_progress"
    __table_args__ = (
        UniqueConstraint(
            "training_id",
            "employee_id",
            "content_id",
            name="uq_training_progress_training_employee_content",
        ),
    )

    training_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("trainings.id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("training_contents.id", ondelete="CASCADE"),
        nullable=False,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean,
        server_default=text("false"),
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
