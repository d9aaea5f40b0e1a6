"""Notification models - in-app notifications, replies and the outbox.

Notifications are written after the primary entity is committed. Intents that
cannot be persisted after retries are parked in ``pending_notifications`` and
re-dispatched later.
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
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, UUIDPrimaryKeyMixin
from grh.models.enums import NotificationType, check_in

_ON_DELETE_SET_NULL = "SET NULL"


def _ref_column(table: str) -> Mapped[uuid.UUID | None]:
    return mapped_column(
        UUID(as_uuid=True),
        ForeignKey(f"{table}.id", ondelete=_ON_DELETE_SET_NULL),
        nullable=True,
    )


class Notification(Base, UUIDPrimaryKeyMixin):
    """In-app notification addressed to one user.

    Attributes:
        recipient_user_id: Addressee.
        sender_company_id: Company at the origin of the notification, if any.
        type: Closed notification type.
        payload: Message and type-specific data.
        read: Read flag, set by the recipient.
        *_id: Non-owning references to the entity the notification is about.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint(check_in("type", NotificationType), name="ck_notifications_type"),
        Index("ix_notifications_recipient_read", "recipient_user_id", "read"),
    )

    recipient_user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_company_id: Mapped[uuid.UUID | None] = _ref_column("users")
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    payload: Mapped[dict] = mapped_column(
        JSONB,
        server_default=text("'{}'::jsonb"),
        nullable=False,
    )
    read: Mapped[bool] = mapped_column(
        Boolean,
        server_default=text("false"),
        nullable=False,
    )
    posting_id: Mapped[uuid.UUID | None] = _ref_column("job_postings")
    interview_id: Mapped[uuid.UUID | None] = _ref_column("interviews")
    application_id: Mapped[uuid.UUID | None] = _ref_column("applications")
    offer_id: Mapped[uuid.UUID | None] = _ref_column("job_offers")
    contract_id: Mapped[uuid.UUID | None] = _ref_column("contracts")
    mission_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("missions.id", ondelete="CASCADE"),
        nullable=True,
    )
    training_id: Mapped[uuid.UUID | None] = _ref_column("trainings")
    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )


class NotificationReply(Base, UUIDPrimaryKeyMixin):
    """Reply posted on a notification thread."""

    __tablename__ = "notification_replies"

    notification_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("notifications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(String(1000), nullable=False)
    read: Mapped[bool] = mapped_column(
        Boolean,
        server_default=text("false"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )


class PendingNotification(Base, UUIDPrimaryKeyMixin):
    """Outbox row for a notification intent that could not be persisted."""

    __tablename__ = "pending_notifications"

    intent: Mapped[dict] = mapped_column(JSONB, nullable=False)
    attempts: Mapped[int] = mapped_column(
        Integer,
        server_default=text("0"),
        nullable=False,
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_attempt_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )
