"""Repositories for notifications, replies, the outbox and stored files."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from grh.models import (
    Notification,
    NotificationReply,
    PendingNotification,
    StoredFile,
)
from grh.repositories.base import SqlRepository
from grh.services.notifier import NotificationIntent


class NotificationRepository(SqlRepository[Notification]):
    model = Notification

    async def create_from_intent(self, intent: NotificationIntent) -> Notification:
        """Insert a notification inside a SAVEPOINT.

        A failed insert rolls back only the savepoint, so the request's
        session stays usable for retries and the outbox fallback.
        """
        notification = Notification(
            recipient_user_id=intent.recipient_user_id,
            sender_company_id=intent.sender_company_id,
            type=intent.type.value,
            payload=intent.payload,
            read=False,
            **intent.refs,
        )
        async with self.db.begin_nested():
            self.db.add(notification)
            await self.db.flush()
        await self.db.refresh(notification)
        return notification

    async def list_for_user(
        self, user_id: uuid.UUID, *, unread_only: bool = False
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.recipient_user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        return await self._scalars(stmt.order_by(Notification.created_at.desc()))

    async def count_unread(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.recipient_user_id == user_id,
                Notification.read.is_(False),
            )
        )
        return result.scalar_one()

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.recipient_user_id == user_id,
                Notification.read.is_(False),
            )
            .values(read=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def add_reply(self, reply: NotificationReply) -> NotificationReply:
        self.db.add(reply)
        await self.db.flush()
        await self.db.refresh(reply)
        return reply

    async def get_reply(self, reply_id: uuid.UUID) -> NotificationReply | None:
        return await self.db.get(NotificationReply, reply_id)

    async def list_replies(self, notification_id: uuid.UUID) -> list[NotificationReply]:
        result = await self.db.execute(
            select(NotificationReply)
            .where(NotificationReply.notification_id == notification_id)
            .order_by(NotificationReply.created_at)
        )
        return list(result.scalars().all())

    async def mark_replies_read_for(self, user_id: uuid.UUID) -> int:
        """Mark replies written by others on the user's notifications as read."""
        owned = select(Notification.id).where(Notification.recipient_user_id == user_id)
        result = await self.db.execute(
            update(NotificationReply)
            .where(
                NotificationReply.notification_id.in_(owned.scalar_subquery()),
                NotificationReply.sender_id != user_id,
                NotificationReply.read.is_(False),
            )
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete_read_for(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            delete(Notification).where(
                Notification.recipient_user_id == user_id,
                Notification.read.is_(True),
            )
        )
        return result.rowcount

    async def delete_for_mission(self, mission_id: uuid.UUID) -> int:
        result = await self.db.execute(
            delete(Notification).where(Notification.mission_id == mission_id)
        )
        return result.rowcount


class OutboxRepository:
    """Parked notification intents awaiting re-dispatch."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def park(self, intent: dict[str, Any], error: str) -> PendingNotification:
        row = PendingNotification(intent=intent, attempts=1, last_error=error)
        async with self.db.begin_nested():
            self.db.add(row)
            await self.db.flush()
        return row

    async def list_due(self, now: datetime, *, limit: int) -> list[PendingNotification]:
        result = await self.db.execute(
            select(PendingNotification)
            .where(
                or_(
                    PendingNotification.next_attempt_at.is_(None),
                    PendingNotification.next_attempt_at <= now,
                )
            )
            .order_by(PendingNotification.created_at)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        return list(result.scalars().all())

    async def record_failure(
        self, row: PendingNotification, error: str, *, next_attempt_at: datetime
    ) -> None:
        row.attempts += 1
        row.last_error = error
        row.next_attempt_at = next_attempt_at
        await self.db.flush()

    async def delete(self, row: PendingNotification) -> None:
        await self.db.delete(row)
        await self.db.flush()


class StoredFileRepository(SqlRepository[StoredFile]):
    model = StoredFile
