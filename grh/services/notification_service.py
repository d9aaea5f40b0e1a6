"""Reading, marking and replying to notifications."""

import logging
import uuid

from grh.core.errors import ForbiddenError, NotFoundError
from grh.models import Notification, NotificationReply
from grh.services.authorization import Action, Actor, require
from grh.services.base import WorkflowService
from grh.services.validation_rules import EntityKind, validate

logger = logging.getLogger(__name__)


class NotificationService(WorkflowService):
    async def _load(self, actor: Actor, notification_id: uuid.UUID) -> Notification:
        notification = await self._get_or_404(
            self._repos.notifications, notification_id, "Notification"
        )
        require(actor, Action.NOTIFICATION_ACCESS, notification)
        return notification

    async def list_mine(self, actor: Actor) -> list[Notification]:
        return await self._repos.notifications.list_for_user(actor.user_id)

    async def list_unread(self, actor: Actor) -> list[Notification]:
        return await self._repos.notifications.list_for_user(actor.user_id, unread_only=True)

    async def unread_count(self, actor: Actor) -> int:
        return await self._repos.notifications.count_unread(actor.user_id)

    async def list_for_admins(self, actor: Actor) -> list[Notification]:
        require(actor, Action.NOTIFICATION_LIST_ADMIN)
        return await self._repos.notifications.list_for_user(actor.user_id)

    async def mark_read(
        self, actor: Actor, notification_id: uuid.UUID, read: bool = True
    ) -> Notification:
        notification = await self._get_or_404(
            self._repos.notifications, notification_id, "Notification"
        )
        require(actor, Action.NOTIFICATION_MARK_READ, notification)
        notification.read = read
        return await self._repos.notifications.save(notification)

    async def mark_all_read(self, actor: Actor) -> int:
        """Mark every notification of the actor and every reply from others as read.

        Returns:
            Number of notifications marked.
        """
        marked = await self._repos.notifications.mark_all_read(actor.user_id)
        replies = await self._repos.notifications.mark_replies_read_for(actor.user_id)
        logger.debug(
            "Marked %d notifications and %d replies read for %s", marked, replies, actor.user_id
        )
        return marked

    async def delete_read(self, actor: Actor) -> int:
        deleted = await self._repos.notifications.delete_read_for(actor.user_id)
        logger.info("Deleted %d read notifications for %s", deleted, actor.user_id)
        return deleted

    # -----------------------------------------------------------------------
    # Replies
    # -----------------------------------------------------------------------

    async def reply(
        self, actor: Actor, notification_id: uuid.UUID, content: str | None
    ) -> NotificationReply:
        """Append a reply to the notification thread.

        Raises:
            ForbiddenError: If the actor is neither the recipient nor the
                sender company.
            ValidationError: If the content is empty or too long.
        """
        notification = await self._load(actor, notification_id)
        validate(EntityKind.NOTIFICATION_REPLY, {"content": content})
        return await self._repos.notifications.add_reply(
            NotificationReply(
                notification_id=notification.id,
                sender_id=actor.user_id,
                content=content.strip(),
                read=False,
            )
        )

    async def list_replies(
        self, actor: Actor, notification_id: uuid.UUID
    ) -> list[NotificationReply]:
        notification = await self._load(actor, notification_id)
        return await self._repos.notifications.list_replies(notification.id)

    async def mark_reply_read(
        self, actor: Actor, notification_id: uuid.UUID, reply_id: uuid.UUID
    ) -> NotificationReply:
        """Mark a reply from the other party as read."""
        notification = await self._load(actor, notification_id)
        reply = await self._repos.notifications.get_reply(reply_id)
        if reply is None or reply.notification_id != notification.id:
            raise NotFoundError("Reply", str(reply_id))
        if reply.sender_id == actor.user_id:
            raise ForbiddenError("You cannot mark your own reply as read")
        reply.read = True
        return await self._repos.notifications.save(reply)
