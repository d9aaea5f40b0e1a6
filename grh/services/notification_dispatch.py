"""Notification dispatch with retry and outbox fallback.

The primary entity is committed before dispatch. Each intent is persisted
with exponential backoff on transient store errors; an intent that still
fails is parked in the outbox and re-dispatched by ``flush_outbox``. The
primary operation never fails because of a notification.

Permanent store errors (constraint violations, bad values) are logged and
the intent is dropped. Outbox rows are dropped once they reach
``settings.notification_outbox_max_attempts``.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from grh.core.config import settings
from grh.core.retry import (
    PERMANENT_STORE_ERRORS,
    TRANSIENT_STORE_ERRORS,
    RetryPolicy,
    with_retries,
)
from grh.models import Notification
from grh.repositories.interfaces import NotificationRepository, OutboxRepository
from grh.services.notifier import NotificationIntent, on_transition

logger = logging.getLogger(__name__)

# Delay before a parked intent becomes due again, multiplied by attempts.
OUTBOX_BACKOFF = timedelta(minutes=1)


@dataclass
class DispatchReport:
    """Outcome of one dispatch call.

    Attributes:
        delivered: Notifications persisted.
        parked: Intents moved to the outbox.
        dropped: Intents discarded after a permanent store error.
    """

    delivered: list[Notification] = field(default_factory=list)
    parked: list[NotificationIntent] = field(default_factory=list)
    dropped: list[NotificationIntent] = field(default_factory=list)


class NotificationDispatcher:
    """Persists notification intents produced by the notifier."""

    def __init__(
        self,
        notifications: NotificationRepository,
        outbox: OutboxRepository,
        policy: RetryPolicy | None = None,
        max_outbox_attempts: int | None = None,
    ) -> None:
        self.notifications = notifications
        self.outbox = outbox
        self.policy = policy or RetryPolicy.from_settings()
        self.max_outbox_attempts = (
            max_outbox_attempts or settings.notification_outbox_max_attempts
        )

    async def _persist(self, intent: NotificationIntent) -> Notification:
        return await with_retries(
            lambda: self.notifications.create_from_intent(intent),
            self.policy,
            TRANSIENT_STORE_ERRORS,
        )

    async def dispatch_intents(self, intents: list[NotificationIntent]) -> DispatchReport:
        """Persist intents, parking the ones that exhaust their retries."""
        report = DispatchReport()
        for intent in intents:
            try:
                report.delivered.append(await self._persist(intent))
            except PERMANENT_STORE_ERRORS as e:
                logger.error(
                    "Notification %s for user %s dropped: %s",
                    intent.type.value,
                    intent.recipient_user_id,
                    e,
                )
                report.dropped.append(intent)
            except TRANSIENT_STORE_ERRORS as e:
                logger.warning(
                    "Notification %s for user %s parked in outbox: %s",
                    intent.type.value,
                    intent.recipient_user_id,
                    e,
                )
                await self.outbox.park(intent.to_dict(), str(e))
                report.parked.append(intent)
        return report

    async def dispatch(self, event: object) -> DispatchReport:
        """Compute the intents for ``event`` and persist them."""
        return await self.dispatch_intents(on_transition(event))

    async def flush_outbox(self, *, now: datetime | None = None, limit: int = 100) -> int:
        """Re-dispatch parked intents that are due.

        Delivered rows are deleted. Transient failures are recorded and
        rescheduled until the row reaches ``max_outbox_attempts``; rows at
        the cap and rows hitting a permanent error are deleted.

        Returns:
            Number of intents delivered.
        """
        now = now or datetime.now(UTC)
        delivered = 0
        for row in await self.outbox.list_due(now, limit=limit):
            intent = NotificationIntent.from_dict(row.intent)
            try:
                await self._persist(intent)
            except PERMANENT_STORE_ERRORS as e:
                logger.error("Outbox entry %s dropped: %s", row.id, e)
                await self.outbox.delete(row)
                continue
            except TRANSIENT_STORE_ERRORS as e:
                attempts = row.attempts + 1
                if attempts >= self.max_outbox_attempts:
                    logger.error(
                        "Outbox entry %s dropped after %d attempts: %s",
                        row.id,
                        attempts,
                        e,
                    )
                    await self.outbox.delete(row)
                    continue
                logger.warning(
                    "Outbox entry %s failed again (attempt %d): %s",
                    row.id,
                    attempts,
                    e,
                )
                await self.outbox.record_failure(
                    row, str(e), next_attempt_at=now + OUTBOX_BACKOFF * attempts
                )
                continue
            await self.outbox.delete(row)
            delivered += 1
        if delivered:
            logger.info("Flushed %d notifications from outbox", delivered)
        return delivered
