"""Shared plumbing for workflow services.

Every workflow service runs the same pipeline per operation:
authorize -> guard -> validate -> persist -> notify.
"""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TypeVar

from grh.core.errors import NotFoundError
from grh.repositories.interfaces import Repositories, Repository
from grh.services.notification_dispatch import NotificationDispatcher

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class WorkflowService:
    """Base class holding repositories, the dispatcher and the clock.

    Args:
        repos: Per-request repositories.
        dispatcher: Notification dispatcher. Built from ``repos`` when omitted.
        clock: Returns the current instant. Injectable for tests.
    """

    def __init__(
        self,
        repos: Repositories,
        dispatcher: NotificationDispatcher | None = None,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self._repos = repos
        self._dispatcher = dispatcher or NotificationDispatcher(
            repos.notifications, repos.outbox
        )
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    @staticmethod
    async def _get_or_404(repo: Repository[T], entity_id: uuid.UUID, resource: str) -> T:
        entity = await repo.get(entity_id)
        if entity is None:
            raise NotFoundError(resource, str(entity_id))
        return entity
