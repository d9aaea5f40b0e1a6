"""Re-dispatch notification intents parked in the outbox.

Standalone script, meant to run periodically (cron or a scheduler sidecar).
Rows are claimed with FOR UPDATE SKIP LOCKED, so concurrent runs are safe.

Usage:
    python -m scripts.flush_notification_outbox [--limit N]
"""

import argparse
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from grh.repositories.sql import build_repositories
from grh.services.notification_dispatch import NotificationDispatcher

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


async def run_flush(session: AsyncSession, *, limit: int = DEFAULT_BATCH_SIZE) -> int:
    """Flush one batch of due outbox rows within ``session``.

    Returns:
        Number of intents delivered.
    """
    repos = build_repositories(session)
    dispatcher = NotificationDispatcher(repos.notifications, repos.outbox)
    delivered = await dispatcher.flush_outbox(limit=limit)
    logger.info("Outbox flush delivered %d notifications", delivered)
    return delivered


async def main() -> None:
    """CLI entry point: flush the outbox of the configured database."""
    import sys

    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

    from grh.core.config import settings

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--limit", type=int, default=DEFAULT_BATCH_SIZE)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = create_async_engine(settings.database_url, echo=False)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session:
        await run_flush(session, limit=args.limit)
        await session.commit()

    await engine.dispose()
    sys.exit(0)


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
