"""Shared SQLAlchemy repository behaviour.

Every repository holds the request's AsyncSession and flushes writes
without committing; the caller (get_db or Repositories.commit) owns the
transaction boundary.
"""

import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from grh.models import Base

ModelT = TypeVar("ModelT", bound=Base)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(value: str) -> str:
    """Build an ILIKE pattern matching ``value`` anywhere."""
    return f"%{escape_like(value)}%"


class SqlRepository(Generic[ModelT]):
    """CRUD for one model over an AsyncSession.

    Subclasses set ``model`` and add their query methods.
    """

    model: type[ModelT]

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, entity_id: uuid.UUID) -> ModelT | None:
        return await self.db.get(self.model, entity_id)

    async def add(self, entity: ModelT) -> ModelT:
        """Insert an entity and load its server-generated columns."""
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def save(self, entity: ModelT) -> ModelT:
        """Flush attribute changes and reload server-updated columns."""
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.db.delete(entity)
        await self.db.flush()

    async def _scalars(self, stmt: Select[Any]) -> list[ModelT]:
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _page(
        self, stmt: Select[Any], *, offset: int, limit: int
    ) -> tuple[list[ModelT], int]:
        """Run ``stmt`` with pagination and return the page plus the total."""
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await self.db.execute(count_stmt)).scalar_one()
        items = await self._scalars(stmt.offset(offset).limit(limit))
        return items, total
