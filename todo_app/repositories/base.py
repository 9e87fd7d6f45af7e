from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import InstrumentedAttribute

T = TypeVar("T")  # SQLAlchemy model class (Declarative)


class BaseRepository(Generic[T]):
    """
    Shared async repository for a single SQLAlchemy model.
    - Accepts model instances only (no dicts / pydantic objects).
    - Never commits; the calling service owns the transaction.
    """

    def __init__(self, model: type[T]) -> None:
        self.model = model

    # ------------------------ Read ------------------------

    async def get(self, session: AsyncSession, pk: Any) -> T | None:
        """Fetch one row by primary key."""
        return await session.get(self.model, pk)

    async def get_by(self, session: AsyncSession, **filters: Any) -> T | None:
        """First row matching equality filters."""
        stmt = select(self.model).filter_by(**filters).limit(1)
        res = await session.execute(stmt)
        return res.scalars().first()

    async def exists(self, session: AsyncSession, **filters: Any) -> bool:
        stmt = select(func.count()).select_from(self.model).filter_by(**filters)
        res = await session.execute(stmt)
        return int(res.scalar_one()) > 0

    async def list(
        self,
        session: AsyncSession,
        *,
        where: dict[str, Any] | None = None,
        order_by: Sequence[InstrumentedAttribute] | None = None,
        limit: int | None = None,
        offset: int | None = 0,
    ) -> list[T]:
        stmt = select(self.model)
        if where:
            stmt = stmt.filter_by(**where)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        res = await session.execute(stmt)
        return list(res.scalars().all())

    async def count(self, session: AsyncSession, **filters: Any) -> int:
        stmt = select(func.count()).select_from(self.model)
        if filters:
            stmt = stmt.filter_by(**filters)
        res = await session.execute(stmt)
        return int(res.scalar_one())

    # ------------------------ Write ------------------------

    async def create(self, session: AsyncSession, obj: T) -> T:
        """
        Insert a new row.
        - Only transient (new, unmanaged) instances are accepted.
        - flush() so the primary key is assigned before returning.
        """
        state = sa_inspect(obj)
        if not state.transient:
            raise ValueError("create(): expected a transient (new) SQLAlchemy model instance")
        session.add(obj)
        await session.flush()
        return obj

    async def save(self, session: AsyncSession, obj: T) -> T:
        """Flush pending changes on a persistent instance."""
        await session.flush()
        return obj

    async def delete(self, session: AsyncSession, obj: T) -> None:
        """Delete a persistent instance and flush."""
        await session.delete(obj)
        await session.flush()
