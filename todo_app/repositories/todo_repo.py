from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.models.todo import Todo
from todo_app.repositories.base import BaseRepository


class TodoRepository(BaseRepository[Todo]):
    def __init__(self):
        super().__init__(Todo)

    async def list_for_owner(self, db: AsyncSession, owner_id: int) -> list[Todo]:
        return await self.list(db, where={"owner_id": owner_id}, order_by=(Todo.id,))

    async def search_for_owner(self, db: AsyncSession, owner_id: int, query: str) -> list[Todo]:
        pattern = f"%{query.lower()}%"
        stmt = (
            select(Todo)
            .where(Todo.owner_id == owner_id)
            .where(
                or_(
                    func.lower(Todo.title).like(pattern),
                    func.lower(func.coalesce(Todo.description, "")).like(pattern),
                )
            )
            .order_by(Todo.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_for_owner(self, db: AsyncSession, owner_id: int, **filters) -> int:
        return await self.count(db, owner_id=owner_id, **filters)
