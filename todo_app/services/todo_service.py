import logging

from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.errors import Forbidden, NotFound, ValidationError
from todo_app.models.todo import Todo
from todo_app.repositories.todo_repo import TodoRepository
from todo_app.schemas.todo import TodoCreate, TodoUpdate
from todo_app.timeutils import utcnow

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000


def _clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise ValidationError("Title cannot be empty")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be less than {MAX_TITLE_LENGTH} characters")
    return title


def _clean_description(description: str) -> str | None:
    description = description.strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description must be less than {MAX_DESCRIPTION_LENGTH} characters")
    return description or None


class TodoService:
    def __init__(self):
        self.repo = TodoRepository()

    async def _get_owned(self, db: AsyncSession, owner_id: int, todo_id: int) -> Todo:
        # fetch by id only, so a foreign record is Forbidden rather than NotFound
        todo = await self.repo.get(db, todo_id)
        if not todo:
            raise NotFound("Todo not found")
        if todo.owner_id != owner_id:
            logger.warning(f"User {owner_id} denied access to todo {todo_id}")
            raise Forbidden("Unauthorized access")
        return todo

    def _apply(self, todo: Todo, patch: TodoUpdate) -> None:
        changes = patch.changes()
        if not changes:
            raise ValidationError("At least one field (title, description or completed) is required")
        if "title" in changes:
            todo.title = _clean_title(changes["title"])
        if "description" in changes:
            todo.description = _clean_description(changes["description"])
        if "completed" in changes:
            todo.completed = changes["completed"]
        todo.updated_at = utcnow()

    async def list_todos(self, db: AsyncSession, owner_id: int) -> list[Todo]:
        return await self.repo.list_for_owner(db, owner_id)

    async def search_todos(self, db: AsyncSession, owner_id: int, query: str | None) -> list[Todo]:
        if not query or not query.strip():
            return await self.repo.list_for_owner(db, owner_id)
        return await self.repo.search_for_owner(db, owner_id, query.strip())

    async def get_stats(self, db: AsyncSession, owner_id: int) -> dict:
        total = await self.repo.count_for_owner(db, owner_id)
        completed = await self.repo.count_for_owner(db, owner_id, completed=True)
        return {
            "total": total,
            "completed": completed,
            "pending": total - completed,
            "completionRate": round(completed * 100 / total) if total else 0,
        }

    async def get_todo(self, db: AsyncSession, owner_id: int, todo_id: int) -> Todo:
        return await self._get_owned(db, owner_id, todo_id)

    async def create_todo(self, db: AsyncSession, owner_id: int, todo_in: TodoCreate) -> Todo:
        if todo_in.title is None:
            raise ValidationError("Missing title")
        now = utcnow()
        todo = Todo(
            title=_clean_title(todo_in.title),
            description=_clean_description(todo_in.description) if todo_in.description else None,
            completed=False,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        await self.repo.create(db, todo)
        await db.commit()
        return todo

    async def update_todo(self, db: AsyncSession, owner_id: int, todo_id: int, patch: TodoUpdate) -> Todo:
        if not patch.changes():
            raise ValidationError("At least one field (title, description or completed) is required")
        todo = await self._get_owned(db, owner_id, todo_id)
        self._apply(todo, patch)
        await self.repo.save(db, todo)
        await db.commit()
        return todo

    async def delete_todo(self, db: AsyncSession, owner_id: int, todo_id: int) -> None:
        todo = await self._get_owned(db, owner_id, todo_id)
        await self.repo.delete(db, todo)
        await db.commit()

    async def bulk_update(self, db: AsyncSession, owner_id: int, items) -> list[Todo]:
        if not items:
            raise ValidationError("No updates provided")
        updated = []
        try:
            for item in items:
                todo = await self._get_owned(db, owner_id, item.id)
                self._apply(todo, item.updates)
                updated.append(todo)
            await db.flush()
        except Exception:
            await db.rollback()
            raise
        await db.commit()
        return updated

    async def bulk_delete(self, db: AsyncSession, owner_id: int, ids: list[int]) -> int:
        if not ids:
            raise ValidationError("No todo IDs provided")
        unique_ids = list(dict.fromkeys(ids))
        try:
            todos = [await self._get_owned(db, owner_id, todo_id) for todo_id in unique_ids]
            for todo in todos:
                await self.repo.delete(db, todo)
        except Exception:
            await db.rollback()
            raise
        await db.commit()
        return len(unique_ids)
