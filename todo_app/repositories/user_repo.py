from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.models.user import User
from todo_app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self):
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        return await self.get_by(db, email=email)

    async def email_exists(self, db: AsyncSession, email: str) -> bool:
        return await self.exists(db, email=email)
