from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from todosync.app.repositories.user_repository import IUserRepository
from todosync.domain.base import utcnow
from todosync.domain.entities import User


class UserRepository(IUserRepository):
    """Account storage in the users table"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.exec(stmt)
        return result.first()

    async def add(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        return user

    async def record_login(self, user_id: UUID) -> None:
        stmt = update(User).where(User.id == user_id).values(last_login_at=utcnow())
        await self.session.execute(stmt)
