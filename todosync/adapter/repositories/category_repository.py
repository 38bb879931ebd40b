from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from todosync.app.repositories.category_repository import ICategoryRepository
from todosync.domain.entities import Category


class CategoryRepository(ICategoryRepository):
    """Category repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_names(self, user_id: UUID) -> List[str]:
        """Get a user's category names ordered by name"""
        stmt = select(Category.name).where(Category.user_id == user_id).order_by(Category.name)
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_by_name(self, user_id: UUID, name: str) -> Optional[Category]:
        """Get a user's category by its name"""
        stmt = select(Category).where(Category.user_id == user_id, Category.name == name)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, category: Category) -> Category:
        """Create a new category"""
        self.session.add(category)
        await self.session.flush()
        await self.session.refresh(category)
        return category

    async def delete(self, category: Category) -> None:
        """Delete a category"""
        await self.session.delete(category)
        await self.session.flush()
