from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from todosync.domain.entities import Category


class ICategoryRepository(ABC):
    """Category repository interface - application layer"""

    @abstractmethod
    async def list_names(self, user_id: UUID) -> List[str]:
        """Get a user's category names ordered by name"""
        pass

    @abstractmethod
    async def get_by_name(self, user_id: UUID, name: str) -> Optional[Category]:
        """Get a user's category by its name"""
        pass

    @abstractmethod
    async def create(self, category: Category) -> Category:
        """Create a new category"""
        pass

    @abstractmethod
    async def delete(self, category: Category) -> None:
        """Delete a category"""
        pass
