from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple
from uuid import UUID

from todosync.domain.entities import Todo


@dataclass
class TodoFilter:
    """Structured filter/sort/page request for listing todos"""

    title: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    due_date_from: Optional[date] = None
    due_date_to: Optional[date] = None
    sort_field: str = "created_at"
    descending: bool = True
    page: int = 1
    per_page: int = 10


class ITodoRepository(ABC):
    """Todo repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, todo_id: UUID) -> Optional[Todo]:
        """Get a live (not soft-deleted) todo by ID"""
        pass

    @abstractmethod
    async def list_for_user(
        self, user_id: UUID, todo_filter: TodoFilter
    ) -> Tuple[List[Todo], int]:
        """Get one page of a user's todos plus the total match count"""
        pass

    @abstractmethod
    async def create(self, todo: Todo) -> Todo:
        """Create a new todo"""
        pass

    @abstractmethod
    async def update(self, todo: Todo) -> Todo:
        """Update existing todo"""
        pass
