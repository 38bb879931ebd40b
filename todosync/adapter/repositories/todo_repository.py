from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from todosync.app.repositories.todo_repository import ITodoRepository, TodoFilter
from todosync.domain.entities import Todo

SORTABLE_FIELDS = {
    "title": Todo.title,
    "created_at": Todo.created_at,
    "due_date": Todo.due_date,
    "status": Todo.status,
}


class TodoRepository(ITodoRepository):
    """Todo repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, todo_id: UUID) -> Optional[Todo]:
        """Get a live todo by ID (soft-deleted rows are invisible)"""
        stmt = select(Todo).where(Todo.id == todo_id, Todo.deleted_at == None)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_for_user(
        self, user_id: UUID, todo_filter: TodoFilter
    ) -> Tuple[List[Todo], int]:
        """
        Get one page of a user's live todos.

        Title matches are partial and case-insensitive, category and status
        are exact. Ties on the sort column fall back to id so pages are stable.
        """
        conditions = [Todo.user_id == user_id, Todo.deleted_at == None]
        if todo_filter.title:
            conditions.append(Todo.title.ilike(f"%{todo_filter.title}%"))
        if todo_filter.category:
            conditions.append(Todo.category == todo_filter.category)
        if todo_filter.status:
            conditions.append(Todo.status == todo_filter.status)
        if todo_filter.due_date_from and todo_filter.due_date_to:
            conditions.append(
                Todo.due_date.between(todo_filter.due_date_from, todo_filter.due_date_to)
            )

        count_stmt = select(func.count()).select_from(Todo).where(*conditions)
        total = (await self.session.exec(count_stmt)).one()

        column = SORTABLE_FIELDS[todo_filter.sort_field]
        order = column.desc() if todo_filter.descending else column.asc()
        stmt = (
            select(Todo)
            .where(*conditions)
            .order_by(order, Todo.id)
            .offset((todo_filter.page - 1) * todo_filter.per_page)
            .limit(todo_filter.per_page)
        )
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def create(self, todo: Todo) -> Todo:
        """Create a new todo"""
        self.session.add(todo)
        await self.session.flush()
        await self.session.refresh(todo)
        return todo

    async def update(self, todo: Todo) -> Todo:
        """Update existing todo"""
        self.session.add(todo)
        await self.session.flush()
        await self.session.refresh(todo)
        return todo
