"""
Update Todo Use Case

Applies a partial update to a todo owned by the caller.
"""

from typing import Any, Dict
from uuid import UUID

from todosync.app.services.unit_of_work import UnitOfWork
from todosync.domain.base import utcnow
from todosync.result import Error, Result, Return
from .dtos import TodoData, TodoMutationResponse

UPDATABLE_FIELDS = ("title", "description", "category", "status", "due_date")
NON_NULLABLE_FIELDS = ("title", "status")


class UpdateTodoUseCase:
    """
    Use case for updating a todo.

    Business Rules:
    - Only the owner may update (403 otherwise)
    - Only fields present in the payload change; explicit null clears
      description, category and due_date, and is ignored for title and status
    - updated_at is bumped on every successful update
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, todo_id: UUID, changes: Dict[str, Any]
    ) -> Result[TodoMutationResponse]:
        async with self.uow:
            todo = await self.uow.todos.get_by_id(todo_id)
            if todo is None:
                return Return.err(Error("TODO_NOT_FOUND", "Resource not found."))
            if todo.user_id != user_id:
                return Return.err(Error("FORBIDDEN", "This action is unauthorized."))

            for field, value in changes.items():
                if field not in UPDATABLE_FIELDS:
                    continue
                if value is None and field in NON_NULLABLE_FIELDS:
                    continue
                setattr(todo, field, value)
            todo.updated_at = utcnow()

            todo = await self.uow.todos.update(todo)
            await self.uow.commit()

            return Return.ok(
                TodoMutationResponse(
                    message="Todo updated successfully", data=TodoData.from_entity(todo)
                )
            )
