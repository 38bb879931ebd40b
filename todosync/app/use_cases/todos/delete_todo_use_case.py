"""
Delete Todo Use Case

Soft-deletes a todo owned by the caller.
"""

from uuid import UUID

from todosync.app.services.unit_of_work import UnitOfWork
from todosync.domain.base import utcnow
from todosync.result import Error, Result, Return
from ..auth.dtos import MessageResponse


class DeleteTodoUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, todo_id: UUID) -> Result[MessageResponse]:
        async with self.uow:
            todo = await self.uow.todos.get_by_id(todo_id)
            if todo is None:
                return Return.err(Error("TODO_NOT_FOUND", "Resource not found."))
            if todo.user_id != user_id:
                return Return.err(Error("FORBIDDEN", "Unauthorized access"))

            # Tombstone; get_by_id and listings skip rows with deleted_at set
            todo.deleted_at = utcnow()
            await self.uow.todos.update(todo)
            await self.uow.commit()

            return Return.ok(MessageResponse(message="Todo deleted successfully"))
