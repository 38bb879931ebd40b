"""
Get Todo Use Case
"""

from uuid import UUID

from todosync.app.services.unit_of_work import UnitOfWork
from todosync.result import Error, Result, Return
from .dtos import TodoData, TodoResponse


class GetTodoUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, todo_id: UUID) -> Result[TodoResponse]:
        async with self.uow:
            todo = await self.uow.todos.get_by_id(todo_id)
            if todo is None:
                return Return.err(Error("TODO_NOT_FOUND", "Resource not found."))
            if todo.user_id != user_id:
                return Return.err(Error("FORBIDDEN", "Unauthorized access"))
            return Return.ok(TodoResponse(data=TodoData.from_entity(todo)))
