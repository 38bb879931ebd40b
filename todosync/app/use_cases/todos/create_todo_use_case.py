"""
Create Todo Use Case
"""

from uuid import UUID

from todosync.app.services.unit_of_work import UnitOfWork
from todosync.domain.entities import Todo, TodoStatus
from todosync.result import Result, Return
from .dtos import CreateTodoCommand, TodoData, TodoMutationResponse


class CreateTodoUseCase:
    """
    Use case for creating a todo owned by the caller.

    Business Rules:
    - Status defaults to pending
    - Category is stored as given; it need not exist in the user's categories
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, command: CreateTodoCommand
    ) -> Result[TodoMutationResponse]:
        async with self.uow:
            todo = Todo(
                user_id=user_id,
                title=command.title,
                description=command.description,
                category=command.category,
                status=command.status or TodoStatus.pending,
                due_date=command.due_date,
            )
            todo = await self.uow.todos.create(todo)
            await self.uow.commit()

            return Return.ok(
                TodoMutationResponse(
                    message="Todo created successfully", data=TodoData.from_entity(todo)
                )
            )
