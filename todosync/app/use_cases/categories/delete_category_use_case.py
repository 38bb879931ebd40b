"""
Delete Category Use Case

Removes a category by name. Todos referencing it keep their category text.
"""

from uuid import UUID

from todosync.app.services.unit_of_work import UnitOfWork
from todosync.result import Error, Result, Return
from ..auth.dtos import MessageResponse


class DeleteCategoryUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, name: str) -> Result[MessageResponse]:
        async with self.uow:
            category = await self.uow.categories.get_by_name(user_id, name)
            if category is None:
                return Return.err(Error("CATEGORY_NOT_FOUND", "Resource not found."))

            await self.uow.categories.delete(category)
            await self.uow.commit()

            return Return.ok(MessageResponse(message="Category deleted successfully"))
