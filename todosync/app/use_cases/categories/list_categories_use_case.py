"""
List Categories Use Case
"""

from uuid import UUID

from todosync.app.services.unit_of_work import UnitOfWork
from todosync.result import Result, Return
from .dtos import CategoryListResponse


class ListCategoriesUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[CategoryListResponse]:
        async with self.uow:
            names = await self.uow.categories.list_names(user_id)
            return Return.ok(CategoryListResponse(data=names))
