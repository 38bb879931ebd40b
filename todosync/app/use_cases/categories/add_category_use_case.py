"""
Add Category Use Case
"""

from uuid import UUID

from todosync.app.services.unit_of_work import UnitOfWork
from todosync.domain.entities import Category
from todosync.result import Error, Result, Return
from .dtos import CategoryCreatedResponse, CategoryData


class AddCategoryUseCase:
    """
    Use case for adding a category.

    Business Rules:
    - Names are unique per user (validation error otherwise)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, name: str) -> Result[CategoryCreatedResponse]:
        async with self.uow:
            existing = await self.uow.categories.get_by_name(user_id, name)
            if existing is not None:
                return Return.err(
                    Error("CATEGORY_ALREADY_EXISTS", "The name has already been taken.")
                )

            category = await self.uow.categories.create(Category(user_id=user_id, name=name))
            await self.uow.commit()

            return Return.ok(
                CategoryCreatedResponse(
                    message="Category added successfully",
                    data=CategoryData(
                        id=str(category.id), name=category.name, created_at=category.created_at
                    ),
                )
            )
