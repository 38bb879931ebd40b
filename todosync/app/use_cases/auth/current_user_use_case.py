"""
Current User Use Case

Loads the authenticated user from access token claims.
"""

from uuid import UUID

from todosync.app.services.unit_of_work import UnitOfWork
from todosync.result import Error, Result, Return
from .dtos import CurrentUserResponse, UserInfo


class CurrentUserUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[CurrentUserResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            return Return.ok(
                CurrentUserResponse(
                    user=UserInfo(id=str(user.id), name=user.name, email=user.email)
                )
            )
