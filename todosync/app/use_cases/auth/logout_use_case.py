"""
Logout Use Case

Revokes the session the presented access token belongs to.
"""

from uuid import UUID

from todosync.app.services.unit_of_work import UnitOfWork
from todosync.result import Result, Return
from .dtos import MessageResponse


class LogoutUseCase:
    """
    Use case for logging out.

    Business Rules:
    - Revoking the session invalidates both its refresh token and every
      access token issued for it
    - Logging out an already revoked session still succeeds
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, session_id: UUID) -> Result[MessageResponse]:
        async with self.uow:
            await self.uow.sessions.revoke(session_id)
            await self.uow.commit()
            return Return.ok(MessageResponse(message="Successfully logged out"))
