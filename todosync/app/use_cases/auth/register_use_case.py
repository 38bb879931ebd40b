"""
Register Use Case

Creates a user account, seeds its default categories and opens a session.
"""

import bcrypt

from todosync.api.utils.jwt import generate_jwt
from todosync.app.services.unit_of_work import UnitOfWork
from todosync.domain.entities import DEFAULT_CATEGORIES, Category, User
from todosync.result import Error, Result, Return
from .dtos import AuthResponse, RegisterCommand, UserInfo
from .session_tokens import new_session


class RegisterUseCase:
    """
    Use case for user registration.

    Business Rules:
    - Email must be unique
    - Password stored as bcrypt hash (cost factor 12)
    - New users start with the General, Urgent and Important categories
    - Registration logs the user in (access + refresh token issued)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, command: RegisterCommand) -> Result[AuthResponse]:
        """
        Execute register use case.

        Args:
            command: Validated registration intent

        Returns:
            Result with AuthResponse, or Error
        """
        async with self.uow:
            existing = await self.uow.users.find_by_email(command.email)
            if existing is not None:
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "The email has already been taken.")
                )

            password_hash = bcrypt.hashpw(command.password.encode(), bcrypt.gensalt(12))
            user = User(
                name=command.name,
                email=command.email,
                password_hash=password_hash.decode(),
            )
            user = await self.uow.users.add(user)

            for name in DEFAULT_CATEGORIES:
                await self.uow.categories.create(Category(user_id=user.id, name=name))

            session, refresh_token = new_session(user)
            session = await self.uow.sessions.open(session)

            await self.uow.commit()

            return Return.ok(
                AuthResponse(
                    user=UserInfo(id=str(user.id), name=user.name, email=user.email),
                    access_token=generate_jwt(user.id, session.id),
                    refresh_token=refresh_token,
                )
            )
