"""
Login Use Case

Handles user authentication and returns a fresh token pair.
"""

import bcrypt

from todosync.api.utils.jwt import generate_jwt
from todosync.app.services.unit_of_work import UnitOfWork
from todosync.result import Error, Result, Return
from .dtos import AuthResponse, UserInfo
from .session_tokens import new_session


class LoginUseCase:
    """
    Use case for user login and token issuance.

    Business Rules:
    - Constant-time password comparison to prevent timing attacks
    - All previous sessions of the user are revoked
    - Creates new session with refresh token
    - Updates user.last_login_at
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, email: str, password: str) -> Result[AuthResponse]:
        """
        Execute login use case.

        Args:
            email: User email
            password: Plain text password

        Returns:
            Result with AuthResponse containing tokens and user info, or Error
        """
        async with self.uow:
            user = await self.uow.users.find_by_email(email)

            # Always perform a hash check even if user not found
            if user is None:
                bcrypt.checkpw(b"dummy_password", bcrypt.hashpw(b"dummy", bcrypt.gensalt(4)))
                return Return.err(Error("INVALID_CREDENTIALS", "Invalid login credentials"))

            if not bcrypt.checkpw(password.encode(), user.password_hash.encode()):
                return Return.err(Error("INVALID_CREDENTIALS", "Invalid login credentials"))

            await self.uow.sessions.revoke_all_for_user(user.id)

            session, refresh_token = new_session(user)
            session = await self.uow.sessions.open(session)

            await self.uow.users.record_login(user.id)

            await self.uow.commit()

            return Return.ok(
                AuthResponse(
                    user=UserInfo(id=str(user.id), name=user.name, email=user.email),
                    access_token=generate_jwt(user.id, session.id),
                    refresh_token=refresh_token,
                )
            )
