"""
Refresh Token Use Case

Handles access token refresh with refresh token rotation.
"""

from datetime import timedelta

from config import ApplicationConfig
from todosync.api.utils.jwt import generate_jwt
from todosync.app.services.unit_of_work import UnitOfWork
from todosync.domain.base import utcnow
from todosync.result import Error, Result, Return
from .dtos import RefreshTokenResponse
from .session_tokens import new_refresh_token


class RefreshTokenUseCase:
    """
    Use case for refreshing access tokens.

    Business Rules:
    - Refresh token rotation: old token invalidated, new token issued
    - Session must not be revoked
    - Session must not be expired
    - Rotation is a compare-and-swap: of two concurrent exchanges of one
      token only the first succeeds
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, refresh_token: str) -> Result[RefreshTokenResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: The refresh token to verify and rotate

        Returns:
            Result with RefreshTokenResponse containing new tokens, or Error
        """
        async with self.uow:
            session = await self.uow.sessions.find_by_refresh_token(refresh_token)

            if session is None:
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            if session.revoked:
                return Return.err(Error("SESSION_REVOKED", "Invalid refresh token"))

            if session.expires_at < utcnow():
                return Return.err(Error("SESSION_EXPIRED", "Invalid refresh token"))

            # Rewrite the hash in place; the presented token stops matching
            new_token, new_token_hash = new_refresh_token()
            rotated = await self.uow.sessions.rotate(
                session.id,
                session.refresh_token_hash,
                new_token_hash,
                utcnow() + timedelta(days=ApplicationConfig.REFRESH_TOKEN_DAYS),
            )
            if not rotated:
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            await self.uow.commit()

            return Return.ok(
                RefreshTokenResponse(
                    access_token=generate_jwt(session.user_id, session.id),
                    refresh_token=new_token,
                )
            )
