from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from todosync.domain.entities import Session


class ISessionRepository(ABC):
    """
    Login sessions and their rotating refresh tokens.

    A session is the unit of revocation: revoking it kills its refresh
    token and every access token minted for it.
    """

    @abstractmethod
    async def open(self, session: Session) -> Session:
        """Persist a freshly issued session"""
        pass

    @abstractmethod
    async def is_active(self, session_id: UUID) -> bool:
        """True while the session exists and has not been revoked"""
        pass

    @abstractmethod
    async def find_by_refresh_token(self, refresh_token: str) -> Optional[Session]:
        """Session whose current refresh token hash matches, revoked or not"""
        pass

    @abstractmethod
    async def rotate(
        self,
        session_id: UUID,
        current_hash: str,
        new_hash: str,
        expires_at: datetime,
    ) -> bool:
        """
        Swap the refresh token hash, but only if it still equals current_hash
        and the session is live. Returns False when another exchange won.
        """
        pass

    @abstractmethod
    async def revoke(self, session_id: UUID) -> bool:
        """Returns False if the session was unknown or already revoked"""
        pass

    @abstractmethod
    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Returns the number of sessions revoked"""
        pass
