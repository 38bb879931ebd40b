from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from todosync.app.repositories.session_repository import ISessionRepository
from todosync.domain.base import utcnow
from todosync.domain.entities import Session, hash_refresh_token


class SessionRepository(ISessionRepository):
    """Sessions table access; revocation and rotation are single UPDATEs"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def open(self, session_obj: Session) -> Session:
        self.session.add(session_obj)
        await self.session.flush()
        return session_obj

    async def is_active(self, session_id: UUID) -> bool:
        stmt = select(Session.id).where(Session.id == session_id, Session.revoked == False)
        result = await self.session.exec(stmt)
        return result.first() is not None

    async def find_by_refresh_token(self, refresh_token: str) -> Optional[Session]:
        """
        Revoked and expired sessions are returned too; the use case tells
        those cases apart.
        """
        stmt = select(Session).where(
            Session.refresh_token_hash == hash_refresh_token(refresh_token)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def rotate(
        self,
        session_id: UUID,
        current_hash: str,
        new_hash: str,
        expires_at: datetime,
    ) -> bool:
        # Compare-and-swap on the hash: two exchanges of one token cannot both win
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.refresh_token_hash == current_hash,
                Session.revoked == False,
            )
            .values(refresh_token_hash=new_hash, expires_at=expires_at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def revoke(self, session_id: UUID) -> bool:
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)
            .values(revoked=True, revoked_at=utcnow())
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        stmt = (
            update(Session)
            .where(Session.user_id == user_id, Session.revoked == False)
            .values(revoked=True, revoked_at=utcnow())
        )
        result = await self.session.execute(stmt)
        return result.rowcount
