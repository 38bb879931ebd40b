"""
Session Entity

Stores refresh tokens for authentication.
"""

import hashlib
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow


def hash_refresh_token(refresh_token: str) -> str:
    """SHA-256 hex digest stored in place of the plain refresh token"""
    return hashlib.sha256(refresh_token.encode()).hexdigest()


class Session(SQLModel, table=True):
    """
    Session entity - one row per login, holding the current refresh token.

    Business Rules:
    - Refresh tokens are stored as SHA-256 hashes
    - Tokens rotate on each refresh: the hash is rewritten in place, so the
      previous refresh token stops matching
    - Revoked sessions reject both refresh and access tokens
    - Expires after REFRESH_TOKEN_DAYS, renewed on each rotation
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    refresh_token_hash: str = Field(max_length=64, index=True)  # SHA-256 hex
    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_revoked", "revoked"),
    )
