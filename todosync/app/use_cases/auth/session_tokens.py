"""
Session token issuance shared by register, login and refresh.
"""

import secrets
from datetime import timedelta
from typing import Tuple

from config import ApplicationConfig
from todosync.domain.base import utcnow
from todosync.domain.entities import Session, User, hash_refresh_token


def new_refresh_token() -> Tuple[str, str]:
    """Return (plain refresh token, stored hash)"""
    refresh_token = secrets.token_urlsafe(32)
    return refresh_token, hash_refresh_token(refresh_token)


def new_session(user: User) -> Tuple[Session, str]:
    """Build an unsaved session for the user and return it with its refresh token"""
    refresh_token, refresh_token_hash = new_refresh_token()
    session = Session(
        user_id=user.id,
        refresh_token_hash=refresh_token_hash,
        expires_at=utcnow() + timedelta(days=ApplicationConfig.REFRESH_TOKEN_DAYS),
    )
    return session, refresh_token
