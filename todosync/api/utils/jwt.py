import secrets
from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from config import ApplicationConfig

ALGORITHM = "HS256"


def generate_jwt(user_id: UUID, session_id: UUID) -> str:
    """
    Generate JWT access token

    Args:
        user_id: User UUID
        session_id: Session UUID the token belongs to (checked for revocation)

    Returns:
        JWT token string (HS256, ACCESS_TOKEN_MINUTES expiry)
    """
    return create_access_token(
        str(user_id),
        str(session_id),
        timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_MINUTES),
    )


def create_access_token(user_id: str, session_id: str, expires_delta: timedelta) -> str:
    """
    Create JWT access token with custom expiry

    A negative expires_delta yields an already-expired token.
    """
    now = datetime.now(UTC)
    payload = {
        "typ": "access",
        "user_id": user_id,
        "session_id": session_id,
        "jti": secrets.token_hex(8),
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm=ALGORITHM)


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT access token

    Returns:
        Decoded payload dict or None if invalid, expired, or not an access token
    """
    try:
        payload = jwt.decode(token, ApplicationConfig.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("typ") != "access":
        return None
    return payload


def generate_csrf_token() -> str:
    """Signed, short-lived anti-forgery token handed out by the CSRF handshake"""
    now = datetime.now(UTC)
    payload = {
        "typ": "csrf",
        "nonce": secrets.token_hex(16),
        "exp": now + timedelta(minutes=ApplicationConfig.CSRF_TOKEN_MINUTES),
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm=ALGORITHM)


def verify_csrf_token(token: str) -> bool:
    try:
        payload = jwt.decode(token, ApplicationConfig.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return False
    return payload.get("typ") == "csrf"
