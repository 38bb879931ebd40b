from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from todosync.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from todosync.api.error import ClientError
from todosync.api.utils.jwt import verify_csrf_token, verify_jwt
from todosync.app.services.unit_of_work import UnitOfWork
from todosync.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

UNAUTHENTICATED = Error("UNAUTHENTICATED", "Unauthenticated.")

CSRF_PROTECTED_METHODS = ("POST", "PUT", "PATCH", "DELETE")


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> dict:
    """
    Dependency to extract and verify the access token from the Authorization header.

    Args:
        credentials: Bearer token from Authorization header
        uow: Unit of work used to check the token's session is still live

    Returns:
        Decoded JWT payload containing user_id and session_id

    Raises:
        ClientError: 401 if the token is missing, invalid, expired, or its
            session has been revoked (logout)
    """
    if credentials is None:
        raise ClientError(UNAUTHENTICATED, status_code=status.HTTP_401_UNAUTHORIZED)

    payload = verify_jwt(credentials.credentials)
    if payload is None:
        raise ClientError(UNAUTHENTICATED, status_code=status.HTTP_401_UNAUTHORIZED)

    async with uow:
        if not await uow.sessions.is_active(UUID(payload["session_id"])):
            raise ClientError(UNAUTHENTICATED, status_code=status.HTTP_401_UNAUTHORIZED)

    return payload


async def verify_csrf(
    request: Request,
    x_xsrf_token: Optional[str] = Header(None, alias="X-XSRF-TOKEN"),
) -> None:
    """
    Anti-forgery check for state-changing requests.

    The token comes from GET /sanctum/csrf-cookie and must be echoed back in
    the X-XSRF-TOKEN header.
    """
    if request.method not in CSRF_PROTECTED_METHODS:
        return
    if not x_xsrf_token or not verify_csrf_token(x_xsrf_token):
        raise ClientError(Error("CSRF_TOKEN_MISMATCH", "CSRF token mismatch."), status_code=419)
