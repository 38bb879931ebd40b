"""
Auth Session Manager

Owns the access/refresh token pair: login, registration, rotation on
refresh, logout and the cached current-user lookup.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from .cache import NO_RETRY, QueryCache, QueryKey
from .errors import (
    ApiError,
    InvalidCredentials,
    InvalidRefreshToken,
    Unauthenticated,
    ValidationError,
)
from .models import AuthSession, Tokens, User
from .token_store import MemoryTokenStore, TokenStore
from .transport import HttpTransport

logger = logging.getLogger(__name__)

USER_KEY = QueryKey.of("auth_user")


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


def bearer(access_token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"} if access_token else {}


class AuthSessionManager:
    """
    Session state for one client.

    Business Rules:
    - login/register persist both tokens and pre-cache the returned user
    - Refresh is single-flight: concurrent callers await the same exchange
    - A refresh requested for an access token that was already replaced
      returns the current tokens without another exchange
    - Any refresh failure clears all local credentials and notifies the
      session-expired listeners
    - logout always clears local state, even when the server call fails
    """

    def __init__(
        self,
        transport: HttpTransport,
        store: Optional[TokenStore] = None,
        cache: Optional[QueryCache] = None,
        user_stale_time: float = 5 * 60,
    ):
        self.transport = transport
        self.store = store or MemoryTokenStore()
        self.cache = cache or QueryCache()
        self.user_stale_time = user_stale_time
        self.state = SessionState.UNAUTHENTICATED
        self._tokens: Optional[Tokens] = None
        self._refresh_task: Optional[asyncio.Task] = None
        self._expired_listeners: List[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Restore a persisted session, if any."""
        tokens = self.store.load()
        if tokens is not None and (tokens.access_token or tokens.refresh_token):
            self._tokens = tokens
            self.state = SessionState.AUTHENTICATED
            logger.info("Restored persisted session")

    async def aclose(self) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        self._refresh_task = None

    def on_session_expired(self, listener: Callable[[], None]) -> None:
        self._expired_listeners.append(listener)

    @property
    def tokens(self) -> Optional[Tokens]:
        return self._tokens

    @property
    def access_token(self) -> Optional[str]:
        return self._tokens.access_token if self._tokens else None

    @property
    def refresh_token(self) -> Optional[str]:
        return self._tokens.refresh_token if self._tokens else None

    @property
    def is_authenticated(self) -> bool:
        return self.state in (SessionState.AUTHENTICATED, SessionState.REFRESHING)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> AuthSession:
        """
        Raises:
            InvalidCredentials: the server rejected the email/password pair
            ValidationError: malformed input (422)
        """
        self.state = SessionState.AUTHENTICATING
        try:
            body = await self.transport.send(
                "POST", "/auth/login", json={"email": email, "password": password}
            )
        except Unauthenticated as e:
            self._clear_credentials()
            raise InvalidCredentials(e.message, status=e.status, data=e.data) from e
        except ApiError:
            self._clear_credentials()
            raise
        return self._accept(body)

    async def register(
        self, name: str, email: str, password: str, password_confirmation: str
    ) -> AuthSession:
        self.state = SessionState.AUTHENTICATING
        try:
            body = await self.transport.send(
                "POST",
                "/auth/register",
                json={
                    "name": name,
                    "email": email,
                    "password": password,
                    "password_confirmation": password_confirmation,
                },
            )
        except ApiError:
            self._clear_credentials()
            raise
        return self._accept(body)

    async def refresh(
        self, refresh_token: Optional[str] = None, failed_access_token: Optional[str] = None
    ) -> Tokens:
        """
        Exchange a refresh token for a new pair.

        Args:
            refresh_token: token to present; defaults to the stored one
            failed_access_token: access token whose rejection prompted the
                refresh. If it has already been replaced, the current tokens
                are returned without another exchange.

        Raises:
            InvalidRefreshToken: the token is missing, invalid, revoked or
                expired. Local credentials are cleared.
        """
        if self._refresh_task is not None and not self._refresh_task.done():
            return await asyncio.shield(self._refresh_task)

        if (
            refresh_token is None
            and failed_access_token is not None
            and self._tokens is not None
            and self._tokens.access_token
            and self._tokens.access_token != failed_access_token
        ):
            logger.debug("Access token already replaced, skipping refresh")
            return self._tokens

        self._refresh_task = asyncio.create_task(self._exchange(refresh_token))
        return await asyncio.shield(self._refresh_task)

    async def _exchange(self, refresh_token: Optional[str]) -> Tokens:
        token = refresh_token or self.refresh_token
        previous_state = self.state
        self.state = SessionState.REFRESHING
        if not token:
            self._expire()
            raise InvalidRefreshToken("No refresh token available", status=401)

        logger.info("Refreshing access token")
        try:
            body = await self.transport.send(
                "POST", "/auth/refresh", json={"refresh_token": token}
            )
        except (Unauthenticated, ValidationError) as e:
            self._expire()
            raise InvalidRefreshToken(e.message, status=401, data=e.data) from e
        except ApiError:
            # Transient failure: keep the credentials for a later attempt
            self.state = previous_state
            raise

        tokens = Tokens(
            access_token=body["access_token"],
            refresh_token=body["refresh_token"],
            token_type=body.get("token_type", "Bearer"),
        )
        self._set_tokens(tokens)
        self.state = SessionState.AUTHENTICATED
        return tokens

    async def logout(self) -> None:
        access_token = self.access_token
        try:
            if access_token:
                await self.transport.send("POST", "/auth/logout", headers=bearer(access_token))
        except ApiError as e:
            logger.warning(f"Server-side logout failed, clearing local session anyway: {e}")
        finally:
            self._clear_credentials()
            self.cache.clear()
            self.transport.reset_csrf()

    async def current_user(self) -> Optional[User]:
        """
        The authenticated user, cached for user_stale_time.

        Returns None without any network call when no access token is held.
        A 401 drops the local access token (the refresh token is kept) and
        propagates; it is never retried.
        """
        if not self.access_token:
            return None

        data = await self.cache.fetch_query(
            USER_KEY,
            self._fetch_user,
            stale_time=self.user_stale_time,
            retry=NO_RETRY,
        )
        return User.model_validate(data) if data is not None else None

    async def _fetch_user(self) -> dict:
        access_token = self.access_token
        try:
            body = await self.transport.send("GET", "/auth/user", headers=bearer(access_token))
        except Unauthenticated:
            if self._tokens is not None and self._tokens.access_token == access_token:
                self._set_tokens(self._tokens.model_copy(update={"access_token": None}))
            raise
        return body["user"]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _accept(self, body: dict) -> AuthSession:
        auth = AuthSession.model_validate(body)
        self._set_tokens(auth.tokens)
        self.state = SessionState.AUTHENTICATED
        if auth.user is not None:
            self.cache.set_query_data(USER_KEY, auth.user.model_dump())
        return auth

    def _set_tokens(self, tokens: Tokens) -> None:
        self._tokens = tokens
        self.store.save(tokens)

    def _clear_credentials(self) -> None:
        self._tokens = None
        self.store.clear()
        self.cache.remove(USER_KEY)
        self.state = SessionState.UNAUTHENTICATED

    def _expire(self) -> None:
        logger.warning("Session expired, clearing credentials")
        self._clear_credentials()
        for listener in list(self._expired_listeners):
            listener()
