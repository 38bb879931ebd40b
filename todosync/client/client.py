"""
TodoClient

Composition root for the client side: builds the transport, session
manager, gateway, cache and resource APIs from ApplicationConfig (or
explicit overrides) and owns their lifecycle.
"""

import logging
from typing import Optional

import httpx

from .cache import QueryCache
from .gateway import ApiGateway
from .notifications import Notifier
from .resources import CategoriesApi, TodosApi
from .session import AuthSessionManager
from .token_store import FileTokenStore, MemoryTokenStore, TokenStore
from .transport import HttpTransport

logger = logging.getLogger(__name__)


class TodoClient:
    """
    Usage:
        async with TodoClient() as client:
            await client.auth.login(email, password)
            page = await client.todos.list({"page": 1, "limit": 10})
    """

    def __init__(
        self,
        config=None,
        base_url: Optional[str] = None,
        store: Optional[TokenStore] = None,
        notifier: Optional[Notifier] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if config is None:
            from config import ApplicationConfig

            config = ApplicationConfig

        if store is None:
            store = (
                FileTokenStore(config.TOKEN_STORE_PATH)
                if config.TOKEN_STORE_PATH
                else MemoryTokenStore()
            )

        self.config = config
        self.notifier = notifier or Notifier()
        self.cache = QueryCache(retry_delay=config.QUERY_RETRY_DELAY)
        self.transport = HttpTransport(
            base_url or config.API_BASE_URL,
            timeout=config.HTTP_TIMEOUT,
            csrf_per_session=config.CSRF_CACHE_PER_SESSION,
            transport=transport,
        )
        self.auth = AuthSessionManager(
            self.transport,
            store=store,
            cache=self.cache,
            user_stale_time=config.USER_STALE_SECONDS,
        )
        self.gateway = ApiGateway(self.transport, self.auth)
        self.todos = TodosApi(
            self.gateway,
            self.cache,
            notifier=self.notifier,
            list_stale_time=config.TODOS_STALE_SECONDS,
            detail_stale_time=config.TODO_STALE_SECONDS,
        )
        self.categories = CategoriesApi(
            self.gateway,
            self.cache,
            notifier=self.notifier,
            stale_time=config.CATEGORIES_STALE_SECONDS,
        )

    async def initialize(self) -> None:
        await self.auth.initialize()

    async def aclose(self) -> None:
        await self.auth.aclose()
        self.cache.close()
        await self.transport.aclose()

    async def __aenter__(self) -> "TodoClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
