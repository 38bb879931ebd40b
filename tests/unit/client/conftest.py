import httpx
import pytest
import pytest_asyncio

from tests.fixtures.fake_api import FakeApi
from todosync.client import (
    ApiGateway,
    AuthSessionManager,
    CategoriesApi,
    HttpTransport,
    MemoryTokenStore,
    QueryCache,
    RecordingNotifier,
    TodosApi,
    Tokens,
)

BASE_URL = "http://test/api"


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest_asyncio.fixture
async def transport(fake_api):
    transport = HttpTransport(BASE_URL, transport=httpx.MockTransport(fake_api))
    yield transport
    await transport.aclose()


@pytest.fixture
def cache():
    return QueryCache(retry_delay=0)


@pytest.fixture
def store():
    return MemoryTokenStore()


@pytest.fixture
def auth(transport, store, cache):
    return AuthSessionManager(transport, store=store, cache=cache)


@pytest_asyncio.fixture
async def logged_in(auth, store):
    """Session restored with access-1 / refresh-1, as after a restart"""
    store.save(Tokens(access_token="access-1", refresh_token="refresh-1"))
    await auth.initialize()
    return auth


@pytest.fixture
def gateway(transport, auth):
    return ApiGateway(transport, auth)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def todos(gateway, cache, notifier):
    return TodosApi(gateway, cache, notifier=notifier)


@pytest.fixture
def categories(gateway, cache, notifier):
    return CategoriesApi(gateway, cache, notifier=notifier)
