import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from todosync.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from todosync.api.app import create_app
from todosync.client import MemoryTokenStore, RecordingNotifier, TodoClient
from todosync.depends import get_unit_of_work

BASE_URL = "http://test/api"


class ClientTestConfig(ApplicationConfig):
    QUERY_RETRY_DELAY = 0
    TOKEN_STORE_PATH = ""


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def app(engine):
    app = create_app(ApplicationConfig)
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    # One database session per request so concurrent requests stay isolated
    async def override_get_unit_of_work():
        async with Session() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    return app


@pytest_asyncio.fixture
async def client(app):
    """Raw HTTP client that has already completed the CSRF handshake"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE_URL) as ac:
        response = await ac.get("/sanctum/csrf-cookie")
        ac.headers["X-XSRF-TOKEN"] = response.headers["X-XSRF-TOKEN"]
        yield ac


@pytest_asyncio.fixture
async def todo_client(app):
    async with TodoClient(
        config=ClientTestConfig,
        base_url=BASE_URL,
        store=MemoryTokenStore(),
        notifier=RecordingNotifier(),
        transport=ASGITransport(app=app),
    ) as todo_client:
        yield todo_client
