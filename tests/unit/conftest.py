import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.find_by_email = AsyncMock(return_value=None)
    uow.users.add = AsyncMock(side_effect=lambda user: user)
    uow.users.record_login = AsyncMock()

    uow.sessions = MagicMock()
    uow.sessions.open = AsyncMock(side_effect=lambda session: session)
    uow.sessions.is_active = AsyncMock(return_value=True)
    uow.sessions.find_by_refresh_token = AsyncMock(return_value=None)
    uow.sessions.rotate = AsyncMock(return_value=True)
    uow.sessions.revoke = AsyncMock(return_value=True)
    uow.sessions.revoke_all_for_user = AsyncMock(return_value=0)

    uow.todos = MagicMock()
    uow.todos.get_by_id = AsyncMock(return_value=None)
    uow.todos.list_for_user = AsyncMock(return_value=([], 0))
    uow.todos.create = AsyncMock(side_effect=lambda todo: todo)
    uow.todos.update = AsyncMock(side_effect=lambda todo: todo)

    uow.categories = MagicMock()
    uow.categories.list_names = AsyncMock(return_value=[])
    uow.categories.get_by_name = AsyncMock(return_value=None)
    uow.categories.create = AsyncMock(side_effect=lambda category: category)
    uow.categories.delete = AsyncMock()

    return uow
