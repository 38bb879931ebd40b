from abc import ABC, abstractmethod

from todosync.app.repositories.category_repository import ICategoryRepository
from todosync.app.repositories.session_repository import ISessionRepository
from todosync.app.repositories.todo_repository import ITodoRepository
from todosync.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    sessions: ISessionRepository
    todos: ITodoRepository
    categories: ICategoryRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
