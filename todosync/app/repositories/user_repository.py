from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from todosync.domain.entities import User


class IUserRepository(ABC):
    """Account lookups for registration, login and the current-user probe"""

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive match, so Jane@x.com and jane@x.com are one account"""
        pass

    @abstractmethod
    async def add(self, user: User) -> User:
        """Persist a new account; its id is available on return"""
        pass

    @abstractmethod
    async def record_login(self, user_id: UUID) -> None:
        """Stamp last_login_at with the current time"""
        pass
