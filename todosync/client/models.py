"""
Client-side views of API payloads
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class TodoStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


PROTECTED_CATEGORIES = ("General", "Urgent", "Important")


class User(BaseModel):
    id: str
    name: str
    email: str


class Tokens(BaseModel):
    """Credentials held by the session manager

    access_token may be dropped on its own (after a 401 on the current-user
    probe) while the refresh token stays usable.
    """

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"


class AuthSession(BaseModel):
    user: Optional[User] = None
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"

    @property
    def tokens(self) -> Tokens:
        return Tokens(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            token_type=self.token_type,
        )


class Todo(BaseModel):
    # Optimistic placeholders (id "temp-...") have no owner yet
    id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    status: TodoStatus = TodoStatus.PENDING
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user_id: Optional[str] = None

    @property
    def is_temporary(self) -> bool:
        return self.id.startswith("temp-")


class PageMeta(BaseModel):
    total: int
    current_page: int
    last_page: int
    per_page: int


class TodoPage(BaseModel):
    data: List[Todo]
    meta: PageMeta


class Category(BaseModel):
    id: str
    name: str
    created_at: Optional[datetime] = None
