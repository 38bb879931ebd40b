"""
Todo Use Case DTOs (Data Transfer Objects)
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from todosync.domain.entities import Todo, TodoStatus


class CreateTodoCommand(BaseModel):
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[TodoStatus] = None
    due_date: Optional[date] = None


class ListTodosQuery(BaseModel):
    """Raw listing request as received on the wire"""

    title: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    due_date_between: Optional[str] = None
    sort: Optional[str] = None
    page: int = 1
    per_page: int = 10


class TodoData(BaseModel):
    """Todo as exposed by the API"""

    id: str
    title: str
    description: Optional[str]
    category: Optional[str]
    status: TodoStatus
    due_date: Optional[date]
    created_at: datetime
    updated_at: datetime
    user_id: str

    @classmethod
    def from_entity(cls, todo: Todo) -> "TodoData":
        return cls(
            id=str(todo.id),
            title=todo.title,
            description=todo.description,
            category=todo.category,
            status=todo.status,
            due_date=todo.due_date,
            created_at=todo.created_at,
            updated_at=todo.updated_at,
            user_id=str(todo.user_id),
        )


class PageMeta(BaseModel):
    total: int
    current_page: int
    last_page: int
    per_page: int


class TodoPageResponse(BaseModel):
    data: List[TodoData]
    meta: PageMeta


class TodoResponse(BaseModel):
    data: TodoData


class TodoMutationResponse(BaseModel):
    message: str
    data: TodoData
