"""
Todo API Routes

CRUD plus filter/sort/paginate over the caller's todos.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator

from todosync.api.error import ClientError, ServerError
from todosync.app.services.unit_of_work import UnitOfWork
from todosync.app.use_cases.auth import MessageResponse
from todosync.app.use_cases.todos import (
    CreateTodoCommand,
    CreateTodoUseCase,
    DeleteTodoUseCase,
    GetTodoUseCase,
    ListTodosQuery,
    ListTodosUseCase,
    TodoMutationResponse,
    TodoPageResponse,
    TodoResponse,
    UpdateTodoUseCase,
)
from todosync.domain.entities import TodoStatus
from todosync.result import Error
from todosync.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/todos", tags=["Todos"])

NOT_FOUND = Error("TODO_NOT_FOUND", "Resource not found.")


def _parse_todo_id(todo_id: str) -> UUID:
    try:
        return UUID(todo_id)
    except ValueError:
        raise ClientError(NOT_FOUND, status_code=status.HTTP_404_NOT_FOUND)


def _raise_for(error: Error):
    if error.code == "TODO_NOT_FOUND":
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code == "FORBIDDEN":
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    if error.code in ("INVALID_SORT", "INVALID_FILTER"):
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise ServerError(error)


def _require_title(value: Optional[str]) -> Optional[str]:
    if value is not None:
        value = value.strip()
        if not value:
            raise ValueError("The title field is required.")
    return value


class CreateTodoRequest(BaseModel):
    """POST /todos payload"""

    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    status: Optional[TodoStatus] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_present(cls, value: Optional[str]) -> Optional[str]:
        return _require_title(value)

    @field_validator("due_date")
    @classmethod
    def not_in_past(cls, value: Optional[date]) -> Optional[date]:
        if value is not None and value < date.today():
            raise ValueError("The due date must be a date after or equal to today.")
        return value


class UpdateTodoRequest(BaseModel):
    """PUT /todos/{id} payload; every field optional"""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    status: Optional[TodoStatus] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_present(cls, value: Optional[str]) -> Optional[str]:
        return _require_title(value)


@router.get("", status_code=status.HTTP_200_OK, response_model=TodoPageResponse)
async def list_todos(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    title: Optional[str] = Query(None, alias="filter[title]"),
    category: Optional[str] = Query(None, alias="filter[category]"),
    todo_status: Optional[str] = Query(None, alias="filter[status]"),
    due_date_between: Optional[str] = Query(None, alias="filter[due_date_between]"),
    sort: Optional[str] = Query(None, description="title|created_at|due_date|status, '-' prefix for desc"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
):
    """
    List Todos

    Raises:
        - 400 Bad Request: Unknown sort field or malformed filter
        - 401 Unauthorized: Invalid or expired access token
    """
    query = ListTodosQuery(
        title=title,
        category=category,
        status=todo_status,
        due_date_between=due_date_between,
        sort=sort,
        page=page,
        per_page=per_page,
    )
    result = await ListTodosUseCase(uow).execute(UUID(current_user["user_id"]), query)
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post("", status_code=status.HTTP_201_CREATED, response_model=TodoMutationResponse)
async def create_todo(
    request: CreateTodoRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    command = CreateTodoCommand(**request.model_dump())
    result = await CreateTodoUseCase(uow).execute(UUID(current_user["user_id"]), command)
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.get("/{todo_id}", status_code=status.HTTP_200_OK, response_model=TodoResponse)
async def get_todo(
    todo_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Todo

    Raises:
        - 403 Forbidden: Todo belongs to another user
        - 404 Not Found: Unknown or deleted todo
    """
    result = await GetTodoUseCase(uow).execute(
        UUID(current_user["user_id"]), _parse_todo_id(todo_id)
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.put("/{todo_id}", status_code=status.HTTP_200_OK, response_model=TodoMutationResponse)
async def update_todo(
    todo_id: str,
    request: UpdateTodoRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Update Todo

    Only the fields present in the body change.

    Raises:
        - 403 Forbidden: Todo belongs to another user
        - 404 Not Found: Unknown or deleted todo
        - 422 Unprocessable Entity: Invalid field values
    """
    result = await UpdateTodoUseCase(uow).execute(
        UUID(current_user["user_id"]),
        _parse_todo_id(todo_id),
        request.model_dump(exclude_unset=True),
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.delete("/{todo_id}", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def delete_todo(
    todo_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await DeleteTodoUseCase(uow).execute(
        UUID(current_user["user_id"]), _parse_todo_id(todo_id)
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value
