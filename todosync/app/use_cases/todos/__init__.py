"""
Todo Use Cases

All todo-related business logic.
"""

from .list_todos_use_case import ListTodosUseCase
from .get_todo_use_case import GetTodoUseCase
from .create_todo_use_case import CreateTodoUseCase
from .update_todo_use_case import UpdateTodoUseCase
from .delete_todo_use_case import DeleteTodoUseCase
from .dtos import (
    CreateTodoCommand,
    ListTodosQuery,
    TodoData,
    PageMeta,
    TodoPageResponse,
    TodoResponse,
    TodoMutationResponse,
)

__all__ = [
    # Use Cases
    "ListTodosUseCase",
    "GetTodoUseCase",
    "CreateTodoUseCase",
    "UpdateTodoUseCase",
    "DeleteTodoUseCase",
    # DTOs
    "CreateTodoCommand",
    "ListTodosQuery",
    "TodoData",
    "PageMeta",
    "TodoPageResponse",
    "TodoResponse",
    "TodoMutationResponse",
]
