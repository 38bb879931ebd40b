"""
List Todos Use Case

Filter, sort and paginate the caller's todos.
"""

import math
from datetime import date
from uuid import UUID

from todosync.app.repositories.todo_repository import TodoFilter
from todosync.app.services.unit_of_work import UnitOfWork
from todosync.domain.entities import TodoStatus
from todosync.result import Error, Result, Return
from .dtos import ListTodosQuery, PageMeta, TodoData, TodoPageResponse

ALLOWED_SORTS = ("title", "created_at", "due_date", "status")
DEFAULT_SORT = "-created_at"


class ListTodosUseCase:
    """
    Use case for listing todos.

    Business Rules:
    - Results are owner-scoped and exclude soft-deleted todos
    - filter[title] is partial, filter[category] and filter[status] exact
    - filter[due_date_between] takes "start,end" (inclusive)
    - sort accepts title, created_at, due_date, status; "-" prefix = descending
    - Default sort is newest first
    - A page past the end yields an empty data list, not an error
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, query: ListTodosQuery) -> Result[TodoPageResponse]:
        sort = query.sort or DEFAULT_SORT
        descending = sort.startswith("-")
        sort_field = sort.lstrip("-")
        if sort_field not in ALLOWED_SORTS:
            return Return.err(
                Error(
                    "INVALID_SORT",
                    f"Requested sort(s) `{sort_field}` is not allowed. "
                    f"Allowed sort(s) are `{', '.join(ALLOWED_SORTS)}`.",
                )
            )

        if query.status and query.status not in {s.value for s in TodoStatus}:
            return Return.err(Error("INVALID_FILTER", f"Unknown status `{query.status}`"))

        due_from = due_to = None
        if query.due_date_between:
            try:
                start, end = query.due_date_between.split(",")
                due_from, due_to = date.fromisoformat(start.strip()), date.fromisoformat(end.strip())
            except ValueError:
                return Return.err(
                    Error("INVALID_FILTER", "filter[due_date_between] must be `start,end` dates")
                )

        todo_filter = TodoFilter(
            title=query.title,
            category=query.category,
            status=TodoStatus(query.status) if query.status else None,
            due_date_from=due_from,
            due_date_to=due_to,
            sort_field=sort_field,
            descending=descending,
            page=query.page,
            per_page=query.per_page,
        )

        async with self.uow:
            todos, total = await self.uow.todos.list_for_user(user_id, todo_filter)

            return Return.ok(
                TodoPageResponse(
                    data=[TodoData.from_entity(todo) for todo in todos],
                    meta=PageMeta(
                        total=total,
                        current_page=query.page,
                        last_page=max(1, math.ceil(total / query.per_page)),
                        per_page=query.per_page,
                    ),
                )
            )
