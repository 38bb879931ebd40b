"""
Todo and category resources

Reads go through the query cache. Mutations apply optimistic overlays,
call the API, then commit or roll back and invalidate the affected kinds.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional
from urllib.parse import quote
from uuid import uuid4

from .cache import MutationTransaction, QueryCache, QueryKey, QueryObserver, retry_policy
from .errors import ApiError, ValidationError
from .gateway import ApiGateway
from .models import PROTECTED_CATEGORIES, Category, Todo, TodoPage
from .notifications import Notifier
from .validation import CategoryCreate, TodoCreate, TodoUpdate, validate_payload

logger = logging.getLogger(__name__)

TODOS = "todos"
TODO = "todo"
CATEGORIES = "categories"

DEFAULT_LIST_PARAMS = {"page": 1, "limit": 10}

LIST_RETRY = retry_policy(3, never=(400, 404))
DETAIL_RETRY = retry_policy(2, never=(404,))
CATEGORIES_RETRY = retry_policy(2)


def todos_key(params: Optional[Mapping[str, Any]] = None) -> QueryKey:
    return QueryKey.of(TODOS, params if params is not None else DEFAULT_LIST_PARAMS)


def todo_key(todo_id: str) -> QueryKey:
    return QueryKey.of(TODO, {"id": str(todo_id)})


def categories_key() -> QueryKey:
    return QueryKey.of(CATEGORIES)


def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat()


def _is_first_page(key: QueryKey) -> bool:
    try:
        return int(key.param("page", 1)) == 1
    except (TypeError, ValueError):
        return False


class TodosApi:
    def __init__(
        self,
        gateway: ApiGateway,
        cache: QueryCache,
        notifier: Optional[Notifier] = None,
        list_stale_time: float = 5 * 60,
        detail_stale_time: float = 5 * 60,
    ):
        self.gateway = gateway
        self.cache = cache
        self.notifier = notifier or Notifier()
        self.list_stale_time = list_stale_time
        self.detail_stale_time = detail_stale_time

    async def list(self, params: Optional[Mapping[str, Any]] = None) -> TodoPage:
        """
        One page of todos.

        params uses the caller-facing names (page, limit, search, status,
        category, sort_by, sort_direction, start_date, end_date).
        """
        params = dict(params) if params is not None else dict(DEFAULT_LIST_PARAMS)

        async def fetch():
            return await self.gateway.request("GET", "/todos", params=params)

        data = await self.cache.fetch_query(
            todos_key(params), fetch, stale_time=self.list_stale_time, retry=LIST_RETRY
        )
        return TodoPage.model_validate(data)

    async def get(self, todo_id: Optional[str]) -> Optional[Todo]:
        """A single todo; None without any request when todo_id is empty."""

        async def fetch():
            return await self.gateway.request("GET", f"/todos/{todo_id}")

        data = await self.cache.fetch_query(
            todo_key(todo_id or ""),
            fetch,
            stale_time=self.detail_stale_time,
            enabled=bool(todo_id),
            retry=DETAIL_RETRY,
        )
        return Todo.model_validate(data["data"]) if data is not None else None

    def observe(self) -> QueryObserver:
        """A list view whose parameters change over time; the latest wins."""
        return QueryObserver(self.list)

    async def create(self, payload: Mapping[str, Any]) -> Todo:
        """
        Create a todo.

        A placeholder with a temp-<uuid> id is prepended to every cached
        first page until the server answers.

        Raises:
            ValidationError: before any request, if the payload is invalid
        """
        body = validate_payload(TodoCreate, payload)
        now = _now_iso()
        placeholder = {
            "id": f"temp-{uuid4()}",
            "title": body["title"],
            "description": body.get("description"),
            "category": body.get("category"),
            "status": body.get("status") or "pending",
            "due_date": body.get("due_date"),
            "created_at": now,
            "updated_at": now,
            "user_id": None,
        }

        def prepend(page):
            if page is None:
                return page
            page["data"] = [placeholder] + page["data"]
            return page

        transaction = MutationTransaction(self.cache)
        for key in self.cache.keys(TODOS):
            if _is_first_page(key):
                transaction.apply(key, prepend)

        try:
            result = await self.gateway.request("POST", "/todos", body=body)
        except ApiError as e:
            transaction.rollback()
            self.notifier.error("Failed to create todo", e)
            raise
        finally:
            self.cache.invalidate(TODOS)

        transaction.commit()
        self.notifier.success("Todo created successfully")
        return Todo.model_validate(result["data"])

    async def update(self, todo_id: str, changes: Mapping[str, Any]) -> Todo:
        """
        Partially update a todo.

        Every cached list containing the todo and its detail entry show the
        change immediately; both are restored exactly if the server refuses.
        """
        body = validate_payload(TodoUpdate, changes)
        todo_id = str(todo_id)
        patch = dict(body, updated_at=_now_iso())

        def patch_page(page):
            if page is None:
                return page
            page["data"] = [
                dict(todo, **patch) if todo["id"] == todo_id else todo for todo in page["data"]
            ]
            return page

        def patch_detail(detail):
            if detail is None:
                return detail
            detail["data"] = dict(detail["data"], **patch)
            return detail

        transaction = MutationTransaction(self.cache)
        for key in self.cache.keys(TODOS):
            transaction.apply(key, patch_page)
        transaction.apply(todo_key(todo_id), patch_detail)

        try:
            result = await self.gateway.request("PUT", f"/todos/{todo_id}", body=body)
        except ApiError as e:
            transaction.rollback()
            self.notifier.error("Failed to update todo", e)
            raise
        finally:
            self.cache.invalidate(TODOS)
            self.cache.invalidate_key(todo_key(todo_id))

        transaction.commit()
        self.notifier.success("Todo updated successfully")
        return Todo.model_validate(result["data"])

    async def delete(self, todo_id: str) -> None:
        """
        Delete a todo.

        It disappears from cached lists and its detail entry is evicted. On
        failure the lists come back; the detail entry is simply refetched on
        the next read.
        """
        todo_id = str(todo_id)

        def remove(page):
            if page is None:
                return page
            page["data"] = [todo for todo in page["data"] if todo["id"] != todo_id]
            return page

        transaction = MutationTransaction(self.cache)
        for key in self.cache.keys(TODOS):
            transaction.apply(key, remove)
        self.cache.remove(todo_key(todo_id))

        try:
            await self.gateway.request("DELETE", f"/todos/{todo_id}")
        except ApiError as e:
            transaction.rollback()
            self.notifier.error("Failed to delete todo", e)
            raise
        finally:
            self.cache.invalidate(TODOS)

        transaction.commit()
        self.notifier.success("Todo deleted successfully")


class CategoriesApi:
    def __init__(
        self,
        gateway: ApiGateway,
        cache: QueryCache,
        notifier: Optional[Notifier] = None,
        stale_time: float = 60 * 60,
    ):
        self.gateway = gateway
        self.cache = cache
        self.notifier = notifier or Notifier()
        self.stale_time = stale_time

    async def list(self) -> List[str]:
        """Category names, sorted by the server."""

        async def fetch():
            body = await self.gateway.request("GET", "/categories")
            return body["data"]

        return await self.cache.fetch_query(
            categories_key(), fetch, stale_time=self.stale_time, retry=CATEGORIES_RETRY
        )

    async def add(self, name: str) -> Category:
        body = validate_payload(CategoryCreate, {"name": name})

        def append(names):
            if names is None:
                return names
            return names + [body["name"]]

        transaction = MutationTransaction(self.cache)
        transaction.apply(categories_key(), append)
        try:
            result = await self.gateway.request("POST", "/categories", body=body)
        except ApiError as e:
            transaction.rollback()
            self.notifier.error("Failed to add category", e)
            raise
        finally:
            self.cache.invalidate(CATEGORIES)

        transaction.commit()
        self.notifier.success("Category added successfully")
        return Category.model_validate(result["data"])

    async def delete(self, name: str) -> None:
        """
        Delete a category. Todos referencing it keep their category value.

        Raises:
            ValidationError: before any request, for a protected default
        """
        if name in PROTECTED_CATEGORIES:
            message = f"The default category {name} cannot be deleted."
            self.notifier.error("Failed to delete category")
            raise ValidationError(message, errors={"name": [message]}, status=None)

        def remove(names):
            if names is None:
                return names
            return [existing for existing in names if existing != name]

        transaction = MutationTransaction(self.cache)
        transaction.apply(categories_key(), remove)
        try:
            await self.gateway.request("DELETE", f"/categories/{quote(name, safe='')}")
        except ApiError as e:
            transaction.rollback()
            self.notifier.error("Failed to delete category", e)
            raise
        finally:
            self.cache.invalidate(CATEGORIES)
            self.cache.invalidate(TODOS)

        transaction.commit()
        self.notifier.success("Category deleted successfully")
