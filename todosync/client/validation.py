"""
Payload validation performed before anything is sent to the server.

Mirrors the server's request rules so obviously bad input fails fast with
the same field-level error shape a 422 would carry.
"""

from datetime import date
from typing import Any, Dict, Mapping, Optional, Type

import pydantic
from pydantic import BaseModel, Field, field_validator

from .errors import ValidationError
from .models import TodoStatus

VALIDATION_MESSAGE = "The given data was invalid."


def _require_title(value: Optional[str]) -> Optional[str]:
    if value is not None:
        value = value.strip()
        if not value:
            raise ValueError("The title field is required.")
    return value


class TodoCreate(BaseModel):
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    status: Optional[TodoStatus] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_present(cls, value: str) -> str:
        return _require_title(value)


class TodoUpdate(BaseModel):
    """Partial update; omitted fields are left alone, but title and status cannot be cleared"""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    status: Optional[TodoStatus] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_present(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("The title field is required.")
        return _require_title(value)

    @field_validator("status")
    @classmethod
    def status_present(cls, value: Optional[TodoStatus]) -> TodoStatus:
        if value is None:
            raise ValueError("The status field cannot be null.")
        return value


class CategoryCreate(BaseModel):
    name: str = Field(..., max_length=100)

    @field_validator("name")
    @classmethod
    def name_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("The name field is required.")
        return value


def validate_payload(model: Type[BaseModel], payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate payload against model and return the JSON-ready body.

    Only keys the caller supplied are kept, so partial updates stay partial.

    Raises:
        ValidationError: with a field -> messages map; status is None since
            the request never left the process
    """
    try:
        validated = model.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        errors: Dict[str, list] = {}
        for item in exc.errors():
            field = ".".join(str(part) for part in item["loc"]) or "request"
            message = item["msg"]
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            errors.setdefault(field, []).append(message)
        raise ValidationError(VALIDATION_MESSAGE, errors=errors, status=None) from exc
    return validated.model_dump(mode="json", exclude_unset=True)
