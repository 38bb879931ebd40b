from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator

from todosync.api.error import ClientError, ServerError
from todosync.app.services.unit_of_work import UnitOfWork
from todosync.app.use_cases.auth import MessageResponse
from todosync.app.use_cases.categories import (
    AddCategoryUseCase,
    CategoryCreatedResponse,
    CategoryListResponse,
    DeleteCategoryUseCase,
    ListCategoriesUseCase,
)
from todosync.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/categories", tags=["Categories"])


class CreateCategoryRequest(BaseModel):
    """POST /categories payload"""

    name: str = Field(..., max_length=100)

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("The name field is required.")
        return value


@router.get("", status_code=status.HTTP_200_OK, response_model=CategoryListResponse)
async def list_categories(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ListCategoriesUseCase(uow).execute(UUID(current_user["user_id"]))
    if result.is_err():
        raise ServerError(result.error)
    return result.value


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CategoryCreatedResponse)
async def add_category(
    request: CreateCategoryRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Add Category

    Raises:
        - 422 Unprocessable Entity: Blank or duplicate name
    """
    result = await AddCategoryUseCase(uow).execute(UUID(current_user["user_id"]), request.name)
    if result.is_err():
        error = result.error
        if error.code == "CATEGORY_ALREADY_EXISTS":
            raise ClientError(
                error,
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                errors={"name": [error.message]},
            )
        raise ServerError(error)
    return result.value


@router.delete("/{name}", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def delete_category(
    name: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Delete Category

    Todos that reference the category are left as they are.

    Raises:
        - 404 Not Found: No such category for this user
    """
    result = await DeleteCategoryUseCase(uow).execute(UUID(current_user["user_id"]), name)
    if result.is_err():
        error = result.error
        if error.code == "CATEGORY_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)
    return result.value
