"""
Category Use Cases
"""

from .list_categories_use_case import ListCategoriesUseCase
from .add_category_use_case import AddCategoryUseCase
from .delete_category_use_case import DeleteCategoryUseCase
from .dtos import CategoryData, CategoryListResponse, CategoryCreatedResponse

__all__ = [
    "ListCategoriesUseCase",
    "AddCategoryUseCase",
    "DeleteCategoryUseCase",
    "CategoryData",
    "CategoryListResponse",
    "CategoryCreatedResponse",
]
