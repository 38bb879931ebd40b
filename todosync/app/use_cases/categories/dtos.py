"""
Category Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel


class CategoryData(BaseModel):
    id: str
    name: str
    created_at: datetime


class CategoryListResponse(BaseModel):
    data: List[str]


class CategoryCreatedResponse(BaseModel):
    message: str
    data: CategoryData
