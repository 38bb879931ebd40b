"""
Category Entity

User-defined label for grouping todos.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel, UniqueConstraint

from ..base import utcnow


class Category(SQLModel, table=True):
    """
    Category entity - a named bucket owned by one user.

    Business Rules:
    - (user_id, name) must be unique
    - No cascade to todos on delete
    """

    __tablename__ = "categories"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    name: str = Field(max_length=100)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_category_user_name"),)
