"""
Todo Entity

A single task owned by one user.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, Date, DateTime, Field, Index, SQLModel

from ..base import utcnow
from .enums import TodoStatus


class Todo(SQLModel, table=True):
    """
    Todo entity - a task owned exclusively by one user.

    Business Rules:
    - Only the owner can read or mutate a todo
    - category is a free-text name, not a foreign key; deleting a category
      leaves todos that reference it untouched
    - Deletes are soft: deleted_at is set and the row is excluded from reads
    """

    __tablename__ = "todos"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None, max_length=100)
    status: TodoStatus = Field(default=TodoStatus.pending)
    due_date: Optional[date] = Field(default=None, sa_column=Column(Date))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_todo_user_deleted", "user_id", "deleted_at"),
        Index("idx_todo_user_status", "user_id", "status"),
    )
