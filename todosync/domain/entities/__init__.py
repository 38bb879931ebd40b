"""
Todo Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import TodoStatus, DEFAULT_CATEGORIES

# Export all entities
from .user import User
from .session import Session, hash_refresh_token
from .todo import Todo
from .category import Category

__all__ = [
    # Enums
    "TodoStatus",
    "DEFAULT_CATEGORIES",
    # Entities
    "User",
    "Session",
    "Todo",
    "Category",
    "hash_refresh_token",
]
