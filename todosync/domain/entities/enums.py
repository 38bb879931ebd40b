"""
Todo Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class TodoStatus(str, Enum):
    """Lifecycle status of a todo"""

    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


DEFAULT_CATEGORIES = ("General", "Urgent", "Important")
