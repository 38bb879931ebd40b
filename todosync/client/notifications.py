"""
Transient success/failure notices emitted by mutations
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    level: str
    message: str
    detail: Optional[str] = None


class Notifier:
    """Default notifier: writes notices to the log."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str, exc: Optional[Exception] = None) -> None:
        if exc is not None:
            logger.warning(f"{message}: {exc}")
        else:
            logger.warning(message)


class RecordingNotifier(Notifier):
    """Keeps every notice, for callers that render them later."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def success(self, message: str) -> None:
        super().success(message)
        self.notifications.append(Notification("success", message))

    def error(self, message: str, exc: Optional[Exception] = None) -> None:
        super().error(message, exc)
        self.notifications.append(
            Notification("error", message, str(exc) if exc is not None else None)
        )
