"""
Token persistence for the session manager
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

from .models import Tokens

logger = logging.getLogger(__name__)


class TokenStore(ABC):
    @abstractmethod
    def load(self) -> Optional[Tokens]:
        pass

    @abstractmethod
    def save(self, tokens: Tokens) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class MemoryTokenStore(TokenStore):
    def __init__(self, tokens: Optional[Tokens] = None):
        self._tokens = tokens

    def load(self) -> Optional[Tokens]:
        return self._tokens

    def save(self, tokens: Tokens) -> None:
        self._tokens = tokens

    def clear(self) -> None:
        self._tokens = None


class FileTokenStore(TokenStore):
    """
    Keeps tokens in a JSON file so a session survives a restart.

    The file is written with owner-only permissions. An unreadable or
    malformed file is treated as "no session".
    """

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Optional[Tokens]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r") as r_file:
                return Tokens.model_validate(json.load(r_file))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return None

    def save(self, tokens: Tokens) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as w_file:
            json.dump(tokens.model_dump(), w_file)

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
