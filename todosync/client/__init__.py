"""
Todo API client

Session handling with silent token refresh, a query cache with optimistic
mutations, and resource APIs for todos and categories.
"""

from .cache import MutationTransaction, QueryCache, QueryKey, QueryObserver
from .client import TodoClient
from .errors import (
    ApiError,
    Forbidden,
    InvalidCredentials,
    InvalidRefreshToken,
    NetworkError,
    NotFound,
    ReauthenticationRequired,
    ServerError,
    Unauthenticated,
    ValidationError,
)
from .gateway import ApiGateway, translate_params
from .models import AuthSession, Category, PageMeta, Todo, TodoPage, TodoStatus, Tokens, User
from .notifications import Notifier, RecordingNotifier
from .resources import CategoriesApi, TodosApi
from .session import AuthSessionManager, SessionState
from .token_store import FileTokenStore, MemoryTokenStore, TokenStore
from .transport import HttpTransport

__all__ = [
    # Facade
    "TodoClient",
    # Building blocks
    "HttpTransport",
    "AuthSessionManager",
    "SessionState",
    "ApiGateway",
    "translate_params",
    "QueryCache",
    "QueryKey",
    "QueryObserver",
    "MutationTransaction",
    "TodosApi",
    "CategoriesApi",
    "Notifier",
    "RecordingNotifier",
    "TokenStore",
    "MemoryTokenStore",
    "FileTokenStore",
    # Models
    "AuthSession",
    "Tokens",
    "User",
    "Todo",
    "TodoPage",
    "PageMeta",
    "TodoStatus",
    "Category",
    # Errors
    "ApiError",
    "ValidationError",
    "Unauthenticated",
    "InvalidCredentials",
    "InvalidRefreshToken",
    "ReauthenticationRequired",
    "Forbidden",
    "NotFound",
    "ServerError",
    "NetworkError",
]
