"""
Client error taxonomy

Every failure surfaced by the client is an ApiError carrying the HTTP status
(None when no response arrived), a human readable message and the decoded
response body.
"""

from typing import Any, Dict, List, Optional


class ApiError(Exception):
    def __init__(self, message: str, status: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, message={self.message!r})"


class ValidationError(ApiError):
    """422, or a payload rejected locally before it was sent"""

    def __init__(
        self,
        message: str,
        errors: Optional[Dict[str, List[str]]] = None,
        status: Optional[int] = 422,
        data: Any = None,
    ):
        super().__init__(message, status=status, data=data)
        self.errors = errors or {}


class Unauthenticated(ApiError):
    pass


class InvalidCredentials(Unauthenticated):
    pass


class InvalidRefreshToken(Unauthenticated):
    pass


class ReauthenticationRequired(Unauthenticated):
    """The session could not be refreshed; the caller must log in again."""


class Forbidden(ApiError):
    pass


class NotFound(ApiError):
    pass


class ServerError(ApiError):
    pass


class NetworkError(ApiError):
    """No response was received (connection refused, timeout, ...)"""


STATUS_ERRORS = {
    401: Unauthenticated,
    403: Forbidden,
    404: NotFound,
}

DEFAULT_MESSAGE = "An error occurred on the server"


def error_from_response(status: int, body: Any) -> ApiError:
    """Map a non-2xx response onto the taxonomy."""
    message = DEFAULT_MESSAGE
    if isinstance(body, dict) and body.get("message"):
        message = str(body["message"])

    if status == 422:
        errors = body.get("errors") if isinstance(body, dict) else None
        return ValidationError(message, errors=errors or {}, status=status, data=body)
    if status >= 500:
        return ServerError(message, status=status, data=body)
    error_class = STATUS_ERRORS.get(status, ApiError)
    return error_class(message, status=status, data=body)
