"""
API Gateway

Every resource call goes through ApiGateway.request: it attaches the bearer
token, translates list parameters into the server's filter/sort syntax and
recovers from an expired access token by refreshing and retrying once.
"""

import logging
from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidRefreshToken, ReauthenticationRequired, Unauthenticated
from .session import AuthSessionManager, bearer
from .transport import HttpTransport

logger = logging.getLogger(__name__)

REAUTHENTICATE_MESSAGE = "Session expired, please log in again."


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _stringify(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def translate_params(params: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Convert caller-facing list parameters into query-string parameters.

    search/title -> filter[title], status/category -> filter[...],
    sort_by + sort_direction -> sort (descending prefixed with "-"),
    limit -> per_page, start_date + end_date -> filter[due_date_between].
    Anything else passes through. None and "" are dropped.
    """
    translated: Dict[str, str] = {}
    if not params:
        return translated

    for key, value in params.items():
        if _is_empty(value):
            continue
        if key in ("search", "title"):
            translated["filter[title]"] = _stringify(value)
        elif key in ("status", "category"):
            translated[f"filter[{key}]"] = _stringify(value)
        elif key == "sort_by":
            prefix = "-" if params.get("sort_direction") == "desc" else ""
            translated["sort"] = f"{prefix}{_stringify(value)}"
        elif key == "limit":
            translated["per_page"] = _stringify(value)
        elif key in ("sort_direction", "start_date", "end_date"):
            continue
        else:
            translated[key] = _stringify(value)

    start, end = params.get("start_date"), params.get("end_date")
    if not _is_empty(start) and not _is_empty(end):
        translated["filter[due_date_between]"] = f"{_stringify(start)},{_stringify(end)}"
    return translated


class ApiGateway:
    def __init__(self, transport: HttpTransport, auth: AuthSessionManager):
        self.transport = transport
        self.auth = auth

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Send an authenticated request.

        Business Rules:
        - The current access token is attached as a bearer token
        - A 401 triggers one refresh and one retry with the new token; a
          second 401 propagates as Unauthenticated
        - If the refresh itself fails the session is already cleared and
          ReauthenticationRequired is raised

        Raises:
            ReauthenticationRequired: the session could not be refreshed
            ApiError: any other normalized failure
        """
        query = translate_params(params)
        access_token = self.auth.access_token
        try:
            return await self.transport.send(
                method, path, json=body, params=query, headers=bearer(access_token)
            )
        except Unauthenticated as e:
            unauthorized = e

        logger.info(f"{method} {path} returned 401, refreshing session")
        try:
            tokens = await self.auth.refresh(failed_access_token=access_token)
        except InvalidRefreshToken as e:
            raise ReauthenticationRequired(
                REAUTHENTICATE_MESSAGE, status=401, data=e.data
            ) from unauthorized

        return await self.transport.send(
            method, path, json=body, params=query, headers=bearer(tokens.access_token)
        )
