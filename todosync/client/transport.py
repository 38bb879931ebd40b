"""
HTTP transport

Thin wrapper over httpx.AsyncClient that performs the anti-forgery handshake,
sends JSON and turns every failure into an ApiError subclass.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .errors import ApiError, NetworkError, error_from_response

logger = logging.getLogger(__name__)

CSRF_PATH = "/sanctum/csrf-cookie"
CSRF_HEADER = "X-XSRF-TOKEN"
CSRF_COOKIE = "XSRF-TOKEN"
CSRF_MISMATCH_STATUS = 419

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "X-Requested-With": "XMLHttpRequest",
}


class HttpTransport:
    """
    Sends requests to the API.

    By default a fresh CSRF token is fetched before every call. With
    csrf_per_session the token is reused until reset_csrf() (called on
    logout), and refetched once if the server reports a mismatch.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        csrf_per_session: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.csrf_per_session = csrf_per_session
        self._csrf_token: Optional[str] = None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=DEFAULT_HEADERS,
            transport=transport,
        )

    async def fetch_csrf(self) -> Optional[str]:
        try:
            response = await self._client.get(CSRF_PATH)
        except httpx.RequestError as e:
            raise NetworkError(f"Failed to obtain CSRF cookie: {e}") from e
        if response.status_code >= 400:
            raise error_from_response(response.status_code, _decode(response))
        token = response.headers.get(CSRF_HEADER) or response.cookies.get(CSRF_COOKIE)
        self._csrf_token = token
        return token

    def reset_csrf(self) -> None:
        self._csrf_token = None

    async def _csrf(self) -> Optional[str]:
        if self.csrf_per_session and self._csrf_token:
            return self._csrf_token
        return await self.fetch_csrf()

    async def send(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send one request and return the decoded body (None for empty bodies).

        Raises:
            ApiError subclass matching the response status, or NetworkError
            when no response was received
        """
        response = await self._send_once(method, path, json, params, headers)
        if response.status_code == CSRF_MISMATCH_STATUS and self.csrf_per_session:
            logger.info("CSRF token rejected, fetching a new one")
            self.reset_csrf()
            response = await self._send_once(method, path, json, params, headers)

        body = _decode(response)
        if response.status_code >= 400:
            error = error_from_response(response.status_code, body)
            logger.debug(f"{method} {path} failed with {response.status_code}: {error.message}")
            raise error
        return body

    async def _send_once(self, method, path, json, params, headers) -> httpx.Response:
        request_headers = dict(headers or {})
        csrf_token = await self._csrf()
        if csrf_token:
            request_headers[CSRF_HEADER] = csrf_token
        try:
            return await self._client.request(
                method, path, json=json, params=params, headers=request_headers
            )
        except httpx.RequestError as e:
            raise NetworkError(str(e) or type(e).__name__) from e

    async def aclose(self) -> None:
        await self._client.aclose()


def _decode(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        if response.status_code >= 400:
            return {"message": response.text}
        raise ApiError(
            "Response body is not valid JSON", status=response.status_code, data=response.text
        )
