"""
HTTP client for the SACCO backend.

Wraps httpx.AsyncClient: attaches the bearer token, classifies every failure
into a PortalError, and retries read operations once on transport or server
errors. Silent (401) errors are never logged and never retried.
"""

from typing import Any, Callable, Optional

import httpx

from sacco_portal.api.errors import (
    PortalError,
    TransportError,
    classify_response,
    classify_transport_error,
    should_retry,
)
from sacco_portal.logger import get_logger

logger = get_logger(__name__)

TokenProvider = Callable[[], Optional[str]]

READ_METHODS = frozenset({"GET", "HEAD"})


class ApiClient:
    """Authenticated JSON client bound to one backend base URL."""

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = 15.0,
        read_retries: int = 1,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.read_retries = read_retries
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _headers(self, authenticated: bool, token: Optional[str]) -> dict[str, str]:
        if not authenticated:
            return {}
        bearer = token or (self.token_provider() if self.token_provider else None)
        return {"Authorization": f"Bearer {bearer}"} if bearer else {}

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        files: Any = None,
        authenticated: bool = True,
        token: Optional[str] = None,
        retry: Optional[bool] = None,
        quiet: bool = False,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the base URL.
            json: JSON body.
            params: Query parameters.
            data: Form fields (for multipart uploads).
            files: Files for multipart uploads.
            authenticated: Attach the bearer token, if any. A 401 is silent
                only when a token was sent.
            token: Explicit bearer token overriding the token provider.
            retry: Force retry behaviour; defaults to retrying reads only.
            quiet: Log failures at DEBUG only.

        Raises:
            PortalError: Classified failure. Check ``silent`` before reporting.
        """
        method = method.upper()
        if retry is None:
            retry = method in READ_METHODS
        max_retries = self.read_retries if retry else 0

        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._send(
                    method,
                    path,
                    json=json,
                    params=params,
                    data=data,
                    files=files,
                    authenticated=authenticated,
                    token=token,
                )
            except PortalError as error:
                if should_retry(error, attempt, max_retries):
                    logger.debug(f"Retrying {method} {path} after: {error.message}")
                    continue
                if quiet:
                    logger.debug(f"{method} {path} failed: {error.message}")
                elif not error.silent:
                    logger.warning(f"{method} {path} failed: {error.message}")
                raise

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any,
        params: Optional[dict[str, Any]],
        data: Optional[dict[str, Any]],
        files: Any,
        authenticated: bool,
        token: Optional[str],
    ) -> Any:
        headers = self._headers(authenticated, token)
        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                params=params,
                data=data,
                files=files,
                headers=headers,
            )
        except httpx.TransportError as e:
            raise classify_transport_error(e) from e

        # A 401 is only a session expiry when a bearer was actually sent.
        error = classify_response(response, authenticated="Authorization" in headers)
        if error is not None:
            raise error

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError("Malformed response from server") from e

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs) -> Any:
        return await self.request("PATCH", path, **kwargs)
