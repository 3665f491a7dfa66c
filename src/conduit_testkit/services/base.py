"""Base API client for talking to the application under test.

This module provides:
- ApiResponse, the ``(status_code, body)`` pair every request returns
- BaseAPIClient, an httpx wrapper with token auth and transport retries

Unlike a production client, BaseAPIClient does not raise on HTTP error
statuses: tests assert on 4xx/5xx responses as often as on 2xx ones.
Only transport failures (connection refused, timeouts) are retried, and
only they raise.
"""

import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from conduit_testkit.constants.api import AUTH_SCHEME, DEFAULT_TIMEOUT_SECONDS, MAX_RETRIES
from conduit_testkit.core.exceptions import ExternalServiceError

log = structlog.get_logger(__name__)

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True)
class ApiResponse:
    """Status code and parsed body of a response.

    Unpacks like a tuple:
        status, body = await client.send("GET", "api/tags")
    """

    status_code: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def __iter__(self) -> Iterator[Any]:
        yield self.status_code
        yield self.body

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def parse_body(response: httpx.Response) -> Any:
    """Parse JSON or text bodies; anything else (or unparsable) is None."""
    if not response.content:
        return None

    content_type = response.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            return response.json()
        if "text/" in content_type:
            return response.text
    except ValueError as e:
        log.warning(
            "response_body_unparsable",
            status_code=response.status_code,
            content_type=content_type,
            error=str(e),
        )
    return None


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    log.warning(
        "request_transport_error",
        attempt=retry_state.attempt_number,
        error=str(error),
    )


class BaseAPIClient:
    """Async HTTP client with token auth and retries on transport errors.

    Provides:
    - Lazy client initialization (created on first request)
    - ``Authorization: Token <token>`` on every request unless skipped
    - Automatic retry with exponential backoff for transport errors
    - Proper resource cleanup (``close`` or ``async with``)

    Attributes:
        base_url: Base URL for all requests (always ends with "/").
        timeout: Request timeout in seconds.
        headers: Default headers for all requests.
        max_retries: Attempts per request on transport errors.

    Example:
        async with BaseAPIClient(base_url="https://api.example.com/", token="abc") as client:
            status, body = await client.send("GET", "api/user")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        token: str | None = None,
        headers: dict[str, str] | None = None,
        max_retries: int = MAX_RETRIES,
    ) -> None:
        """Initialize BaseAPIClient.

        Args:
            base_url: Base URL for all requests.
            timeout: Request timeout in seconds (default: 30).
            token: API token sent in the Authorization header.
            headers: Default headers for all requests.
            max_retries: Attempts on transport errors (default: 3).
        """
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.timeout = timeout
        self.headers = headers or {}
        self.max_retries = max_retries
        self._token = token
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "BaseAPIClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        """Set (or clear) the authentication token."""
        self._token = token

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client (lazy initialization).

        Returns:
            The httpx AsyncClient instance.
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json", **self.headers},
            )
            log.debug("httpx_client_created", base_url=self.base_url)
        return self._client

    async def close(self) -> None:
        """Close the httpx client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.debug("httpx_client_closed", base_url=self.base_url)

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        token = token if token is not None else self._token
        if not token:
            return {}
        return {"Authorization": f"{AUTH_SCHEME} {token}"}

    async def send(
        self,
        method: str,
        path: str,
        *,
        body: Mapping[str, Any] | None = None,
        token: str | None = None,
        params: Mapping[str, Any] | None = None,
        skip_auth: bool = False,
    ) -> ApiResponse:
        """Send a request and return its status and parsed body.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            path: Request path, relative to base_url.
            body: JSON body.
            token: Token for this request only, overriding the client's.
            params: Query parameters.
            skip_auth: Send no Authorization header.

        Returns:
            ApiResponse, whatever the HTTP status.

        Raises:
            ValueError: If the method is not supported.
            ExternalServiceError: If the request fails after all retries.
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        client = await self._get_client()
        headers = {} if skip_auth else self._auth_headers(token)
        started = time.perf_counter()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=0.5, max=4),
                retry=retry_if_exception_type(httpx.TransportError),
                before_sleep=_log_retry,
                reraise=True,
            ):
                with attempt:
                    response = await client.request(
                        method,
                        path,
                        json=body,
                        params=params,
                        headers=headers,
                    )
        except httpx.TransportError as e:
            log.error(
                "request_max_retries_exceeded",
                method=method,
                path=path,
                max_retries=self.max_retries,
                error=str(e),
            )
            raise ExternalServiceError(
                service=self.base_url,
                message=f"{method} {path} failed after {self.max_retries} attempt(s): {e}",
            ) from e

        log.debug(
            "request_completed",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return ApiResponse(
            status_code=response.status_code,
            body=parse_body(response),
            headers=dict(response.headers),
        )

    async def get(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.send("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.send("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.send("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.send("DELETE", path, **kwargs)
