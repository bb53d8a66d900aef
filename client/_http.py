"""Internal HTTP handling for the compose client.

This module provides the transport layer shared by all sub-clients:
- Making HTTP requests (sync and async)
- Mapping error responses onto the client exception hierarchy
- Retry with exponential backoff for idempotent requests

This is an internal module and should not be imported directly by users.
"""

import asyncio
import time
from typing import Any, Literal

import httpx

from client.exceptions import (
    APIError,
    ConflictError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    UpstreamError,
    ValidationError,
)


HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

# Requests that can be repeated without dispatching or proposing twice
IDEMPOTENT_METHODS = {"GET", "PUT", "PATCH", "DELETE"}

# Status codes that trigger automatic retry (when retry is enabled)
RETRYABLE_STATUS_CODES = {503, 504}

DEFAULT_RETRY_BACKOFF_BASE = 0.5  # seconds
DEFAULT_RETRY_BACKOFF_MAX = 30.0  # seconds


def _parse_error_response(response: httpx.Response) -> tuple[str, str | None, dict | None]:
    """Extract message, error type and details from an error response.

    Understands the server's `{"error", "detail", "type", "details"}` body
    and FastAPI's request-validation body, where `detail` is a list.

    Args:
        response: The HTTP response to parse.

    Returns:
        A tuple of (message, error_type, details).
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or f"HTTP {response.status_code} error", None, None

    if not isinstance(body, dict):
        return str(body), None, None

    detail = body.get("detail")
    if isinstance(detail, list):
        messages = [
            f"{err.get('loc', ['unknown'])[-1]}: {err.get('msg', 'invalid')}"
            for err in detail
        ]
        return "; ".join(messages), "validation_error", {"errors": detail}

    details = body.get("details")
    if "validation_errors" in body:
        details = {"errors": body["validation_errors"]}
    message = detail if isinstance(detail, str) else body.get("error", str(body))
    return message, body.get("type"), details


def _raise_for_status(response: httpx.Response) -> None:
    """Raise the client exception matching an error status code.

    Raises:
        ValidationError: For HTTP 422 responses.
        NotFoundError: For HTTP 404 responses.
        ConflictError: For HTTP 409 responses.
        UpstreamError: For HTTP 502 responses.
        ServerError: For other HTTP 5xx responses.
        APIError: For other HTTP 4xx responses.
    """
    if response.is_success:
        return

    message, error_type, details = _parse_error_response(response)
    try:
        response_body = response.json()
    except ValueError:
        response_body = response.text

    status_code = response.status_code
    kwargs = {
        "message": message,
        "error_type": error_type,
        "details": details,
        "response_body": response_body,
    }
    if status_code == 422:
        raise ValidationError(**kwargs)
    if status_code == 404:
        raise NotFoundError(**kwargs)
    if status_code == 409:
        raise ConflictError(**kwargs)
    if status_code == 502:
        raise UpstreamError(**kwargs)
    if status_code >= 500:
        raise ServerError(status_code=status_code, **kwargs)
    raise APIError(status_code=status_code, **kwargs)


def _calculate_backoff(attempt: int, base: float = DEFAULT_RETRY_BACKOFF_BASE) -> float:
    """Return the delay before retry number `attempt` (0-indexed).

    Doubles per attempt, capped at DEFAULT_RETRY_BACKOFF_MAX seconds.
    """
    return min(base * (2**attempt), DEFAULT_RETRY_BACKOFF_MAX)


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return params
    return {k: v for k, v in params.items() if v is not None}


def _decode(response: httpx.Response) -> Any:
    _raise_for_status(response)
    if response.content:
        return response.json()
    return None


class _RetryPolicy:
    """Decides whether a failed attempt is retried."""

    def __init__(self, enabled: bool, max_retries: int) -> None:
        self.enabled = enabled
        self.attempts = max_retries + 1 if enabled else 1

    def retry_status(self, method: str, status_code: int, attempt: int) -> bool:
        return (
            self.enabled
            and method in IDEMPOTENT_METHODS
            and status_code in RETRYABLE_STATUS_CODES
            and attempt < self.attempts - 1
        )

    def retry_error(self, method: str, error: Exception, attempt: int) -> bool:
        if not self.enabled or attempt >= self.attempts - 1:
            return False
        # A refused connection never reached the server, so any method is safe
        if isinstance(error, httpx.ConnectError):
            return True
        return method in IDEMPOTENT_METHODS


def _transport_error(
    error: httpx.HTTPError, url: str, timeout: float
) -> ConnectionError | TimeoutError:
    if isinstance(error, httpx.TimeoutException):
        return TimeoutError(message=f"Request to {url} timed out", timeout=timeout, url=url)
    return ConnectionError(message=f"Failed to connect to {url}", url=url, cause=error)


class HTTPClient:
    """Synchronous HTTP client for the compose API.

    Attributes:
        base_url: The base URL for all API requests.
        timeout: Request timeout in seconds.
        retry_enabled: Whether to retry on transient failures.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: The base URL for all API requests.
            timeout: Request timeout in seconds.
            retry_enabled: Whether to retry on transient failures.
            max_retries: Maximum number of retry attempts.
            transport: Custom transport (e.g., a TestClient-backed transport).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries
        self._retry = _RetryPolicy(retry_enabled, max_retries)
        self._client = httpx.Client(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Make an HTTP request and return the parsed JSON response.

        Args:
            method: The HTTP method.
            path: The URL path (appended to base_url).
            params: Query parameters; None values are dropped.
            json: JSON body to send.

        Returns:
            The parsed JSON response body, or None for empty responses.

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the request times out.
            APIError: If the server returns an error response.
        """
        url = f"{self.base_url}{path}"
        params = _clean_params(params)

        for attempt in range(self._retry.attempts):
            try:
                response = self._client.request(method, path, params=params, json=json)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                if not self._retry.retry_error(method, e, attempt):
                    raise _transport_error(e, url, self.timeout) from e
                time.sleep(_calculate_backoff(attempt))
                continue

            if self._retry.retry_status(method, response.status_code, attempt):
                time.sleep(_calculate_backoff(attempt))
                continue
            return _decode(response)

        raise RuntimeError("Unexpected error in request retry loop")

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self.request("POST", path, params=params, json=json)

    def patch(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self.request("PATCH", path, params=params, json=json)

    def delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("DELETE", path, params=params)


class AsyncHTTPClient:
    """Asynchronous HTTP client for the compose API.

    Attributes:
        base_url: The base URL for all API requests.
        timeout: Request timeout in seconds.
        retry_enabled: Whether to retry on transient failures.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the async HTTP client.

        Args:
            base_url: The base URL for all API requests.
            timeout: Request timeout in seconds.
            retry_enabled: Whether to retry on transient failures.
            max_retries: Maximum number of retry attempts.
            transport: Custom transport (e.g., ASGITransport for testing).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries
        self._retry = _RetryPolicy(retry_enabled, max_retries)
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Make an async HTTP request and return the parsed JSON response.

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the request times out.
            APIError: If the server returns an error response.
        """
        url = f"{self.base_url}{path}"
        params = _clean_params(params)

        for attempt in range(self._retry.attempts):
            try:
                response = await self._client.request(
                    method, path, params=params, json=json
                )
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                if not self._retry.retry_error(method, e, attempt):
                    raise _transport_error(e, url, self.timeout) from e
                await asyncio.sleep(_calculate_backoff(attempt))
                continue

            if self._retry.retry_status(method, response.status_code, attempt):
                await asyncio.sleep(_calculate_backoff(attempt))
                continue
            return _decode(response)

        raise RuntimeError("Unexpected error in request retry loop")

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(
        self, path: str, json: Any = None, params: dict[str, Any] | None = None
    ) -> Any:
        return await self.request("POST", path, params=params, json=json)

    async def patch(
        self, path: str, json: Any = None, params: dict[str, Any] | None = None
    ) -> Any:
        return await self.request("PATCH", path, params=params, json=json)

    async def delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("DELETE", path, params=params)
