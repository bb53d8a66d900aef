"""Exception hierarchy for the compose API client.

Exception Hierarchy:
    ComposeClientError (base)
    ├── ConnectionError - Network/connection failures
    ├── TimeoutError - Request timeout
    └── APIError - Server returned an error response
        ├── ValidationError (HTTP 422)
        ├── NotFoundError (HTTP 404)
        ├── ConflictError (HTTP 409)
        └── ServerError (HTTP 5xx)
            └── UpstreamError (HTTP 502)

Example:
    Handling an incomplete draft::

        try:
            client.drafts.send(draft_id)
        except ValidationError as e:
            print(f"Fill in: {', '.join(e.missing_fields)}")
        except ConflictError:
            # A suggestion is pending; resolve it first
            client.suggestions.reject(draft_id)
"""

from typing import Any


class ComposeClientError(Exception):
    """Base exception for all compose client errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ConnectionError(ComposeClientError):
    """Failed to connect to the compose server.

    Attributes:
        message: Human-readable error description.
        url: The URL that failed to connect.
        cause: The underlying exception that caused the connection failure.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.url:
            return f"{self.message} (url: {self.url})"
        return self.message


class TimeoutError(ComposeClientError):
    """Request timed out.

    Attributes:
        message: Human-readable error description.
        timeout: The timeout value in seconds.
        url: The URL that timed out.
    """

    def __init__(
        self,
        message: str,
        timeout: float | None = None,
        url: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        extras = []
        if self.timeout is not None:
            extras.append(f"timeout: {self.timeout}s")
        if self.url:
            extras.append(f"url: {self.url}")
        if not extras:
            return self.message
        return f"{self.message} ({', '.join(extras)})"


class APIError(ComposeClientError):
    """Server returned an error response.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the server.
        error_type: Server-side exception name (e.g. "DraftNotFoundError").
        details: Additional error details from the response.
        response_body: Raw response body for debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        self.response_body = response_body
        super().__init__(message)

    def __str__(self) -> str:
        if self.error_type:
            return f"[HTTP {self.status_code}] [{self.error_type}] {self.message}"
        return f"[HTTP {self.status_code}] {self.message}"


class ValidationError(APIError):
    """Request or draft validation failed (HTTP 422).

    Raised both for malformed requests and for sending a draft that is
    missing recipients or a subject.
    """

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=422,
            error_type=error_type or "validation_error",
            details=details,
            response_body=response_body,
        )

    @property
    def missing_fields(self) -> list[str]:
        """Draft fields that must be filled before sending, if reported."""
        return list((self.details or {}).get("missing_fields", []))


class NotFoundError(APIError):
    """Draft or message not found (HTTP 404)."""

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=404,
            error_type=error_type or "not_found",
            details=details,
            response_body=response_body,
        )


class ConflictError(APIError):
    """State conflict (HTTP 409).

    Common cases:
    - Accepting or rejecting when no suggestion is pending
    - Sending a draft while its suggestion is still pending
    - Dispatching a draft that is already being dispatched
    """

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_type=error_type or "conflict",
            details=details,
            response_body=response_body,
        )


class ServerError(APIError):
    """Server-side error (HTTP 5xx)."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_type=error_type or "server_error",
            details=details,
            response_body=response_body,
        )


class UpstreamError(ServerError):
    """The suggestion service or the mail sink failed (HTTP 502).

    The draft is left open with its content intact, so the action can be
    retried.
    """

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=502,
            error_type=error_type,
            details=details,
            response_body=response_body,
        )
