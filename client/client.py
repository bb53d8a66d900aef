"""Main compose client classes.

This module provides the entry points for the compose API:
- ComposeClient: Synchronous client
- AsyncComposeClient: Asynchronous client

Both expose the API through sub-client properties (client.drafts,
client.suggestions, client.messages).

Example:
    Synchronous usage::

        from client import ComposeClient

        with ComposeClient(base_url="http://localhost:8000") as client:
            inbound = client.messages.receive(
                from_address="a@x.com", subject="Hello", body="Are you free?"
            )
            draft = client.drafts.create("reply", source_message_id=inbound.id)
            client.suggestions.propose(draft.id, body="Yes, Tuesday works.")
            client.suggestions.accept(draft.id)
            client.drafts.send(draft.id)

    Asynchronous usage::

        from client import AsyncComposeClient

        async with AsyncComposeClient() as client:
            draft = await client.drafts.create()
            await client.drafts.set_body(draft.id, "Hi")
"""

from typing import Any

from client._drafts import AsyncDraftsClient, DraftsClient
from client._http import AsyncHTTPClient, HTTPClient
from client._messages import AsyncMessagesClient, MessagesClient
from client._suggestions import AsyncSuggestionsClient, SuggestionsClient
from client.models import HealthResponse


class ComposeClient:
    """Synchronous client for the compose REST API.

    Attributes:
        base_url: The base URL of the compose server.
        timeout: Request timeout in seconds.
        retry_enabled: Whether automatic retry is enabled.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: The base URL of the compose server.
            timeout: Request timeout in seconds.
            retry_enabled: Whether to retry idempotent requests on connection
                errors, timeouts and HTTP 503/504, with exponential backoff.
            max_retries: Maximum number of retry attempts when retry is enabled.
            transport: Custom HTTP transport (e.g., for testing).
        """
        self.base_url = base_url
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

        self._http = HTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )

        # Sub-clients are created on first access
        self._drafts: DraftsClient | None = None
        self._suggestions: SuggestionsClient | None = None
        self._messages: MessagesClient | None = None

    def __enter__(self) -> "ComposeClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the client and release resources."""
        self._http.close()

    @property
    def drafts(self) -> DraftsClient:
        """Draft lifecycle: create, edit, window state, layout, send, save."""
        if self._drafts is None:
            self._drafts = DraftsClient(self._http)
        return self._drafts

    @property
    def suggestions(self) -> SuggestionsClient:
        """Suggestion review: propose, request, accept, reject, live updates."""
        if self._suggestions is None:
            self._suggestions = SuggestionsClient(self._http)
        return self._suggestions

    @property
    def messages(self) -> MessagesClient:
        """Mailbox: query, get, receive."""
        if self._messages is None:
            self._messages = MessagesClient(self._http)
        return self._messages

    def health(self) -> HealthResponse:
        """Check that the server is up."""
        return HealthResponse.model_validate(self._http.get("/health"))


class AsyncComposeClient:
    """Asynchronous client for the compose REST API.

    Attributes:
        base_url: The base URL of the compose server.
        timeout: Request timeout in seconds.
        retry_enabled: Whether automatic retry is enabled.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        """Initialize the async client. See ComposeClient for arguments."""
        self.base_url = base_url
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

        self._http = AsyncHTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )

        self._drafts: AsyncDraftsClient | None = None
        self._suggestions: AsyncSuggestionsClient | None = None
        self._messages: AsyncMessagesClient | None = None

    async def __aenter__(self) -> "AsyncComposeClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._http.close()

    @property
    def drafts(self) -> AsyncDraftsClient:
        if self._drafts is None:
            self._drafts = AsyncDraftsClient(self._http)
        return self._drafts

    @property
    def suggestions(self) -> AsyncSuggestionsClient:
        if self._suggestions is None:
            self._suggestions = AsyncSuggestionsClient(self._http)
        return self._suggestions

    @property
    def messages(self) -> AsyncMessagesClient:
        if self._messages is None:
            self._messages = AsyncMessagesClient(self._http)
        return self._messages

    async def health(self) -> HealthResponse:
        return HealthResponse.model_validate(await self._http.get("/health"))
