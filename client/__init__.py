"""Compose API Client Library.

This module provides a type-safe Python client for the compose draft REST
API. It supports both synchronous and asynchronous usage.

Example:
    Synchronous usage::

        from client import ComposeClient

        with ComposeClient(base_url="http://localhost:8000") as client:
            draft = client.drafts.create()
            client.drafts.set_recipients(draft.id, "to", ["a@x.com"])
            client.drafts.set_subject(draft.id, "Hello")
            client.drafts.send(draft.id)

    Asynchronous usage::

        from client import AsyncComposeClient

        async with AsyncComposeClient() as client:
            views = await client.drafts.list()

Exports:
    ComposeClient: Synchronous client.
    AsyncComposeClient: Asynchronous client.

    Exceptions:
        ComposeClientError: Base exception for all client errors.
        ConnectionError: Failed to connect to the server.
        TimeoutError: Request timed out.
        APIError: Server returned an error response.
        ValidationError: Request or draft validation failed (HTTP 422).
        NotFoundError: Draft or message not found (HTTP 404).
        ConflictError: Diff or dispatch state conflict (HTTP 409).
        ServerError: Server-side error (HTTP 5xx).
        UpstreamError: Suggestion service or mail sink failed (HTTP 502).
"""

from client._drafts import AsyncDraftsClient, DraftsClient
from client._messages import AsyncMessagesClient, MessagesClient
from client._suggestions import AsyncSuggestionsClient, SuggestionsClient
from client.client import AsyncComposeClient, ComposeClient
from client.exceptions import (
    APIError,
    ComposeClientError,
    ConflictError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    UpstreamError,
    ValidationError,
)
from client.models import (
    CloseDraftResponse,
    ComposeLayout,
    ContentEditResponse,
    DispatchResponse,
    DraftActionResponse,
    DraftView,
    HealthResponse,
    LivePublishResponse,
    Message,
    MessageQueryResponse,
    SuggestionRequestResponse,
)

__all__ = [
    # Main clients
    "ComposeClient",
    "AsyncComposeClient",
    # Sub-clients
    "DraftsClient",
    "AsyncDraftsClient",
    "SuggestionsClient",
    "AsyncSuggestionsClient",
    "MessagesClient",
    "AsyncMessagesClient",
    # Response models
    "CloseDraftResponse",
    "ComposeLayout",
    "ContentEditResponse",
    "DispatchResponse",
    "DraftActionResponse",
    "DraftView",
    "HealthResponse",
    "LivePublishResponse",
    "Message",
    "MessageQueryResponse",
    "SuggestionRequestResponse",
    # Exceptions
    "ComposeClientError",
    "ConnectionError",
    "TimeoutError",
    "APIError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
    "UpstreamError",
]
