"""Suggestions sub-client for the compose API.

This module provides SuggestionsClient and AsyncSuggestionsClient for
proposing suggestions, fetching them from the server's suggestion service,
resolving pending diffs, and publishing live suggestions.

This is an internal module. Import from `client` instead.
"""

from typing import TYPE_CHECKING, Any

from client._base import AsyncBaseClient, BaseClient
from client.models import (
    DraftActionResponse,
    LivePublishResponse,
    SuggestionRequestResponse,
)

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient


def _suggestion_payload(body: str, subject: str | None) -> dict[str, Any]:
    payload: dict[str, Any] = {"body": body}
    if subject is not None:
        payload["subject"] = subject
    return payload


def _live_payload(body: str, draft_id: str | None) -> dict[str, Any]:
    payload: dict[str, Any] = {"body": body}
    if draft_id is not None:
        payload["draft_id"] = draft_id
    return payload


class SuggestionsClient(BaseClient):
    """Synchronous client for suggestion endpoints.

    Example:
        client.suggestions.propose(draft_id, body="Hi there, I can help.")
        view = client.drafts.get(draft_id)
        if view.is_diff_mode:
            client.suggestions.accept(draft_id)
    """

    def __init__(self, http_client: "HTTPClient") -> None:
        super().__init__(http_client)

    def propose(
        self, draft_id: str, body: str, subject: str | None = None
    ) -> DraftActionResponse:
        """Put a draft into diff mode with the given content.

        Args:
            draft_id: Target draft.
            body: Proposed body.
            subject: Proposed subject, or None to leave the subject unchanged.

        Raises:
            ConflictError: If a suggestion is pending and the server refuses
                replacements.
        """
        data = self._post(
            f"/drafts/{draft_id}/suggestion", json=_suggestion_payload(body, subject)
        )
        return DraftActionResponse.model_validate(data)

    def request(self, draft_id: str) -> SuggestionRequestResponse:
        """Ask the server to fetch a suggestion from its suggestion service.

        Raises:
            UpstreamError: If the suggestion service failed.
        """
        data = self._post(f"/drafts/{draft_id}/suggestion/request")
        return SuggestionRequestResponse.model_validate(data)

    def accept(self, draft_id: str) -> DraftActionResponse:
        """Merge the pending suggestion into the draft."""
        return DraftActionResponse.model_validate(self._post(f"/drafts/{draft_id}/accept"))

    def reject(self, draft_id: str) -> DraftActionResponse:
        """Discard the pending suggestion."""
        return DraftActionResponse.model_validate(self._post(f"/drafts/{draft_id}/reject"))

    def publish_live(self, body: str, draft_id: str | None = None) -> LivePublishResponse:
        """Publish a live suggestion to one draft or, with no draft_id, to all."""
        data = self._post("/suggestions/live", json=_live_payload(body, draft_id))
        return LivePublishResponse.model_validate(data)


class AsyncSuggestionsClient(AsyncBaseClient):
    """Asynchronous client for suggestion endpoints."""

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        super().__init__(http_client)

    async def propose(
        self, draft_id: str, body: str, subject: str | None = None
    ) -> DraftActionResponse:
        data = await self._post(
            f"/drafts/{draft_id}/suggestion", json=_suggestion_payload(body, subject)
        )
        return DraftActionResponse.model_validate(data)

    async def request(self, draft_id: str) -> SuggestionRequestResponse:
        data = await self._post(f"/drafts/{draft_id}/suggestion/request")
        return SuggestionRequestResponse.model_validate(data)

    async def accept(self, draft_id: str) -> DraftActionResponse:
        data = await self._post(f"/drafts/{draft_id}/accept")
        return DraftActionResponse.model_validate(data)

    async def reject(self, draft_id: str) -> DraftActionResponse:
        data = await self._post(f"/drafts/{draft_id}/reject")
        return DraftActionResponse.model_validate(data)

    async def publish_live(
        self, body: str, draft_id: str | None = None
    ) -> LivePublishResponse:
        data = await self._post("/suggestions/live", json=_live_payload(body, draft_id))
        return LivePublishResponse.model_validate(data)
