"""Drafts sub-client for the compose API.

This module provides DraftsClient and AsyncDraftsClient for the draft
lifecycle endpoints (/drafts/*): creating, editing, window state, layout,
closing, and sending or saving.

This is an internal module. Import from `client` instead.
"""

from typing import TYPE_CHECKING, Any, Literal

from client._base import AddressLike, AsyncBaseClient, BaseClient, address_payload
from client.models import (
    CloseDraftResponse,
    ComposeLayout,
    ContentEditResponse,
    DispatchResponse,
    DraftActionResponse,
    DraftView,
)
from models.updates import DraftUpdate

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient


ComposeModeArg = Literal["new", "reply", "replyAll", "forward"]
RecipientField = Literal["to", "cc", "bcc"]

UpdateLike = DraftUpdate | dict[str, Any]


def _create_payload(
    mode: ComposeModeArg,
    source_message_id: str | None,
    is_inline: bool,
    parent_email_id: str | None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"mode": mode, "is_inline": is_inline}
    if source_message_id is not None:
        payload["source_message_id"] = source_message_id
    if parent_email_id is not None:
        payload["parent_email_id"] = parent_email_id
    return payload


def _updates_payload(updates: list[UpdateLike]) -> dict[str, Any]:
    return {
        "updates": [
            u.model_dump(mode="json") if isinstance(u, DraftUpdate) else u for u in updates
        ]
    }


def _window_payload(is_minimized: bool | None, is_fullscreen: bool | None) -> dict[str, Any]:
    payload = {}
    if is_minimized is not None:
        payload["is_minimized"] = is_minimized
    if is_fullscreen is not None:
        payload["is_fullscreen"] = is_fullscreen
    return payload


def _recipients_update(field: RecipientField, addresses: list[AddressLike]) -> dict[str, Any]:
    return {"field": field, "value": [address_payload(a) for a in addresses]}


class DraftsClient(BaseClient):
    """Synchronous client for compose draft endpoints.

    Example:
        with ComposeClient() as client:
            draft = client.drafts.create("reply", source_message_id="msg-1")
            client.drafts.set_body(draft.id, "Sounds good, see you then.")
            client.drafts.send(draft.id)
    """

    _BASE_PATH = "/drafts"

    def __init__(self, http_client: "HTTPClient") -> None:
        super().__init__(http_client)

    def create(
        self,
        mode: ComposeModeArg = "new",
        source_message_id: str | None = None,
        is_inline: bool = False,
        parent_email_id: str | None = None,
    ) -> DraftView:
        """Open a new draft.

        Args:
            mode: new, reply, replyAll or forward.
            source_message_id: Message to reply to or forward.
            is_inline: Whether the draft renders inside a detail view.
            parent_email_id: Message the draft belongs to.

        Returns:
            The new draft.

        Raises:
            NotFoundError: If the source message does not exist.
        """
        data = self._post(
            self._BASE_PATH,
            json=_create_payload(mode, source_message_id, is_inline, parent_email_id),
        )
        return DraftView.model_validate(data)

    def get(self, draft_id: str) -> DraftView:
        """Get one draft, including any pending suggestion diff."""
        return DraftView.model_validate(self._get(f"{self._BASE_PATH}/{draft_id}"))

    def layout(self, view: Literal["list", "detail"] | None = None) -> ComposeLayout:
        """Get the window layout, for `view` or the session's current view."""
        data = self._get(f"{self._BASE_PATH}/layout", params={"view": view})
        return ComposeLayout.model_validate(data)

    def set_view(self, view: Literal["list", "detail"]) -> ComposeLayout:
        """Switch the session's view context."""
        data = self._patch(f"{self._BASE_PATH}/layout/view", json={"view": view})
        return ComposeLayout.model_validate(data)

    def update_window(
        self,
        draft_id: str,
        is_minimized: bool | None = None,
        is_fullscreen: bool | None = None,
    ) -> DraftActionResponse:
        """Change window flags. Flags left as None are unchanged."""
        data = self._patch(
            f"{self._BASE_PATH}/{draft_id}/window",
            json=_window_payload(is_minimized, is_fullscreen),
        )
        return DraftActionResponse.model_validate(data)

    def update_content(self, draft_id: str, updates: list[UpdateLike]) -> ContentEditResponse:
        """Apply direct edits.

        Args:
            draft_id: Target draft.
            updates: DraftUpdate objects or `{"field": ..., "value": ...}` dicts.

        Returns:
            The draft afterwards, with any edits suppressed by a pending suggestion.
        """
        data = self._patch(
            f"{self._BASE_PATH}/{draft_id}/content", json=_updates_payload(updates)
        )
        return ContentEditResponse.model_validate(data)

    def set_subject(self, draft_id: str, subject: str) -> ContentEditResponse:
        return self.update_content(draft_id, [{"field": "subject", "value": subject}])

    def set_body(self, draft_id: str, body: str) -> ContentEditResponse:
        return self.update_content(draft_id, [{"field": "body", "value": body}])

    def set_recipients(
        self, draft_id: str, field: RecipientField, addresses: list[AddressLike]
    ) -> ContentEditResponse:
        return self.update_content(draft_id, [_recipients_update(field, addresses)])

    def close(self, draft_id: str) -> CloseDraftResponse:
        """Close a draft. Safe to call on an already-closed draft."""
        return CloseDraftResponse.model_validate(self._delete(f"{self._BASE_PATH}/{draft_id}"))

    def send(self, draft_id: str) -> DispatchResponse:
        """Send a draft.

        Raises:
            ValidationError: If recipients or subject are missing.
            ConflictError: If a suggestion is pending.
            UpstreamError: If the mail sink failed; the draft stays open.
        """
        return DispatchResponse.model_validate(self._post(f"{self._BASE_PATH}/{draft_id}/send"))

    def save(self, draft_id: str) -> DispatchResponse:
        """Save a draft into the drafts folder."""
        return DispatchResponse.model_validate(self._post(f"{self._BASE_PATH}/{draft_id}/save"))

    def list(self) -> list[DraftView]:
        """List every open draft in creation order."""
        return [DraftView.model_validate(d) for d in self._get(self._BASE_PATH)]


class AsyncDraftsClient(AsyncBaseClient):
    """Asynchronous client for compose draft endpoints."""

    _BASE_PATH = "/drafts"

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        super().__init__(http_client)

    async def create(
        self,
        mode: ComposeModeArg = "new",
        source_message_id: str | None = None,
        is_inline: bool = False,
        parent_email_id: str | None = None,
    ) -> DraftView:
        """Open a new draft. See DraftsClient.create."""
        data = await self._post(
            self._BASE_PATH,
            json=_create_payload(mode, source_message_id, is_inline, parent_email_id),
        )
        return DraftView.model_validate(data)

    async def get(self, draft_id: str) -> DraftView:
        return DraftView.model_validate(await self._get(f"{self._BASE_PATH}/{draft_id}"))

    async def layout(self, view: Literal["list", "detail"] | None = None) -> ComposeLayout:
        data = await self._get(f"{self._BASE_PATH}/layout", params={"view": view})
        return ComposeLayout.model_validate(data)

    async def set_view(self, view: Literal["list", "detail"]) -> ComposeLayout:
        data = await self._patch(f"{self._BASE_PATH}/layout/view", json={"view": view})
        return ComposeLayout.model_validate(data)

    async def update_window(
        self,
        draft_id: str,
        is_minimized: bool | None = None,
        is_fullscreen: bool | None = None,
    ) -> DraftActionResponse:
        data = await self._patch(
            f"{self._BASE_PATH}/{draft_id}/window",
            json=_window_payload(is_minimized, is_fullscreen),
        )
        return DraftActionResponse.model_validate(data)

    async def update_content(
        self, draft_id: str, updates: list[UpdateLike]
    ) -> ContentEditResponse:
        data = await self._patch(
            f"{self._BASE_PATH}/{draft_id}/content", json=_updates_payload(updates)
        )
        return ContentEditResponse.model_validate(data)

    async def set_subject(self, draft_id: str, subject: str) -> ContentEditResponse:
        return await self.update_content(draft_id, [{"field": "subject", "value": subject}])

    async def set_body(self, draft_id: str, body: str) -> ContentEditResponse:
        return await self.update_content(draft_id, [{"field": "body", "value": body}])

    async def set_recipients(
        self, draft_id: str, field: RecipientField, addresses: list[AddressLike]
    ) -> ContentEditResponse:
        return await self.update_content(draft_id, [_recipients_update(field, addresses)])

    async def close(self, draft_id: str) -> CloseDraftResponse:
        data = await self._delete(f"{self._BASE_PATH}/{draft_id}")
        return CloseDraftResponse.model_validate(data)

    async def send(self, draft_id: str) -> DispatchResponse:
        data = await self._post(f"{self._BASE_PATH}/{draft_id}/send")
        return DispatchResponse.model_validate(data)

    async def save(self, draft_id: str) -> DispatchResponse:
        data = await self._post(f"{self._BASE_PATH}/{draft_id}/save")
        return DispatchResponse.model_validate(data)

    async def list(self) -> list[DraftView]:
        return [DraftView.model_validate(d) for d in await self._get(self._BASE_PATH)]
