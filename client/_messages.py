"""Messages sub-client for the compose API.

This module provides MessagesClient and AsyncMessagesClient for reading the
mailbox (/messages/*) and receiving inbound messages.

This is an internal module. Import from `client` instead.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from client._base import AddressLike, AsyncBaseClient, BaseClient, address_payload
from client.models import Message, MessageQueryResponse

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient


FolderArg = Literal["inbox", "sent", "drafts"]


def _receive_payload(
    from_address: AddressLike,
    subject: str,
    body: str,
    to: list[AddressLike] | None,
    cc: list[AddressLike] | None,
    date: datetime | None,
    thread_id: str | None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "from_address": address_payload(from_address),
        "subject": subject,
        "body": body,
        "to": [address_payload(a) for a in to or []],
        "cc": [address_payload(a) for a in cc or []],
    }
    if date is not None:
        payload["date"] = date.isoformat()
    if thread_id is not None:
        payload["thread_id"] = thread_id
    return payload


class MessagesClient(BaseClient):
    """Synchronous client for mailbox endpoints."""

    _BASE_PATH = "/messages"

    def __init__(self, http_client: "HTTPClient") -> None:
        super().__init__(http_client)

    def query(
        self,
        folder: FolderArg | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> MessageQueryResponse:
        """List messages, newest first.

        Args:
            folder: Restrict to inbox, sent or drafts.
            limit: Maximum number of messages to return.
            offset: Number of messages to skip.

        Returns:
            A page of messages with counts.
        """
        data = self._get(
            self._BASE_PATH, params={"folder": folder, "limit": limit, "offset": offset}
        )
        return MessageQueryResponse.model_validate(data)

    def get(self, message_id: str) -> Message:
        """Get one message by id.

        Raises:
            NotFoundError: If the message does not exist.
        """
        return Message.model_validate(self._get(f"{self._BASE_PATH}/{message_id}"))

    def receive(
        self,
        from_address: AddressLike,
        subject: str = "",
        body: str = "",
        to: list[AddressLike] | None = None,
        cc: list[AddressLike] | None = None,
        date: datetime | None = None,
        thread_id: str | None = None,
    ) -> Message:
        """File an inbound message into the inbox.

        Recipients default to the server's local user when `to` is omitted.
        """
        data = self._post(
            f"{self._BASE_PATH}/receive",
            json=_receive_payload(from_address, subject, body, to, cc, date, thread_id),
        )
        return Message.model_validate(data)


class AsyncMessagesClient(AsyncBaseClient):
    """Asynchronous client for mailbox endpoints."""

    _BASE_PATH = "/messages"

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        super().__init__(http_client)

    async def query(
        self,
        folder: FolderArg | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> MessageQueryResponse:
        data = await self._get(
            self._BASE_PATH, params={"folder": folder, "limit": limit, "offset": offset}
        )
        return MessageQueryResponse.model_validate(data)

    async def get(self, message_id: str) -> Message:
        return Message.model_validate(await self._get(f"{self._BASE_PATH}/{message_id}"))

    async def receive(
        self,
        from_address: AddressLike,
        subject: str = "",
        body: str = "",
        to: list[AddressLike] | None = None,
        cc: list[AddressLike] | None = None,
        date: datetime | None = None,
        thread_id: str | None = None,
    ) -> Message:
        data = await self._post(
            f"{self._BASE_PATH}/receive",
            json=_receive_payload(from_address, subject, body, to, cc, date, thread_id),
        )
        return Message.model_validate(data)
