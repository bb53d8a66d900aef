"""Dispatch Actions: turn a compose draft into a sent or saved message.

Dispatch order is fixed: validate, build the message, hand it to the sink,
file it in the mailbox, then remove the draft. If the sink fails the draft
stays open and nothing is filed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional
from uuid import uuid4

import httpx

from models.base_state import utc_now
from models.draft import ComposeDraft
from models.draft_store import DraftStore
from models.errors import DispatchTransportError, DraftValidationError
from models.message import EmailAddress, Mailbox, Message
from models.reconciliation import SuggestionReconciler

logger = logging.getLogger(__name__)


class MessageSink(ABC):
    """External transport that accepts dispatched messages."""

    @abstractmethod
    async def deliver(self, message: Message) -> None:
        """Hand off a message. Raising any exception signals failure."""
        pass


class LocalMessageSink(MessageSink):
    """Accepts every message without sending it anywhere.

    Delivered messages are kept in `delivered` for inspection.
    """

    def __init__(self):
        self.delivered: list[Message] = []

    async def deliver(self, message: Message) -> None:
        self.delivered.append(message)


class HTTPMessageSink(MessageSink):
    """Posts dispatched messages to a mail-send endpoint.

    Args:
        url: Endpoint accepting `{to, cc, bcc, subject, body, is_draft}`.
        timeout: Request timeout in seconds.
        transport: Custom transport (e.g., MockTransport for testing).
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def deliver(self, message: Message) -> None:
        payload = {
            "to": [addr.email for addr in message.to],
            "cc": [addr.email for addr in message.cc],
            "bcc": [addr.email for addr in message.bcc],
            "subject": message.subject,
            "body": message.body,
            "is_draft": message.is_draft,
        }
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            response = await client.post(self.url, json=payload)
        response.raise_for_status()


def missing_send_fields(draft: ComposeDraft) -> list[str]:
    """Return the names of fields that must be filled before sending."""
    missing = []
    if not draft.data.to:
        missing.append("to")
    if not draft.data.subject:
        missing.append("subject")
    return missing


class Dispatcher:
    """Sends or saves compose drafts.

    Both actions are terminal. A second dispatch of the same id fails with
    DraftNotFoundError once the first has completed.

    Args:
        store: Draft registry.
        mailbox: Collection dispatched messages are filed into.
        sink: Transport that must confirm each message before it is filed.
        sender: Local identity used as the sender.
        reconciler: Locks the draft while it is dispatched and refuses
            dispatch while a suggestion is pending. A private one is created
            when omitted.
    """

    def __init__(
        self,
        store: DraftStore,
        mailbox: Mailbox,
        sink: Optional[MessageSink] = None,
        sender: Optional[EmailAddress] = None,
        reconciler: Optional[SuggestionReconciler] = None,
    ):
        self.store = store
        self.mailbox = mailbox
        self.sink = sink or LocalMessageSink()
        self.sender = sender or store.user_address
        self.reconciler = reconciler or SuggestionReconciler(store)

    async def send_from_draft(self, draft_id: str) -> Message:
        """Send a draft.

        Raises:
            DraftNotFoundError: If the draft is not open.
            SuggestionPendingError: If the draft has an unresolved suggestion.
            DraftValidationError: If `to` or `subject` is empty.
            DispatchInProgressError: If the draft is already being dispatched.
            DispatchTransportError: If the sink fails. The draft is kept.
        """
        return await self._dispatch(draft_id, is_draft=False)

    async def save_draft_from_compose(self, draft_id: str) -> Message:
        """Save a draft as-is, however incomplete.

        Raises the same errors as send_from_draft, except DraftValidationError.
        """
        return await self._dispatch(draft_id, is_draft=True)

    def build_message(self, draft: ComposeDraft, is_draft: bool) -> Message:
        """Construct the immutable message for a draft's current content."""
        prefix = "draft" if is_draft else "email"
        return Message(
            id=f"{prefix}-{uuid4()}",
            thread_id=f"thread-{uuid4()}",
            from_address=self.sender,
            to=draft.data.to,
            cc=draft.data.cc,
            bcc=draft.data.bcc,
            subject=draft.data.subject or "",
            body=draft.data.body or "",
            date=utc_now(),
            attachments=draft.data.attachments,
            in_reply_to=draft.data.in_reply_to,
            is_read=True,
            is_sent=not is_draft,
            is_draft=is_draft,
        )

    async def _dispatch(self, draft_id: str, is_draft: bool) -> Message:
        operation = "save" if is_draft else "send"

        draft = self.reconciler.begin_dispatch(draft_id, operation)
        try:
            if not is_draft:
                missing = missing_send_fields(draft)
                if missing:
                    raise DraftValidationError(draft_id, missing)

            message = self.build_message(draft, is_draft)
            try:
                await self.sink.deliver(message)
            except Exception as e:
                logger.warning(f"Failed to {operation} draft {draft_id}: {e}")
                raise DispatchTransportError(
                    draft_id, str(e) or type(e).__name__, cause=e
                ) from e

            self.mailbox.add(message)
            self.store.close(draft_id)
        finally:
            self.reconciler.end_dispatch(draft_id)

        action = "Saved" if is_draft else "Sent"
        logger.info(f"{action} draft {draft_id} as message {message.id}")
        return message

    def is_dispatching(self, draft_id: str) -> bool:
        return self.reconciler.is_dispatching(draft_id)
