"""ComposeSession: wires the draft components together for one user session."""

import logging
from typing import Optional

from models.dispatch import Dispatcher, LocalMessageSink, MessageSink
from models.draft import ComposeDraft, ComposeMode
from models.draft_store import DraftStore
from models.errors import DraftNotFoundError, SuggestionFetchError
from models.layout import DraftLayoutController
from models.message import EmailAddress, Mailbox, Message
from models.reconciliation import ReentryPolicy, SuggestionReconciler
from models.suggestions import (
    LiveSuggestion,
    SuggestionChannel,
    SuggestionHandle,
    SuggestionService,
)

logger = logging.getLogger(__name__)

DEFAULT_USER = EmailAddress(email="me@gmail.com", name="Me")


class ComposeSession:
    """All compose state for one user session.

    The session owns exactly one DraftStore, which is the only shared
    mutable registry. Every other component reaches drafts through it.

    Args:
        user_address: Local identity (sender of dispatched messages).
        reentry_policy: How a suggestion arriving during a pending diff is handled.
        suggestion_service: Service used by request_suggestion.
        sink: Transport for dispatched messages (defaults to a local sink).
        mailbox: Existing message collection to use.
    """

    def __init__(
        self,
        user_address: Optional[EmailAddress] = None,
        reentry_policy: ReentryPolicy | str = ReentryPolicy.REPLACE,
        suggestion_service: Optional[SuggestionService] = None,
        sink: Optional[MessageSink] = None,
        mailbox: Optional[Mailbox] = None,
    ):
        self.user_address = user_address or DEFAULT_USER
        self.store = DraftStore(user_address=self.user_address)
        self.mailbox = mailbox if mailbox is not None else Mailbox()
        self.channel = SuggestionChannel()
        self.reconciler = SuggestionReconciler(self.store, self.channel, reentry_policy)
        self.dispatcher = Dispatcher(
            self.store,
            self.mailbox,
            sink=sink or LocalMessageSink(),
            sender=self.user_address,
            reconciler=self.reconciler,
        )
        self.layout = DraftLayoutController(self.store)
        self.suggestion_service = suggestion_service

    def create_draft(
        self,
        mode: ComposeMode,
        source_message_id: Optional[str] = None,
        is_inline: bool = False,
        parent_email_id: Optional[str] = None,
    ) -> str:
        """Create a draft, resolving its source message from the mailbox.

        Args:
            mode: new, reply, replyAll or forward.
            source_message_id: Message to reply to or forward.
            is_inline: Whether the draft renders inside a detail view.
            parent_email_id: Message the draft belongs to. Defaults to the
                source message.

        Returns:
            The new draft id.

        Raises:
            MessageNotFoundError: If the source message does not exist.
        """
        source = self.mailbox.get(source_message_id) if source_message_id else None
        if parent_email_id is None and source is not None:
            parent_email_id = source.id
        return self.store.create(
            mode, source=source, is_inline=is_inline, parent_email_id=parent_email_id
        )

    def source_for(self, draft: ComposeDraft) -> Optional[Message]:
        """Return the message a draft replies to or forwards, if still present."""
        for message_id in (draft.data.in_reply_to, draft.parent_email_id):
            if message_id:
                message = self.mailbox.find(message_id)
                if message is not None:
                    return message
        return None

    def request_suggestion(
        self, draft_id: str, service: Optional[SuggestionService] = None
    ) -> SuggestionHandle:
        """Start a suggestion fetch with the draft's source message as context.

        Raises:
            DraftNotFoundError: If the draft is not open.
            SuggestionFetchError: If no suggestion service is configured.
        """
        draft = self.store.get(draft_id)
        if draft is None:
            raise DraftNotFoundError(draft_id)
        service = service or self.suggestion_service
        if service is None:
            raise SuggestionFetchError(draft_id, "no suggestion service configured")
        return self.reconciler.request_suggestion(draft_id, service, self.source_for(draft))

    def publish_live_suggestion(self, event: LiveSuggestion) -> list[str]:
        """Publish a live suggestion and return the ids of the drafts it updated."""
        return self.channel.publish(event)

    async def shutdown(self) -> None:
        """Cancel in-flight suggestion fetches."""
        await self.reconciler.shutdown()
        logger.info(f"Compose session closed: {self.store.summary}")
