"""Draft Store: the single registry of open compose drafts."""

import logging
import threading
from typing import Any, Callable, Optional
from uuid import uuid4

from pydantic import Field, PrivateAttr

from models.base_state import StateContainer, utc_now
from models.draft import ComposeData, ComposeDraft, ComposeMode, dedupe_addresses
from models.message import EmailAddress, Message
from models.updates import DraftUpdate, WindowUpdate

logger = logging.getLogger(__name__)

FORWARD_DATE_FORMAT = "%a, %b %d, %Y at %I:%M %p"

CloseListener = Callable[[str], None]


def format_forward_body(source: Message) -> str:
    """Render the quoted header block placed in a forwarded draft's body."""
    return (
        "\n\n---------- Forwarded message ---------\n"
        f"From: {source.from_address.display}\n"
        f"Date: {source.date.strftime(FORWARD_DATE_FORMAT)}\n"
        f"Subject: {source.subject}\n"
        f"\n{source.body}"
    )


def build_template(
    mode: ComposeMode, source: Optional[Message], self_address: EmailAddress
) -> ComposeData:
    """Pre-fill draft content from a source message.

    Args:
        mode: Compose mode of the new draft.
        source: Message being replied to or forwarded, if any.
        self_address: The local identity, excluded from reply-all recipients.

    Returns:
        Initial content for the draft. Empty when mode is "new" or there is
        no source.
    """
    if source is None or mode == "new":
        return ComposeData()

    if mode == "reply":
        return ComposeData(
            to=[source.from_address],
            subject=f"Re: {source.subject}",
            in_reply_to=source.id,
        )

    if mode == "replyAll":
        others = [addr for addr in source.to if addr.key != self_address.key]
        return ComposeData(
            to=dedupe_addresses([source.from_address, *others]),
            cc=list(source.cc),
            subject=f"Re: {source.subject}",
            in_reply_to=source.id,
        )

    return ComposeData(
        subject=f"Fwd: {source.subject}",
        body=format_forward_body(source),
    )


class DraftStore(StateContainer):
    """Registry of every open compose draft, keyed by id.

    The store is the only owner of draft instances. Reads hand out deep
    copies so callers address drafts by id and never hold live references.
    Mutators are silent no-ops when the id is unknown, since a draft may be
    closed at any moment by another part of the UI.

    Args:
        container_type: Always "drafts".
        drafts: Open drafts in creation order.
        user_address: The local identity used for reply-all filtering.
    """

    container_type: str = Field(default="drafts", frozen=True)
    drafts: dict[str, ComposeDraft] = Field(
        default_factory=dict, description="Open drafts indexed by id"
    )
    user_address: EmailAddress = Field(
        default_factory=lambda: EmailAddress(email="me@gmail.com", name="Me"),
        description="Local identity",
    )

    _lock: Any = PrivateAttr(default_factory=threading.RLock)
    _close_listeners: list[CloseListener] = PrivateAttr(default_factory=list)

    def create(
        self,
        mode: ComposeMode,
        source: Optional[Message] = None,
        is_inline: bool = False,
        parent_email_id: Optional[str] = None,
    ) -> str:
        """Register a new draft pre-filled from `source` according to `mode`.

        Args:
            mode: new, reply, replyAll or forward.
            source: Message to reply to or forward.
            is_inline: Whether the draft renders inside a detail view.
            parent_email_id: Message the draft responds to, if any.

        Returns:
            The new draft id.
        """
        draft_id = f"compose-{uuid4()}"
        draft = ComposeDraft(
            id=draft_id,
            mode=mode,
            data=build_template(mode, source, self.user_address),
            is_inline=is_inline,
            parent_email_id=parent_email_id,
        )
        with self._lock:
            self.drafts[draft_id] = draft
            self.touch()
        logger.info(f"Created {mode} draft {draft_id} (inline={is_inline})")
        return draft_id

    def update_window_state(self, draft_id: str, update: WindowUpdate) -> None:
        """Merge window flags into a draft. No-op if the draft is gone."""
        with self._lock:
            draft = self.drafts.get(draft_id)
            if draft is None:
                logger.debug(f"Ignoring window update for missing draft {draft_id}")
                return
            update.apply_to(draft)
            self.touch()

    def update_content(self, draft_id: str, *updates: DraftUpdate) -> None:
        """Apply field updates to a draft's content, in order.

        This is the direct-edit path. No-op if the draft is gone.

        Args:
            draft_id: Target draft.
            *updates: Field-set operations to apply.
        """
        with self._lock:
            draft = self.drafts.get(draft_id)
            if draft is None:
                logger.debug(f"Ignoring content update for missing draft {draft_id}")
                return
            data = draft.data
            for update in updates:
                data = update.apply_to(data)
            draft.data = data
            self.touch()

    def close(self, draft_id: str) -> None:
        """Remove a draft from the registry and notify close listeners.

        Closing an unknown id does nothing, so calling this twice is safe.
        """
        with self._lock:
            if self.drafts.pop(draft_id, None) is None:
                return
            self.touch()
            listeners = list(self._close_listeners)
        logger.info(f"Closed draft {draft_id}")
        for listener in listeners:
            listener(draft_id)

    def add_close_listener(self, listener: CloseListener) -> None:
        """Register a callback invoked with the draft id after each close."""
        self._close_listeners.append(listener)

    def get(self, draft_id: str) -> Optional[ComposeDraft]:
        """Return a copy of the draft, or None if it is not open."""
        with self._lock:
            draft = self.drafts.get(draft_id)
            return draft.model_copy(deep=True) if draft is not None else None

    def exists(self, draft_id: str) -> bool:
        """Return whether a draft with this id is open."""
        with self._lock:
            return draft_id in self.drafts

    def get_snapshot(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot of the open drafts."""
        with self._lock:
            return {
                "container_type": self.container_type,
                "last_updated": self.last_updated.isoformat(),
                "drafts": [draft.model_dump(mode="json") for draft in self.drafts.values()],
                "draft_count": len(self.drafts),
            }

    def validate_state(self) -> list[str]:
        """Check registry keys against draft ids."""
        errors = []
        with self._lock:
            for key, draft in self.drafts.items():
                if key != draft.id:
                    errors.append(f"Draft registered under '{key}' has id '{draft.id}'")
        return errors

    def clear(self) -> None:
        """Drop every draft without notifying listeners."""
        with self._lock:
            self.drafts.clear()
            self.last_updated = utc_now()
            self.update_count = 0

    @property
    def summary(self) -> str:
        """Return draft counts by window state."""
        with self._lock:
            minimized = sum(1 for d in self.drafts.values() if d.is_minimized)
            fullscreen = sum(1 for d in self.drafts.values() if d.is_fullscreen)
            return (
                f"{len(self.drafts)} open drafts "
                f"({minimized} minimized, {fullscreen} fullscreen)"
            )

    def list(self) -> list[ComposeDraft]:
        """Return copies of every open draft in creation order."""
        with self._lock:
            return [draft.model_copy(deep=True) for draft in self.drafts.values()]
