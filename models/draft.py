"""Compose draft models."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.base_state import utc_now
from models.message import EmailAddress, EmailAttachment

ComposeMode = Literal["new", "reply", "replyAll", "forward"]

COMPOSE_MODES: tuple[str, ...] = ("new", "reply", "replyAll", "forward")


def dedupe_addresses(addresses: list[EmailAddress]) -> list[EmailAddress]:
    """Drop repeated addresses, keeping the first occurrence of each email.

    Args:
        addresses: Address records in display order.

    Returns:
        The addresses with case-insensitive duplicates removed.
    """
    seen: set[str] = set()
    unique = []
    for address in addresses:
        if address.key not in seen:
            seen.add(address.key)
            unique.append(address)
    return unique


class ComposeData(BaseModel):
    """Partial message content of a compose draft.

    `subject` and `body` are None until set, which is distinct from an
    empty string. Recipient lists behave as sets keyed on the address.

    Args:
        to: Primary recipients.
        cc: CC recipients.
        bcc: BCC recipients.
        subject: Subject line, if set.
        body: Body text, if set.
        attachments: Ordered attachment references.
        in_reply_to: Id of the message being replied to (lookup only).
    """

    model_config = ConfigDict(extra="forbid")

    to: list[EmailAddress] = Field(default_factory=list, description="Primary recipients")
    cc: list[EmailAddress] = Field(default_factory=list, description="CC recipients")
    bcc: list[EmailAddress] = Field(default_factory=list, description="BCC recipients")
    subject: Optional[str] = Field(default=None, description="Subject line")
    body: Optional[str] = Field(default=None, description="Body text")
    attachments: list[EmailAttachment] = Field(
        default_factory=list, description="Attachment references"
    )
    in_reply_to: Optional[str] = Field(
        default=None, description="Id of the message being replied to"
    )

    @field_validator("to", "cc", "bcc")
    @classmethod
    def validate_unique_recipients(cls, value: list[EmailAddress]) -> list[EmailAddress]:
        """Collapse duplicate recipients within one field."""
        return dedupe_addresses(value)


class ComposeDraft(BaseModel):
    """An in-progress message in its own compose window.

    Owned exclusively by the DraftStore. Identity, mode, inline placement,
    parent reference and creation time are fixed at creation; content and
    window flags change through store operations.

    Args:
        id: Unique draft identifier.
        mode: How the draft was started (new, reply, replyAll, forward).
        data: Current message content.
        is_minimized: Whether the window is collapsed.
        is_fullscreen: Whether the window covers the viewport.
        is_inline: Whether the draft renders inside a detail view.
        parent_email_id: Id of the message this draft responds to (lookup only).
        created_at: When the draft was created.
    """

    id: str = Field(frozen=True, description="Unique draft identifier")
    mode: ComposeMode = Field(frozen=True, description="Compose mode")
    data: ComposeData = Field(default_factory=ComposeData, description="Message content")
    is_minimized: bool = Field(default=False, description="Window collapsed")
    is_fullscreen: bool = Field(default=False, description="Window covers the viewport")
    is_inline: bool = Field(default=False, frozen=True, description="Rendered inline")
    parent_email_id: Optional[str] = Field(
        default=None, frozen=True, description="Message this draft responds to"
    )
    created_at: datetime = Field(
        default_factory=utc_now, frozen=True, description="Creation time"
    )
