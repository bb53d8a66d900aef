"""Message models and the in-memory mailbox that dispatched drafts land in."""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from models.base_state import StateContainer, utc_now
from models.errors import MessageNotFoundError

PREVIEW_LENGTH = 100

STANDARD_FOLDERS = ("inbox", "sent", "drafts")


class EmailAddress(BaseModel):
    """An address record with an optional display name.

    Args:
        email: The mailbox address.
        name: Display name, if known.
    """

    model_config = ConfigDict(frozen=True)

    email: str = Field(min_length=1, description="Mailbox address")
    name: Optional[str] = Field(default=None, description="Display name")

    @property
    def key(self) -> str:
        """Case-insensitive identity used for de-duplication."""
        return self.email.strip().lower()

    @property
    def display(self) -> str:
        """Name if present, otherwise the address."""
        return self.name or self.email


class EmailAttachment(BaseModel):
    """Reference to a file attached to a draft or message.

    Args:
        attachment_id: Unique identifier (auto-generated UUID).
        filename: Name of the attached file.
        size: File size in bytes.
        mime_type: MIME type (e.g., "application/pdf").
    """

    model_config = ConfigDict(frozen=True)

    attachment_id: str = Field(
        default_factory=lambda: str(uuid4()), description="Unique identifier"
    )
    filename: str = Field(description="Name of the attached file")
    size: int = Field(default=0, ge=0, description="File size in bytes")
    mime_type: str = Field(
        default="application/octet-stream", description="MIME type"
    )


class Message(BaseModel):
    """An immutable email message.

    Messages are produced by dispatching a compose draft (sent or saved) or by
    receiving mail into the inbox. Further edits require a new draft.

    Args:
        id: Unique message identifier.
        thread_id: Thread identifier for conversation grouping.
        from_address: Sender.
        to: Primary recipients.
        cc: CC recipients.
        bcc: BCC recipients.
        subject: Subject line.
        body: Plain text body.
        date: When the message was sent, saved or received.
        attachments: Ordered attachment references.
        in_reply_to: Id of the message this one replies to.
        is_read: Read/unread status.
        is_sent: Whether this message was sent by the local user.
        is_draft: Whether this message is a saved draft.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique message identifier")
    thread_id: str = Field(description="Thread identifier")
    from_address: EmailAddress = Field(description="Sender")
    to: list[EmailAddress] = Field(default_factory=list, description="Primary recipients")
    cc: list[EmailAddress] = Field(default_factory=list, description="CC recipients")
    bcc: list[EmailAddress] = Field(default_factory=list, description="BCC recipients")
    subject: str = Field(default="", description="Subject line")
    body: str = Field(default="", description="Plain text body")
    date: datetime = Field(default_factory=utc_now, description="Message timestamp")
    attachments: list[EmailAttachment] = Field(
        default_factory=list, description="Attachment references"
    )
    in_reply_to: Optional[str] = Field(
        default=None, description="Id of the message this replies to"
    )
    is_read: bool = Field(default=False, description="Read/unread status")
    is_sent: bool = Field(default=False, description="Sent by the local user")
    is_draft: bool = Field(default=False, description="Saved draft")

    @model_validator(mode="after")
    def validate_status_flags(self) -> "Message":
        """Ensure a message is not both sent and a draft."""
        if self.is_sent and self.is_draft:
            raise ValueError("A message cannot be both sent and a draft")
        return self

    @computed_field
    @property
    def body_preview(self) -> str:
        """First ~100 characters of the body."""
        preview = self.body[:PREVIEW_LENGTH]
        if len(self.body) > PREVIEW_LENGTH:
            preview = preview.rstrip() + "..."
        return preview

    @property
    def folder(self) -> str:
        """Folder this message belongs to."""
        if self.is_sent:
            return "sent"
        if self.is_draft:
            return "drafts"
        return "inbox"


class Mailbox(StateContainer):
    """In-memory message collection.

    Tracks every message of the session and the folder each one is filed in.
    Messages are immutable; the mailbox only ever adds or clears them.

    Args:
        container_type: Always "mailbox".
        messages: All messages indexed by id.
        folders: Folder name to ordered list of message ids.
    """

    container_type: str = Field(default="mailbox", frozen=True)
    messages: dict[str, Message] = Field(
        default_factory=dict, description="All messages indexed by id"
    )
    folders: dict[str, list[str]] = Field(
        default_factory=dict, description="Folder to message ids mapping"
    )

    def model_post_init(self, __context: Any) -> None:
        """Initialize standard folders after model creation.

        Args:
            __context: Pydantic context (unused).
        """
        for folder in STANDARD_FOLDERS:
            self.folders.setdefault(folder, [])

    def add(self, message: Message) -> Message:
        """File a message into the folder implied by its status flags.

        Args:
            message: The message to add.

        Returns:
            The added message.

        Raises:
            ValueError: If a message with the same id already exists.
        """
        if message.id in self.messages:
            raise ValueError(f"Message '{message.id}' already exists")

        self.messages[message.id] = message
        self.folders[message.folder].append(message.id)
        self.touch()
        return message

    def receive(
        self,
        from_address: EmailAddress,
        to: list[EmailAddress],
        subject: str,
        body: str,
        cc: Optional[list[EmailAddress]] = None,
        attachments: Optional[list[EmailAttachment]] = None,
        date: Optional[datetime] = None,
        thread_id: Optional[str] = None,
    ) -> Message:
        """Build an inbound message and file it in the inbox.

        Args:
            from_address: Sender.
            to: Primary recipients.
            subject: Subject line.
            body: Plain text body.
            cc: CC recipients.
            attachments: Attachment references.
            date: When the message arrived (defaults to now).
            thread_id: Thread to file the message under (new thread if absent).

        Returns:
            The received message.
        """
        message_id = f"msg-{uuid4()}"
        message = Message(
            id=message_id,
            thread_id=thread_id or f"thread-{uuid4()}",
            from_address=from_address,
            to=to,
            cc=cc or [],
            subject=subject,
            body=body,
            date=date or utc_now(),
            attachments=attachments or [],
        )
        return self.add(message)

    def find(self, message_id: str) -> Optional[Message]:
        """Return the message with the given id, or None."""
        return self.messages.get(message_id)

    def get(self, message_id: str) -> Message:
        """Return the message with the given id.

        Raises:
            MessageNotFoundError: If no such message exists.
        """
        message = self.messages.get(message_id)
        if message is None:
            raise MessageNotFoundError(message_id)
        return message

    def list_messages(self, folder: Optional[str] = None) -> list[Message]:
        """Return messages in filing order, optionally restricted to one folder."""
        if folder is None:
            return list(self.messages.values())
        return [self.messages[mid] for mid in self.folders.get(folder, [])]

    def query(
        self,
        folder: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> dict[str, Any]:
        """Return a page of messages, newest first.

        Args:
            folder: Restrict to this folder.
            limit: Maximum number of messages to return (None = all).
            offset: Number of messages to skip.

        Returns:
            Dictionary with "messages", "total_count" and "returned_count".
        """
        matching = sorted(self.list_messages(folder), key=lambda m: m.date, reverse=True)
        total_count = len(matching)
        if limit is not None:
            page = matching[offset : offset + limit]
        else:
            page = matching[offset:]
        return {
            "messages": page,
            "total_count": total_count,
            "returned_count": len(page),
        }

    def get_snapshot(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot of the mailbox."""
        return {
            "container_type": self.container_type,
            "last_updated": self.last_updated.isoformat(),
            "messages": {
                mid: message.model_dump(mode="json")
                for mid, message in self.messages.items()
            },
            "folders": {folder: len(ids) for folder, ids in self.folders.items()},
            "total_count": len(self.messages),
        }

    def validate_state(self) -> list[str]:
        """Check that folders and messages agree with each other."""
        errors = []
        filed: set[str] = set()
        for folder, message_ids in self.folders.items():
            for message_id in message_ids:
                message = self.messages.get(message_id)
                if message is None:
                    errors.append(f"Folder '{folder}' references missing message {message_id}")
                elif message.folder != folder:
                    errors.append(
                        f"Message {message_id} filed in '{folder}' but belongs in '{message.folder}'"
                    )
                if message_id in filed:
                    errors.append(f"Message {message_id} filed more than once")
                filed.add(message_id)
        for message_id in self.messages:
            if message_id not in filed:
                errors.append(f"Message {message_id} is not filed in any folder")
        return errors

    def clear(self) -> None:
        """Remove every message and reset folders."""
        self.messages.clear()
        self.folders = {folder: [] for folder in STANDARD_FOLDERS}
        self.last_updated = utc_now()
        self.update_count = 0

    @property
    def summary(self) -> str:
        """Return counts per folder."""
        counts = ", ".join(
            f"{len(self.folders[folder])} {folder}" for folder in STANDARD_FOLDERS
        )
        return f"{len(self.messages)} messages ({counts})"
