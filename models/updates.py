"""Typed partial updates for compose drafts.

Content changes are expressed as a tagged union of "set field" operations
rather than free-form partial dictionaries, so a merge can never pick up a
key the draft does not have. Each variant is tagged by its `field` value:

    {"field": "body", "value": "Hi there"}
    {"field": "to", "value": [{"email": "a@x.com"}]}

Window flag changes use WindowUpdate, where omitted flags are left alone.
"""

from abc import abstractmethod
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from models.draft import ComposeData, ComposeDraft, dedupe_addresses
from models.message import EmailAddress, EmailAttachment

TEXT_FIELDS = ("subject", "body")


class DraftUpdate(BaseModel):
    """Base class for a single field-set operation on draft content.

    Updates are immutable value objects. Applying one returns a new
    ComposeData and never mutates the input.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str

    @abstractmethod
    def apply_to(self, data: ComposeData) -> ComposeData:
        """Return a copy of `data` with this update applied.

        Args:
            data: Current draft content.

        Returns:
            New content with the field replaced.
        """
        pass

    @property
    def is_text_edit(self) -> bool:
        """Whether this update writes the subject or body."""
        return self.field in TEXT_FIELDS

    def get_summary(self) -> str:
        """Return a one-line description for logging."""
        return f"set {self.field}"


class SetRecipients(DraftUpdate):
    """Replace one recipient field (to, cc or bcc)."""

    field: Literal["to", "cc", "bcc"]
    value: list[EmailAddress] = Field(default_factory=list)

    def apply_to(self, data: ComposeData) -> ComposeData:
        return data.model_copy(update={self.field: dedupe_addresses(self.value)})

    def get_summary(self) -> str:
        return f"set {self.field} ({len(self.value)} recipient(s))"


class SetSubject(DraftUpdate):
    """Replace the subject line."""

    field: Literal["subject"] = "subject"
    value: str

    def apply_to(self, data: ComposeData) -> ComposeData:
        return data.model_copy(update={"subject": self.value})


class SetBody(DraftUpdate):
    """Replace the body text."""

    field: Literal["body"] = "body"
    value: str

    def apply_to(self, data: ComposeData) -> ComposeData:
        return data.model_copy(update={"body": self.value})

    def get_summary(self) -> str:
        return f"set body ({len(self.value)} chars)"


class SetAttachments(DraftUpdate):
    """Replace the ordered attachment list."""

    field: Literal["attachments"] = "attachments"
    value: list[EmailAttachment] = Field(default_factory=list)

    def apply_to(self, data: ComposeData) -> ComposeData:
        return data.model_copy(update={"attachments": list(self.value)})


class SetInReplyTo(DraftUpdate):
    """Replace the in-reply-to back reference."""

    field: Literal["in_reply_to"] = "in_reply_to"
    value: Optional[str] = None

    def apply_to(self, data: ComposeData) -> ComposeData:
        return data.model_copy(update={"in_reply_to": self.value})


ContentUpdate = Annotated[
    Union[SetRecipients, SetSubject, SetBody, SetAttachments, SetInReplyTo],
    Field(discriminator="field"),
]

_content_updates_adapter = TypeAdapter(list[ContentUpdate])


def parse_content_updates(raw: list[dict[str, Any]]) -> list[DraftUpdate]:
    """Validate a list of tagged update dictionaries.

    Args:
        raw: Dictionaries of the form {"field": ..., "value": ...}.

    Returns:
        The typed update objects, in order.

    Raises:
        pydantic.ValidationError: If a tag is unknown or a value has the wrong type.
    """
    return _content_updates_adapter.validate_python(raw)


class WindowUpdate(BaseModel):
    """Partial change to a draft's window flags.

    Args:
        is_minimized: New minimized flag, or None to leave unchanged.
        is_fullscreen: New fullscreen flag, or None to leave unchanged.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    is_minimized: Optional[bool] = None
    is_fullscreen: Optional[bool] = None

    def changes(self) -> dict[str, bool]:
        """Return only the flags this update sets."""
        return self.model_dump(exclude_none=True)

    def apply_to(self, draft: ComposeDraft) -> None:
        """Merge the set flags into `draft` in place."""
        for name, value in self.changes().items():
            setattr(draft, name, value)
