"""Client response models for the compose API client.

This module re-exports the models the API answers with and defines the
client-specific response models that don't exist in the API layer.
"""

from pydantic import BaseModel, Field

# Re-export shared models for client convenience
from api.models import (
    CloseDraftResponse,
    ContentEditResponse,
    DispatchResponse,
    DraftActionResponse,
    ErrorResponse,
    LivePublishResponse,
    QueryResponse,
    SuggestionRequestResponse,
)
from models.layout import ComposeLayout, LayoutSlot
from models.message import EmailAddress, EmailAttachment, Message
from models.reconciliation import ContentSnapshot, DraftView, FieldDiff
from models.suggestions import Suggestion, SuggestionOutcome

__all__ = [
    # Re-exported
    "CloseDraftResponse",
    "ComposeLayout",
    "ContentEditResponse",
    "ContentSnapshot",
    "DispatchResponse",
    "DraftActionResponse",
    "DraftView",
    "EmailAddress",
    "EmailAttachment",
    "ErrorResponse",
    "FieldDiff",
    "LayoutSlot",
    "LivePublishResponse",
    "Message",
    "QueryResponse",
    "Suggestion",
    "SuggestionOutcome",
    "SuggestionRequestResponse",
    # Client-specific models
    "HealthResponse",
    "MessageQueryResponse",
]


class MessageQueryResponse(QueryResponse[list[Message]]):
    """A page of messages, newest first."""


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status string (e.g., "healthy").
    """

    status: str = Field(..., description="Health status")
