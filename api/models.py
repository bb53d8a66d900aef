"""Shared request and response models for API endpoints.

This module contains the models used across more than one router, so the
draft, suggestion and message endpoints answer in a consistent shape.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from models.message import Message
from models.reconciliation import DraftView
from models.suggestions import SuggestionOutcome


# Generic type variable for query results
ResultT = TypeVar("ResultT")


class DraftActionResponse(BaseModel):
    """Response model for draft mutations (edit, window change, accept, reject).

    Attributes:
        draft_id: The draft that was acted upon.
        status: Short status code for the action (e.g. "updated", "accepted").
        message: Human-readable message describing the result.
        draft: Read model of the draft after the action.
    """

    draft_id: str
    status: str
    message: str
    draft: DraftView


class DispatchResponse(BaseModel):
    """Response model for send and save actions.

    Attributes:
        draft_id: The draft that was dispatched (no longer open).
        status: "sent" or "saved".
        message: The message produced by the dispatch.
    """

    draft_id: str
    status: str
    message: Message


class QueryResponse(BaseModel, Generic[ResultT]):
    """Paginated list response.

    Attributes:
        query: Echo of the query parameters sent.
        results: The page of results.
        total_count: Total number of results matching the query.
        returned_count: Number of results returned (after pagination).
    """

    query: dict[str, Any]
    results: ResultT
    total_count: int
    returned_count: int


# Error response models


class ErrorResponse(BaseModel):
    """Standard error response body produced by the exception handlers.

    Attributes:
        error: Error title.
        detail: Human-readable error message.
        type: Exception class name.
        details: Optional additional error details.
    """

    error: str
    detail: str
    type: str | None = None
    details: dict[str, Any] | None = None


class ContentEditResponse(DraftActionResponse):
    """Response model for direct edits.

    Attributes:
        suppressed: Fields whose edits were dropped because a suggestion is pending.
    """

    suppressed: list[str] = Field(default_factory=list)


class CloseDraftResponse(BaseModel):
    """Response model for closing a draft.

    Attributes:
        draft_id: The draft that was closed.
        was_open: False if the draft had already been closed.
    """

    draft_id: str
    was_open: bool


class SuggestionRequestResponse(BaseModel):
    """Response model for a fetched suggestion.

    Attributes:
        outcome: How the fetched suggestion was resolved.
        draft: Read model of the draft, or None if it was closed meanwhile.
    """

    outcome: SuggestionOutcome
    draft: Optional[DraftView] = None


class LivePublishResponse(BaseModel):
    """Response model for publishing a live suggestion.

    Attributes:
        delivered_to: Number of drafts whose body was updated.
        updated_drafts: Ids of those drafts.
    """

    delivered_to: int
    updated_drafts: list[str] = Field(default_factory=list)
