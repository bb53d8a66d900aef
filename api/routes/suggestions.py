"""Suggestion endpoints.

Provides REST API endpoints for merging suggested content into drafts:
proposing a suggestion directly, fetching one from the configured
suggestion service, accepting or rejecting a pending diff, and publishing
live suggestions.
"""

from fastapi import APIRouter

from api.dependencies import ComposeSessionDep
from api.models import (
    DraftActionResponse,
    ErrorResponse,
    LivePublishResponse,
    SuggestionRequestResponse,
)
from models.suggestions import LiveSuggestion, Suggestion

router = APIRouter(
    tags=["suggestions"],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


# ============================================================================
# Route Handlers
# ============================================================================


@router.post("/drafts/{draft_id}/suggestion", response_model=DraftActionResponse)
async def propose_suggestion(
    draft_id: str, suggestion: Suggestion, session: ComposeSessionDep
):
    """Put a draft into diff mode with the given suggestion.

    Args:
        draft_id: Target draft.
        suggestion: Proposed body and optional subject.
        session: The compose session (injected).

    Returns:
        The draft with its pending diff.
    """
    session.reconciler.propose(draft_id, suggestion)
    return DraftActionResponse(
        draft_id=draft_id,
        status="diffing",
        message="Suggestion pending review",
        draft=session.reconciler.view(draft_id),
    )


@router.post(
    "/drafts/{draft_id}/suggestion/request",
    response_model=SuggestionRequestResponse,
    responses={502: {"model": ErrorResponse}},
)
async def request_suggestion(draft_id: str, session: ComposeSessionDep):
    """Fetch a suggestion from the configured suggestion service.

    Waits for the fetch to resolve. If the draft is closed while the fetch
    is in flight, the result is discarded and `draft` is null.

    Args:
        draft_id: Target draft.
        session: The compose session (injected).

    Returns:
        The outcome and the draft's read model.
    """
    handle = session.request_suggestion(draft_id)
    outcome = await handle.result()
    draft = None
    if session.store.exists(draft_id):
        draft = session.reconciler.view(draft_id)
    return SuggestionRequestResponse(outcome=outcome, draft=draft)


@router.post("/drafts/{draft_id}/accept", response_model=DraftActionResponse)
async def accept_suggestion(draft_id: str, session: ComposeSessionDep):
    """Commit the pending suggestion into the draft."""
    session.reconciler.accept(draft_id)
    return DraftActionResponse(
        draft_id=draft_id,
        status="accepted",
        message="Suggestion merged into draft",
        draft=session.reconciler.view(draft_id),
    )


@router.post("/drafts/{draft_id}/reject", response_model=DraftActionResponse)
async def reject_suggestion(draft_id: str, session: ComposeSessionDep):
    """Discard the pending suggestion, leaving the draft unchanged."""
    session.reconciler.reject(draft_id)
    return DraftActionResponse(
        draft_id=draft_id,
        status="rejected",
        message="Suggestion discarded",
        draft=session.reconciler.view(draft_id),
    )


@router.post("/suggestions/live", response_model=LivePublishResponse)
async def publish_live_suggestion(event: LiveSuggestion, session: ComposeSessionDep):
    """Publish a live suggestion.

    Drafts that are not reviewing a suggestion take the body directly.
    Address one draft with `draft_id` or omit it to reach every draft.
    """
    updated = session.publish_live_suggestion(event)
    return LivePublishResponse(delivered_to=len(updated), updated_drafts=updated)
