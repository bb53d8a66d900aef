"""Compose draft endpoints.

Provides REST API endpoints for the draft lifecycle: creating drafts from
scratch or from a message, direct edits, window state, layout, closing, and
the terminal send / save-as-draft dispatch actions.
"""

from typing import Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from api.dependencies import ComposeSessionDep
from api.models import (
    CloseDraftResponse,
    ContentEditResponse,
    DispatchResponse,
    DraftActionResponse,
    ErrorResponse,
)
from models.draft import ComposeMode
from models.errors import DraftNotFoundError
from models.layout import ComposeLayout, ViewContext
from models.reconciliation import DraftView
from models.updates import ContentUpdate, WindowUpdate

router = APIRouter(
    prefix="/drafts",
    tags=["drafts"],
    responses={404: {"model": ErrorResponse}},
)


# ============================================================================
# Request Models
# ============================================================================


class CreateDraftRequest(BaseModel):
    """Request model for opening a new compose draft.

    Attributes:
        mode: How the draft is started.
        source_message_id: Message to reply to or forward.
        is_inline: Whether the draft renders inside a detail view.
        parent_email_id: Message the draft belongs to (defaults to the source).
    """

    mode: ComposeMode = Field(default="new", description="Compose mode")
    source_message_id: Optional[str] = Field(
        default=None, description="Message to reply to or forward"
    )
    is_inline: bool = Field(default=False, description="Render inside a detail view")
    parent_email_id: Optional[str] = Field(
        default=None, description="Message the draft belongs to"
    )


class UpdateContentRequest(BaseModel):
    """Request model for direct edits.

    Attributes:
        updates: Tagged field-set operations, applied in order.
    """

    updates: list[ContentUpdate] = Field(min_length=1, description="Field updates")


class SetViewRequest(BaseModel):
    """Request model for switching the view context.

    Attributes:
        view: "list" or "detail".
    """

    view: ViewContext = Field(description="View context")


# ============================================================================
# Route Handlers
# ============================================================================


@router.post("", response_model=DraftView, status_code=status.HTTP_201_CREATED)
async def create_draft(request: CreateDraftRequest, session: ComposeSessionDep):
    """Open a new compose draft.

    Reply, reply-all and forward drafts are pre-filled from the source
    message.

    Args:
        request: Draft creation parameters.
        session: The compose session (injected).

    Returns:
        The new draft.
    """
    draft_id = session.create_draft(
        request.mode,
        source_message_id=request.source_message_id,
        is_inline=request.is_inline,
        parent_email_id=request.parent_email_id,
    )
    return session.reconciler.view(draft_id)


@router.get("", response_model=list[DraftView])
async def list_drafts(session: ComposeSessionDep):
    """List every open draft in creation order."""
    return session.reconciler.views()


@router.get("/layout", response_model=ComposeLayout)
async def get_layout(
    session: ComposeSessionDep,
    view: Optional[ViewContext] = Query(default=None, description="View context"),
):
    """Get the window layout of the open drafts.

    Args:
        session: The compose session (injected).
        view: "list" or "detail". Defaults to the session's current view,
            which this request does not change.

    Returns:
        Fullscreen and stacked regular windows.
    """
    return session.layout.layout(view)


@router.patch("/layout/view", response_model=ComposeLayout)
async def set_layout_view(request: SetViewRequest, session: ComposeSessionDep):
    """Switch the session's current view context and return the new layout."""
    session.layout.set_view(request.view)
    return session.layout.layout()


@router.get("/{draft_id}", response_model=DraftView)
async def get_draft(draft_id: str, session: ComposeSessionDep):
    """Get the read model of one draft, including any pending diff."""
    return session.reconciler.view(draft_id)


@router.patch("/{draft_id}/window", response_model=DraftActionResponse)
async def update_window(draft_id: str, request: WindowUpdate, session: ComposeSessionDep):
    """Minimize, restore or toggle fullscreen on a draft window.

    Args:
        draft_id: Target draft.
        request: Flags to change; omitted flags are left alone.
        session: The compose session (injected).

    Returns:
        The draft after the change.
    """
    if not session.store.exists(draft_id):
        raise DraftNotFoundError(draft_id)
    session.store.update_window_state(draft_id, request)
    changed = ", ".join(f"{k}={v}" for k, v in request.changes().items()) or "nothing"
    return DraftActionResponse(
        draft_id=draft_id,
        status="updated",
        message=f"Window updated: {changed}",
        draft=session.reconciler.view(draft_id),
    )


@router.patch("/{draft_id}/content", response_model=ContentEditResponse)
async def update_content(
    draft_id: str, request: UpdateContentRequest, session: ComposeSessionDep
):
    """Apply direct edits to a draft.

    While a suggestion is pending, subject and body edits are dropped and
    reported in `suppressed`; other fields still update.

    Args:
        draft_id: Target draft.
        request: Tagged field updates.
        session: The compose session (injected).

    Returns:
        The draft after the edit and the suppressed fields.
    """
    dropped = session.reconciler.edit(draft_id, *request.updates)
    applied = len(request.updates) - len(dropped)
    return ContentEditResponse(
        draft_id=draft_id,
        status="updated" if applied else "suppressed",
        message=f"Applied {applied} of {len(request.updates)} update(s)",
        draft=session.reconciler.view(draft_id),
        suppressed=[u.field for u in dropped],
    )


@router.delete("/{draft_id}", response_model=CloseDraftResponse)
async def close_draft(draft_id: str, session: ComposeSessionDep):
    """Close a draft, discarding its content.

    Closing is idempotent: an already-closed draft answers with
    `was_open: false` instead of an error.
    """
    was_open = session.store.exists(draft_id)
    session.store.close(draft_id)
    return CloseDraftResponse(draft_id=draft_id, was_open=was_open)


@router.post(
    "/{draft_id}/send",
    response_model=DispatchResponse,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def send_draft(draft_id: str, session: ComposeSessionDep):
    """Send a draft. Requires at least one recipient and a subject.

    The draft is removed only after the mail sink confirms delivery.
    """
    message = await session.dispatcher.send_from_draft(draft_id)
    return DispatchResponse(draft_id=draft_id, status="sent", message=message)


@router.post(
    "/{draft_id}/save",
    response_model=DispatchResponse,
    responses={409: {"model": ErrorResponse}},
)
async def save_draft(draft_id: str, session: ComposeSessionDep):
    """Save a draft into the drafts folder, however incomplete."""
    message = await session.dispatcher.save_draft_from_compose(draft_id)
    return DispatchResponse(draft_id=draft_id, status="saved", message=message)
