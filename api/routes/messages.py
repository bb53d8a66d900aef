"""Message endpoints.

Provides REST API endpoints for reading the mailbox that dispatched drafts
are filed into, and for receiving inbound messages to reply to or forward.
"""

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from api.dependencies import ComposeSessionDep
from api.models import ErrorResponse, QueryResponse
from models.message import EmailAddress, EmailAttachment, Message

router = APIRouter(
    prefix="/messages",
    tags=["messages"],
    responses={404: {"model": ErrorResponse}},
)

Folder = Literal["inbox", "sent", "drafts"]


# ============================================================================
# Request Models
# ============================================================================


class ReceiveMessageRequest(BaseModel):
    """Request model for an inbound message.

    Attributes:
        from_address: Sender.
        to: Primary recipients (defaults to the local user).
        cc: CC recipients.
        subject: Subject line.
        body: Plain text body.
        attachments: Attachment references.
        date: When the message arrived (defaults to now).
        thread_id: Existing thread to file the message under.
    """

    from_address: EmailAddress = Field(description="Sender")
    to: list[EmailAddress] = Field(default_factory=list, description="Primary recipients")
    cc: list[EmailAddress] = Field(default_factory=list, description="CC recipients")
    subject: str = Field(default="", description="Subject line")
    body: str = Field(default="", description="Plain text body")
    attachments: list[EmailAttachment] = Field(
        default_factory=list, description="Attachment references"
    )
    date: Optional[datetime] = Field(default=None, description="Arrival time")
    thread_id: Optional[str] = Field(default=None, description="Thread identifier")


# ============================================================================
# Route Handlers
# ============================================================================


@router.get("", response_model=QueryResponse[list[Message]])
async def query_messages(
    session: ComposeSessionDep,
    folder: Optional[Folder] = Query(default=None, description="Folder to list"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000, description="Maximum results"),
    offset: int = Query(default=0, ge=0, description="Results to skip"),
):
    """List messages, newest first.

    Args:
        session: The compose session (injected).
        folder: Restrict to inbox, sent or drafts.
        limit: Maximum number of messages to return.
        offset: Number of messages to skip.

    Returns:
        A page of messages with counts.
    """
    result = session.mailbox.query(folder=folder, limit=limit, offset=offset)
    return QueryResponse[list[Message]](
        query={"folder": folder, "limit": limit, "offset": offset},
        results=result["messages"],
        total_count=result["total_count"],
        returned_count=result["returned_count"],
    )


@router.get("/{message_id}", response_model=Message)
async def get_message(message_id: str, session: ComposeSessionDep):
    """Get one message by id."""
    return session.mailbox.get(message_id)


@router.post("/receive", response_model=Message, status_code=status.HTTP_201_CREATED)
async def receive_message(request: ReceiveMessageRequest, session: ComposeSessionDep):
    """File an inbound message into the inbox.

    Args:
        request: The inbound message.
        session: The compose session (injected).

    Returns:
        The received message, which drafts can now reply to or forward.
    """
    return session.mailbox.receive(
        from_address=request.from_address,
        to=request.to or [session.user_address],
        subject=request.subject,
        body=request.body,
        cc=request.cc,
        attachments=request.attachments,
        date=request.date,
        thread_id=request.thread_id,
    )
