"""Fixtures for compose drafts, messages and sessions."""

from datetime import datetime, timezone

import pytest

from models.dispatch import LocalMessageSink, MessageSink
from models.draft_store import DraftStore
from models.message import EmailAddress, Mailbox, Message
from models.reconciliation import ReentryPolicy, SuggestionReconciler
from models.session import ComposeSession
from models.suggestions import Suggestion, SuggestionChannel


ME = EmailAddress(email="me@gmail.com", name="Me")
AVERY = EmailAddress(email="avery.chen@gmail.com", name="Avery Chen")
JORDAN = EmailAddress(email="jordan@example.com", name="Jordan Lee")
SAM = EmailAddress(email="sam@example.com")

FIXED_DATE = datetime(2025, 3, 4, 15, 30, tzinfo=timezone.utc)


def create_message(
    message_id: str = "msg-1",
    from_address: EmailAddress = AVERY,
    to: list[EmailAddress] | None = None,
    subject: str = "Meeting Request - Project Sync",
    body: str = "What times work for you to meet this week?",
    date: datetime | None = None,
    **kwargs,
) -> Message:
    """Create an inbound Message with sensible defaults.

    Args:
        message_id: Unique message id.
        from_address: Sender.
        to: Primary recipients (defaults to the local user).
        subject: Subject line.
        body: Body text.
        date: Message timestamp (defaults to FIXED_DATE).
        **kwargs: Additional fields to override.

    Returns:
        Message instance ready for testing.
    """
    return Message(
        id=message_id,
        thread_id=kwargs.pop("thread_id", f"thread-{message_id}"),
        from_address=from_address,
        to=to if to is not None else [ME],
        subject=subject,
        body=body,
        date=date or FIXED_DATE,
        **kwargs,
    )


def create_session(
    policy: ReentryPolicy | str = ReentryPolicy.REPLACE,
    sink: MessageSink | None = None,
    messages: list[Message] | None = None,
    **kwargs,
) -> ComposeSession:
    """Create a ComposeSession with an optional pre-filled mailbox.

    Args:
        policy: Re-entry policy for the reconciler.
        sink: Message sink (defaults to a LocalMessageSink).
        messages: Messages to file into the mailbox.
        **kwargs: Additional ComposeSession arguments.

    Returns:
        ComposeSession instance ready for testing.
    """
    session = ComposeSession(
        user_address=ME,
        reentry_policy=policy,
        sink=sink or LocalMessageSink(),
        **kwargs,
    )
    for message in messages or []:
        session.mailbox.add(message)
    return session


def create_suggestion(body: str = "Hi there, Tuesday works for me.", subject: str | None = None):
    return Suggestion(body=body, subject=subject)


# Pre-built examples
MEETING_REQUEST = create_message(
    message_id="email-avery-default",
    to=[ME, JORDAN],
    body="Hi there,\n\nWhat times work for you to meet this week?\n\nBest regards,\nAvery Chen",
)


@pytest.fixture
def store():
    """Provide an empty DraftStore owned by the local user."""
    return DraftStore(user_address=ME)


@pytest.fixture
def channel():
    """Provide a SuggestionChannel with no subscribers."""
    return SuggestionChannel()


@pytest.fixture
def reconciler(store, channel):
    """Provide a SuggestionReconciler using the replace policy."""
    return SuggestionReconciler(store, channel)


@pytest.fixture
def strict_reconciler(store, channel):
    """Provide a SuggestionReconciler that refuses suggestions during a diff."""
    return SuggestionReconciler(store, channel, ReentryPolicy.REJECT_NEW)


@pytest.fixture
def mailbox():
    """Provide an empty Mailbox."""
    return Mailbox()


@pytest.fixture
def meeting_request():
    """Provide the inbound meeting request used by reply and forward tests."""
    return MEETING_REQUEST


@pytest.fixture
def compose_session():
    """Provide a ComposeSession whose mailbox holds the meeting request."""
    return create_session(messages=[MEETING_REQUEST])
