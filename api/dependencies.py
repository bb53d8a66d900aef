"""Dependency injection providers for the FastAPI application.

This module defines dependencies that can be injected into route handlers,
providing access to the shared ComposeSession.
"""

import logging
from datetime import timedelta
from typing import Annotated, Optional

from fastapi import Depends

from api.settings import Settings, settings as default_settings
from models.base_state import utc_now
from models.dispatch import HTTPMessageSink, LocalMessageSink
from models.message import EmailAddress, Mailbox, Message
from models.session import ComposeSession
from models.suggestions import HTTPSuggestionService

logger = logging.getLogger(__name__)

DEMO_BODY = """Hi there,

I hope this email finds you well. I've been reviewing our project timeline and I think we should schedule a sync meeting to discuss our progress and next steps.

We've made significant progress on the frontend components, but there are a few areas where I'd like to get your input. Specifically, I want to discuss the user authentication flow and how we're handling data persistence.

What times work for you to meet this week? I'm flexible with my schedule and can accommodate most times between Tuesday and Friday.

Looking forward to hearing from you!

Best regards,
Avery Chen"""


# Global state
# A single in-memory session per process; drafts are never persisted
_compose_session: ComposeSession | None = None


def get_compose_session() -> ComposeSession:
    """Get the shared ComposeSession instance.

    This function is a FastAPI dependency. Route handlers receive the result
    through the ComposeSessionDep annotation.

    Returns:
        The shared ComposeSession instance.

    Raises:
        RuntimeError: If the session hasn't been initialized yet.
    """
    if _compose_session is None:
        raise RuntimeError(
            "ComposeSession not initialized. Call initialize_compose_session() first."
        )
    return _compose_session


def seed_demo_messages(mailbox: Mailbox, user: EmailAddress) -> Message:
    """File the demo meeting request into the inbox so there is something to reply to."""
    message = Message(
        id="email-avery-default",
        thread_id="thread-avery",
        from_address=EmailAddress(email="avery.chen@gmail.com", name="Avery Chen"),
        to=[user],
        subject="Meeting Request - Project Sync",
        body=DEMO_BODY,
        date=utc_now() - timedelta(hours=2),
    )
    return mailbox.add(message)


def build_compose_session(config: Settings) -> ComposeSession:
    """Create a ComposeSession wired according to `config`.

    Remote suggestion and mail-send endpoints are used only when their URLs
    are configured; otherwise suggestions must be proposed explicitly and
    dispatch stays local.
    """
    user = EmailAddress(email=config.user_email, name=config.user_name)

    suggestion_service = None
    if config.suggestion_service_url:
        suggestion_service = HTTPSuggestionService(
            config.suggestion_service_url, timeout=config.suggestion_timeout
        )

    if config.mail_send_url:
        sink = HTTPMessageSink(config.mail_send_url, timeout=config.dispatch_timeout)
    else:
        sink = LocalMessageSink()

    session = ComposeSession(
        user_address=user,
        reentry_policy=config.reentry_policy,
        suggestion_service=suggestion_service,
        sink=sink,
    )
    if config.seed_demo_messages:
        seed_demo_messages(session.mailbox, user)
    return session


def initialize_compose_session(config: Optional[Settings] = None) -> ComposeSession:
    """Initialize the shared ComposeSession instance.

    This should be called once when the FastAPI app starts up.

    Args:
        config: Settings to use. Defaults to the environment-derived settings.

    Returns:
        The newly created ComposeSession.
    """
    global _compose_session

    config = config or default_settings
    _compose_session = build_compose_session(config)
    logger.info(
        f"Compose session initialized for {config.user_email} "
        f"(reentry policy: {config.reentry_policy.value})"
    )
    return _compose_session


async def shutdown_compose_session() -> None:
    """Shut down the ComposeSession, cancelling in-flight suggestion fetches."""
    global _compose_session

    if _compose_session is not None:
        await _compose_session.shutdown()
    _compose_session = None


# Type alias for dependency injection
ComposeSessionDep = Annotated[ComposeSession, Depends(get_compose_session)]
