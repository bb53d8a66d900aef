"""Compose draft core models.

This package contains the in-memory core of the compose service: drafts and
their registry, the window layout projection, suggestion reconciliation,
dispatch into messages, and the session that wires them together.
"""

from models.base_state import StateContainer
from models.draft import ComposeData, ComposeDraft, ComposeMode
from models.draft_store import DraftStore
from models.dispatch import Dispatcher, HTTPMessageSink, LocalMessageSink, MessageSink
from models.layout import ComposeLayout, DraftLayoutController, LayoutSlot
from models.message import EmailAddress, EmailAttachment, Mailbox, Message
from models.reconciliation import (
    DraftView,
    ReconciliationState,
    ReentryPolicy,
    SuggestionReconciler,
)
from models.session import ComposeSession
from models.suggestions import (
    HTTPSuggestionService,
    LiveSuggestion,
    StaticSuggestionService,
    Suggestion,
    SuggestionChannel,
    SuggestionHandle,
    SuggestionOutcome,
    SuggestionService,
)

__all__ = [
    "StateContainer",
    "ComposeData",
    "ComposeDraft",
    "ComposeMode",
    "DraftStore",
    "Dispatcher",
    "MessageSink",
    "LocalMessageSink",
    "HTTPMessageSink",
    "ComposeLayout",
    "DraftLayoutController",
    "LayoutSlot",
    "EmailAddress",
    "EmailAttachment",
    "Mailbox",
    "Message",
    "DraftView",
    "ReconciliationState",
    "ReentryPolicy",
    "SuggestionReconciler",
    "ComposeSession",
    "Suggestion",
    "SuggestionChannel",
    "SuggestionHandle",
    "SuggestionOutcome",
    "SuggestionService",
    "StaticSuggestionService",
    "HTTPSuggestionService",
    "LiveSuggestion",
]
