"""Exception hierarchy for the compose draft core.

Every error raised by the draft store, reconciler and dispatcher inherits from
ComposeError so route handlers can map them to HTTP responses in one place.
None of these are fatal: each one is scoped to a single draft or message.

Exception Hierarchy:
    ComposeError (base)
    ├── DraftNotFoundError - draft id not in the registry
    ├── MessageNotFoundError - message id not in the mailbox
    ├── DraftValidationError - send attempted on an incomplete draft
    ├── NoPendingSuggestionError - accept/reject with no diff in progress
    ├── SuggestionPendingError - operation refused while a diff is pending
    ├── DispatchInProgressError - draft already being sent/saved
    ├── SuggestionFetchError - content suggestion service failed
    └── DispatchTransportError - message sink failed
"""


class ComposeError(Exception):
    """Base exception for all compose core errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DraftNotFoundError(ComposeError):
    """Raised when an operation targets a draft id that is not registered.

    Args:
        draft_id: The draft id that wasn't found.
    """

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Draft '{draft_id}' not found")


class MessageNotFoundError(ComposeError):
    """Raised when a message id is not present in the mailbox.

    Args:
        message_id: The message id that wasn't found.
    """

    def __init__(self, message_id: str):
        self.message_id = message_id
        super().__init__(f"Message '{message_id}' not found")


class DraftValidationError(ComposeError):
    """Raised when a draft is missing fields required to send it.

    The draft is left untouched in the registry.

    Args:
        draft_id: The draft that failed validation.
        missing_fields: Names of the required fields that are empty.
    """

    def __init__(self, draft_id: str, missing_fields: list[str]):
        self.draft_id = draft_id
        self.missing_fields = missing_fields
        super().__init__(
            f"Draft '{draft_id}' cannot be sent: missing {', '.join(missing_fields)}"
        )


class NoPendingSuggestionError(ComposeError):
    """Raised when accept/reject is called on a draft that is not diffing."""

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Draft '{draft_id}' has no pending suggestion")


class SuggestionPendingError(ComposeError):
    """Raised when an operation needs the pending suggestion resolved first.

    Args:
        draft_id: The draft with an unresolved diff.
        operation: What was refused (e.g. "suggest", "send").
    """

    def __init__(self, draft_id: str, operation: str):
        self.draft_id = draft_id
        self.operation = operation
        super().__init__(
            f"Cannot {operation} draft '{draft_id}' while a suggestion is pending; "
            "accept or reject it first"
        )


class DispatchInProgressError(ComposeError):
    """Raised when a draft is edited, sent a suggestion or dispatched while a
    previous dispatch of it is in flight.
    """

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Draft '{draft_id}' is already being dispatched")


class SuggestionFetchError(ComposeError):
    """Raised when the content suggestion service fails.

    The target draft stays in direct-edit mode, unchanged.

    Args:
        draft_id: The draft the suggestion was requested for.
        reason: Description of the failure.
        cause: The underlying exception, if any.
    """

    def __init__(self, draft_id: str, reason: str, cause: Exception | None = None):
        self.draft_id = draft_id
        self.reason = reason
        self.cause = cause
        super().__init__(f"Suggestion for draft '{draft_id}' failed: {reason}")


class DispatchTransportError(ComposeError):
    """Raised when the message sink fails to deliver a dispatched message.

    The draft is kept in the registry so its content is not lost.

    Args:
        draft_id: The draft being dispatched.
        reason: Description of the failure.
        cause: The underlying exception, if any.
    """

    def __init__(self, draft_id: str, reason: str, cause: Exception | None = None):
        self.draft_id = draft_id
        self.reason = reason
        self.cause = cause
        super().__init__(f"Dispatch of draft '{draft_id}' failed: {reason}")
