"""Content suggestions: the service boundary, live channel and fetch handles.

A suggestion reaches a draft in one of two ways:

- Explicitly, from a SuggestionService. The result enters diff mode and
  waits for the user to accept or reject it.
- Ambiently, as a LiveSuggestion published on a SuggestionChannel. Drafts
  that are not diffing take the body directly.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Coroutine, Literal, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models.draft import ComposeDraft, ComposeMode
from models.errors import SuggestionFetchError
from models.message import EmailAddress, Message

logger = logging.getLogger(__name__)


class Suggestion(BaseModel):
    """Externally produced candidate content for a draft.

    Args:
        body: Proposed body text. Always present.
        subject: Proposed subject, or None to leave the subject unchanged.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    body: str = Field(description="Proposed body text")
    subject: Optional[str] = Field(default=None, description="Proposed subject")


class SuggestionContext(BaseModel):
    """Snapshot of a draft handed to the suggestion service.

    Args:
        draft_id: Draft the suggestion is for.
        mode: Compose mode of the draft.
        to: Current primary recipients.
        cc: Current CC recipients.
        subject: Current subject ("" if unset).
        body: Current body ("" if unset).
        source_message: Message being replied to or forwarded, if any.
    """

    model_config = ConfigDict(frozen=True)

    draft_id: str
    mode: ComposeMode
    to: list[EmailAddress] = Field(default_factory=list)
    cc: list[EmailAddress] = Field(default_factory=list)
    subject: str = ""
    body: str = ""
    source_message: Optional[Message] = None

    @classmethod
    def from_draft(
        cls, draft: ComposeDraft, source_message: Optional[Message] = None
    ) -> "SuggestionContext":
        return cls(
            draft_id=draft.id,
            mode=draft.mode,
            to=draft.data.to,
            cc=draft.data.cc,
            subject=draft.data.subject or "",
            body=draft.data.body or "",
            source_message=source_message,
        )


class SuggestionService(ABC):
    """Produces suggested content for a draft.

    Implementations resolve exactly once per call and may raise. The draft
    named in the context may be gone by the time the call returns.
    """

    @abstractmethod
    async def propose(self, context: SuggestionContext) -> Suggestion:
        """Produce a suggestion for the draft described by `context`.

        Raises:
            SuggestionFetchError: If no suggestion could be produced.
        """
        pass


class StaticSuggestionService(SuggestionService):
    """Returns a fixed suggestion, or one computed from the context.

    Used for demos and tests. Every context received is recorded in `calls`.

    Args:
        suggestion: The suggestion to return, or a callable building one.
        delay: Seconds to wait before returning.
    """

    def __init__(
        self,
        suggestion: Union[Suggestion, Callable[[SuggestionContext], Suggestion]],
        delay: float = 0.0,
    ):
        self.suggestion = suggestion
        self.delay = delay
        self.calls: list[SuggestionContext] = []

    async def propose(self, context: SuggestionContext) -> Suggestion:
        self.calls.append(context)
        if self.delay:
            await asyncio.sleep(self.delay)
        if callable(self.suggestion):
            return self.suggestion(context)
        return self.suggestion


class HTTPSuggestionService(SuggestionService):
    """Fetches suggestions from a remote draft-reply endpoint.

    The draft context is POSTed as JSON. The endpoint may answer with a JSON
    object `{"body": ..., "subject": ...}` or with the reply as plain text.

    Args:
        url: Endpoint to POST the draft context to.
        timeout: Request timeout in seconds.
        transport: Custom transport (e.g., MockTransport for testing).
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def propose(self, context: SuggestionContext) -> Suggestion:
        payload = context.model_dump(mode="json")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            raise SuggestionFetchError(context.draft_id, "request timed out", cause=e) from e
        except httpx.HTTPError as e:
            raise SuggestionFetchError(context.draft_id, str(e) or type(e).__name__, cause=e) from e

        if not response.is_success:
            raise SuggestionFetchError(
                context.draft_id, f"service returned HTTP {response.status_code}"
            )
        return self._parse_response(context.draft_id, response)

    def _parse_response(self, draft_id: str, response: httpx.Response) -> Suggestion:
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            try:
                return Suggestion.model_validate(response.json())
            except (ValueError, ValidationError) as e:
                raise SuggestionFetchError(draft_id, "malformed suggestion payload", cause=e) from e

        body = response.text
        if not body.strip():
            raise SuggestionFetchError(draft_id, "service returned an empty suggestion")
        return Suggestion(body=body)


class LiveSuggestion(BaseModel):
    """An ambient body update published by an external agent.

    Args:
        body: The agent's current suggested body.
        draft_id: Draft the update is addressed to, or None for every draft.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    body: str
    draft_id: Optional[str] = None


LiveSuggestionListener = Callable[[LiveSuggestion], Optional[list[str]]]


class SuggestionChannel:
    """Publish/subscribe channel for live suggestions.

    Delivery is synchronous: `publish` returns after every subscriber has
    handled the event. A subscriber may return the ids of the drafts it
    updated.
    """

    def __init__(self):
        self._subscribers: list[LiveSuggestionListener] = []

    def subscribe(self, listener: LiveSuggestionListener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A callable that removes the listener again.
        """
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def publish(self, event: LiveSuggestion) -> list[str]:
        """Deliver an event to every subscriber.

        Returns:
            Ids of the drafts subscribers updated, without duplicates.
        """
        target = event.draft_id or "all drafts"
        logger.debug(f"Publishing live suggestion for {target}")
        updated: list[str] = []
        for listener in list(self._subscribers):
            for draft_id in listener(event) or []:
                if draft_id not in updated:
                    updated.append(draft_id)
        return updated

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


def _consume_exception(task: asyncio.Task) -> None:
    # Fetch failures are logged where they occur; callers may never await
    if not task.cancelled():
        task.exception()


OutcomeStatus = Literal["entered", "replaced", "refused", "discarded"]


class SuggestionOutcome(BaseModel):
    """How a fetched suggestion was resolved against its draft.

    Args:
        draft_id: Target draft.
        status: "entered" (diff started), "replaced" (an unresolved diff was
            rejected first), "refused" (a diff was already pending) or
            "discarded" (the draft closed or the fetch was cancelled).
        suggestion: The fetched suggestion, if one arrived.
        reason: Why the result was refused or discarded.
    """

    draft_id: str
    status: OutcomeStatus
    suggestion: Optional[Suggestion] = None
    reason: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status in ("entered", "replaced")


class SuggestionHandle:
    """Cancellation-aware handle to one in-flight suggestion fetch.

    Wraps the asyncio task running the fetch. Once cancelled, the fetch's
    result is never applied, even if it already arrived.

    Args:
        draft_id: Draft the fetch is for.
    """

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False

    def start(self, coro: Coroutine[Any, Any, SuggestionOutcome]) -> "SuggestionHandle":
        """Schedule the fetch coroutine on the running event loop."""
        self._task = asyncio.get_running_loop().create_task(coro)
        self._task.add_done_callback(_consume_exception)
        return self

    def add_done_callback(self, callback: Callable[["SuggestionHandle"], None]) -> None:
        self._require_task().add_done_callback(lambda _task: callback(self))

    def cancel(self) -> bool:
        """Cancel the fetch. Returns False if it had already finished."""
        self._cancelled = True
        if self._task is None or self._task.done():
            return False
        return self._task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled or (self._task is not None and self._task.cancelled())

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def result(self) -> SuggestionOutcome:
        """Wait for the fetch to resolve.

        Returns:
            The outcome. A cancelled fetch resolves as "discarded".

        Raises:
            SuggestionFetchError: If the suggestion service failed.
        """
        task = self._require_task()
        await asyncio.wait({task})
        if task.cancelled():
            return SuggestionOutcome(
                draft_id=self.draft_id, status="discarded", reason="fetch cancelled"
            )
        return task.result()

    def _require_task(self) -> asyncio.Task:
        if self._task is None:
            raise RuntimeError("SuggestionHandle has not been started")
        return self._task
