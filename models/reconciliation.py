"""Suggestion Reconciliation Engine.

Each draft is in one of two states:

- Direct: edits go straight into the draft's content.
- Diffing: a suggestion is pending. The draft's content is frozen for
  subject/body edits and the read model shows original vs proposed until
  the user accepts or rejects.

Reconciliation state is transient and lives beside the draft, never inside
it. Closing a draft drops its state and cancels any in-flight fetch for it.
While a draft is being dispatched its content is locked: edits, proposals,
fetch requests and live suggestions for it are refused.
"""

import asyncio
import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.draft import ComposeData, ComposeDraft, ComposeMode
from models.draft_store import DraftStore
from models.errors import (
    DispatchInProgressError,
    DraftNotFoundError,
    NoPendingSuggestionError,
    SuggestionFetchError,
    SuggestionPendingError,
)
from models.message import Message
from models.suggestions import (
    LiveSuggestion,
    Suggestion,
    SuggestionChannel,
    SuggestionContext,
    SuggestionHandle,
    SuggestionOutcome,
    SuggestionService,
)
from models.updates import DraftUpdate, SetBody, SetSubject

logger = logging.getLogger(__name__)


class ContentSnapshot(BaseModel):
    """Subject and body captured when a draft enters diff mode."""

    model_config = ConfigDict(frozen=True)

    subject: str = ""
    body: str = ""


class ReconciliationState(BaseModel):
    """Per-draft diff state.

    `original` and `proposed` are set exactly when `is_diff_mode` is true.
    The model is frozen, so entering or leaving diff mode always swaps the
    whole value.

    Args:
        is_diff_mode: Whether a suggestion is pending.
        original: Content of the draft when the suggestion arrived.
        proposed: The pending suggestion.
    """

    model_config = ConfigDict(frozen=True)

    is_diff_mode: bool = False
    original: Optional[ContentSnapshot] = None
    proposed: Optional[Suggestion] = None

    @model_validator(mode="after")
    def validate_diff_fields(self) -> "ReconciliationState":
        """Ensure original/proposed are present only in diff mode."""
        has_diff = self.original is not None and self.proposed is not None
        has_any = self.original is not None or self.proposed is not None
        if self.is_diff_mode and not has_diff:
            raise ValueError("Diff mode requires both original and proposed content")
        if not self.is_diff_mode and has_any:
            raise ValueError("original and proposed must be empty outside diff mode")
        return self

    @classmethod
    def direct(cls) -> "ReconciliationState":
        return cls()

    @classmethod
    def enter(cls, data: ComposeData, suggestion: Suggestion) -> "ReconciliationState":
        """Build the diff state for `suggestion` against the current content."""
        return cls(
            is_diff_mode=True,
            original=ContentSnapshot(subject=data.subject or "", body=data.body or ""),
            proposed=suggestion,
        )


DIRECT = ReconciliationState.direct()


class FieldDiff(BaseModel):
    """Old and new value of one field touched by a pending suggestion."""

    field: Literal["subject", "body"]
    old: str
    new: str

    @property
    def changed(self) -> bool:
        return self.old != self.new


class DraftView(BaseModel):
    """Read model of a draft combined with its reconciliation state.

    `diff` has one entry per field the pending suggestion supplies,
    subject before body, and is empty in direct-edit mode.
    """

    id: str
    mode: ComposeMode
    data: ComposeData
    is_minimized: bool
    is_fullscreen: bool
    is_inline: bool
    parent_email_id: Optional[str] = None
    created_at: datetime
    is_diff_mode: bool = False
    original: Optional[ContentSnapshot] = None
    proposed: Optional[Suggestion] = None
    diff: list[FieldDiff] = Field(default_factory=list)

    @classmethod
    def build(cls, draft: ComposeDraft, state: ReconciliationState) -> "DraftView":
        diff = []
        if state.is_diff_mode:
            if state.proposed.subject is not None:
                diff.append(
                    FieldDiff(
                        field="subject",
                        old=state.original.subject,
                        new=state.proposed.subject,
                    )
                )
            diff.append(
                FieldDiff(field="body", old=state.original.body, new=state.proposed.body)
            )
        return cls(
            id=draft.id,
            mode=draft.mode,
            data=draft.data,
            is_minimized=draft.is_minimized,
            is_fullscreen=draft.is_fullscreen,
            is_inline=draft.is_inline,
            parent_email_id=draft.parent_email_id,
            created_at=draft.created_at,
            is_diff_mode=state.is_diff_mode,
            original=state.original,
            proposed=state.proposed,
            diff=diff,
        )


class ReentryPolicy(str, Enum):
    """What happens when a suggestion arrives for a draft that is already diffing."""

    REPLACE = "replace"
    REJECT_NEW = "reject_new"


class SuggestionReconciler:
    """Merges suggestions into drafts through a diff / accept / reject protocol.

    The reconciler only touches draft content through DraftStore operations.
    It registers itself as a close listener on the store and, when given a
    channel, as a live suggestion subscriber.

    Args:
        store: Draft registry.
        channel: Live suggestion channel to subscribe to.
        policy: Behaviour when a suggestion arrives during an unresolved diff.
    """

    def __init__(
        self,
        store: DraftStore,
        channel: Optional[SuggestionChannel] = None,
        policy: ReentryPolicy | str = ReentryPolicy.REPLACE,
    ):
        self.store = store
        self.policy = ReentryPolicy(policy)
        self._states: dict[str, ReconciliationState] = {}
        self._in_flight: dict[str, SuggestionHandle] = {}
        self._dispatching: set[str] = set()
        self._lock = threading.RLock()

        store.add_close_listener(self._on_draft_closed)
        self._unsubscribe = channel.subscribe(self._on_live_suggestion) if channel else None

    # ==========================================================================
    # Read model
    # ==========================================================================

    def state(self, draft_id: str) -> ReconciliationState:
        """Return the draft's reconciliation state (direct if none recorded)."""
        with self._lock:
            return self._states.get(draft_id, DIRECT)

    def is_diffing(self, draft_id: str) -> bool:
        return self.state(draft_id).is_diff_mode

    def view(self, draft_id: str) -> DraftView:
        """Return the read model for one draft.

        Raises:
            DraftNotFoundError: If the draft is not open.
        """
        with self._lock:
            draft = self.store.get(draft_id)
            if draft is None:
                raise DraftNotFoundError(draft_id)
            return DraftView.build(draft, self.state(draft_id))

    def views(self) -> list[DraftView]:
        """Return read models for every open draft in creation order."""
        with self._lock:
            return [DraftView.build(d, self.state(d.id)) for d in self.store.list()]

    # ==========================================================================
    # Transitions
    # ==========================================================================

    def propose(self, draft_id: str, suggestion: Suggestion) -> ReconciliationState:
        """Enter diff mode with `suggestion` for an existing draft.

        Args:
            draft_id: Target draft.
            suggestion: Proposed content.

        Returns:
            The new reconciliation state.

        Raises:
            DraftNotFoundError: If the draft is not open.
            SuggestionPendingError: If a diff is pending and the policy is
                REJECT_NEW.
            DispatchInProgressError: If the draft is being sent or saved.
        """
        state, _ = self._enter(draft_id, suggestion)
        return state

    def accept(self, draft_id: str) -> ComposeDraft:
        """Commit the pending suggestion into the draft and leave diff mode.

        Only the fields the suggestion supplies are written.

        Returns:
            A copy of the updated draft.

        Raises:
            DraftNotFoundError: If the draft is not open.
            NoPendingSuggestionError: If the draft is not diffing.
        """
        with self._lock:
            state = self._require_diffing(draft_id)
            updates: list[DraftUpdate] = []
            if state.proposed.subject is not None:
                updates.append(SetSubject(value=state.proposed.subject))
            updates.append(SetBody(value=state.proposed.body))
            self.store.update_content(draft_id, *updates)
            del self._states[draft_id]
            draft = self.store.get(draft_id)
        logger.info(f"Accepted suggestion for draft {draft_id}")
        return draft

    def reject(self, draft_id: str) -> ComposeDraft:
        """Discard the pending suggestion and leave diff mode.

        Returns:
            A copy of the draft, unchanged by the suggestion.

        Raises:
            DraftNotFoundError: If the draft is not open.
            NoPendingSuggestionError: If the draft is not diffing.
        """
        with self._lock:
            self._require_diffing(draft_id)
            del self._states[draft_id]
            draft = self.store.get(draft_id)
        logger.info(f"Rejected suggestion for draft {draft_id}")
        return draft

    def edit(self, draft_id: str, *updates: DraftUpdate) -> list[DraftUpdate]:
        """Apply direct user edits.

        While the draft is diffing, subject and body edits are dropped since
        the live editing surface is replaced by the diff. Other fields still
        update.

        Args:
            draft_id: Target draft.
            *updates: Field-set operations from the user.

        Returns:
            The updates that were dropped.

        Raises:
            DraftNotFoundError: If the draft is not open.
            DispatchInProgressError: If the draft is being sent or saved.
        """
        with self._lock:
            if not self.store.exists(draft_id):
                raise DraftNotFoundError(draft_id)
            self._require_not_dispatching(draft_id)
            dropped: list[DraftUpdate] = []
            applied = list(updates)
            if self.is_diffing(draft_id):
                dropped = [u for u in updates if u.is_text_edit]
                applied = [u for u in updates if not u.is_text_edit]
            if applied:
                self.store.update_content(draft_id, *applied)

        if dropped:
            summary = ", ".join(u.get_summary() for u in dropped)
            logger.debug(f"Suppressed edits on diffing draft {draft_id}: {summary}")
        return dropped

    # ==========================================================================
    # Async suggestion fetch
    # ==========================================================================

    def request_suggestion(
        self,
        draft_id: str,
        service: SuggestionService,
        source: Optional[Message] = None,
    ) -> SuggestionHandle:
        """Start fetching a suggestion for a draft.

        Must be called from a running event loop. Any earlier fetch still in
        flight for the same draft is cancelled. When the fetch resolves, the
        result is applied only if the handle was not cancelled and the draft
        is still open.

        Args:
            draft_id: Target draft.
            service: Service producing the suggestion.
            source: Message being replied to or forwarded, passed as context.

        Returns:
            Handle to await or cancel the fetch.

        Raises:
            DraftNotFoundError: If the draft is not open.
            SuggestionPendingError: If a diff is pending and the policy is
                REJECT_NEW.
            DispatchInProgressError: If the draft is being sent or saved.
        """
        with self._lock:
            draft = self.store.get(draft_id)
            if draft is None:
                raise DraftNotFoundError(draft_id)
            self._require_not_dispatching(draft_id)
            if self.policy == ReentryPolicy.REJECT_NEW and self.is_diffing(draft_id):
                raise SuggestionPendingError(draft_id, "request a suggestion for")

            previous = self._in_flight.pop(draft_id, None)
            if previous is not None and previous.cancel():
                logger.info(f"Cancelled earlier suggestion fetch for draft {draft_id}")

            context = SuggestionContext.from_draft(draft, source)
            handle = SuggestionHandle(draft_id)
            handle.start(self._resolve(handle, service, context))
            self._in_flight[draft_id] = handle
            handle.add_done_callback(self._forget_handle)

        logger.info(f"Requested suggestion for draft {draft_id}")
        return handle

    def in_flight(self, draft_id: str) -> Optional[SuggestionHandle]:
        with self._lock:
            return self._in_flight.get(draft_id)

    async def _resolve(
        self,
        handle: SuggestionHandle,
        service: SuggestionService,
        context: SuggestionContext,
    ) -> SuggestionOutcome:
        draft_id = context.draft_id
        try:
            suggestion = await service.propose(context)
        except SuggestionFetchError as e:
            logger.warning(f"Suggestion fetch for draft {draft_id} failed: {e.reason}")
            raise
        except Exception as e:
            logger.warning(f"Suggestion fetch for draft {draft_id} failed: {e}")
            raise SuggestionFetchError(draft_id, str(e) or type(e).__name__, cause=e) from e

        if handle.cancelled:
            logger.debug(f"Discarding suggestion for draft {draft_id}: fetch cancelled")
            return SuggestionOutcome(
                draft_id=draft_id,
                status="discarded",
                suggestion=suggestion,
                reason="fetch cancelled",
            )

        try:
            _, replaced = self._enter(draft_id, suggestion)
        except DraftNotFoundError:
            logger.debug(f"Discarding suggestion for draft {draft_id}: draft closed")
            return SuggestionOutcome(
                draft_id=draft_id,
                status="discarded",
                suggestion=suggestion,
                reason="draft closed",
            )
        except DispatchInProgressError:
            logger.debug(f"Discarding suggestion for draft {draft_id}: draft being dispatched")
            return SuggestionOutcome(
                draft_id=draft_id,
                status="discarded",
                suggestion=suggestion,
                reason="draft being dispatched",
            )
        except SuggestionPendingError as e:
            return SuggestionOutcome(
                draft_id=draft_id, status="refused", suggestion=suggestion, reason=e.message
            )

        return SuggestionOutcome(
            draft_id=draft_id,
            status="replaced" if replaced else "entered",
            suggestion=suggestion,
        )

    def _forget_handle(self, handle: SuggestionHandle) -> None:
        with self._lock:
            if self._in_flight.get(handle.draft_id) is handle:
                del self._in_flight[handle.draft_id]

    # ==========================================================================
    # Live suggestions
    # ==========================================================================

    def apply_live_suggestion(self, event: LiveSuggestion) -> list[str]:
        """Copy a live suggestion's body into matching drafts.

        Drafts that are diffing or being dispatched are skipped, as are drafts
        that already have that body or are not the event's target. An empty body is ignored.

        Returns:
            Ids of the drafts that were updated.
        """
        if not event.body:
            return []

        updated = []
        with self._lock:
            if event.draft_id is not None:
                targets = [event.draft_id]
            else:
                targets = [d.id for d in self.store.list()]

            for draft_id in targets:
                draft = self.store.get(draft_id)
                if draft is None:
                    continue
                if self.is_diffing(draft_id) or draft_id in self._dispatching:
                    logger.debug(f"Skipping live suggestion for locked draft {draft_id}")
                    continue
                if (draft.data.body or "") == event.body:
                    continue
                self.store.update_content(draft_id, SetBody(value=event.body))
                updated.append(draft_id)

        if updated:
            logger.info(f"Live suggestion synced into {len(updated)} draft(s)")
        return updated

    def _on_live_suggestion(self, event: LiveSuggestion) -> list[str]:
        return self.apply_live_suggestion(event)

    # ==========================================================================
    # Dispatch guard
    # ==========================================================================

    def begin_dispatch(self, draft_id: str, operation: str = "send") -> ComposeDraft:
        """Lock a draft for dispatch and return the content to dispatch.

        Until end_dispatch is called, edits, proposals, fetch requests and
        live suggestions for the draft are refused, so the content handed to
        the sink is the content the user last saw.

        Args:
            draft_id: Draft to dispatch.
            operation: "send" or "save", used in error messages.

        Returns:
            A copy of the draft.

        Raises:
            DraftNotFoundError: If the draft is not open.
            DispatchInProgressError: If the draft is already being dispatched.
            SuggestionPendingError: If the draft has an unresolved suggestion.
        """
        with self._lock:
            draft = self.store.get(draft_id)
            if draft is None:
                raise DraftNotFoundError(draft_id)
            self._require_not_dispatching(draft_id)
            if self.is_diffing(draft_id):
                raise SuggestionPendingError(draft_id, operation)
            self._dispatching.add(draft_id)
        return draft

    def end_dispatch(self, draft_id: str) -> None:
        with self._lock:
            self._dispatching.discard(draft_id)

    def is_dispatching(self, draft_id: str) -> bool:
        with self._lock:
            return draft_id in self._dispatching

    def _require_not_dispatching(self, draft_id: str) -> None:
        if draft_id in self._dispatching:
            raise DispatchInProgressError(draft_id)

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def _enter(
        self, draft_id: str, suggestion: Suggestion
    ) -> tuple[ReconciliationState, bool]:
        with self._lock:
            draft = self.store.get(draft_id)
            if draft is None:
                raise DraftNotFoundError(draft_id)
            self._require_not_dispatching(draft_id)

            replaced = self.is_diffing(draft_id)
            if replaced:
                if self.policy == ReentryPolicy.REJECT_NEW:
                    logger.info(
                        f"Refused new suggestion for draft {draft_id}: diff already pending"
                    )
                    raise SuggestionPendingError(draft_id, "propose a suggestion for")
                logger.info(f"Rejected unresolved suggestion for draft {draft_id} (replaced)")

            state = ReconciliationState.enter(draft.data, suggestion)
            self._states[draft_id] = state

        logger.info(f"Draft {draft_id} entered diff mode")
        return state, replaced

    def _require_diffing(self, draft_id: str) -> ReconciliationState:
        if not self.store.exists(draft_id):
            raise DraftNotFoundError(draft_id)
        state = self.state(draft_id)
        if not state.is_diff_mode:
            raise NoPendingSuggestionError(draft_id)
        return state

    def _on_draft_closed(self, draft_id: str) -> None:
        with self._lock:
            self._states.pop(draft_id, None)
            handle = self._in_flight.pop(draft_id, None)
        if handle is not None and handle.cancel():
            logger.info(f"Cancelled suggestion fetch for closed draft {draft_id}")

    async def shutdown(self) -> None:
        """Cancel every in-flight fetch and stop listening to the channel."""
        with self._lock:
            handles = list(self._in_flight.values())
            self._in_flight.clear()
        for handle in handles:
            handle.cancel()
        if handles:
            await asyncio.gather(*(h.result() for h in handles), return_exceptions=True)
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
