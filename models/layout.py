"""Draft Lifecycle Controller: window layout derived from the open drafts.

The controller keeps no draft state of its own. Every call to `layout()`
recomputes the projection from `DraftStore.list()`.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from models.draft import ComposeDraft
from models.draft_store import DraftStore

ViewContext = Literal["list", "detail"]

FULLSCREEN_LAYER = 50
MINIMIZED_LAYER = 40
OPEN_LAYER = 30


class LayoutSlot(BaseModel):
    """Placement of one draft window.

    Args:
        draft_id: Draft rendered in this slot.
        position: Distance from the anchor edge (0 is nearest).
        is_minimized: Whether the window is collapsed.
        layer: Stacking layer; higher renders on top.
    """

    draft_id: str
    position: int = Field(ge=0)
    is_minimized: bool = False
    layer: int


class ComposeLayout(BaseModel):
    """Full window composition for one view.

    Args:
        view: View context the layout was computed for.
        fullscreen: Drafts covering the viewport.
        regular: Stacked floating drafts, nearest the anchor first.
    """

    view: ViewContext
    fullscreen: list[LayoutSlot] = Field(default_factory=list)
    regular: list[LayoutSlot] = Field(default_factory=list)

    @property
    def visible_ids(self) -> list[str]:
        return [slot.draft_id for slot in self.fullscreen + self.regular]


def compute_layout(drafts: list[ComposeDraft], view: ViewContext) -> ComposeLayout:
    """Partition drafts into fullscreen and stacked regular windows.

    Args:
        drafts: Open drafts in creation order.
        view: Current view. Inline drafts are hidden on "detail" views
            because the detail page renders them itself.

    Returns:
        The computed layout.
    """
    visible = [d for d in drafts if not (view == "detail" and d.is_inline)]

    fullscreen = [
        LayoutSlot(
            draft_id=d.id,
            position=i,
            is_minimized=d.is_minimized,
            layer=FULLSCREEN_LAYER,
        )
        for i, d in enumerate(d for d in visible if d.is_fullscreen)
    ]

    # Newest first, so position 0 sits at the anchor edge
    regular_drafts = [d for d in visible if not d.is_fullscreen]
    regular_drafts.reverse()
    regular = [
        LayoutSlot(
            draft_id=d.id,
            position=i,
            is_minimized=d.is_minimized,
            layer=MINIMIZED_LAYER if d.is_minimized else OPEN_LAYER,
        )
        for i, d in enumerate(regular_drafts)
    ]

    return ComposeLayout(view=view, fullscreen=fullscreen, regular=regular)


class DraftLayoutController:
    """Projects the draft registry into a window layout for the current view.

    Args:
        store: Registry to read drafts from.
        view: Initial view context.
    """

    def __init__(self, store: DraftStore, view: ViewContext = "list"):
        self.store = store
        self.view: ViewContext = view

    def set_view(self, view: ViewContext) -> None:
        self.view = view

    def layout(self, view: Optional[ViewContext] = None) -> ComposeLayout:
        """Compute the layout for `view`, or the current view when omitted."""
        return compute_layout(self.store.list(), view or self.view)
