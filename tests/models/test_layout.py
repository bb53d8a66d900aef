"""Unit tests for the window layout projection."""

from models.draft import ComposeDraft
from models.layout import (
    FULLSCREEN_LAYER,
    MINIMIZED_LAYER,
    OPEN_LAYER,
    DraftLayoutController,
    compute_layout,
)
from models.updates import WindowUpdate


def make_draft(draft_id: str, **kwargs) -> ComposeDraft:
    return ComposeDraft(id=draft_id, mode="new", **kwargs)


class TestComputeLayout:
    """Test partitioning drafts into fullscreen and stacked windows."""

    def test_empty(self):
        layout = compute_layout([], "list")

        assert layout.fullscreen == []
        assert layout.regular == []
        assert layout.visible_ids == []

    def test_newest_regular_draft_nearest_anchor(self):
        """Verify regular drafts stack newest first from position 0."""
        drafts = [make_draft("a"), make_draft("b"), make_draft("c")]

        layout = compute_layout(drafts, "list")

        assert [(s.draft_id, s.position) for s in layout.regular] == [
            ("c", 0),
            ("b", 1),
            ("a", 2),
        ]

    def test_fullscreen_separated(self):
        drafts = [make_draft("a"), make_draft("b", is_fullscreen=True), make_draft("c")]

        layout = compute_layout(drafts, "list")

        assert [s.draft_id for s in layout.fullscreen] == ["b"]
        assert layout.fullscreen[0].layer == FULLSCREEN_LAYER
        assert [s.draft_id for s in layout.regular] == ["c", "a"]

    def test_layers_follow_minimized_flag(self):
        drafts = [make_draft("a", is_minimized=True), make_draft("b")]

        layout = compute_layout(drafts, "list")

        layers = {s.draft_id: s.layer for s in layout.regular}
        assert layers == {"a": MINIMIZED_LAYER, "b": OPEN_LAYER}
        assert layout.regular[1].is_minimized is True

    def test_fullscreen_minimized_keeps_flag(self):
        """Verify the two flags are independent."""
        layout = compute_layout([make_draft("a", is_fullscreen=True, is_minimized=True)], "list")

        assert layout.fullscreen[0].is_minimized is True

    def test_inline_hidden_on_detail_view(self):
        drafts = [make_draft("a", is_inline=True), make_draft("b")]

        assert compute_layout(drafts, "detail").visible_ids == ["b"]
        assert compute_layout(drafts, "list").visible_ids == ["b", "a"]


class TestDraftLayoutController:
    """Test that the controller reads the live registry."""

    def test_layout_reflects_store_changes(self, store):
        controller = DraftLayoutController(store)
        first = store.create("new")
        second = store.create("new")

        assert controller.layout().visible_ids == [second, first]

        store.update_window_state(first, WindowUpdate(is_fullscreen=True))
        store.close(second)

        layout = controller.layout()
        assert [s.draft_id for s in layout.fullscreen] == [first]
        assert layout.regular == []

    def test_set_view(self, store):
        controller = DraftLayoutController(store)
        store.create("reply", is_inline=True)

        controller.set_view("detail")

        layout = controller.layout()
        assert layout.view == "detail"
        assert layout.visible_ids == []

    def test_one_off_view(self, store):
        controller = DraftLayoutController(store)
        inline = store.create("reply", is_inline=True)

        assert controller.layout("detail").visible_ids == []
        assert controller.view == "list"
        assert controller.layout().visible_ids == [inline]
