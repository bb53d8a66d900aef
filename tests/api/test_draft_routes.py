"""Integration tests for the /drafts endpoints.

Covers draft creation from each mode, listing, layout, window flags,
direct edits, closing, and the send / save dispatch actions.
"""

from tests.api.helpers import create_draft_via_api, fill_draft_via_api, propose_via_api
from tests.fixtures.compose import MEETING_REQUEST


class TestCreateDraft:
    """Tests for POST /drafts."""

    def test_create_new_draft(self, client):
        """New drafts start empty and in direct-edit mode."""
        response = client.post("/drafts", json={})

        assert response.status_code == 201
        data = response.json()
        assert data["id"].startswith("compose-")
        assert data["mode"] == "new"
        assert data["data"]["to"] == []
        assert data["data"]["subject"] is None
        assert data["is_diff_mode"] is False
        assert data["diff"] == []

    def test_create_reply(self, client):
        data = create_draft_via_api(
            client, mode="reply", source_message_id=MEETING_REQUEST.id
        )

        assert data["data"]["to"][0]["email"] == "avery.chen@gmail.com"
        assert data["data"]["subject"] == "Re: Meeting Request - Project Sync"
        assert data["data"]["in_reply_to"] == MEETING_REQUEST.id
        assert data["parent_email_id"] == MEETING_REQUEST.id

    def test_create_reply_all_excludes_user(self, client):
        data = create_draft_via_api(
            client, mode="replyAll", source_message_id=MEETING_REQUEST.id
        )

        emails = [a["email"] for a in data["data"]["to"]]
        assert emails == ["avery.chen@gmail.com", "jordan@example.com"]

    def test_create_forward(self, client):
        data = create_draft_via_api(
            client, mode="forward", source_message_id=MEETING_REQUEST.id
        )

        assert data["data"]["to"] == []
        assert data["data"]["subject"] == "Fwd: Meeting Request - Project Sync"
        assert "---------- Forwarded message ---------" in data["data"]["body"]

    def test_create_inline(self, client):
        data = create_draft_via_api(
            client, mode="reply", source_message_id=MEETING_REQUEST.id, is_inline=True
        )

        assert data["is_inline"] is True

    def test_unknown_source_message(self, client):
        response = client.post(
            "/drafts", json={"mode": "reply", "source_message_id": "msg-missing"}
        )

        assert response.status_code == 404
        assert response.json()["type"] == "MessageNotFoundError"

    def test_invalid_mode(self, client):
        response = client.post("/drafts", json={"mode": "reply-all"})

        assert response.status_code == 422


class TestListAndGet:
    """Tests for GET /drafts and GET /drafts/{id}."""

    def test_list_in_creation_order(self, client):
        first = create_draft_via_api(client)["id"]
        second = create_draft_via_api(client)["id"]

        response = client.get("/drafts")

        assert response.status_code == 200
        assert [d["id"] for d in response.json()] == [first, second]

    def test_get_draft(self, client, new_draft):
        response = client.get(f"/drafts/{new_draft}")

        assert response.status_code == 200
        assert response.json()["id"] == new_draft

    def test_get_missing(self, client):
        response = client.get("/drafts/compose-missing")

        assert response.status_code == 404
        assert response.json()["error"] == "Draft Not Found"


class TestLayout:
    """Tests for GET /drafts/layout."""

    def test_layout_newest_first(self, client):
        first = create_draft_via_api(client)["id"]
        second = create_draft_via_api(client)["id"]

        response = client.get("/drafts/layout")

        assert response.status_code == 200
        data = response.json()
        assert data["view"] == "list"
        assert [s["draft_id"] for s in data["regular"]] == [second, first]
        assert data["fullscreen"] == []

    def test_fullscreen_and_minimized(self, client):
        full = create_draft_via_api(client)["id"]
        mini = create_draft_via_api(client)["id"]
        client.patch(f"/drafts/{full}/window", json={"is_fullscreen": True})
        client.patch(f"/drafts/{mini}/window", json={"is_minimized": True})

        data = client.get("/drafts/layout").json()

        assert [s["draft_id"] for s in data["fullscreen"]] == [full]
        assert data["regular"][0]["draft_id"] == mini
        assert data["regular"][0]["is_minimized"] is True
        assert data["regular"][0]["layer"] == 40

    def test_detail_view_hides_inline(self, client, reply_draft):
        inline = create_draft_via_api(
            client, mode="reply", source_message_id=MEETING_REQUEST.id, is_inline=True
        )["id"]

        detail = client.get("/drafts/layout", params={"view": "detail"}).json()
        listing = client.get("/drafts/layout", params={"view": "list"}).json()

        assert [s["draft_id"] for s in detail["regular"]] == [reply_draft]
        assert inline in [s["draft_id"] for s in listing["regular"]]

    def test_view_query_does_not_switch_view(self, client_with_session):
        client, session = client_with_session

        detail = client.get("/drafts/layout", params={"view": "detail"}).json()

        assert detail["view"] == "detail"
        assert session.layout.view == "list"
        assert client.get("/drafts/layout").json()["view"] == "list"

    def test_set_view_persists(self, client_with_session, reply_draft):
        client, session = client_with_session
        create_draft_via_api(
            client, mode="reply", source_message_id=MEETING_REQUEST.id, is_inline=True
        )

        response = client.patch("/drafts/layout/view", json={"view": "detail"})

        assert response.status_code == 200
        assert [s["draft_id"] for s in response.json()["regular"]] == [reply_draft]
        assert session.layout.view == "detail"
        assert client.get("/drafts/layout").json()["view"] == "detail"

    def test_set_view_rejects_unknown(self, client):
        response = client.patch("/drafts/layout/view", json={"view": "grid"})

        assert response.status_code == 422


class TestWindow:
    """Tests for PATCH /drafts/{id}/window."""

    def test_minimize(self, client, new_draft):
        response = client.patch(f"/drafts/{new_draft}/window", json={"is_minimized": True})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "updated"
        assert data["draft"]["is_minimized"] is True
        assert data["draft"]["is_fullscreen"] is False

    def test_missing_draft(self, client):
        response = client.patch("/drafts/compose-missing/window", json={"is_minimized": True})

        assert response.status_code == 404

    def test_unknown_flag_rejected(self, client, new_draft):
        response = client.patch(f"/drafts/{new_draft}/window", json={"is_maximized": True})

        assert response.status_code == 422


class TestContent:
    """Tests for PATCH /drafts/{id}/content."""

    def test_direct_edit(self, client, new_draft):
        data = fill_draft_via_api(client, new_draft)

        assert data["status"] == "updated"
        assert data["suppressed"] == []
        assert data["draft"]["data"]["subject"] == "Lunch"
        assert data["draft"]["data"]["body"] == "Noon?"

    def test_text_edits_suppressed_while_diffing(self, client, new_draft):
        propose_via_api(client, new_draft, body="Suggested")

        response = client.patch(
            f"/drafts/{new_draft}/content",
            json={
                "updates": [
                    {"field": "body", "value": "Typed"},
                    {"field": "cc", "value": [{"email": "sam@example.com"}]},
                ]
            },
        )

        data = response.json()
        assert response.status_code == 200
        assert data["suppressed"] == ["body"]
        assert data["draft"]["data"]["body"] is None
        assert data["draft"]["data"]["cc"] == [{"email": "sam@example.com", "name": None}]

    def test_all_edits_suppressed(self, client, new_draft):
        propose_via_api(client, new_draft, body="Suggested")

        response = client.patch(
            f"/drafts/{new_draft}/content",
            json={"updates": [{"field": "subject", "value": "Typed"}]},
        )

        assert response.json()["status"] == "suppressed"

    def test_empty_update_list(self, client, new_draft):
        response = client.patch(f"/drafts/{new_draft}/content", json={"updates": []})

        assert response.status_code == 422

    def test_unknown_field(self, client, new_draft):
        response = client.patch(
            f"/drafts/{new_draft}/content",
            json={"updates": [{"field": "from", "value": "x"}]},
        )

        assert response.status_code == 422

    def test_missing_draft(self, client):
        response = client.patch(
            "/drafts/compose-missing/content",
            json={"updates": [{"field": "body", "value": "x"}]},
        )

        assert response.status_code == 404


class TestClose:
    """Tests for DELETE /drafts/{id}."""

    def test_close(self, client, new_draft):
        response = client.delete(f"/drafts/{new_draft}")

        assert response.status_code == 200
        assert response.json() == {"draft_id": new_draft, "was_open": True}
        assert client.get(f"/drafts/{new_draft}").status_code == 404

    def test_close_twice(self, client, new_draft):
        client.delete(f"/drafts/{new_draft}")

        response = client.delete(f"/drafts/{new_draft}")

        assert response.status_code == 200
        assert response.json()["was_open"] is False


class TestSend:
    """Tests for POST /drafts/{id}/send."""

    def test_send(self, client_with_session, new_draft):
        client, session = client_with_session
        fill_draft_via_api(client, new_draft)

        response = client.post(f"/drafts/{new_draft}/send")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "sent"
        assert data["message"]["is_sent"] is True
        assert data["message"]["subject"] == "Lunch"
        assert data["message"]["from_address"]["email"] == "me@gmail.com"
        assert session.mailbox.folders["sent"] == [data["message"]["id"]]
        assert client.get(f"/drafts/{new_draft}").status_code == 404

    def test_send_incomplete(self, client, new_draft):
        response = client.post(f"/drafts/{new_draft}/send")

        assert response.status_code == 422
        data = response.json()
        assert data["type"] == "DraftValidationError"
        assert data["details"]["missing_fields"] == ["to", "subject"]
        assert client.get(f"/drafts/{new_draft}").status_code == 200

    def test_send_twice(self, client, new_draft):
        fill_draft_via_api(client, new_draft)
        client.post(f"/drafts/{new_draft}/send")

        response = client.post(f"/drafts/{new_draft}/send")

        assert response.status_code == 404

    def test_send_while_diffing(self, client, new_draft):
        fill_draft_via_api(client, new_draft)
        propose_via_api(client, new_draft, body="Better")

        response = client.post(f"/drafts/{new_draft}/send")

        assert response.status_code == 409
        assert response.json()["type"] == "SuggestionPendingError"

    def test_reply_lands_in_thread_reference(self, client, reply_draft):
        client.patch(
            f"/drafts/{reply_draft}/content",
            json={"updates": [{"field": "body", "value": "Tuesday works."}]},
        )

        message = client.post(f"/drafts/{reply_draft}/send").json()["message"]

        assert message["in_reply_to"] == MEETING_REQUEST.id
        assert message["body"] == "Tuesday works."


class TestSave:
    """Tests for POST /drafts/{id}/save."""

    def test_save_incomplete(self, client_with_session, new_draft):
        client, session = client_with_session

        response = client.post(f"/drafts/{new_draft}/save")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "saved"
        assert data["message"]["is_draft"] is True
        assert session.mailbox.folders["drafts"] == [data["message"]["id"]]
        assert client.get("/drafts").json() == []
