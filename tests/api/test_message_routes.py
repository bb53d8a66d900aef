"""Integration tests for the /messages endpoints."""

from tests.api.helpers import create_draft_via_api, fill_draft_via_api
from tests.fixtures.compose import MEETING_REQUEST


class TestQueryMessages:
    """Tests for GET /messages."""

    def test_lists_inbox(self, client):
        response = client.get("/messages")

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 1
        assert data["results"][0]["id"] == MEETING_REQUEST.id
        assert data["results"][0]["body_preview"].startswith("Hi there,")

    def test_folder_filter(self, client, new_draft):
        fill_draft_via_api(client, new_draft)
        sent = client.post(f"/drafts/{new_draft}/send").json()["message"]

        response = client.get("/messages", params={"folder": "sent"})

        data = response.json()
        assert [m["id"] for m in data["results"]] == [sent["id"]]
        assert data["query"]["folder"] == "sent"

    def test_pagination(self, client):
        for i in range(3):
            client.post(
                "/messages/receive",
                json={"from_address": {"email": f"user{i}@example.com"}, "subject": f"#{i}"},
            )

        data = client.get("/messages", params={"limit": 2, "offset": 1}).json()

        assert data["total_count"] == 4
        assert data["returned_count"] == 2
        assert data["query"]["limit"] == 2

    def test_invalid_folder(self, client):
        response = client.get("/messages", params={"folder": "spam"})

        assert response.status_code == 422

    def test_invalid_limit(self, client):
        response = client.get("/messages", params={"limit": 0})

        assert response.status_code == 422

    def test_default_query_echo(self, client):
        data = client.get("/messages").json()

        assert data["query"] == {"folder": None, "limit": None, "offset": 0}

    def test_folder_with_pagination(self, client):
        for i in range(3):
            client.post(
                "/messages/receive",
                json={"from_address": {"email": f"user{i}@example.com"}, "subject": f"#{i}"},
            )

        data = client.get(
            "/messages", params={"folder": "inbox", "limit": 1, "offset": 2}
        ).json()

        assert data["total_count"] == 4
        assert data["returned_count"] == 1
        assert data["query"] == {"folder": "inbox", "limit": 1, "offset": 2}

    def test_negative_offset(self, client):
        response = client.get("/messages", params={"offset": -1})

        assert response.status_code == 422


class TestGetMessage:
    """Tests for GET /messages/{id}."""

    def test_get(self, client):
        response = client.get(f"/messages/{MEETING_REQUEST.id}")

        assert response.status_code == 200
        assert response.json()["subject"] == MEETING_REQUEST.subject

    def test_get_missing(self, client):
        response = client.get("/messages/msg-missing")

        assert response.status_code == 404
        assert response.json()["error"] == "Message Not Found"


class TestReceiveMessage:
    """Tests for POST /messages/receive."""

    def test_receive_defaults_to_local_user(self, client):
        response = client.post(
            "/messages/receive",
            json={
                "from_address": {"email": "jordan@example.com", "name": "Jordan Lee"},
                "subject": "Quick question",
                "body": "Do you have the slides?",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["to"] == [{"email": "me@gmail.com", "name": "Me"}]
        assert data["is_sent"] is False
        assert data["is_draft"] is False

    def test_received_message_can_be_replied_to(self, client):
        inbound = client.post(
            "/messages/receive",
            json={"from_address": {"email": "jordan@example.com"}, "subject": "Slides"},
        ).json()

        draft = create_draft_via_api(client, mode="reply", source_message_id=inbound["id"])

        assert draft["data"]["subject"] == "Re: Slides"
        assert draft["data"]["to"][0]["email"] == "jordan@example.com"

    def test_receive_requires_sender(self, client):
        response = client.post("/messages/receive", json={"subject": "No sender"})

        assert response.status_code == 422
