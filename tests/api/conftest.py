"""Shared fixtures for API integration tests.

The TestClient and injected ComposeSession come from tests.fixtures.api;
this module adds drafts opened through the API.
"""

import pytest

from tests.api.helpers import create_draft_via_api
from tests.fixtures.compose import MEETING_REQUEST


@pytest.fixture
def client(client_with_session):
    """Provide just the TestClient when the session is not needed."""
    test_client, _ = client_with_session
    return test_client


@pytest.fixture
def reply_draft(client):
    """Open a reply to the meeting request and return its id."""
    draft = create_draft_via_api(client, mode="reply", source_message_id=MEETING_REQUEST.id)
    return draft["id"]


@pytest.fixture
def new_draft(client):
    """Open an empty new draft and return its id."""
    return create_draft_via_api(client)["id"]
