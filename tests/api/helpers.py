"""Helper functions for API integration tests.

Convenience functions for opening and filling drafts through the HTTP API,
so route tests can focus on the behaviour under test.
"""

from typing import Any


def create_draft_via_api(client, **payload: Any) -> dict[str, Any]:
    """Open a draft through POST /drafts.

    Args:
        client: The TestClient.
        **payload: CreateDraftRequest fields (mode, source_message_id, ...).

    Returns:
        The created draft's read model.
    """
    response = client.post("/drafts", json=payload)
    assert response.status_code == 201, f"Failed to create draft: {response.json()}"
    return response.json()


def fill_draft_via_api(
    client,
    draft_id: str,
    to: str = "avery.chen@gmail.com",
    subject: str = "Lunch",
    body: str = "Noon?",
) -> dict[str, Any]:
    """Set recipient, subject and body so the draft can be sent."""
    response = client.patch(
        f"/drafts/{draft_id}/content",
        json={
            "updates": [
                {"field": "to", "value": [{"email": to}]},
                {"field": "subject", "value": subject},
                {"field": "body", "value": body},
            ]
        },
    )
    assert response.status_code == 200, f"Failed to fill draft: {response.json()}"
    return response.json()


def propose_via_api(
    client, draft_id: str, body: str, subject: str | None = None
) -> dict[str, Any]:
    """Put a draft into diff mode through POST /drafts/{id}/suggestion."""
    payload: dict[str, Any] = {"body": body}
    if subject is not None:
        payload["subject"] = subject
    response = client.post(f"/drafts/{draft_id}/suggestion", json=payload)
    assert response.status_code == 200, f"Failed to propose: {response.json()}"
    return response.json()
