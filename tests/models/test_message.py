"""Unit tests for messages and the mailbox."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from models.errors import MessageNotFoundError
from models.message import EmailAddress, Mailbox, Message
from tests.fixtures.compose import AVERY, FIXED_DATE, ME, create_message


class TestEmailAddress:
    """Test address identity and display."""

    def test_key_ignores_case_and_whitespace(self):
        """Verify addresses compare on a normalized key."""
        assert EmailAddress(email=" Avery.Chen@Gmail.com ").key == AVERY.key

    def test_display_prefers_name(self):
        assert AVERY.display == "Avery Chen"
        assert EmailAddress(email="sam@example.com").display == "sam@example.com"

    def test_empty_email_rejected(self):
        with pytest.raises(ValidationError):
            EmailAddress(email="")


class TestMessage:
    """Test the immutable Message model."""

    def test_message_is_frozen(self):
        """Verify messages cannot be edited after creation."""
        message = create_message()

        with pytest.raises(ValidationError):
            message.subject = "Changed"

    def test_sent_and_draft_are_exclusive(self):
        with pytest.raises(ValidationError):
            create_message(is_sent=True, is_draft=True)

    def test_folder_from_flags(self):
        assert create_message().folder == "inbox"
        assert create_message(is_sent=True).folder == "sent"
        assert create_message(is_draft=True).folder == "drafts"

    def test_short_body_preview_is_whole_body(self):
        message = create_message(body="Short note")

        assert message.body_preview == "Short note"

    def test_long_body_preview_is_truncated(self):
        """Verify the preview is cut at 100 characters with an ellipsis."""
        message = create_message(body="x" * 150)

        assert message.body_preview == "x" * 100 + "..."

    def test_preview_is_serialized(self):
        data = create_message(body="Hello").model_dump(mode="json")

        assert data["body_preview"] == "Hello"


class TestMailbox:
    """Test filing and querying messages."""

    def test_standard_folders_exist(self):
        mailbox = Mailbox()

        assert set(mailbox.folders) == {"inbox", "sent", "drafts"}

    def test_add_files_by_folder(self, mailbox):
        mailbox.add(create_message("m1"))
        mailbox.add(create_message("m2", is_sent=True))
        mailbox.add(create_message("m3", is_draft=True))

        assert mailbox.folders["inbox"] == ["m1"]
        assert mailbox.folders["sent"] == ["m2"]
        assert mailbox.folders["drafts"] == ["m3"]
        assert mailbox.validate_state() == []

    def test_add_duplicate_id_rejected(self, mailbox):
        mailbox.add(create_message("m1"))

        with pytest.raises(ValueError):
            mailbox.add(create_message("m1"))

    def test_get_missing_raises(self, mailbox):
        with pytest.raises(MessageNotFoundError) as exc_info:
            mailbox.get("nope")

        assert exc_info.value.message_id == "nope"

    def test_find_missing_returns_none(self, mailbox):
        assert mailbox.find("nope") is None

    def test_receive_files_into_inbox(self, mailbox):
        """Verify receive builds an inbound message with a fresh thread."""
        message = mailbox.receive(
            from_address=AVERY, to=[ME], subject="Lunch?", body="Free at noon?"
        )

        assert message.id.startswith("msg-")
        assert message.thread_id.startswith("thread-")
        assert message.folder == "inbox"
        assert mailbox.get(message.id) == message

    def test_query_newest_first_with_pagination(self, mailbox):
        for i in range(5):
            mailbox.add(create_message(f"m{i}", date=FIXED_DATE + timedelta(minutes=i)))

        result = mailbox.query(limit=2, offset=1)

        assert [m.id for m in result["messages"]] == ["m3", "m2"]
        assert result["total_count"] == 5
        assert result["returned_count"] == 2

    def test_query_by_folder(self, mailbox):
        mailbox.add(create_message("m1"))
        mailbox.add(create_message("m2", is_sent=True))

        result = mailbox.query(folder="sent")

        assert [m.id for m in result["messages"]] == ["m2"]

    def test_clear(self, mailbox):
        mailbox.add(create_message("m1"))

        mailbox.clear()

        assert mailbox.messages == {}
        assert mailbox.folders["inbox"] == []
        assert mailbox.update_count == 0

    def test_snapshot_counts(self, mailbox):
        mailbox.add(create_message("m1"))

        snapshot = mailbox.get_snapshot()

        assert snapshot["total_count"] == 1
        assert snapshot["folders"]["inbox"] == 1
        assert "1 messages" in mailbox.summary
