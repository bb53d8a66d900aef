"""Tests for settings and compose session construction."""

import pytest

from api import dependencies
from api.dependencies import (
    build_compose_session,
    get_compose_session,
    initialize_compose_session,
    shutdown_compose_session,
)
from api.settings import Settings
from models.dispatch import HTTPMessageSink, LocalMessageSink
from models.reconciliation import ReentryPolicy
from models.suggestions import HTTPSuggestionService


class TestSettings:
    """Settings are read from COMPOSE_* environment variables."""

    def test_defaults(self):
        config = Settings(_env_file=None)

        assert config.reentry_policy is ReentryPolicy.REPLACE
        assert config.suggestion_service_url is None
        assert config.seed_demo_messages is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("COMPOSE_USER_EMAIL", "alex@example.com")
        monkeypatch.setenv("COMPOSE_REENTRY_POLICY", "reject_new")
        monkeypatch.setenv("COMPOSE_SUGGESTION_TIMEOUT", "5")

        config = Settings(_env_file=None)

        assert config.user_email == "alex@example.com"
        assert config.reentry_policy is ReentryPolicy.REJECT_NEW
        assert config.suggestion_timeout == 5.0


class TestBuildComposeSession:
    """Sessions are wired from settings."""

    def test_local_defaults(self):
        session = build_compose_session(
            Settings(_env_file=None, suggestion_service_url=None, mail_send_url=None)
        )

        assert session.suggestion_service is None
        assert isinstance(session.dispatcher.sink, LocalMessageSink)
        assert session.mailbox.messages == {}

    def test_remote_services(self):
        session = build_compose_session(
            Settings(
                _env_file=None,
                suggestion_service_url="http://suggest.test/reply",
                suggestion_timeout=3.0,
                mail_send_url="http://mail.test/send",
            )
        )

        assert isinstance(session.suggestion_service, HTTPSuggestionService)
        assert session.suggestion_service.timeout == 3.0
        assert isinstance(session.dispatcher.sink, HTTPMessageSink)
        assert session.dispatcher.sink.url == "http://mail.test/send"

    def test_identity_and_policy(self):
        session = build_compose_session(
            Settings(
                _env_file=None,
                user_email="alex@example.com",
                user_name="Alex",
                reentry_policy="reject_new",
            )
        )

        assert session.user_address.email == "alex@example.com"
        assert session.store.user_address.name == "Alex"
        assert session.reconciler.policy is ReentryPolicy.REJECT_NEW

    def test_seed_demo_messages(self):
        session = build_compose_session(Settings(_env_file=None, seed_demo_messages=True))

        message = session.mailbox.get("email-avery-default")
        assert message.from_address.name == "Avery Chen"
        assert message.to == [session.user_address]


class TestSessionLifecycle:
    async def test_initialize_and_shutdown(self):
        session = initialize_compose_session(Settings(_env_file=None))

        assert get_compose_session() is session

        await shutdown_compose_session()

        assert dependencies._compose_session is None
        with pytest.raises(RuntimeError):
            get_compose_session()
