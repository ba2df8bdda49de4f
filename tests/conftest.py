"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Infrastructure: mock_settings, mock_logfire, respx_mock, test_client
2. Dispatchers: message_dispatcher, postback_dispatcher, echo_dispatcher,
   webhook_dispatchers
3. Payload builders: message_payload, postback_payload, echo_payload
"""

import os
from unittest.mock import MagicMock, Mock

import pytest
import respx

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

PAGE_ID = "page456"
USER_PSID = "user123"


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def mock_settings(monkeypatch):
    """Mock application settings, patched where get_settings is used."""
    from messenger_platform.config import Settings

    settings = Settings(
        facebook_page_access_token="test-page-token",
        facebook_verify_token="test-verify-token",
        facebook_app_id="test-app-id",
        facebook_app_secret="test-app-secret",
        facebook_page_id=None,
        env="local",
        logfire_token=None,
        sentry_dsn=None,
    )

    for module in (
        "messenger_platform.config",
        "messenger_platform.main",
        "messenger_platform.api.health",
        "messenger_platform.api.webhook",
        "messenger_platform.dispatch.routing",
        "messenger_platform.logging_config",
        "messenger_platform.services.graph_api",
        "messenger_platform.services.oauth_service",
    ):
        monkeypatch.setattr(f"{module}.get_settings", lambda: settings)
    return settings


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for testing without actual logging.

    Returns the mock so tests can assert on ``info``/``warn``/``error`` calls.
    """
    from contextlib import contextmanager

    @contextmanager
    def mock_span(*args, **kwargs):
        yield {}

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warn = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    for module in (
        "messenger_platform.dispatch.dispatcher",
        "messenger_platform.dispatch.echoes",
        "messenger_platform.services.graph_api",
        "messenger_platform.services.facebook_service",
        "messenger_platform.services.sender_action_service",
        "messenger_platform.services.conversation_service",
        "messenger_platform.services.oauth_service",
        "messenger_platform.services.signature",
        "messenger_platform.middleware.correlation_id",
        "messenger_platform.logging_config",
        "messenger_platform.main",
    ):
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)
    return mock_logfire_module


@pytest.fixture
def webhook_dispatchers(mock_settings):
    """Fresh global dispatchers built from mock_settings, dropped after the test."""
    from messenger_platform.dispatch import get_webhook_dispatchers, reset_webhook_dispatchers

    reset_webhook_dispatchers()
    yield get_webhook_dispatchers()
    reset_webhook_dispatchers()


@pytest.fixture
def test_client(mock_settings, mock_logfire, webhook_dispatchers):
    """FastAPI TestClient for E2E tests."""
    from fastapi.testclient import TestClient

    from messenger_platform.main import app

    with TestClient(app) as client:
        yield client


# =============================================================================
# Dispatchers
# =============================================================================


@pytest.fixture
def message_dispatcher():
    from messenger_platform.dispatch import MessageDispatcher

    return MessageDispatcher()


@pytest.fixture
def postback_dispatcher():
    from messenger_platform.dispatch import PostbackDispatcher

    return PostbackDispatcher()


@pytest.fixture
def echo_dispatcher():
    from messenger_platform.dispatch import EchoDispatcher

    return EchoDispatcher()


# =============================================================================
# Payload builders
# =============================================================================


def build_payload(events, *, page_id=PAGE_ID, standby=None, object_type="page"):
    """Wrap events into a single-entry webhook delivery."""
    entry = {"id": page_id, "time": 1458692752478, "messaging": list(events)}
    if standby is not None:
        entry["standby"] = list(standby)
    return {"object": object_type, "entry": [entry]}


def message_event(message, *, sender=USER_PSID, recipient=PAGE_ID):
    return {
        "sender": {"id": sender},
        "recipient": {"id": recipient},
        "timestamp": 1458692752478,
        "message": {"mid": "m_1", **message},
    }


def postback_event(postback, *, sender=USER_PSID, recipient=PAGE_ID):
    return {
        "sender": {"id": sender},
        "recipient": {"id": recipient},
        "timestamp": 1458692752478,
        "postback": {"mid": "m_pb", **postback},
    }


def echo_event(message, *, sender=PAGE_ID, recipient=USER_PSID):
    return {
        "sender": {"id": sender},
        "recipient": {"id": recipient},
        "timestamp": 1458692752478,
        "message": {"mid": "m_echo", "is_echo": True, **message},
    }


@pytest.fixture
def message_payload():
    """Builder: ``message_payload({"text": "hi"})``."""

    def _build(*messages, **kwargs):
        return build_payload([message_event(m) for m in messages], **kwargs)

    return _build


@pytest.fixture
def postback_payload():
    def _build(*postbacks, **kwargs):
        return build_payload([postback_event(p) for p in postbacks], **kwargs)

    return _build


@pytest.fixture
def echo_payload():
    def _build(*messages, **kwargs):
        return build_payload([echo_event(m) for m in messages], **kwargs)

    return _build
