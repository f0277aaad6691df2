"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Infrastructure: mock_settings, mock_logfire, state reset, test_client
2. Mock Services: mock_messaging_service, mock_staff_notifier
3. Workflow: rate_limiter, order_store, inbound_relay, decision_handler
4. Payload builders: facebook_image_payload, telegram_callback_update
"""

import os
from unittest.mock import MagicMock, Mock

import pytest

# Suppress warnings when logfire isn't configured in tests
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from src.middleware.rate_limiter import RateLimiter, reset_rate_limiter
from src.models.user_models import FacebookUserInfo
from src.services.decision_handler import DecisionHandler
from src.services.inbound_relay import InboundRelay
from src.services.messaging_protocol import MockMessagingService, MockStaffNotifier
from src.services.order_store import OrderStore, reset_order_store

# Modules that bind ``logfire`` at import time
_LOGFIRE_MODULES = (
    "src.middleware.rate_limiter",
    "src.middleware.correlation_id",
    "src.services.order_store",
    "src.services.background_tasks",
    "src.services.facebook_service",
    "src.services.telegram_service",
    "src.services.messaging_protocol",
    "src.services.identity_resolver",
    "src.services.inbound_relay",
    "src.services.decision_handler",
    "src.logging_config",
    "src.main",
)

# Modules that bind ``get_settings`` at import time
_SETTINGS_MODULES = (
    "src.config",
    "src.main",
    "src.logging_config",
    "src.api.webhook",
    "src.api.telegram_webhook",
    "src.services.facebook_service",
    "src.services.telegram_service",
)

TEST_BOT_TOKEN = "123456:test-bot-token"
TEST_CHAT_ID = "-1001234567890"
TEST_PAGE_TOKEN = "test-page-token"


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture(autouse=True)
def mock_logfire(monkeypatch):
    """
    Replace logfire in every module with a MagicMock.

    Tests can assert on ``mock_logfire.error`` etc. to verify logging.
    """
    from contextlib import contextmanager

    @contextmanager
    def mock_span(*args, **kwargs):
        yield MagicMock()

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warning = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_httpx = Mock()

    for module in _LOGFIRE_MODULES:
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Give every test fresh module-level rate limiter and order store."""
    reset_rate_limiter()
    reset_order_store()
    yield
    reset_rate_limiter()
    reset_order_store()


@pytest.fixture
def mock_settings(monkeypatch):
    """Settings with every credential configured, patched everywhere."""
    from src.config import Settings

    settings = Settings(
        facebook_page_access_token=TEST_PAGE_TOKEN,
        facebook_verify_token="test-verify-token",
        facebook_app_secret=None,
        telegram_bot_token=TEST_BOT_TOKEN,
        telegram_chat_id=TEST_CHAT_ID,
        telegram_webhook_secret=None,
        env="local",
        logfire_token=None,
        sentry_dsn=None,
        order_cooldown_seconds=30,
    )

    for module in _SETTINGS_MODULES:
        monkeypatch.setattr(f"{module}.get_settings", lambda: settings)
    return settings


@pytest.fixture
def test_client(mock_settings):
    """FastAPI TestClient for E2E tests (lifespan not started)."""
    from fastapi.testclient import TestClient

    from src.main import app

    return TestClient(app)


# =============================================================================
# Mock Services
# =============================================================================


@pytest.fixture
def sample_facebook_user_info():
    """Profile with a full name."""
    return FacebookUserInfo(
        id="9001",
        name="Jane Doe",
        first_name="Jane",
        last_name="Doe",
    )


@pytest.fixture
def mock_messaging_service(sample_facebook_user_info):
    """Customer-facing mock that resolves sender 9001 to Jane Doe."""
    return MockMessagingService(user_info=sample_facebook_user_info)


@pytest.fixture
def mock_staff_notifier():
    """Staff-facing mock that hands out message ids starting at 100."""
    return MockStaffNotifier(first_message_id=100)


# =============================================================================
# Workflow
# =============================================================================


@pytest.fixture
def rate_limiter():
    return RateLimiter(cooldown_seconds=30)


@pytest.fixture
def order_store():
    return OrderStore(retention_seconds=3600)


@pytest.fixture
def inbound_relay(mock_messaging_service, mock_staff_notifier, rate_limiter, order_store):
    return InboundRelay(
        messaging_service=mock_messaging_service,
        staff_notifier=mock_staff_notifier,
        rate_limiter=rate_limiter,
        order_store=order_store,
    )


@pytest.fixture
def decision_handler(mock_messaging_service, mock_staff_notifier, order_store):
    return DecisionHandler(
        messaging_service=mock_messaging_service,
        staff_notifier=mock_staff_notifier,
        order_store=order_store,
    )


# =============================================================================
# Payload builders
# =============================================================================


@pytest.fixture
def facebook_image_payload():
    """Build a Messenger webhook payload carrying image attachments."""

    def _build(sender_id="9001", urls=("https://cdn.example.com/photo.jpg",), text=None):
        message = {
            "mid": "m_1",
            "attachments": [{"type": "image", "payload": {"url": u}} for u in urls],
        }
        if text is not None:
            message["text"] = text
        return {
            "object": "page",
            "entry": [
                {
                    "id": "page-1",
                    "time": 1700000000,
                    "messaging": [
                        {
                            "sender": {"id": sender_id},
                            "recipient": {"id": "page-1"},
                            "timestamp": 1700000000,
                            "message": message,
                        }
                    ],
                }
            ],
        }

    return _build


@pytest.fixture
def telegram_callback_update():
    """Build a Telegram update with a callback query."""

    def _build(data="confirm_9001", message_id=100, callback_id="cb-1"):
        return {
            "update_id": 1,
            "callback_query": {
                "id": callback_id,
                "from": {"id": 42, "is_bot": False, "first_name": "Staff"},
                "data": data,
                "message": {
                    "message_id": message_id,
                    "chat": {"id": int(TEST_CHAT_ID), "type": "supergroup"},
                    "caption": "📸 New order photo",
                },
            },
        }

    return _build
