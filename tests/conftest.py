"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Settings: test_settings (plus an autouse environment for get_settings())
2. Menu: linear_menu, branching_menu
3. Messaging: mock_messaging_service, failing_messaging_service
4. Webhook payloads: make_envelope, sign_body
5. Infrastructure: test_client, logfire_capture, mock_logfire
"""

import json
import os
from unittest.mock import MagicMock, Mock, patch

import pytest
from hypothesis import HealthCheck, settings as hypothesis_settings

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import logfire

from src.config import Settings, get_settings
from src.services.menu_state_machine import MenuStateMachine, NavigationMode
from src.services.messaging_protocol import MockMessagingService
from src.services.signature import compute_signature

# The autouse settings environment is identical for every generated example
hypothesis_settings.register_profile(
    "messenger", suppress_health_check=[HealthCheck.function_scoped_fixture]
)
hypothesis_settings.load_profile("messenger")

TEST_APP_SECRET = "test-app-secret"
TEST_VERIFY_TOKEN = "test-verify-token"
TEST_PAGE_TOKEN = "test-page-token"
TEST_SERVER_URL = "bot.example.com"
TEST_IMAGE_BASE_URL = f"https://{TEST_SERVER_URL}/assets/screenshots/"

_SETTINGS_ENV = {
    "FACEBOOK_APP_SECRET": TEST_APP_SECRET,
    "FACEBOOK_VERIFY_TOKEN": TEST_VERIFY_TOKEN,
    "FACEBOOK_PAGE_ACCESS_TOKEN": TEST_PAGE_TOKEN,
    "SERVER_URL": TEST_SERVER_URL,
    "NAVIGATION_MODE": "linear",
    "ENV": "local",
}


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    """Provide required settings through the environment for every test."""
    for key, value in _SETTINGS_ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings():
    """Settings instance matching the test environment."""
    return Settings(
        facebook_app_secret=TEST_APP_SECRET,
        facebook_verify_token=TEST_VERIFY_TOKEN,
        facebook_page_access_token=TEST_PAGE_TOKEN,
        server_url=TEST_SERVER_URL,
    )


# =============================================================================
# Menu Fixtures
# =============================================================================


@pytest.fixture
def linear_menu():
    """Menu state machine in linear (guided tour) mode."""
    return MenuStateMachine(NavigationMode.LINEAR, TEST_IMAGE_BASE_URL)


@pytest.fixture
def branching_menu():
    """Menu state machine in branching (carousel) mode."""
    return MenuStateMachine(NavigationMode.BRANCHING, TEST_IMAGE_BASE_URL)


# =============================================================================
# Messaging Service Mocks
# =============================================================================


@pytest.fixture
def mock_messaging_service():
    """Messaging service that records sends and reports success."""
    return MockMessagingService()


@pytest.fixture
def failing_messaging_service():
    """Messaging service that records sends and reports failure."""
    return MockMessagingService(should_fail_send=True)


# =============================================================================
# Webhook Payload Fixtures
# =============================================================================


@pytest.fixture
def make_envelope():
    """Build a Page webhook body around messaging events.

    Each event dict is merged with sender/recipient/timestamp fields.
    """

    def _make(*events, object_kind="page", page_id="page-1", sender_id="user-1"):
        return {
            "object": object_kind,
            "entry": [
                {
                    "id": page_id,
                    "time": 1458692752478,
                    "messaging": [
                        {
                            "sender": {"id": sender_id},
                            "recipient": {"id": page_id},
                            "timestamp": 1458692752478,
                            **event,
                        }
                        for event in events
                    ],
                }
            ],
        }

    return _make


@pytest.fixture
def sign_body():
    """Serialize a body and compute its X-Hub-Signature header value."""

    def _sign(payload, secret=TEST_APP_SECRET):
        raw = json.dumps(payload).encode("utf-8")
        return raw, f"sha1={compute_signature(secret, raw)}"

    return _sign


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def test_client():
    """FastAPI TestClient for E2E tests (lifespan not started)."""
    from fastapi.testclient import TestClient
    from src.main import app

    return TestClient(app)


@pytest.fixture
def logfire_capture():
    """
    Capture Logfire logs for testing.

    This fixture patches Logfire to capture log calls for assertion.
    """
    captured_logs = []

    original = {
        level: getattr(logfire, level)
        for level in ("debug", "info", "warning", "error")
    }

    def _capture(level):
        def capture(*args, **kwargs):
            captured_logs.append((level, args, kwargs))
            return original[level](*args, **kwargs)

        return capture

    with (
        patch("logfire.debug", side_effect=_capture("debug")),
        patch("logfire.info", side_effect=_capture("info")),
        patch("logfire.warning", side_effect=_capture("warning")),
        patch("logfire.error", side_effect=_capture("error")),
    ):
        yield captured_logs


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire setup calls so app startup does not configure exporters.
    """
    mock_logfire_module = MagicMock()
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()
    mock_logfire_module.LogfireLoggingHandler = Mock()

    monkeypatch.setattr("src.logging_config.logfire", mock_logfire_module)
    return mock_logfire_module
