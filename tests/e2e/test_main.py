"""End-to-end tests for main application."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from src.main import APP_TITLE, APP_VERSION, app
from src.services.menu_state_machine import MenuStateMachine, NavigationMode
from src.services.message_processor import EventProcessor


class TestMainApplication:
    """Test FastAPI application initialization."""

    def test_app_metadata(self):
        """Test application metadata."""
        assert app.title == "Messenger Feature Tour Bot"
        assert app.description is not None
        assert app.version == APP_VERSION

    def test_root_endpoint(self, test_client):
        """Test root endpoint."""
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json() == {
            "message": APP_TITLE,
            "navigation_mode": "linear",
            "version": APP_VERSION,
        }

    def test_app_routes(self, test_client):
        """Test that all expected routes are registered."""
        assert test_client.get("/").status_code == 200
        assert test_client.get("/health").status_code == 200
        # Registered but rejected: no verify token, no signature
        assert test_client.get("/webhook").status_code == 403
        assert test_client.post("/webhook", content=b"{}").status_code == 403
        assert test_client.get("/missing").status_code == 404


class TestLifespan:
    """Test application startup and shutdown."""

    @pytest.fixture(autouse=True)
    def reset_state(self):
        yield
        app.state.menu = None
        app.state.event_processor = None

    def test_startup_builds_menu_and_processor(self, mock_logfire, monkeypatch):
        monkeypatch.setenv("NAVIGATION_MODE", "branching")

        with patch("src.logging_config.logging.basicConfig"):
            with TestClient(app):
                assert isinstance(app.state.menu, MenuStateMachine)
                assert app.state.menu.mode is NavigationMode.BRANCHING
                assert isinstance(app.state.event_processor, EventProcessor)

        mock_logfire.configure.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once_with(app)

    def test_sentry_initialised_with_dsn(self, mock_logfire, monkeypatch):
        monkeypatch.setenv("SENTRY_DSN", "https://key@sentry.example.com/1")

        with (
            patch("src.logging_config.logging.basicConfig"),
            patch("src.main.sentry_sdk.init") as sentry_init,
        ):
            with TestClient(app):
                pass

        kwargs = sentry_init.call_args.kwargs
        assert kwargs["dsn"] == "https://key@sentry.example.com/1"
        assert kwargs["send_default_pii"] is False

    def test_sentry_skipped_without_dsn(self, mock_logfire, monkeypatch):
        monkeypatch.delenv("SENTRY_DSN", raising=False)

        with (
            patch("src.logging_config.logging.basicConfig"),
            patch("src.main.sentry_sdk.init") as sentry_init,
        ):
            with TestClient(app):
                pass

        sentry_init.assert_not_called()

    def test_startup_fails_without_app_secret(self, mock_logfire, monkeypatch):
        monkeypatch.delenv("FACEBOOK_APP_SECRET")

        with pytest.raises(ValidationError):
            with TestClient(app):
                pass
