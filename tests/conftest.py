"""Pytest shared fixtures."""
import os
import pathlib
import sys
from typing import Any, Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")

import pytest
import requests

from authbridge.config.settings import AppConfig
from authbridge.core.context import WebContext


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from hitting live identity providers.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _stub_post(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP POST in unit test: {url}")

    def _stub_get(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP GET in unit test: {url}")

    monkeypatch.setattr(requests, "post", _stub_post)
    monkeypatch.setattr(requests, "get", _stub_get)


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, text: str = "", status_code: int = 200):
        self.text = text
        self.status_code = status_code


class FakeClock:
    """Monotonic clock driven by the test."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis / 1000


# ─────────────────────────────────────────────────────────────────────────────
# Web context
# ─────────────────────────────────────────────────────────────────────────────
class MockWebContext(WebContext):
    """In-memory WebContext for client tests."""

    def __init__(
        self,
        parameters: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
        session: Optional[dict[str, Any]] = None,
        method: str = "GET",
    ):
        self.parameters = dict(parameters or {})
        self.headers = dict(headers or {})
        self.session = session if session is not None else {}
        self.method = method
        self.written_response = ""

    def get_request_parameter(self, name: str) -> Optional[str]:
        return self.parameters.get(name)

    def get_request_parameters(self) -> dict[str, list[str]]:
        return {name: [value] for name, value in self.parameters.items()}

    def get_request_header(self, name: str) -> Optional[str]:
        return self.headers.get(name)

    def get_request_method(self) -> str:
        return self.method

    def get_session_attribute(self, name: str) -> Any:
        return self.session.get(name)

    def set_session_attribute(self, name: str, value: Any) -> None:
        self.session[name] = value

    def invalidate_session(self) -> None:
        self.session.clear()

    def write_response(self, data: str) -> None:
        self.written_response += data


@pytest.fixture()
def context():
    return MockWebContext()


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> AppConfig:
    values = dict(
        demo_mode=True,
        secret_key="test-secret-key",
        session_cookie_secure=False,
        callback_url="http://localhost/callback",
        form_login_url="http://localhost/login-form",
    )
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture()
def app_config():
    return make_config()


@pytest.fixture()
def flask_app(app_config, tmp_path, monkeypatch):
    from authbridge.flask_app import create_app

    monkeypatch.setenv("FLASK_SESSION_DIR", str(tmp_path / "sessions"))
    app = create_app(app_config)
    app.config.update(TESTING=True)
    yield app
    app.extensions["authbridge.clients"].shutdown()


@pytest.fixture()
def client(flask_app):
    """Flask test client with stubbed network requests."""
    with flask_app.test_client() as client:
        with flask_app.app_context():
            yield client


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires live providers)"
    )
