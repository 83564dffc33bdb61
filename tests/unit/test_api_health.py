"""Tests for health check endpoints."""
import pytest
from flask import Flask

from authbridge.api.health import bp as health_bp
from authbridge.clients.http import FormClient, SimpleTestUsernamePasswordAuthenticator
from authbridge.clients.registry import Clients


def make_app(clients):
    app = Flask(__name__)
    app.extensions["authbridge.clients"] = clients
    app.register_blueprint(health_bp)
    return app


@pytest.fixture()
def client():
    form = FormClient(authenticator=SimpleTestUsernamePasswordAuthenticator(), login_url="http://localhost/login-form")
    app = make_app(Clients("http://localhost/callback", [form]))
    with app.test_client() as client:
        yield client


def test_health_check(client):
    """Test basic health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.data == b"ok"
    assert response.content_type.startswith("text/plain")


def test_readiness_check(client):
    """Test readiness check endpoint."""
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.data == b"ready"
    assert response.content_type.startswith("text/plain")


def test_readiness_reports_broken_client():
    broken = FormClient(login_url="http://localhost/login-form")
    app = make_app(Clients("http://localhost/callback", [broken]))

    with app.test_client() as client:
        response = client.get("/ready")

    assert response.status_code == 503
    assert "authenticator cannot be None" in response.get_json()["clients"]["FormClient"]
