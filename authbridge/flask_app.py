"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with the clients registry, blueprints and
configuration.
"""
from __future__ import annotations
import atexit
import os
from tempfile import gettempdir

from flask import Flask
from flask_session import Session
from werkzeug.middleware.proxy_fix import ProxyFix

from authbridge.clients.factory import build_clients
from authbridge.config import AppConfig, load_settings


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: AppConfig | None = None) -> Flask:
    """Create and configure Flask application."""
    # Load configuration
    cfg = cfg or load_settings()

    # Create Flask app
    app = Flask(__name__)

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    app.config["DEMO_MODE"] = cfg.demo_mode

    # Flask session configuration
    app.config["SECRET_KEY"] = cfg.secret_key
    app.config["SESSION_TYPE"] = cfg.session_type
    if app.config["SESSION_TYPE"] == "filesystem":
        session_dir = os.environ.get("FLASK_SESSION_DIR") or os.path.join(gettempdir(), "authbridge_flask_session")
        os.makedirs(session_dir, exist_ok=True)
        app.config["SESSION_FILE_DIR"] = session_dir

    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_SECURE"] = cfg.session_cookie_secure

    # Initialize session
    Session(app)

    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    # Clients registry (initialized eagerly so misconfiguration fails at startup)
    clients = build_clients(cfg)
    clients.ensure_initialized()
    app.extensions["authbridge.clients"] = clients
    atexit.register(clients.shutdown)

    # Register blueprints
    from authbridge.api import auth, errors, health

    app.register_blueprint(auth.bp)
    app.register_blueprint(health.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    # Log startup info
    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    print(f"[flask_app] Mode={mode_label}")
    print(f"[flask_app] Clients: {', '.join(client.name for client in clients) or 'none'}")

    if cfg.demo_mode:
        print("[flask_app] WARNING: Demo mode active - do not deploy with demo credentials")

    return app
