"""Health check endpoints."""
from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Basic health check endpoint."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Readiness check: every configured client must initialize."""
    clients = current_app.extensions["authbridge.clients"]
    failures = {}
    for client in clients.find_all_clients():
        try:
            client.ensure_initialized()
        except Exception as exc:
            current_app.logger.warning(f"Client {client.name} not ready: {exc}")
            failures[client.name] = str(exc)
    if failures:
        return jsonify({"status": "not ready", "clients": failures}), 503
    return ("ready", 200, {"Content-Type": "text/plain"})
