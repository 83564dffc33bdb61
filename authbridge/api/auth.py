"""Authentication routes.

- GET /login/<client_name>: redirect to the client's login page / provider
- GET|POST /callback?client_name=...: read credentials, resolve and store the profile
- GET /profile: profile of the current session user
- GET|POST /logout: drop the session
"""
from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, redirect, render_template_string, request, session

from authbridge.core.context import FlaskWebContext
from authbridge.core.exceptions import CredentialsError
from authbridge.core.profile import ACCESS_TOKEN, profile_from_session

bp = Blueprint("auth", __name__)

PROFILE_SESSION_KEY = "authbridge_profile"
REQUESTED_URL_SESSION_KEY = "authbridge_requested_url"

_LOGIN_FORM = """<!doctype html>
<title>Sign in</title>
<form method="post" action="{{ action }}">
  <label>Username <input name="username" autocomplete="username"></label>
  <label>Password <input name="password" type="password" autocomplete="current-password"></label>
  <button type="submit">Sign in</button>
</form>
"""


def _clients():
    return current_app.extensions["authbridge.clients"]


def current_profile():
    """Rebuild the profile saved in session, or None."""
    return profile_from_session(session.get(PROFILE_SESSION_KEY))


def _safe_next(target: str | None) -> str | None:
    """Only keep same-site relative paths."""
    if not target or not target.startswith("/") or target.startswith("//"):
        return None
    return target


@bp.route("/")
def index():
    profile = current_profile()
    clients = _clients()
    return jsonify({
        "authenticated": profile is not None,
        "typed_id": profile.typed_id if profile else None,
        "clients": [client.name for client in clients.find_all_clients()],
    })


@bp.route("/login/<client_name>")
def login(client_name: str):
    """Send the browser to where the client authenticates the user."""
    client = _clients().find_client_by_name(client_name)
    requested_url = _safe_next(request.args.get("next"))
    if requested_url:
        session[REQUESTED_URL_SESSION_KEY] = requested_url

    context = FlaskWebContext()
    target = client.redirection_target(context)
    current_app.logger.info(f"Redirecting to {client.name} login")
    return redirect(target)


@bp.route("/login-form")
def login_form():
    """Minimal login page for the form client (demo)."""
    clients = _clients()
    form_client = next((c for c in clients.find_all_clients() if c.name == "FormClient"), None)
    if form_client is None:
        return ("Form login disabled", 404, {"Content-Type": "text/plain"})
    return render_template_string(_LOGIN_FORM, action=form_client.callback_url)


@bp.route("/callback", methods=["GET", "POST"])
def callback():
    """Finish the authentication started by /login/<client_name>."""
    clients = _clients()
    context = FlaskWebContext()
    client = clients.find_client(context)

    credentials = client.extract_credentials(context)
    if credentials is None:
        # Clients answering the caller directly (CAS proxy receptor)
        if context.response_written:
            return Response(context.response_body, status=200, mimetype="text/xml")
        raise CredentialsError(f"No credentials found for {client.name}")

    profile = client.resolve_profile(credentials)
    session[PROFILE_SESSION_KEY] = profile.to_session()
    current_app.logger.info(f"User authenticated: {profile.typed_id}")

    return redirect(session.pop(REQUESTED_URL_SESSION_KEY, None) or "/")


@bp.route("/profile")
def profile():
    """Current user profile as JSON."""
    user = current_profile()
    if user is None:
        return jsonify({"error": "Unauthorized", "message": "Authentication required"}), 401
    data = user.to_session()
    data["attributes"].pop(ACCESS_TOKEN, None)
    data["id"] = user.id
    return jsonify(data)


@bp.route("/logout", methods=["GET", "POST"])
def logout():
    """Clear the local session."""
    profile = current_profile()
    session.clear()
    if profile is not None:
        current_app.logger.info(f"User logged out: {profile.typed_id}")
    return redirect("/")
