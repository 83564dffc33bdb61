"""Error handlers for the application."""
from flask import Response, jsonify, request
from werkzeug.exceptions import HTTPException

from authbridge.core.exceptions import (
    AuthChallengeError,
    CommunicationError,
    ConfigurationError,
    CredentialsError,
    ProtocolError,
)


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(AuthChallengeError)
    def auth_challenge(error: AuthChallengeError):
        """Ask the browser for Basic credentials."""
        response = _error_response(401, "Unauthorized", "Authentication required")
        response.headers["WWW-Authenticate"] = error.www_authenticate
        return response

    @app.errorhandler(CredentialsError)
    def bad_credentials(error: CredentialsError):
        app.logger.info(f"Credentials rejected: {error.message}")
        return _error_response(401, "Unauthorized", error.message)

    @app.errorhandler(ProtocolError)
    def provider_error(error: ProtocolError):
        """Provider refused the authentication (error parameters, CAS failure...)."""
        app.logger.warning(f"Provider error: {error.message} {dict(error.errors)}")
        return _error_response(401, "Unauthorized", error.message, provider_errors=dict(error.errors))

    @app.errorhandler(CommunicationError)
    def bad_gateway(error: CommunicationError):
        # Status and body stay in the logs; they may carry provider internals
        app.logger.error(f"Provider communication failed: {error.message} (body: {error.body!r})")
        return _error_response(502, "Bad Gateway", "Identity provider unavailable")

    @app.errorhandler(ConfigurationError)
    def misconfigured(error: ConfigurationError):
        app.logger.error(f"Configuration error: {error.message}", exc_info=True)
        return _error_response(500, "Internal Server Error", "Authentication is misconfigured")

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return _error_response(404, "Not Found", "Resource not found")

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        # ALWAYS log the error (even in production) - logs are secure
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return _error_response(500, "Internal Server Error", "An unexpected error occurred")


def _error_response(status: int, error: str, message: str, **extra) -> Response:
    if _wants_json():
        response = jsonify({"error": error, "message": message, **extra})
    else:
        response = Response(f"{error}: {message}", mimetype="text/plain")
    response.status_code = status
    return response


def _wants_json():
    """Check if the client wants a JSON response."""
    return request.accept_mimetypes.accept_json and \
           not request.accept_mimetypes.accept_html
