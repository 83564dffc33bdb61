"""authbridge: one user profile whatever protocol authenticated the user.

To use the Flask app:
    from authbridge.flask_app import create_app

To use the clients standalone:
    from authbridge.clients import FormClient, CasClient
    from authbridge.clients.oauth import GitHubClient
"""
# Note: flask_app is not imported here so that the clients can be used
# without creating an application
