"""Flask blueprints and error handlers."""
