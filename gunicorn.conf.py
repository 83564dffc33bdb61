"""Gunicorn configuration file.

The application is built by the factory in every worker, so each worker owns
its clients registry (and, when CAS proxying is enabled, its own proxy
granting ticket store and cleaner thread). Proxy tickets are therefore only
visible to the worker that received them: run a single worker process with
threads when CAS proxying is enabled.
"""
import os

wsgi_app = "authbridge.flask_app:create_app()"
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "1"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Secrets are read by the settings loader from /run/secrets; only report
    what the worker will see.
    """
    if os.environ.get("CAS_PROXY_ENABLED", "false").lower() == "true" and workers > 1:
        worker.log.warning("CAS_PROXY_ENABLED with several workers: proxy tickets are per-worker")

    from pathlib import Path

    secrets_dir = Path("/run/secrets")
    if secrets_dir.exists() and secrets_dir.is_dir():
        secret_files = list(secrets_dir.glob("*"))
        if secret_files:
            worker.log.info(f"Found {len(secret_files)} secrets in /run/secrets")
            return
    worker.log.info("No /run/secrets mount; secrets come from the environment")
