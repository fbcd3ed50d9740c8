"""Gunicorn configuration for the Salesforce proxy.

Token state lives in process memory, so the proxy runs as ONE worker
process; concurrency comes from threads inside that worker. Running several
worker processes would give each its own token store and its own set of
pending logins (a callback could land on a worker that never issued the state).

Run:
    gunicorn -c gunicorn.conf.py
"""
import os

wsgi_app = "sf_proxy.flask_app:create_app()"

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:5000")
workers = 1
worker_class = "gthread"
threads = int(os.environ.get("GUNICORN_THREADS", "8"))
# Salesforce calls time out after REQUEST_TIMEOUT; a refresh + retry is at most three calls
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "45"))
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()


def post_fork(server, worker):
    """Called just after the worker has been forked."""
    if server.cfg.workers != 1:
        worker.log.warning(
            "Running %d workers: each keeps its own Salesforce token and pending logins",
            server.cfg.workers,
        )
    worker.log.info("Salesforce proxy worker started (threads=%d)", server.cfg.threads)
