"""Status page and health check endpoints."""
from urllib.parse import urlparse

from flask import Blueprint, current_app, render_template

from sf_proxy.api import get_services

bp = Blueprint("health", __name__)


@bp.route("/")
def index():
    """Status page showing whether the proxy holds a Salesforce token."""
    cfg = current_app.config["APP_CONFIG"]
    store = get_services().store
    credential = store.get()
    return render_template(
        "index.html",
        title="Salesforce Proxy",
        is_authenticated=store.is_authenticated(),
        auth_flow=cfg.salesforce_auth_flow,
        instance_host=urlparse(credential.instance_url).netloc if credential else None,
    )


@bp.route("/health")
def health_check():
    """Basic health check endpoint."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Ready once a Salesforce token is held."""
    if not get_services().store.is_authenticated():
        return ("unauthenticated", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
