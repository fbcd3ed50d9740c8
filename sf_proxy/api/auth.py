"""Authentication routes: Salesforce login redirect and OAuth callback.

Web flow:
- GET /auth/login issues a PKCE pair and a state nonce, then redirects to Salesforce
- GET /oauth/callback exchanges the code (with the verifier bound to ``state``)

Password flow (SALESFORCE_AUTH_FLOW=password):
- GET /auth/login runs the username-password grant and returns to the status page
- API routes log in on demand through ensure_authenticated()
"""
from __future__ import annotations
from urllib.parse import urlparse

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from sf_proxy.api import SalesforceServices, get_services
from sf_proxy.core.pkce import generate_pkce_pair
from sf_proxy.core.salesforce import NoAuthorizationCode, SalesforceApiProxy
from sf_proxy.core.token_store import Credential

bp = Blueprint("auth", __name__)


def login_with_password(cfg, services: SalesforceServices) -> Credential:
    """Run the username-password grant with configured credentials and store the result."""
    credential = services.oauth_client.password_grant(
        cfg.salesforce_username,
        cfg.salesforce_password,
        cfg.salesforce_security_token,
    )
    services.store.set(credential)
    return credential


def ensure_authenticated() -> SalesforceApiProxy:
    """Return the API proxy, logging in first when the password flow allows it.

    In the web flow nothing happens here: the proxy itself raises
    ``Unauthenticated`` until someone completes /auth/login.
    """
    cfg = current_app.config["APP_CONFIG"]
    services = get_services()
    if cfg.uses_password_flow and not services.store.is_authenticated():
        current_app.logger.info("[Auth] No stored token; running password grant")
        login_with_password(cfg, services)
    return services.api


# ─────────────────────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────────────────────
@bp.route("/auth/login")
def login():
    """Start a Salesforce login."""
    cfg = current_app.config["APP_CONFIG"]
    services = get_services()

    if cfg.uses_password_flow:
        login_with_password(cfg, services)
        return redirect(url_for("health.index"))

    code_verifier, code_challenge = generate_pkce_pair()
    state = services.pending.issue(code_verifier)
    authorize_url = services.oauth_client.build_authorize_url(code_challenge, state)

    current_app.logger.info("[Auth] Redirecting to %s", services.oauth_client.authorization_endpoint)
    return redirect(authorize_url)


@bp.route("/oauth/callback")
def callback():
    """Handle the Salesforce redirect after login."""
    services = get_services()
    state = request.args.get("state")

    error = request.args.get("error")
    if error:
        services.pending.discard(state)
        description = request.args.get("error_description") or error
        current_app.logger.warning("[Auth] Salesforce returned error=%s", error)
        return render_template(
            "auth_result.html",
            title="Login failed",
            success=False,
            message=description,
        ), 400

    code = request.args.get("code")
    if not code:
        services.pending.discard(state)
        raise NoAuthorizationCode()

    code_verifier = services.pending.consume(state)
    credential = services.oauth_client.exchange_code(code, code_verifier)
    services.store.set(credential)

    instance_host = urlparse(credential.instance_url).netloc
    current_app.logger.info("[Auth] Authenticated against %s", instance_host)
    return render_template(
        "auth_result.html",
        title="Login successful",
        success=True,
        message=f"Connected to {instance_host}.",
    )
