"""Flask application factory and bootstrap.

This module provides the create_app() factory function that wires the
Salesforce token store, OAuth client and API proxy into the blueprints.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from sf_proxy.config import AppConfig, load_settings
from sf_proxy.core.authorization_state import PendingAuthorizations
from sf_proxy.core.salesforce import SalesforceApiProxy, SalesforceOAuthClient
from sf_proxy.core.token_store import TokenStore


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(
    cfg: Optional[AppConfig] = None,
    store: Optional[TokenStore] = None,
    oauth_client: Optional[SalesforceOAuthClient] = None,
) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Settings (loaded from the environment when omitted)
        store: Credential store shared by all requests (new empty store when omitted)
        oauth_client: Salesforce OAuth client (built from cfg when omitted)

    Raises:
        CredentialsMissing: If required settings are absent; nothing is served
    """
    if cfg is None:
        cfg = load_settings()
    _configure_logging(cfg.log_level)

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg

    if cfg.trust_proxy_headers:
        # Trust X-Forwarded-* headers from a single reverse proxy hop
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    _register_services(app, cfg, store, oauth_client)

    # Register blueprints
    from sf_proxy.api import accounts, auth, errors, health

    app.register_blueprint(auth.bp)
    app.register_blueprint(accounts.bp)
    app.register_blueprint(health.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    app.logger.info(
        "[flask_app] Salesforce proxy ready: flow=%s login_url=%s",
        cfg.salesforce_auth_flow,
        cfg.salesforce_login_url,
    )
    return app


def _register_services(
    app: Flask,
    cfg: AppConfig,
    store: Optional[TokenStore],
    oauth_client: Optional[SalesforceOAuthClient],
) -> None:
    """Build the Salesforce collaborators once per app instance."""
    from sf_proxy.api import EXTENSION_KEY, SalesforceServices

    if store is None:
        store = TokenStore()
    if oauth_client is None:
        oauth_client = SalesforceOAuthClient.from_config(cfg)

    app.extensions[EXTENSION_KEY] = SalesforceServices(
        store=store,
        pending=PendingAuthorizations(ttl_seconds=cfg.pkce_state_ttl),
        oauth_client=oauth_client,
        api=SalesforceApiProxy(
            store,
            oauth_client,
            api_version=cfg.salesforce_api_version,
            timeout=cfg.request_timeout,
        ),
    )


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("sf_proxy").setLevel(level)


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=False)
