"""HTTP layer: Flask blueprints and the per-app Salesforce service container."""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from sf_proxy.core.authorization_state import PendingAuthorizations
from sf_proxy.core.salesforce import SalesforceApiProxy, SalesforceOAuthClient
from sf_proxy.core.token_store import TokenStore

EXTENSION_KEY = "salesforce"


@dataclass
class SalesforceServices:
    """Collaborators shared by every request of one application instance."""
    store: TokenStore
    pending: PendingAuthorizations
    oauth_client: SalesforceOAuthClient
    api: SalesforceApiProxy


def get_services() -> SalesforceServices:
    """Return the services registered by ``create_app`` for the current app."""
    return current_app.extensions[EXTENSION_KEY]
