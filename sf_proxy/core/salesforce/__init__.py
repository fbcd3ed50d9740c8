"""Salesforce OAuth and REST API client library.

Architecture:
- oauth.py: Connected App OAuth2 flows (web server + PKCE, refresh, password)
- api.py: Bearer-authenticated REST calls with single refresh-and-retry
- exceptions.py: Typed exceptions for error handling

Usage:
    from sf_proxy.core.salesforce import SalesforceOAuthClient, SalesforceApiProxy
    from sf_proxy.core.token_store import TokenStore

    store = TokenStore()
    oauth_client = SalesforceOAuthClient(client_id, client_secret, redirect_uri)
    store.set(oauth_client.password_grant(username, password, security_token))

    proxy = SalesforceApiProxy(store, oauth_client)
    records = proxy.query("SELECT Id, Name FROM Account LIMIT 10")
"""
from .api import DEFAULT_API_VERSION, SalesforceApiProxy
from .exceptions import (
    CredentialsMissing,
    DownstreamError,
    InvalidRecordId,
    NoAuthorizationCode,
    NoPkceVerifier,
    NoRefreshToken,
    SalesforceError,
    TokenExchangeFailed,
    Unauthenticated,
)
from .oauth import DEFAULT_LOGIN_URL, DEFAULT_SCOPE, SalesforceOAuthClient

__all__ = [
    "SalesforceOAuthClient",
    "SalesforceApiProxy",
    "DEFAULT_API_VERSION",
    "DEFAULT_LOGIN_URL",
    "DEFAULT_SCOPE",
    "SalesforceError",
    "CredentialsMissing",
    "NoAuthorizationCode",
    "NoPkceVerifier",
    "TokenExchangeFailed",
    "Unauthenticated",
    "NoRefreshToken",
    "DownstreamError",
    "InvalidRecordId",
]
