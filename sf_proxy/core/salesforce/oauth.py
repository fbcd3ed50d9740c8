"""OAuth2 client for a Salesforce Connected App.

Supports the Web Server flow with PKCE (browser login through
``/services/oauth2/authorize``) and the Username-Password flow for headless
deployments. All token requests are form-encoded POSTs to
``/services/oauth2/token``.
"""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlencode, urlparse

import requests

from ..token_store import Credential
from .exceptions import CredentialsMissing, NoRefreshToken, TokenExchangeFailed

logger = logging.getLogger(__name__)

DEFAULT_LOGIN_URL = "https://login.salesforce.com"
DEFAULT_SCOPE = "api refresh_token"
REQUEST_TIMEOUT = 10


class SalesforceOAuthClient:
    """Talks to the Salesforce authorization and token endpoints.

    Usage:
        client = SalesforceOAuthClient("3MVG9...", "secret", "http://localhost:5000/oauth/callback")
        url = client.build_authorize_url(challenge, state)
        credential = client.exchange_code(code, verifier)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str = "",
        login_url: str = DEFAULT_LOGIN_URL,
        scope: str = DEFAULT_SCOPE,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize the OAuth client.

        Args:
            client_id: Connected App consumer key
            client_secret: Connected App consumer secret
            redirect_uri: Callback URL registered on the Connected App
            login_url: login.salesforce.com, test.salesforce.com or a My Domain URL
            scope: Space-separated OAuth scopes requested at authorization
            timeout: Seconds before a token request is abandoned
        """
        self.client_id = client_id
        self._client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.login_url = login_url.rstrip("/")
        self.scope = scope
        self.timeout = timeout

        self.authorization_endpoint = f"{self.login_url}/services/oauth2/authorize"
        self.token_endpoint = f"{self.login_url}/services/oauth2/token"

    @classmethod
    def from_config(cls, cfg) -> "SalesforceOAuthClient":
        """Create a client from an ``AppConfig``."""
        return cls(
            client_id=cfg.salesforce_client_id,
            client_secret=cfg.salesforce_client_secret,
            redirect_uri=cfg.salesforce_redirect_uri,
            login_url=cfg.salesforce_login_url,
            scope=cfg.salesforce_oauth_scope,
            timeout=cfg.request_timeout,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Web Server flow (authorization code + PKCE)
    # ─────────────────────────────────────────────────────────────────────────
    def build_authorize_url(self, code_challenge: str, state: Optional[str] = None) -> str:
        """Build the URL the browser is redirected to for login.

        Args:
            code_challenge: S256 PKCE challenge
            state: Opaque value echoed back on the callback

        Returns:
            Authorization endpoint URL with query parameters
        """
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
            "scope": self.scope,
        }
        if state:
            params["state"] = state
        return f"{self.authorization_endpoint}?{urlencode(params)}"

    def exchange_code(self, code: str, code_verifier: str) -> Credential:
        """Exchange an authorization code for tokens.

        Raises:
            TokenExchangeFailed: If Salesforce rejects the code or verifier
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "redirect_uri": self.redirect_uri,
            "code_verifier": code_verifier,
        }
        payload = self._request_token(data)
        return self._to_credential(payload, "authorization_code")

    def refresh(self, refresh_token: Optional[str]) -> Credential:
        """Mint a new access token from a refresh token.

        The refresh token is kept unless Salesforce issues a new one.

        Raises:
            NoRefreshToken: If no refresh token is available
            TokenExchangeFailed: If Salesforce rejects the refresh token
        """
        if not refresh_token:
            raise NoRefreshToken()

        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
            "client_secret": self._client_secret,
        }
        payload = self._request_token(data)
        return self._to_credential(payload, "refresh_token", refresh_token=refresh_token)

    # ─────────────────────────────────────────────────────────────────────────
    # Username-Password flow
    # ─────────────────────────────────────────────────────────────────────────
    def password_grant(self, username: str, password: str, security_token: str = "") -> Credential:
        """Authenticate with username, password and security token.

        Salesforce expects the security token appended directly to the
        password, not sent as a separate parameter.

        Raises:
            CredentialsMissing: If username or password is empty
            TokenExchangeFailed: If Salesforce rejects the credentials
        """
        missing = [name for name, value in (("username", username), ("password", password)) if not value]
        if missing:
            raise CredentialsMissing(missing)

        data = {
            "grant_type": "password",
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "username": username,
            "password": password + (security_token or ""),
        }
        logger.info("Authenticating with username-password flow for %s", username)
        payload = self._request_token(data)
        return self._to_credential(payload, "password")

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────
    def _request_token(self, data: dict[str, str]) -> dict[str, Any]:
        """POST a grant to the token endpoint and return the decoded body."""
        grant_type = data["grant_type"]
        try:
            resp = requests.post(self.token_endpoint, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Token endpoint unreachable (grant=%s): %s", grant_type, type(exc).__name__)
            raise TokenExchangeFailed(None, "Token endpoint unreachable", grant_type) from exc

        body = decode_body(resp)
        if resp.status_code != 200:
            logger.warning("Token request rejected: grant=%s status=%d", grant_type, resp.status_code)
            raise TokenExchangeFailed(resp.status_code, body, grant_type)
        if not isinstance(body, dict):
            raise TokenExchangeFailed(resp.status_code, "Token response is not a JSON object", grant_type)
        return body

    def _to_credential(self, payload: dict[str, Any], grant_type: str, refresh_token: Optional[str] = None) -> Credential:
        try:
            credential = Credential.from_token_response(payload, refresh_token=refresh_token)
        except (KeyError, AttributeError) as exc:
            raise TokenExchangeFailed(200, f"Token response missing {exc}", grant_type) from exc
        logger.info(
            "Obtained access token: grant=%s instance=%s refresh_token=%s",
            grant_type,
            urlparse(credential.instance_url).netloc,
            bool(credential.refresh_token),
        )
        return credential


def decode_body(resp: requests.Response) -> Any:
    """Return the JSON body if there is one, otherwise the raw text."""
    try:
        return resp.json()
    except ValueError:
        return resp.text
