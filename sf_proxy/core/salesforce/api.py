"""Bearer-authenticated calls to the Salesforce REST API.

Handles the token lifecycle reactively: a 401 triggers one refresh and one
retry of the original request, never more.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from ..token_store import Credential, TokenStore
from ..validators import validate_record_id, validate_sobject_name
from .exceptions import DownstreamError, TokenExchangeFailed, Unauthenticated
from .oauth import REQUEST_TIMEOUT, SalesforceOAuthClient, decode_body

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "60.0"


class SalesforceApiProxy:
    """HTTP client for the Salesforce REST API with refresh-on-401.

    Features:
    - Bearer token taken from the shared ``TokenStore``
    - Single refresh-and-retry when the access token has expired
    - Centralized translation of HTTP failures into typed errors

    Usage:
        proxy = SalesforceApiProxy(store, oauth_client)
        records = proxy.query("SELECT Id, Name FROM Account LIMIT 10")
    """

    def __init__(
        self,
        store: TokenStore,
        oauth_client: SalesforceOAuthClient,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.store = store
        self.oauth_client = oauth_client
        self.api_version = api_version
        self.timeout = timeout

    @property
    def data_path(self) -> str:
        return f"/services/data/v{self.api_version}"

    def call(self, method: str, path: str, body: Optional[Any] = None, params: Optional[dict] = None) -> Any:
        """Execute an authenticated request against the instance URL.

        Args:
            method: HTTP method (GET, POST, ...)
            path: Path relative to the instance URL (e.g. "/services/data/v60.0/query/")
            body: JSON payload for POST/PATCH
            params: Query parameters

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            Unauthenticated: No token held, or the token expired and cannot be refreshed
            DownstreamError: Any other failure, including a 401 on the retry
        """
        credential = self.store.get()
        if credential is None or not credential.access_token:
            raise Unauthenticated()

        resp = self._send(credential, method, path, body, params)
        if resp.status_code == 401:
            if not credential.refresh_token:
                logger.info("Access token rejected and no refresh token held; clearing stored credential")
                self.store.clear_if(credential)
                raise Unauthenticated()
            credential = self._refresh(credential)
            resp = self._send(credential, method, path, body, params)

        return self._handle_response(resp, path)

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.call("GET", path, params=params)

    def post(self, path: str, body: Any) -> Any:
        return self.call("POST", path, body=body)

    def query(self, soql: str) -> list[dict]:
        """Run a SOQL query and return its records."""
        result = self.get(f"{self.data_path}/query/", params={"q": soql})
        return (result or {}).get("records", [])

    def get_record(self, sobject: str, record_id: str) -> dict:
        """Fetch a single record by id.

        Raises:
            InvalidRecordId: If the id is malformed (no request is sent)
        """
        sobject = validate_sobject_name(sobject)
        record_id = validate_record_id(record_id)
        return self.get(f"{self.data_path}/sobjects/{sobject}/{record_id}")

    def _send(self, credential: Credential, method: str, path: str, body: Any, params: Optional[dict]) -> requests.Response:
        url = f"{credential.instance_url}{path}"
        headers = {
            "Authorization": f"Bearer {credential.access_token}",
            "Accept": "application/json",
        }
        try:
            return requests.request(
                method,
                url,
                headers=headers,
                json=body,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Salesforce request failed: %s %s (%s)", method, path, type(exc).__name__)
            raise DownstreamError(None, "Salesforce API unreachable", path) from exc

    def _refresh(self, credential: Credential) -> Credential:
        """Refresh the access token and publish it to the store.

        A rejected refresh clears the store unless it already holds a newer credential.
        """
        logger.info("Access token expired; refreshing")
        try:
            refreshed = self.oauth_client.refresh(credential.refresh_token)
        except TokenExchangeFailed as exc:
            logger.warning("Refresh rejected (status=%s)", exc.status_code)
            if self.store.clear_if(credential):
                logger.info("Cleared stored credential")
            else:
                logger.info("Stored credential was replaced during refresh; keeping it")
            raise Unauthenticated("Salesforce session expired. Log in again at /auth/login.") from exc
        self.store.set(refreshed)
        return refreshed

    def _handle_response(self, resp: requests.Response, path: str) -> Any:
        """Centralized error handling for API responses.

        Raises:
            DownstreamError: If response status indicates error
        """
        if resp.status_code >= 400:
            body = decode_body(resp)
            logger.warning("Salesforce API error: status=%d path=%s", resp.status_code, path)
            raise DownstreamError(resp.status_code, body, path)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise DownstreamError(resp.status_code, "Response is not valid JSON", path) from exc
