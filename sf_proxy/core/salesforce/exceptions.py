"""Salesforce-specific exceptions for error handling.

Every exception carries the HTTP status the proxy answers with and a short
``error`` label used in JSON bodies. Downstream status codes and bodies are
preserved for diagnostics; no secret value is ever formatted into a message.
"""
from __future__ import annotations

from typing import Any, Optional


class SalesforceError(Exception):
    """Base exception for all Salesforce proxy operations."""

    http_status = 500
    error = "Salesforce Error"

    def __init__(self, message: str = ""):
        self.message = message or (self.__doc__ or self.error).strip().splitlines()[0]
        super().__init__(self.message)


class CredentialsMissing(SalesforceError):
    """Client id, client secret or login credentials are not configured."""

    error = "Credentials Missing"

    def __init__(self, missing: Optional[list[str]] = None, message: str = ""):
        self.missing = list(missing or [])
        if not message and self.missing:
            message = f"Missing configuration: {', '.join(self.missing)}"
        super().__init__(message)


class NoAuthorizationCode(SalesforceError):
    """Callback request did not include an authorization code."""

    http_status = 400
    error = "No Authorization Code"


class NoPkceVerifier(SalesforceError):
    """Login attempt expired or was already used. Restart the login flow."""

    http_status = 400
    error = "Invalid Login State"


class TokenExchangeFailed(SalesforceError):
    """Salesforce token endpoint rejected the request.

    Attributes:
        status_code: Downstream HTTP status (None on transport errors)
        body: Parsed downstream body (dict) or raw text
        grant_type: OAuth grant that was attempted
    """

    http_status = 502
    error = "Token Exchange Failed"

    def __init__(self, status_code: Optional[int], body: Any, grant_type: str):
        self.status_code = status_code
        self.body = body
        self.grant_type = grant_type
        super().__init__(f"[{status_code}] {grant_type} grant rejected: {_describe(body)}")


class Unauthenticated(SalesforceError):
    """Not authenticated with Salesforce. Log in at /auth/login."""

    http_status = 401
    error = "Authentication required"


class NoRefreshToken(SalesforceError):
    """No refresh token is held; a new login is required."""

    http_status = 401
    error = "No Refresh Token"


class DownstreamError(SalesforceError):
    """Salesforce REST API returned an error.

    Attributes:
        status_code: Downstream HTTP status (None on transport errors)
        body: Parsed downstream body (list/dict) or raw text
        path: API path that failed
    """

    error = "Salesforce request failed"

    def __init__(self, status_code: Optional[int], body: Any, path: str):
        self.status_code = status_code
        self.body = body
        self.path = path
        if status_code and status_code >= 400:
            self.http_status = status_code
        else:
            self.http_status = 502
        super().__init__(f"[{status_code}] {path}: {_describe(body)}")


class InvalidRecordId(SalesforceError):
    """Record id is not a valid 15 or 18 character Salesforce id."""

    http_status = 400
    error = "Invalid Record Id"


def _describe(body: Any) -> str:
    """Short human-readable description of a downstream error body."""
    if isinstance(body, dict):
        return str(body.get("error_description") or body.get("error") or body.get("message") or body)
    if isinstance(body, list) and body and isinstance(body[0], dict):
        return str(body[0].get("message") or body[0].get("errorCode") or body[0])
    return str(body)
