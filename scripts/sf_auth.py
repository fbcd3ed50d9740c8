"""Command-line helper for checking Salesforce Connected App credentials.

This module serves as a CLI wrapper around sf_proxy.core.salesforce for
headless environments where no browser can reach the proxy's callback.

Commands:
    password-login   Run the username-password grant (optionally a SOQL query)
    web-login        Print the authorize URL, then exchange a pasted code
"""
from __future__ import annotations
import argparse
import getpass
import json
import os
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlparse

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sf_proxy.core.pkce import generate_pkce_pair
from sf_proxy.core.salesforce import (
    DEFAULT_API_VERSION,
    DEFAULT_LOGIN_URL,
    SalesforceApiProxy,
    SalesforceError,
    SalesforceOAuthClient,
)
from sf_proxy.core.token_store import Credential, TokenStore


def main(argv: Optional[list[str]] = None) -> None:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Salesforce Connected App auth helper")
    parser.add_argument("--login-url", default=os.environ.get("SALESFORCE_LOGIN_URL") or DEFAULT_LOGIN_URL)
    parser.add_argument("--client-id", default=os.environ.get("SALESFORCE_CLIENT_ID"))
    parser.add_argument("--api-version", default=os.environ.get("SALESFORCE_API_VERSION", DEFAULT_API_VERSION))

    sub = parser.add_subparsers(dest="cmd")

    pw = sub.add_parser("password-login", help="Authenticate with username, password and security token")
    pw.add_argument("--username", default=os.environ.get("SALESFORCE_USERNAME"))
    pw.add_argument("--query", help="SOQL query to run after authenticating")

    web = sub.add_parser("web-login", help="Authorization code + PKCE with a pasted callback URL")
    web.add_argument("--redirect-uri", default=os.environ.get("SALESFORCE_REDIRECT_URI"))
    web.add_argument("--scope", default=os.environ.get("SALESFORCE_OAUTH_SCOPE", "api refresh_token"))

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        sys.exit(1)

    if not args.client_id:
        print("[sf_auth] SALESFORCE_CLIENT_ID (or --client-id) is required", file=sys.stderr)
        sys.exit(1)

    # Secrets come from the environment or a prompt, never from argv
    client_secret = os.environ.get("SALESFORCE_CLIENT_SECRET")
    if not client_secret:
        print("[sf_auth] SALESFORCE_CLIENT_SECRET is required", file=sys.stderr)
        sys.exit(1)

    client = SalesforceOAuthClient(
        client_id=args.client_id,
        client_secret=client_secret,
        redirect_uri=getattr(args, "redirect_uri", None) or "",
        login_url=args.login_url,
        scope=getattr(args, "scope", None) or "api refresh_token",
    )

    try:
        if args.cmd == "password-login":
            credential = _password_login(client, args.username)
            _report(credential)
            if args.query:
                store = TokenStore(credential)
                proxy = SalesforceApiProxy(store, client, api_version=args.api_version)
                print(json.dumps(proxy.query(args.query), indent=2))
        elif args.cmd == "web-login":
            if not args.redirect_uri:
                print("[sf_auth] SALESFORCE_REDIRECT_URI (or --redirect-uri) is required", file=sys.stderr)
                sys.exit(1)
            _report(_web_login(client))
    except SalesforceError as exc:
        print(f"[sf_auth] {exc.error}: {exc.message}", file=sys.stderr)
        sys.exit(1)


def _password_login(client: SalesforceOAuthClient, username: Optional[str]) -> Credential:
    if not username:
        username = input("Username: ").strip()
    password = os.environ.get("SALESFORCE_PASSWORD") or getpass.getpass("Password: ")
    security_token = os.environ.get("SALESFORCE_SECURITY_TOKEN")
    if security_token is None:
        security_token = getpass.getpass("Security token (blank if IP is trusted): ")
    return client.password_grant(username, password, security_token)


def _web_login(client: SalesforceOAuthClient) -> Credential:
    code_verifier, code_challenge = generate_pkce_pair()

    print("1. Open this URL in a browser and log in:")
    print(f"   {client.build_authorize_url(code_challenge)}")
    print(f"2. Copy the full URL you are redirected to ({client.redirect_uri}?code=...)")
    callback_url = input("Paste the callback URL (or just the code): ").strip()

    code = _extract_code(callback_url)
    if not code:
        print("[sf_auth] No authorization code found", file=sys.stderr)
        sys.exit(1)
    return client.exchange_code(code, code_verifier)


def _extract_code(value: str) -> Optional[str]:
    """Return the ``code`` query parameter of a URL, or the value itself if it is not a URL."""
    if "?" not in value and "=" not in value:
        return value or None
    query = parse_qs(urlparse(value).query)
    codes = query.get("code")
    return codes[0] if codes else None


def _report(credential: Credential) -> None:
    print(f"[sf_auth] Authenticated: instance={urlparse(credential.instance_url).netloc}")
    print(f"[sf_auth] Refresh token issued: {'yes' if credential.refresh_token else 'no'}")


if __name__ == "__main__":
    main()
