"""PKCE (Proof Key for Code Exchange) helpers, RFC 7636 S256 method."""
from __future__ import annotations

import secrets

from authlib.oauth2.rfc7636 import create_s256_code_challenge

# 32 random bytes -> 43 URL-safe characters, inside RFC 7636's 43..128 range
VERIFIER_BYTES = 32


def generate_pkce_pair() -> tuple[str, str]:
    """Generate a PKCE code verifier and its S256 code challenge.

    Returns:
        (code_verifier, code_challenge), both base64url without padding
    """
    code_verifier = secrets.token_urlsafe(VERIFIER_BYTES)
    return code_verifier, compute_challenge(code_verifier)


def compute_challenge(code_verifier: str) -> str:
    """Return BASE64URL(SHA256(code_verifier)) without padding."""
    return create_s256_code_challenge(code_verifier)
