"""In-memory Salesforce credential store.

One store is owned by the application factory and handed to the routes and
the API proxy. Nothing is persisted: a restart means logging in again.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Credential:
    """Tokens returned by the Salesforce token endpoint."""

    access_token: str = field(repr=False)
    instance_url: str
    refresh_token: Optional[str] = field(default=None, repr=False)
    obtained_at: float = field(default_factory=time.time)

    @classmethod
    def from_token_response(cls, payload: Mapping[str, Any], refresh_token: Optional[str] = None) -> "Credential":
        """Build a credential from a token endpoint JSON body.

        Args:
            payload: Decoded JSON body
            refresh_token: Refresh token to keep when the body carries none

        Raises:
            KeyError: If access_token or instance_url is missing
        """
        return cls(
            access_token=payload["access_token"],
            instance_url=payload["instance_url"].rstrip("/"),
            refresh_token=payload.get("refresh_token") or refresh_token,
        )


class TokenStore:
    """Holds the single process-wide credential.

    ``None`` means unauthenticated. Writers swap the whole credential under a
    lock so readers never observe a half-updated token set.
    """

    def __init__(self, credential: Optional[Credential] = None):
        self._lock = threading.Lock()
        self._credential = credential

    def get(self) -> Optional[Credential]:
        with self._lock:
            return self._credential

    def set(self, credential: Credential) -> None:
        with self._lock:
            self._credential = credential

    def clear(self) -> None:
        with self._lock:
            self._credential = None

    def clear_if(self, credential: Credential) -> bool:
        """Clear the store only if it still holds ``credential``.

        Returns:
            True if the store was cleared, False if a newer credential was kept
        """
        with self._lock:
            if self._credential is not credential:
                return False
            self._credential = None
            return True

    def is_authenticated(self) -> bool:
        credential = self.get()
        return bool(credential and credential.access_token)
