"""Pending OAuth authorizations keyed by the ``state`` parameter.

Each browser redirect to Salesforce gets its own state nonce bound to the PKCE
verifier that produced the challenge. The callback consumes the entry exactly
once; entries left behind by abandoned logins expire.
"""
from __future__ import annotations

import logging
import secrets
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from .salesforce.exceptions import NoPkceVerifier

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600
DEFAULT_MAX_PENDING = 100


class PendingAuthorizations:
    """Short-lived mapping of state nonce -> PKCE code verifier."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_pending: int = DEFAULT_MAX_PENDING,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_pending = max_pending
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[str, tuple[str, float]]" = OrderedDict()

    def issue(self, code_verifier: str) -> str:
        """Remember a verifier and return the state nonce that retrieves it."""
        state = secrets.token_urlsafe(24)
        with self._lock:
            self._purge_expired()
            while len(self._entries) >= self.max_pending:
                self._entries.popitem(last=False)
                logger.warning("Evicted oldest pending login (limit=%d)", self.max_pending)
            self._entries[state] = (code_verifier, self._clock())
        return state

    def consume(self, state: Optional[str]) -> str:
        """Return and forget the verifier bound to ``state``.

        Raises:
            NoPkceVerifier: If the state is missing, unknown, already used or expired
        """
        if not state:
            raise NoPkceVerifier()
        with self._lock:
            self._purge_expired()
            entry = self._entries.pop(state, None)
        if entry is None:
            logger.info("Callback state not found or expired")
            raise NoPkceVerifier()
        return entry[0]

    def discard(self, state: Optional[str]) -> None:
        if not state:
            return
        with self._lock:
            self._entries.pop(state, None)

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    def _purge_expired(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        expired = [state for state, (_, created) in self._entries.items() if created <= cutoff]
        for state in expired:
            del self._entries[state]
