"""
ports/token_cache_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the per-profile token cache.

The cache is the only shared mutable state between builds.  Three
operations match what the credential state machine needs:
  1. read        — token if fresh, else None (never raises on bad data)
  2. append      — record a newly minted token (write failures are logged)
  3. invalidate  — force the next read to miss (after an SSO re-login)

Current implementation: FileTokenCache (append-only text file per profile)
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenCachePort(Protocol):
    """Contract for a timestamped single-token-per-profile cache."""

    def read(self, profile: str, expiry: timedelta, now: datetime) -> str | None:
        """Return the cached token for *profile* if it is still fresh.

        Args:
            profile: Cache key (AWS profile name).
            expiry:  How long after its timestamp a token stays usable.
            now:     Reference time for the freshness check.

        Returns:
            The token, or None when absent, invalidated, expired or
            unreadable.
        """
        ...

    def append(self, profile: str, timestamp: datetime, token: str) -> None:
        """Persist *token* as the newest record for *profile*.

        Storage failures are logged, not raised: the caller already holds
        the token and a lost record only costs one extra fetch.
        """
        ...

    def invalidate(self, profile: str) -> None:
        """Make the next read() for *profile* return None."""
        ...
