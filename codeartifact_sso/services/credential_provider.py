"""
services/credential_provider.py
──────────────────────────────────────────────────────────────────────────────
Credential orchestrator: repository URL in, aws:<token> credential out.

State machine:

  START → URL_PARSED → MODE_DETECTED ─┬─ CI ─────────────────────→ FETCH → DONE
                                      └─ LOCAL → SESSION_CHECK → CACHE_LOOKUP
                                                     ┌──────────────┴──────────┐
                                                    HIT → DONE        MISS → FETCH → CACHE_WRITE → DONE

CI mode always fetches a fresh token with the ambient credentials of the CI
job: no profile, no SSO session check and no disk cache (CI containers are
short-lived and there is no user to complete a browser login).

Build tools may evaluate the credential lazily and more than once per build.
get_credential() memoizes per request so the session check and the fetch run
at most once per provider lifetime.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta

from codeartifact_sso.domain.models import Credential, CredentialRequest, ExecutionMode
from codeartifact_sso.ports.token_cache_port import TokenCachePort
from codeartifact_sso.services.repo_url import parse_repo_url
from codeartifact_sso.services.session import LoginSessionChecker
from codeartifact_sso.services.token_fetcher import TokenFetcher

logger = logging.getLogger(__name__)

_MemoKey = tuple[str, str, int, ExecutionMode]


class CredentialProvider:
    """Resolves CodeArtifact credentials with on-disk token caching.

    Inject via services/container.py — do not instantiate directly in
    application code.

    Args:
        cache:   Any object satisfying TokenCachePort.
        session: LoginSessionChecker (local mode only).
        fetcher: TokenFetcher.
    """

    def __init__(
        self,
        cache: TokenCachePort,
        session: LoginSessionChecker,
        fetcher: TokenFetcher,
    ) -> None:
        self._cache = cache
        self._session = session
        self._fetcher = fetcher
        self._memo: dict[_MemoKey, Credential] = {}
        self._lock = threading.Lock()

    @property
    def cache(self) -> TokenCachePort:
        return self._cache

    @property
    def session(self) -> LoginSessionChecker:
        return self._session

    # ── Public API ─────────────────────────────────────────────────────────

    def get_credential(self, request: CredentialRequest, mode: ExecutionMode) -> Credential:
        """Return the credential for *request*, resolving it at most once.

        Raises:
            MissingConfigurationError, InvalidRepoUrlError,
            LoginFailedError, TokenFetchError: see resolve().
        """
        key = (request.repo_url, request.profile, request.cache_expire_hours, mode)
        with self._lock:
            credential = self._memo.get(key)
            if credential is None:
                credential = Credential(password=self.resolve(request, mode))
                self._memo[key] = credential
            return credential

    def resolve(
        self,
        request: CredentialRequest,
        mode: ExecutionMode,
        now: datetime | None = None,
    ) -> str:
        """Run the full state machine once, without memoization.

        Args:
            request: Repository URL, profile and cache expiry.
            mode:    ExecutionMode.CI or ExecutionMode.LOCAL.
            now:     Reference time for cache freshness and the written
                     timestamp (defaults to the local wall clock).

        Returns:
            Authorization token.

        Raises:
            MissingConfigurationError: Repository URL is empty.
            InvalidRepoUrlError:       Repository URL is not CodeArtifact.
            LoginFailedError:          `aws sso login` failed (local mode).
            TokenFetchError:           Token command failed.
        """
        coords = parse_repo_url(request.repo_url)
        logger.info("Resolving CodeArtifact token | mode=%s", mode.value)

        if mode is ExecutionMode.CI:
            return self._fetcher.fetch(coords)

        profile = request.profile
        self._session.ensure_logged_in(profile)

        now = now or datetime.now()
        expiry = timedelta(hours=request.cache_expire_hours)
        cached = self._cache.read(profile, expiry, now)
        if cached is not None:
            logger.info("Cached token is available, using it | profile=%s", profile)
            return cached

        logger.info("Retrieving new token | profile=%s", profile)
        token = self._fetcher.fetch(coords, profile)
        self._cache.append(profile, now, token)
        return token

    def clear(self) -> None:
        """Forget memoized credentials (the disk cache is untouched)."""
        with self._lock:
            self._memo.clear()
