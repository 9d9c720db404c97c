"""
services/session.py
──────────────────────────────────────────────────────────────────────────────
Local-mode SSO session guard.

A cached CodeArtifact token is worthless once the SSO session that minted it
has died, so before every local lookup we ask STS who we are.  If that fails
the user is sent through `aws sso login` (browser) and the profile's token
cache is invalidated, forcing the next lookup to fetch a fresh token.
"""
from __future__ import annotations

import logging

from codeartifact_sso.domain.exceptions import LoginFailedError
from codeartifact_sso.ports.command_runner_port import CommandRunnerPort
from codeartifact_sso.ports.token_cache_port import TokenCachePort

logger = logging.getLogger(__name__)


def caller_identity_command(profile: str) -> list[str]:
    return ["aws", "sts", "get-caller-identity", "--profile", profile]


def sso_login_command(profile: str) -> list[str]:
    return ["aws", "sso", "login", "--profile", profile]


class LoginSessionChecker:
    """Ensures a live SSO session exists for a profile.

    Args:
        runner: Any object satisfying CommandRunnerPort.
        cache:  Any object satisfying TokenCachePort.
    """

    def __init__(self, runner: CommandRunnerPort, cache: TokenCachePort) -> None:
        self._runner = runner
        self._cache = cache

    def ensure_logged_in(self, profile: str) -> bool:
        """Verify the SSO session for *profile*, logging in again if needed.

        Returns:
            True if a login was performed (and the cache invalidated),
            False if the existing session was still valid.

        Raises:
            LoginFailedError: If `aws sso login` exits non-zero.
        """
        logger.info("Checking SSO login status | profile=%s", profile)
        probe = self._runner.run(caller_identity_command(profile))
        if probe.ok:
            logger.info("Already logged in | profile=%s", profile)
            return False

        logger.warning(
            "SSO session for profile '%s' has expired (exit %d), refreshing …",
            profile,
            probe.exit_code,
        )
        logger.warning("Opening SSO authorization page in your default browser …")

        login = self._runner.run(sso_login_command(profile), interactive=True)
        if not login.ok:
            raise LoginFailedError(
                f"Failed refreshing AWS SSO session for profile '{profile}' "
                f"(exit {login.exit_code})" + (f": {login.stderr.strip()}" if login.stderr else ""),
                exit_code=login.exit_code,
                stderr=login.stderr,
            )

        logger.info("Successfully refreshed SSO session | profile=%s", profile)
        self._cache.invalidate(profile)
        return True
