"""
services/token_fetcher.py
──────────────────────────────────────────────────────────────────────────────
Mints a CodeArtifact authorization token through the AWS CLI.
"""
from __future__ import annotations

import logging

from codeartifact_sso.domain.exceptions import TokenFetchError
from codeartifact_sso.domain.models import RepoCoordinates
from codeartifact_sso.ports.command_runner_port import CommandRunnerPort

logger = logging.getLogger(__name__)


def authorization_token_command(
    coords: RepoCoordinates,
    profile: str | None = None,
) -> list[str]:
    argv = [
        "aws", "codeartifact", "get-authorization-token",
        "--domain", coords.domain,
        "--domain-owner", coords.account,
        "--query", "authorizationToken",
        "--output", "text",
        "--region", coords.region,
    ]
    if profile:
        argv += ["--profile", profile]
    return argv


class TokenFetcher:
    """Runs `aws codeartifact get-authorization-token` and returns stdout.

    Args:
        runner: Any object satisfying CommandRunnerPort.
    """

    def __init__(self, runner: CommandRunnerPort) -> None:
        self._runner = runner

    def fetch(self, coords: RepoCoordinates, profile: str | None = None) -> str:
        """Fetch a fresh token for *coords*.

        Args:
            coords:  Parsed registry coordinates.
            profile: AWS profile (local mode).  None uses the ambient
                     credentials of the environment (CI mode).

        Returns:
            Bearer token string (never empty).

        Raises:
            TokenFetchError: If the CLI exits non-zero or prints nothing.
        """
        if profile:
            logger.info("Fetching CodeArtifact token | profile=%s", profile)
        else:
            logger.info("Fetching CodeArtifact token without profile")

        result = self._runner.run(authorization_token_command(coords, profile))
        if not result.ok:
            stderr = result.stderr.strip() or "(no stderr)"
            logger.error(
                "Failed fetching CodeArtifact token (exit %d): %s", result.exit_code, stderr
            )
            raise TokenFetchError(
                f"aws codeartifact get-authorization-token failed "
                f"(exit {result.exit_code}): {stderr}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )

        token = result.stdout.strip()
        if not token:
            raise TokenFetchError(
                "aws codeartifact get-authorization-token returned an empty token",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )

        logger.info("Successfully fetched CodeArtifact token")
        return token
