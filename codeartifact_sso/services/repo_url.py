"""
services/repo_url.py
──────────────────────────────────────────────────────────────────────────────
Derives registry coordinates from a CodeArtifact repository URL.

  https://aa-bb-cc-123456789012.d.codeartifact.us-west-2.amazonaws.com/pypi/repo/
          └──────┘ └──────────┘               └───────┘
           domain     account                   region

The domain may itself contain hyphens; the account is the trailing run of
digits before ".d.".  The whole string must match, prefix matches are
rejected.
"""
from __future__ import annotations

import logging
import re

from codeartifact_sso.domain.exceptions import InvalidRepoUrlError, MissingConfigurationError
from codeartifact_sso.domain.models import RepoCoordinates

logger = logging.getLogger(__name__)

_REPO_URL_RE = re.compile(
    r"https://(?P<domain>[a-zA-Z0-9-]+)-(?P<account>\d+)"
    r"\.d\.codeartifact\.(?P<region>[a-z0-9-]+)\.amazonaws\.com.*"
)


def parse_repo_url(repo_url: str | None) -> RepoCoordinates:
    """Split a repository URL into domain, account and region.

    Raises:
        MissingConfigurationError: If *repo_url* is empty.
        InvalidRepoUrlError:       If it is not a CodeArtifact endpoint.
    """
    if not repo_url or not repo_url.strip():
        raise MissingConfigurationError(
            "Repository URL is not provided. "
            "Pass --repo-url or set CODEARTIFACT_REPO_URL."
        )

    match = _REPO_URL_RE.fullmatch(repo_url)
    if match is None:
        raise InvalidRepoUrlError(f"Failed parsing repoUrl '{repo_url}'")

    coords = RepoCoordinates(**match.groupdict())
    logger.info(
        "Parsed repoUrl | domain=%s account=%s region=%s",
        coords.domain,
        coords.account,
        coords.region,
    )
    return coords


def is_codeartifact_url(url: str) -> bool:
    return _REPO_URL_RE.fullmatch(url or "") is not None
