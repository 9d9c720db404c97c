"""
services/container.py
──────────────────────────────────────────────────────────────────────────────
Dependency Injection container.

THIS IS THE ONLY FILE THAT NAMES CONCRETE ADAPTER CLASSES.

  CommandRunnerPort → SubprocessCommandRunner (real `aws` CLI)
  TokenCachePort    → FileTokenCache          (~/.cache/awsCodeArtifact)

Thread safety:
  @lru_cache(maxsize=1) makes get_provider() return the same instance across
  calls, so its credential memo is shared by every caller in the process
  (the CLI and the keyring backend alike).
"""
from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import ValidationError

from codeartifact_sso.adapters.file_token_cache import FileTokenCache
from codeartifact_sso.adapters.subprocess_runner import SubprocessCommandRunner
from codeartifact_sso.config.settings import Settings, get_settings
from codeartifact_sso.domain.exceptions import ConfigurationError, MissingConfigurationError
from codeartifact_sso.domain.models import CredentialRequest, ExecutionMode
from codeartifact_sso.services.credential_provider import CredentialProvider
from codeartifact_sso.services.session import LoginSessionChecker
from codeartifact_sso.services.token_fetcher import TokenFetcher

logger = logging.getLogger(__name__)


def build_provider(settings: Settings) -> CredentialProvider:
    """Wire a CredentialProvider from *settings* (no caching)."""
    runner = SubprocessCommandRunner(settings)     # CommandRunnerPort
    cache  = FileTokenCache(settings)              # TokenCachePort

    provider = CredentialProvider(
        cache=cache,
        session=LoginSessionChecker(runner=runner, cache=cache),
        fetcher=TokenFetcher(runner=runner),
    )
    logger.debug("CredentialProvider ready | cache_dir=%s", settings.cache_dir)
    return provider


@lru_cache(maxsize=1)
def get_provider() -> CredentialProvider:
    """Build and return the process-wide CredentialProvider singleton."""
    return build_provider(get_settings())


def build_request(
    settings: Settings,
    repo_url: str | None = None,
    profile: str | None = None,
    cache_expire_hours: int | None = None,
) -> CredentialRequest:
    """Merge explicit values over settings into a CredentialRequest.

    Raises:
        MissingConfigurationError: If no repository URL is available.
    """
    url = repo_url or settings.repo_url
    if not url or not url.strip():
        raise MissingConfigurationError(
            "Repository URL is not provided. "
            "Pass --repo-url or set CODEARTIFACT_REPO_URL."
        )
    try:
        return CredentialRequest(
            repo_url=url,
            profile=profile or settings.profile,
            cache_expire_hours=(
                settings.cache_expire_hours if cache_expire_hours is None else cache_expire_hours
            ),
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid credential configuration: {exc}") from exc


def detect_mode(settings: Settings) -> ExecutionMode:
    return ExecutionMode.from_flag(settings.ci)
