"""
domain/exceptions.py
──────────────────────────────────────────────────────────────────────────────
Custom exception hierarchy.

All exceptions are rooted at CodeArtifactSSOError so callers can catch
broadly (except CodeArtifactSSOError) or narrowly (except TokenFetchError).

Propagation policy:
  CacheParseError      → absorbed by the cache adapter, becomes a cache miss
  everything else      → propagates to the caller; there is no safe default
                         credential to fall back on

CLI exit codes:
  ConfigurationError   → 2
  all other errors     → 1
"""
from __future__ import annotations


class CodeArtifactSSOError(Exception):
    """Base exception for all application errors."""


class ConfigurationError(CodeArtifactSSOError):
    """Raised when configuration is invalid or the AWS CLI cannot be found."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a required configuration value (e.g. repo URL) is absent."""


class InvalidRepoUrlError(CodeArtifactSSOError):
    """Raised when a repository URL is not a CodeArtifact endpoint."""


class CacheParseError(CodeArtifactSSOError):
    """Raised when the last record of a token cache file cannot be parsed."""


class CommandError(CodeArtifactSSOError):
    """Raised when an AWS CLI invocation fails."""

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class LoginFailedError(CommandError):
    """Raised when `aws sso login` exits non-zero."""


class TokenFetchError(CommandError):
    """Raised when `aws codeartifact get-authorization-token` fails."""


class CommandTimeoutError(CommandError):
    """Raised when a captured AWS CLI command exceeds COMMAND_TIMEOUT."""
