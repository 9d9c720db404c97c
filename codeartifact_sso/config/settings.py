"""
config/settings.py
──────────────────────────────────────────────────────────────────────────────
Single source of truth for all tuneable parameters.

All values can be overridden via environment variables or a .env file in the
current working directory.  The frozen dataclass ensures settings are never
mutated at runtime.

Most commonly set:
  CODEARTIFACT_REPO_URL            → repository to authenticate against
  CODEARTIFACT_PROFILE             → local AWS SSO profile
  CODEARTIFACT_CACHE_EXPIRE_HOURS  → how long a cached token is reused
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from codeartifact_sso.domain.exceptions import ConfigurationError

# Load .env from the directory the build is run in
load_dotenv(Path.cwd() / ".env")

DEFAULT_CACHE_EXPIRE_HOURS: int = 6


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key, str(default))
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc


def _env_path(key: str, default: Path) -> Path:
    return Path(os.getenv(key, str(default))).expanduser()


def _env_profile() -> str:
    return os.getenv("CODEARTIFACT_PROFILE") or os.getenv("AWS_PROFILE") or "default"


@dataclass(frozen=True)
class Settings:
    """Immutable application settings loaded from environment variables."""

    # ── Repository ─────────────────────────────────────────────────────────
    repo_url: str = field(
        default_factory=lambda: _env("CODEARTIFACT_REPO_URL", "")
    )
    profile: str = field(default_factory=_env_profile)

    # ── Token cache ────────────────────────────────────────────────────────
    cache_expire_hours: int = field(
        default_factory=lambda: _env_int(
            "CODEARTIFACT_CACHE_EXPIRE_HOURS", DEFAULT_CACHE_EXPIRE_HOURS
        )
    )
    cache_dir: Path = field(
        default_factory=lambda: _env_path(
            "CODEARTIFACT_CACHE_DIR",
            Path.home() / ".cache" / "awsCodeArtifact",
        )
    )
    # 0 disables compaction (file grows without bound)
    cache_max_records: int = field(
        default_factory=lambda: _env_int("CODEARTIFACT_CACHE_MAX_RECORDS", 20)
    )

    # ── AWS CLI ────────────────────────────────────────────────────────────
    aws_cli_path: str = field(
        default_factory=lambda: _env("AWS_CLI_PATH", "aws")
    )
    # Applies to captured commands only; `aws sso login` never times out.
    command_timeout: int = field(
        default_factory=lambda: _env_int("CODEARTIFACT_COMMAND_TIMEOUT", 60)
    )

    # ── Execution environment ──────────────────────────────────────────────
    ci: bool = field(
        default_factory=lambda: _env("CIRCLECI", "") == "true"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide Settings, read from the environment once.

    The CLI and the keyring backend both go through here, so a .env file or
    CODEARTIFACT_* variable is read once per pip or CLI invocation.
    """
    return Settings()
