"""
domain/models.py
──────────────────────────────────────────────────────────────────────────────
Pure domain objects — Pydantic models with no imports from adapters or ports.

  RepoCoordinates    domain / account / region parsed from a repository URL
  CredentialRequest  the three values the build tool hands us
  CacheRecord        tagged view of the last line of a token cache file
  Credential         what goes back to the build tool (aws:<token>)
  CommandResult      exit code + captured output of one AWS CLI call
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CODEARTIFACT_USERNAME = "aws"


# ── Enums ──────────────────────────────────────────────────────────────────────

class ExecutionMode(str, Enum):
    """Where the build runs.  Computed once at the boundary, never inside logic."""
    CI    = "ci"     # non-interactive: ambient credentials, no profile, no cache
    LOCAL = "local"  # developer machine: SSO profile, session check, disk cache

    @classmethod
    def from_flag(cls, ci: bool) -> "ExecutionMode":
        return cls.CI if ci else cls.LOCAL


class CacheState(str, Enum):
    VALID       = "valid"
    INVALIDATED = "invalidated"  # blank last line, written after a re-login
    ABSENT      = "absent"       # no file, or an empty one


# ── Input ──────────────────────────────────────────────────────────────────────

class CredentialRequest(BaseModel):
    """Validated configuration for one credential resolution."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    repo_url: str = Field(..., description="CodeArtifact repository endpoint")
    profile: str = Field("default", min_length=1,
                         description="Local AWS profile used for SSO-scoped commands")
    cache_expire_hours: int = Field(6, ge=1,
                                    description="How long a cached token is reused")

    @field_validator("profile")
    @classmethod
    def profile_is_a_plain_name(cls, v: str) -> str:
        if v in (".", "..") or "/" in v or "\\" in v:
            raise ValueError("profile must not contain path separators")
        return v


# ── Parsed / persisted state ───────────────────────────────────────────────────

class RepoCoordinates(BaseModel):
    """Registry coordinates derived from a repository URL."""

    model_config = ConfigDict(frozen=True)

    domain:  str
    account: str
    region:  str


class CacheRecord(BaseModel):
    """The authoritative (last) record of a token cache file."""

    model_config = ConfigDict(frozen=True)

    state:     CacheState
    timestamp: Optional[datetime] = None
    token:     Optional[str]      = None

    @classmethod
    def valid(cls, timestamp: datetime, token: str) -> "CacheRecord":
        return cls(state=CacheState.VALID, timestamp=timestamp, token=token)

    @classmethod
    def invalidated(cls) -> "CacheRecord":
        return cls(state=CacheState.INVALIDATED)

    @classmethod
    def absent(cls) -> "CacheRecord":
        return cls(state=CacheState.ABSENT)


# ── Output ─────────────────────────────────────────────────────────────────────

class Credential(BaseModel):
    """Username/password pair handed back to the build tool."""

    model_config = ConfigDict(frozen=True)

    username: str = CODEARTIFACT_USERNAME
    password: str

    def __repr__(self) -> str:
        return f"Credential(username={self.username!r}, password='***')"

    __str__ = __repr__


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single external command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
