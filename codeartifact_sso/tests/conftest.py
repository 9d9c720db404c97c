"""
tests/conftest.py
──────────────────────────────────────────────────────────────────────────────
Shared pytest fixtures and fake adapter implementations.

FakeCommandRunner implements CommandRunnerPort via structural subtyping — it
does NOT inherit from any base class.  It records every argv it is given and
answers from a table keyed by the AWS CLI service + operation, so service
logic is tested without a real `aws` binary.

Fixture hierarchy:
  settings   → Settings pointing the cache at tmp_path
  cache      → real FileTokenCache on tmp_path
  runner     → FakeCommandRunner (session valid, token "eyTOKEN")
  session    → LoginSessionChecker(runner, cache)
  fetcher    → TokenFetcher(runner)
  provider   → CredentialProvider wired with all of the above
"""
from __future__ import annotations

from datetime import datetime

import pytest

from codeartifact_sso.adapters.file_token_cache import FileTokenCache
from codeartifact_sso.config.settings import Settings
from codeartifact_sso.domain.models import CommandResult, CredentialRequest
from codeartifact_sso.services.credential_provider import CredentialProvider
from codeartifact_sso.services.session import LoginSessionChecker
from codeartifact_sso.services.token_fetcher import TokenFetcher

REPO_URL = "https://mycompany-123456789012.d.codeartifact.us-west-2.amazonaws.com/maven/maven-central/"
PROFILE = "mycompany-dev"
TOKEN = "eyTOKEN"
NOW = datetime(2024, 3, 1, 12, 0, 0)

IDENTITY = ("sts", "get-caller-identity")
LOGIN = ("sso", "login")
GET_TOKEN = ("codeartifact", "get-authorization-token")


# ── Fake adapters ──────────────────────────────────────────────────────────

class FakeCommandRunner:
    """Scripted CommandRunnerPort.

    responses maps (service, operation) to a CommandResult, or to a list of
    results consumed in order (the last one repeats).
    """

    def __init__(self, responses: dict | None = None) -> None:
        self.responses: dict = {
            IDENTITY: CommandResult(0, stdout='{"Account": "123456789012"}'),
            LOGIN: CommandResult(0),
            GET_TOKEN: CommandResult(0, stdout=f"{TOKEN}\n"),
        }
        self.responses.update(responses or {})
        self.calls: list[tuple[list[str], bool]] = []

    def run(self, argv: list[str], interactive: bool = False) -> CommandResult:
        self.calls.append((list(argv), interactive))
        result = self.responses[tuple(argv[1:3])]
        if isinstance(result, list):
            return result.pop(0) if len(result) > 1 else result[0]
        return result

    def operations(self) -> list[tuple[str, str]]:
        return [tuple(argv[1:3]) for argv, _ in self.calls]

    def argv_for(self, operation: tuple[str, str]) -> list[list[str]]:
        return [argv for argv, _ in self.calls if tuple(argv[1:3]) == operation]


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Return a Settings instance isolated from the developer's environment."""
    return Settings(
        repo_url=REPO_URL,
        profile=PROFILE,
        cache_expire_hours=6,
        cache_dir=tmp_path / "cache",
        cache_max_records=20,
        aws_cli_path="/usr/local/bin/aws",
        command_timeout=5,
        ci=False,
    )


@pytest.fixture
def cache(settings) -> FileTokenCache:
    return FileTokenCache(settings)


@pytest.fixture
def runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def session(runner, cache) -> LoginSessionChecker:
    return LoginSessionChecker(runner=runner, cache=cache)


@pytest.fixture
def fetcher(runner) -> TokenFetcher:
    return TokenFetcher(runner=runner)


@pytest.fixture
def provider(cache, session, fetcher) -> CredentialProvider:
    return CredentialProvider(cache=cache, session=session, fetcher=fetcher)


@pytest.fixture
def request_() -> CredentialRequest:
    return CredentialRequest(repo_url=REPO_URL, profile=PROFILE, cache_expire_hours=6)
