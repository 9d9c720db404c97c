"""
tests/e2e/test_resolve_credential.py
──────────────────────────────────────────────────────────────────────────────
End-to-end credential resolution through the container wiring.

build_provider() assembles the real SubprocessCommandRunner and
FileTokenCache; only subprocess.run is replaced, by a dispatcher that
behaves like the AWS CLI.  The cache lives in tmp_path.

For tests that run the real AWS CLI, see the integration/ folder and run
with: pytest -m integration
"""
from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from codeartifact_sso.domain.models import ExecutionMode
from codeartifact_sso.services.container import build_provider, build_request
from codeartifact_sso.tests.conftest import NOW, PROFILE, REPO_URL, TOKEN

_RUN = "codeartifact_sso.adapters.subprocess_runner.subprocess.run"


class FakeAwsCli:
    """Stands in for subprocess.run; answers like the aws binary would."""

    def __init__(self, session_valid: bool = True, token: str = TOKEN) -> None:
        self.session_valid = session_valid
        self.token = token
        self.argvs: list[list[str]] = []

    def __call__(self, argv, **kwargs):
        self.argvs.append(list(argv))
        proc = MagicMock(stdout="", stderr="")
        if argv[1:3] == ["sts", "get-caller-identity"]:
            proc.returncode = 0 if self.session_valid else 255
        elif argv[1:3] == ["sso", "login"]:
            self.session_valid = True
            proc.returncode = 0
        elif argv[1:3] == ["codeartifact", "get-authorization-token"]:
            proc.returncode = 0
            proc.stdout = f"{self.token}\n"
        else:
            proc.returncode = 127
        return proc


@pytest.fixture
def aws():
    fake = FakeAwsCli()
    with patch(_RUN, side_effect=fake):
        yield fake


class TestLocalScenario:
    def test_empty_cache_fetches_and_persists(self, aws, settings):
        provider = build_provider(settings)
        request = build_request(settings)

        token = provider.resolve(request, ExecutionMode.LOCAL, now=NOW)

        assert token == TOKEN
        fetch = aws.argvs[-1]
        assert fetch == [
            "/usr/local/bin/aws", "codeartifact", "get-authorization-token",
            "--domain", "mycompany",
            "--domain-owner", "123456789012",
            "--query", "authorizationToken",
            "--output", "text",
            "--region", "us-west-2",
            "--profile", PROFILE,
        ]
        content = (settings.cache_dir / PROFILE / "ssoToken.records").read_text()
        non_blank = [line for line in content.splitlines() if line.strip()]
        assert len(non_blank) == 1
        assert non_blank[0].endswith(TOKEN)

    def test_second_build_reuses_cached_token(self, aws, settings):
        build_provider(settings).resolve(build_request(settings), ExecutionMode.LOCAL, now=NOW)
        aws.token = "should-not-be-used"

        token = build_provider(settings).resolve(
            build_request(settings), ExecutionMode.LOCAL, now=NOW + timedelta(hours=1)
        )

        assert token == TOKEN
        assert aws.argvs[-1][1:3] == ["sts", "get-caller-identity"]

    def test_expired_session_relogs_and_refetches(self, aws, settings):
        build_provider(settings).resolve(build_request(settings), ExecutionMode.LOCAL, now=NOW)
        aws.session_valid = False
        aws.token = "fresh-after-login"

        token = build_provider(settings).resolve(
            build_request(settings), ExecutionMode.LOCAL, now=NOW + timedelta(minutes=5)
        )

        assert token == "fresh-after-login"
        ops = [argv[1:3] for argv in aws.argvs[-3:]]
        assert ops == [
            ["sts", "get-caller-identity"],
            ["sso", "login"],
            ["codeartifact", "get-authorization-token"],
        ]

    def test_get_credential_is_username_aws(self, aws, settings):
        credential = build_provider(settings).get_credential(
            build_request(settings), ExecutionMode.LOCAL
        )
        assert (credential.username, credential.password) == ("aws", TOKEN)


class TestCiScenario:
    def test_no_profile_no_session_check_no_cache(self, aws, settings):
        token = build_provider(settings).resolve(
            build_request(settings, repo_url=REPO_URL), ExecutionMode.CI, now=NOW
        )

        assert token == TOKEN
        assert len(aws.argvs) == 1
        assert "--profile" not in aws.argvs[0]
        assert not (settings.cache_dir / PROFILE).exists()
