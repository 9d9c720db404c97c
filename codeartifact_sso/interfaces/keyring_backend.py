"""
interfaces/keyring_backend.py
──────────────────────────────────────────────────────────────────────────────
keyring backend that serves CodeArtifact credentials to pip, twine and uv.

Registered under the `keyring.backends` entry point (pyproject.toml), so once
the package is installed pip picks it up automatically:

  pip install --index-url https://acme-123456789012.d.codeartifact.us-west-2.amazonaws.com/pypi/py/simple/ requests

Only services that look like CodeArtifact endpoints are answered; everything
else returns None so other backends get their turn.  pip sometimes asks with
the bare host instead of the full URL, which is treated as https.

The profile, cache expiry and CI/local mode come from settings; the service
URL itself is the repository URL.  Errors propagate; pip logs them and
continues without keyring credentials.
"""
from __future__ import annotations

import logging
from typing import Optional

from keyring import backend, credentials
from keyring.errors import PasswordDeleteError, PasswordSetError

from codeartifact_sso.config.settings import get_settings
from codeartifact_sso.domain.models import CODEARTIFACT_USERNAME, Credential
from codeartifact_sso.services.container import build_request, detect_mode, get_provider
from codeartifact_sso.services.repo_url import is_codeartifact_url

logger = logging.getLogger(__name__)


def _normalise_service(service: str) -> str:
    if "://" not in service:
        return f"https://{service}"
    return service


class CodeArtifactKeyring(backend.KeyringBackend):
    """Read-only keyring backend for AWS CodeArtifact repositories."""

    priority = 9  # ahead of the OS keychains

    def _credential_for(self, service: str, username: Optional[str]) -> Optional[Credential]:
        url = _normalise_service(service)
        if not is_codeartifact_url(url):
            return None
        if username and username != CODEARTIFACT_USERNAME:
            logger.debug("Ignoring request for user %r on %s", username, url)
            return None

        settings = get_settings()
        request = build_request(settings, repo_url=url)
        logger.debug("Resolving credential for %s", url)
        return get_provider().get_credential(request, detect_mode(settings))

    def get_password(self, service: str, username: str) -> Optional[str]:  # type: ignore[override]
        credential = self._credential_for(service, username)
        return credential.password if credential else None

    def get_credential(  # type: ignore[override]
        self, service: str, username: Optional[str]
    ) -> Optional[credentials.SimpleCredential]:
        credential = self._credential_for(service, username)
        if credential is None:
            return None
        return credentials.SimpleCredential(credential.username, credential.password)

    def set_password(self, service: str, username: str, password: str) -> None:
        raise PasswordSetError("CodeArtifact tokens are minted by the AWS CLI, not stored")

    def delete_password(self, service: str, username: str) -> None:
        raise PasswordDeleteError(
            "Use `codeartifact-sso invalidate` to drop a cached CodeArtifact token"
        )
