"""
interfaces/cli.py
──────────────────────────────────────────────────────────────────────────────
Command-line interface for CodeArtifact SSO credentials.

Usage:
  # Print a token (cached if still fresh)
  codeartifact-sso token --repo-url https://acme-123456789012.d.codeartifact.us-west-2.amazonaws.com/pypi/py/

  # pip index URL with credentials embedded
  pip install -i "$(codeartifact-sso index-url --profile acme-dev)" requests

  # Refresh the SSO session only / drop the cached token
  codeartifact-sso login --profile acme-dev
  codeartifact-sso invalidate --profile acme-dev

  # Check the credential against the repository
  codeartifact-sso verify -v

Every option falls back to the CODEARTIFACT_* environment variables (see
config/settings.py).  Mode is CI when CIRCLECI=true unless --ci/--no-ci is
given.

Exit codes:
  0 — success
  1 — fatal error (login, token fetch, repository rejected credential)
  2 — argument / configuration error
"""
from __future__ import annotations

import argparse
import logging
import sys
from urllib.parse import quote, urlsplit, urlunsplit

import requests

from codeartifact_sso.config.settings import Settings, get_settings
from codeartifact_sso.domain.exceptions import CodeArtifactSSOError, ConfigurationError
from codeartifact_sso.domain.models import Credential, CredentialRequest, ExecutionMode
from codeartifact_sso.services.container import build_request, detect_mode, get_provider
from codeartifact_sso.services.credential_provider import CredentialProvider

logger = logging.getLogger(__name__)

VERIFY_TIMEOUT_SECONDS = 30


# ── Argument parser ────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--repo-url", "-r",
        metavar="URL",
        dest="repo_url",
        help="CodeArtifact repository URL. (default: $CODEARTIFACT_REPO_URL)",
    )
    common.add_argument(
        "--profile", "-p",
        metavar="NAME",
        help="Local AWS SSO profile. (default: $CODEARTIFACT_PROFILE or $AWS_PROFILE)",
    )
    common.add_argument(
        "--expire-hours", "-e",
        type=int,
        dest="expire_hours",
        metavar="HOURS",
        help="Reuse a cached token for this many hours. (default: 6)",
    )
    common.add_argument(
        "--ci",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force CI mode (no profile, no cache) or local mode. (default: $CIRCLECI == 'true')",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )

    p = argparse.ArgumentParser(
        prog="codeartifact-sso",
        description="Fetch and cache AWS CodeArtifact tokens using AWS SSO profiles.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.add_parser("token", parents=[common], help="Print an authorization token.")
    sub.add_parser("index-url", parents=[common],
                   help="Print the repository URL with aws:<token> credentials embedded.")
    sub.add_parser("login", parents=[common],
                   help="Check the SSO session and log in again if it has expired.")
    sub.add_parser("invalidate", parents=[common],
                   help="Invalidate the cached token for the profile.")
    sub.add_parser("verify", parents=[common],
                   help="Authenticate against the repository and report the HTTP status.")
    return p


# ── Helpers ────────────────────────────────────────────────────────────────

def credential_url(repo_url: str, credential: Credential) -> str:
    """Embed *credential* as userinfo in *repo_url*."""
    parts = urlsplit(repo_url)
    host = parts.netloc.rsplit("@", 1)[-1]
    userinfo = f"{quote(credential.username, safe='')}:{quote(credential.password, safe='')}"
    return urlunsplit(parts._replace(netloc=f"{userinfo}@{host}"))


def _mode(args: argparse.Namespace, settings: Settings) -> ExecutionMode:
    if args.ci is None:
        return detect_mode(settings)
    return ExecutionMode.from_flag(args.ci)


def _verify(request: CredentialRequest, credential: Credential) -> int:
    try:
        resp = requests.get(
            request.repo_url,
            auth=(credential.username, credential.password),
            timeout=VERIFY_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.exception("Request to %s failed", request.repo_url)
        print(f"ERROR: could not reach repository: {exc}", file=sys.stderr)
        return 1

    if resp.status_code in (401, 403):
        print(f"ERROR: repository rejected the credential (HTTP {resp.status_code})",
              file=sys.stderr)
        return 1

    print(f"OK: HTTP {resp.status_code} from {request.repo_url}")
    return 0


# ── Main logic ─────────────────────────────────────────────────────────────

def run(args: argparse.Namespace, provider: CredentialProvider | None = None) -> int:
    """Execute *args.command*.

    Returns:
        Exit code (0 = success, 1 = error, 2 = configuration error).
    """
    try:
        settings = get_settings()
        mode = _mode(args, settings)
        profile = args.profile or settings.profile
        provider = provider or get_provider()

        if args.command == "login":
            if mode is ExecutionMode.CI:
                print("CI mode: no SSO session to check.")
                return 0
            provider.session.ensure_logged_in(profile)
            print(f"SSO session for profile '{profile}' is valid.")
            return 0

        if args.command == "invalidate":
            provider.cache.invalidate(profile)
            print(f"Token cache for profile '{profile}' invalidated.")
            return 0

        request = build_request(
            settings,
            repo_url=args.repo_url,
            profile=args.profile,
            cache_expire_hours=args.expire_hours,
        )
        credential = provider.get_credential(request, mode)

        if args.command == "token":
            print(credential.password)
            return 0
        if args.command == "index-url":
            print(credential_url(request.repo_url, credential))
            return 0
        if args.command == "verify":
            return _verify(request, credential)
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    except CodeArtifactSSOError as exc:
        logger.debug("Command %r failed", args.command, exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print(f"ERROR: unknown command {args.command!r}", file=sys.stderr)
    return 2


def main() -> None:
    """Entry point for the codeartifact-sso console script."""
    parser = _build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(2)

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    sys.exit(run(args))


if __name__ == "__main__":
    main()
