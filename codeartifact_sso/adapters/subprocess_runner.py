"""
adapters/subprocess_runner.py
──────────────────────────────────────────────────────────────────────────────
Implements CommandRunnerPort with subprocess.run.

Two modes:
  captured     stdout/stderr piped back as text, bounded by COMMAND_TIMEOUT
  interactive  stdio inherited from the parent, no timeout (`aws sso login`
               opens a browser and waits for the user)

subprocess.run kills the child when an exception interrupts the wait.  Ctrl-C
already raises KeyboardInterrupt; for SIGTERM, interactive runs on the main
thread temporarily install a handler that raises SystemExit(143), so a killed
build never leaves a dangling login flow behind.  Off the main thread no
handler is installed.
"""
from __future__ import annotations

import contextlib
import logging
import signal
import subprocess
import threading
from typing import Iterator

from codeartifact_sso.config.settings import Settings
from codeartifact_sso.domain.exceptions import CommandTimeoutError, ConfigurationError
from codeartifact_sso.domain.models import CommandResult

logger = logging.getLogger(__name__)

AWS_PROGRAM = "aws"


def _exit_on_sigterm(signum, frame) -> None:
    raise SystemExit(128 + signum)


@contextlib.contextmanager
def _sigterm_raises() -> Iterator[None]:
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.signal(signal.SIGTERM, _exit_on_sigterm)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous if previous is not None else signal.SIG_DFL)


class SubprocessCommandRunner:
    """Runs AWS CLI commands as blocking child processes.

    Usage (injected by container.py — do not instantiate manually):
        runner = SubprocessCommandRunner(settings)
        result = runner.run(["aws", "sts", "get-caller-identity"])
    """

    def __init__(self, settings: Settings) -> None:
        self._aws_cli_path = settings.aws_cli_path
        self._timeout = settings.command_timeout
        logger.debug(
            "SubprocessCommandRunner initialised | aws=%s timeout=%ds",
            self._aws_cli_path,
            self._timeout,
        )

    # ── CommandRunnerPort implementation ───────────────────────────────────

    def run(self, argv: list[str], interactive: bool = False) -> CommandResult:
        resolved = self._resolve(argv)
        logger.debug("exec%s: %s", " (interactive)" if interactive else "", " ".join(resolved))
        try:
            if interactive:
                with _sigterm_raises():
                    completed = subprocess.run(resolved, check=False)
                return CommandResult(exit_code=completed.returncode)

            completed = subprocess.run(
                resolved,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(
                f"'{' '.join(argv[:3])}' timed out after {self._timeout}s"
            ) from exc
        except FileNotFoundError as exc:
            raise ConfigurationError(
                f"AWS CLI not found at '{self._aws_cli_path}'. "
                "Install it or set the AWS_CLI_PATH environment variable."
            ) from exc

        return CommandResult(
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    # ── Private helpers ────────────────────────────────────────────────────

    def _resolve(self, argv: list[str]) -> list[str]:
        if argv and argv[0] == AWS_PROGRAM:
            return [self._aws_cli_path, *argv[1:]]
        return list(argv)
