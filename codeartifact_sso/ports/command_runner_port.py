"""
ports/command_runner_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for running external commands (the AWS CLI).

Services build argv lists and inspect CommandResult; they never touch
subprocess directly.  Tests substitute a fake runner that records argv and
returns scripted results.

Current implementation: SubprocessCommandRunner
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from codeartifact_sso.domain.models import CommandResult


@runtime_checkable
class CommandRunnerPort(Protocol):
    """Contract for a blocking external-command runner."""

    def run(self, argv: list[str], interactive: bool = False) -> CommandResult:
        """Run a command to completion and return its outcome.

        Args:
            argv:        Command and arguments; argv[0] is the logical
                         program name (e.g. "aws").
            interactive: When True the command shares the caller's terminal
                         (stdin/stdout/stderr are not captured) and may block
                         for as long as a human needs, e.g. a browser login.

        Returns:
            CommandResult.  A non-zero exit code is NOT an exception here;
            the caller decides what a failure means.

        Raises:
            ConfigurationError:  If the program cannot be found.
            CommandTimeoutError: If a captured command exceeds its timeout.
        """
        ...
