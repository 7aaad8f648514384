"""Command runner: every side effect deliver performs goes through here.

Wraps ``subprocess.run`` for external commands and plain callables for
in-process filesystem actions (directory creation, symlinks) so both obey
the same two switches from ``DeliverConfig``:

- ``dry_run``: print the action and skip it.
- ``verbose``: print the action and perform it.

Commands block until the child process exits; there is no timeout.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

import click

from deliver.config import DeliverConfig
from deliver.exceptions import SourceControlError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CommandResult:
    """Outcome of one external command (decoupled from ``subprocess``)."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs commands and filesystem actions according to a ``DeliverConfig``.

    Example::

        runner = CommandRunner(DeliverConfig(verbose=True))
        result = runner.run(["git", "rev-parse", "HEAD"], cwd=Path("src/log"))
    """

    def __init__(self, config: DeliverConfig) -> None:
        self.config = config

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    def _announce(self, text: str) -> None:
        logger.debug("%s", text)
        if self.config.echo_commands:
            click.echo(text)

    def run(self, args: list[str], *, cwd: Path | None = None) -> CommandResult:
        """Run an external command and return its captured output.

        In dry-run mode the command is printed and an empty successful
        result is returned without starting a process.

        Raises:
            SourceControlError: If the command exits with a non-zero status.
            OSError: If the executable cannot be started at all.
        """
        self._announce(shlex.join(args))
        if self.dry_run:
            return CommandResult(returncode=0, stdout="", stderr="")

        proc = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            check=False,
        )
        result = CommandResult(
            returncode=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )
        if not result.success:
            raise SourceControlError(args, result.returncode, result.stderr)
        return result

    def perform(self, description: str, action: Callable[[], T]) -> T | None:
        """Run an in-process side effect, or only describe it in dry-run mode."""
        self._announce(description)
        if self.dry_run:
            return None
        return action()
