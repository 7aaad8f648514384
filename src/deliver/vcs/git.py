"""Git client used by the dependency fetcher.

Each method maps to one ``git`` invocation run through ``CommandRunner``.
Commands that act on an existing working copy run with that directory as
the working directory. Any non-zero exit raises ``SourceControlError``,
which the rest of deliver treats as fatal.
"""

from __future__ import annotations

import logging
from pathlib import Path

from deliver.vcs.runner import CommandRunner

logger = logging.getLogger(__name__)

# Returned by current_revision() when no command actually ran (dry-run).
UNKNOWN_REVISION = "<REV>"


class GitClient:
    """Thin wrapper over the ``git`` executable."""

    def __init__(self, runner: CommandRunner, executable: str = "git") -> None:
        self.runner = runner
        self.executable = executable

    def _git(self, *args: str, cwd: Path | None = None) -> str:
        result = self.runner.run([self.executable, *args], cwd=cwd)
        return result.stdout

    @staticmethod
    def is_working_copy(path: Path) -> bool:
        """True if *path* already holds a git checkout."""
        return (path / ".git").exists()

    def clone(self, url: str, branch: str, dest: Path) -> None:
        """Clone *url* at *branch* into *dest*."""
        self._git("clone", "-b", branch, url, str(dest))

    def fetch(self, path: Path) -> None:
        """Download remote updates without touching the checkout."""
        self._git("fetch", cwd=path)

    def checkout(self, path: Path, ref: str) -> None:
        self._git("checkout", ref, cwd=path)

    def pull(self, path: Path, branch: str) -> None:
        self._git("pull", "origin", branch, cwd=path)

    def current_revision(self, path: Path) -> str:
        """Return the commit currently checked out at *path*."""
        revision = self._git("rev-parse", "HEAD", cwd=path).strip()
        if not revision:
            logger.debug("No revision reported for %s", path)
            return UNKNOWN_REVISION
        return revision
