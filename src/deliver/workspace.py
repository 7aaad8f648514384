"""Workspace discovery, working-copy paths, and the project symlink.

A workspace is a GOPATH-style tree: every package is checked out under
``<workspace>/src/<package name>``. Two layouts are supported:

- Shared (default): the first entry of ``$GOPATH``.
- Per-project (``use_workspace``): walk up from the current directory to
  the nearest ``packages.json``; the workspace is then
  ``<root or $HOME>/deliver_workspaces/<that directory>``. If no manifest
  is found before reaching the filesystem root, ``$GOPATH`` is used.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from deliver.config import DeliverConfig
from deliver.exceptions import WorkspaceError
from deliver.vcs.runner import CommandRunner

logger = logging.getLogger(__name__)


def _gopath(environ: Mapping[str, str]) -> Path:
    value = environ.get("GOPATH", "")
    first = value.split(os.pathsep)[0] if value else ""
    if not first:
        raise WorkspaceError("GOPATH is not set; set it or use --deliver-workspace")
    return Path(first)


def find_project_dir(start: Path, package_file: str) -> Path | None:
    """Return the nearest directory at or above *start* holding *package_file*."""
    for directory in (start, *start.parents):
        if (directory / package_file).is_file():
            return directory
    return None


def discover_workspace_path(
    config: DeliverConfig,
    cwd: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Compute the workspace path for a run.

    Args:
        config: Run configuration (``use_workspace``, ``root_dir``,
            ``package_file``, ``workspaces_dir``).
        cwd: Directory to start from. Defaults to the process cwd.
        environ: Environment mapping. Defaults to ``os.environ``.

    Raises:
        WorkspaceError: If the workspace falls back to ``$GOPATH`` and it
            is unset.
    """
    environ = os.environ if environ is None else environ
    if not config.use_workspace:
        return _gopath(environ)

    start = (cwd or Path.cwd()).absolute()
    project_dir = find_project_dir(start, config.package_file)
    if project_dir is None:
        logger.info("No %s above %s, using GOPATH", config.package_file, start)
        return _gopath(environ)

    root = config.root_dir or environ.get("HOME") or str(Path.home())
    return Path(root, config.workspaces_dir, *project_dir.parts[1:])


class Workspace:
    """Paths inside one workspace plus the project symlink."""

    def __init__(self, path: Path, runner: CommandRunner) -> None:
        self.path = path
        self.runner = runner

    @classmethod
    def discover(
        cls,
        config: DeliverConfig,
        runner: CommandRunner,
        cwd: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Workspace:
        return cls(discover_workspace_path(config, cwd, environ), runner)

    @property
    def src_dir(self) -> Path:
        return self.path / "src"

    def package_path(self, name: str) -> Path:
        """Working-copy directory for the package called *name*."""
        return self.src_dir / name

    def project_package_path(self, cwd: Path | None = None) -> str:
        """Import path of the current project relative to ``src``.

        Falls back to the absolute directory when the project does not
        live inside the workspace.
        """
        current = (cwd or Path.cwd()).absolute()
        try:
            return current.relative_to(self.src_dir).as_posix()
        except ValueError:
            return str(current)

    def link_project(self, repository: str, cwd: Path | None = None) -> Path | None:
        """Symlink ``src/<repository>`` to the project directory.

        Returns the link path, or None when the project already lives at
        that location and no link is needed.

        Raises:
            WorkspaceError: If a real directory occupies the link path.
        """
        target = (cwd or Path.cwd()).absolute()
        link = self.src_dir / repository
        if link == target:
            logger.info("Project already at %s, skipping symlink", link)
            return None
        if link.is_dir() and not link.is_symlink():
            raise WorkspaceError(f"Cannot link project: {link} is a directory")

        self.runner.perform(
            f"mkdir -p {link.parent}",
            lambda: link.parent.mkdir(parents=True, exist_ok=True),
        )
        self.runner.perform(f"rm -f {link}", lambda: link.unlink(missing_ok=True))
        self.runner.perform(f"ln -s {target} {link}", lambda: link.symlink_to(target))
        return link

    def ensure_dir(self, path: Path) -> None:
        """Create *path* (and parents) unless it already exists."""
        if path.exists():
            return
        self.runner.perform(
            f"mkdir -p {path}", lambda: path.mkdir(parents=True, exist_ok=True)
        )
