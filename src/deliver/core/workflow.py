"""Install and update workflows.

Both commands follow the same three phases, strictly in sequence:

1. Build: fetch the packages of a manifest into a fresh
   ``DependencyTree`` whose sentinel stands for the current project.
2. Resolve: run the ``ConflictResolver`` over the finished tree and
   hand any conflicts to the ``on_conflicts`` callback.
3. Apply: re-check out each canonical descriptor in *its own* working
   copy (keyed by package name).

The apply phase only touches the canonical package's working copy.
Other package names that share the same source keep whatever ref they
asked for; a warning names each such working copy so the user can tell.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from deliver.config import DeliverConfig
from deliver.core.dependency import (
    ConflictResolver,
    DependencyFetcher,
    DependencyTree,
    Resolution,
)
from deliver.core.dependency.fetcher import ProgressCallback
from deliver.core.manifest import Manifest, PackageDescriptor
from deliver.exceptions import PackageNotFoundError
from deliver.vcs.git import GitClient
from deliver.workspace import Workspace

logger = logging.getLogger(__name__)

ConflictCallback = Callable[[Resolution], None]


@dataclass
class RunReport:
    """What one install or update run produced.

    Attributes:
        tree: The dependency tree built during the run.
        resolution: Conflicts found in the tree and their canonical picks.
        lock_path: Lock file written by the run, if any.
    """

    tree: DependencyTree
    resolution: Resolution
    lock_path: Path | None = None


class Workflow:
    """Runs ``install`` and ``update`` for the project in *project_dir*.

    Args:
        config: Run configuration.
        workspace: Workspace receiving the working copies.
        git: Git client.
        project_dir: Directory holding ``packages.json``/``packages.lock``.
        progress: Optional callback for human-readable progress lines.
        on_conflicts: Optional callback receiving the resolution before
            any working copy is re-pinned (the CLI prints the warnings).
    """

    def __init__(
        self,
        config: DeliverConfig,
        workspace: Workspace,
        git: GitClient,
        project_dir: Path,
        progress: ProgressCallback | None = None,
        on_conflicts: ConflictCallback | None = None,
    ) -> None:
        self.config = config
        self.workspace = workspace
        self.git = git
        self.project_dir = project_dir
        self._progress = progress
        self._on_conflicts = on_conflicts

    @property
    def package_path(self) -> Path:
        return self.project_dir / self.config.package_file

    @property
    def lock_path(self) -> Path:
        return self.project_dir / self.config.lock_file

    def _say(self, message: str) -> None:
        logger.debug("%s", message)
        if self._progress is not None:
            self._progress(message)

    def _new_fetcher(self) -> DependencyFetcher:
        tree = DependencyTree(label=self.workspace.project_package_path(self.project_dir))
        return DependencyFetcher(
            tree,
            self.git,
            self.workspace,
            lock_file=self.config.lock_file,
            progress=self._progress,
            default_branch=self.config.default_branch,
        )

    @staticmethod
    def _lookup(manifest: Manifest, name: str, manifest_file: str) -> PackageDescriptor:
        descriptor = manifest.get(name)
        if descriptor is None:
            raise PackageNotFoundError(name, manifest_file)
        return descriptor

    def _link_project(self, manifest: Manifest) -> None:
        if manifest.has_repository:
            self.workspace.link_project(manifest.repository, self.project_dir)

    def _write_lock(self, manifest: Manifest) -> Path:
        self.workspace.runner.perform(
            f"write {self.lock_path}", lambda: manifest.write(self.lock_path)
        )
        return self.lock_path

    def install(self, name: str | None = None) -> RunReport:
        """Install packages exactly as pinned in the lock file.

        Args:
            name: Install only this package (and what it locks).

        Raises:
            FileNotFoundError: If the project has no lock file.
            PackageNotFoundError: If *name* is not in the lock file.
        """
        lock = Manifest.read(self.lock_path)
        fetcher = self._new_fetcher()
        if name is not None:
            fetcher.fetch(self._lookup(lock, name, self.config.lock_file))
        else:
            fetcher.fetch_all(lock)
            self._link_project(lock)
        return RunReport(tree=fetcher.tree, resolution=self.resolve_and_apply(fetcher))

    def update(self, name: str | None = None) -> RunReport:
        """Move packages to their branch tips and rewrite the lock file.

        With *name*, only that package is updated and only its lock entry
        is replaced; a missing lock file starts out empty. Without it the
        whole manifest is fetched and the lock file is rewritten.

        Raises:
            FileNotFoundError: If the project has no ``packages.json``.
            PackageNotFoundError: If *name* is not in the manifest.
        """
        manifest = Manifest.read(self.package_path)
        fetcher = self._new_fetcher()
        if name is not None:
            descriptor = self._lookup(manifest, name, self.config.package_file)
            fetcher.fetch(descriptor)
            if self.lock_path.is_file():
                lock = Manifest.read(self.lock_path)
            else:
                lock = Manifest(repository=manifest.repository)
            lock.set(descriptor)
        else:
            fetcher.fetch_all(manifest)
            self._link_project(manifest)
            lock = manifest
        lock_path = self._write_lock(lock)
        return RunReport(
            tree=fetcher.tree,
            resolution=self.resolve_and_apply(fetcher),
            lock_path=lock_path,
        )

    def resolve_and_apply(self, fetcher: DependencyFetcher) -> Resolution:
        """Resolve conflicts in the fetched tree and re-pin the winners."""
        resolution = ConflictResolver().resolve(fetcher.tree)
        if resolution.has_conflicts and self._on_conflicts is not None:
            self._on_conflicts(resolution)
        for descriptor in resolution.resolved:
            self._say(f"resolving {descriptor.name} to {descriptor.ref}")
            fetcher.update(descriptor)
        for conflict in resolution.conflicts:
            names = {
                req.name
                for requesters in conflict.requests.values()
                for req in requesters
                if not req.chosen and req.ref != conflict.chosen.ref
            }
            for other in sorted(names - {conflict.chosen.name}):
                logger.warning(
                    "Working copy %s shares source %s but was not re-pinned to %s",
                    other, conflict.source, conflict.chosen.ref,
                )
        return resolution
