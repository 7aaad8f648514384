"""Dependency fetcher: materialise working copies and grow the tree.

For one ``PackageDescriptor`` the fetcher:

1. Ensures a working copy exists at ``<workspace>/src/<name>`` (clone on
   first use, ``git fetch`` afterwards).
2. Checks out the right ref. A pinned revision is checked out exactly and
   never pulled. Otherwise the branch tip is checked out and pulled, and
   the resulting commit is written back into ``descriptor.revision``.
3. Attaches a node for the package to the dependency tree.
4. Recurses into the package's own lock manifest, if it has one, in
   package-name order.

Errors are not caught here: a git, manifest, or filesystem failure aborts
the whole run, leaving already-fetched siblings as they are.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from deliver.config import DEFAULT_BRANCH, LOCK_FILE
from deliver.core.dependency.tree import DependencyTree, Node
from deliver.core.manifest import Manifest, PackageDescriptor
from deliver.exceptions import DependencyCycleError
from deliver.vcs.git import GitClient
from deliver.workspace import Workspace

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class DependencyFetcher:
    """Fetches packages recursively into a ``DependencyTree``.

    Args:
        tree: Tree that receives one node per fetched package.
        git: Git client used for every source-control operation.
        workspace: Workspace resolving package names to working copies.
        lock_file: Name of the lock manifest looked for inside each
            fetched working copy.
        progress: Optional callback receiving human-readable progress
            lines (the CLI prints them).
        default_branch: Branch given to descriptors that do not name one.
    """

    def __init__(
        self,
        tree: DependencyTree,
        git: GitClient,
        workspace: Workspace,
        lock_file: str = LOCK_FILE,
        progress: ProgressCallback | None = None,
        default_branch: str = DEFAULT_BRANCH,
    ) -> None:
        self.tree = tree
        self.git = git
        self.workspace = workspace
        self.lock_file = lock_file
        self._progress = progress
        self.default_branch = default_branch
        # Sources on the current fetch stack, outermost first.
        self._active: list[str] = []

    def _report(self, message: str) -> None:
        logger.debug("%s", message)
        if self._progress is not None:
            self._progress(message)

    def working_copy(self, descriptor: PackageDescriptor) -> Path:
        return self.workspace.package_path(descriptor.name)

    def update(self, descriptor: PackageDescriptor) -> None:
        """Check out the ref *descriptor* asks for in its own working copy.

        A pinned descriptor is checked out at its revision and left alone.
        Otherwise the branch tip is checked out and pulled, and the commit
        it lands on becomes ``descriptor.revision``.
        """
        descriptor.default_branch = self.default_branch
        path = self.working_copy(descriptor)
        if descriptor.has_revision:
            self.git.checkout(path, descriptor.revision)
            return
        branch = descriptor.branch_or_default
        self.git.checkout(path, branch)
        self.git.pull(path, branch)
        descriptor.revision = self.git.current_revision(path)

    def _sync_working_copy(self, descriptor: PackageDescriptor, path: Path) -> None:
        self.workspace.ensure_dir(path)
        if self.git.is_working_copy(path):
            self.git.fetch(path)
        else:
            self.git.clone(descriptor.source, descriptor.branch_or_default, path)

    def fetch(self, descriptor: PackageDescriptor, parent: Node | None = None) -> Node:
        """Fetch one package and, recursively, everything it locks.

        Args:
            descriptor: Package to fetch. Its ``revision`` is filled in
                when it tracks a branch tip.
            parent: Node requesting the package. Defaults to the
                sentinel root.

        Returns:
            The node created for *descriptor*, with its subtree attached.

        Raises:
            DependencyCycleError: If *descriptor*'s source is already
                being fetched further up the stack.
        """
        parent = self.tree.root if parent is None else parent
        if descriptor.source in self._active:
            raise DependencyCycleError(
                [*self._active, descriptor.source], root=self.tree.label
            )

        descriptor.default_branch = self.default_branch
        path = self.working_copy(descriptor)
        self._report(f"downloading {descriptor.name} -> {path}")
        self._sync_working_copy(descriptor, path)
        self.update(descriptor)

        node = self.tree.add_child(parent, descriptor)

        lock_path = path / self.lock_file
        if lock_path.is_file():
            manifest = Manifest.read(lock_path)
            self._report(f"getting dependencies of {descriptor.name}...")
            self._active.append(descriptor.source)
            try:
                self.fetch_all(manifest, node)
            finally:
                self._active.pop()
            self._report(f"done with dependencies of {descriptor.name}")
        return node

    def fetch_all(self, manifest: Manifest, parent: Node | None = None) -> list[Node]:
        """Fetch every package in *manifest*, ordered by package name."""
        return [self.fetch(descriptor, parent) for descriptor in manifest.sorted_packages()]
