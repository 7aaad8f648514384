"""Manifest data models: PackageDescriptor and Manifest.

Pure data holders shared by the codec, the fetcher, and the conflict
resolver. A ``PackageDescriptor`` is mutable: the fetcher
writes the concrete commit back into ``revision`` after checking out the
tip of a branch, and that value is what ends up in the lock file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from deliver.config import DEFAULT_BRANCH

# Placeholder revision used in refs for packages that track a branch tip.
HEAD = "HEAD"


@dataclass
class PackageDescriptor:
    """Identity and pinning state of one dependency.

    Attributes:
        name: Package name; also the working-copy directory name.
        source: Git URL of the package. Two descriptors with the same
            source are the same underlying code, whatever their names.
        branch: Branch to track. Empty means ``default_branch``.
        revision: Concrete commit. When set the package is pinned and
            its working copy is never refreshed from upstream.
        default_branch: Branch used when ``branch`` is empty. Set by the
            fetcher from the run configuration; never serialized.
    """

    name: str
    source: str
    branch: str = ""
    revision: str = ""
    default_branch: str = field(default=DEFAULT_BRANCH, compare=False, repr=False)

    @property
    def branch_or_default(self) -> str:
        return self.branch or self.default_branch

    @property
    def revision_or_head(self) -> str:
        return self.revision or HEAD

    @property
    def ref(self) -> str:
        """Checkout target as ``<branch>/<revision or HEAD>``."""
        return f"{self.branch_or_default}/{self.revision_or_head}"

    @property
    def has_revision(self) -> bool:
        return bool(self.revision)

    def describe(self) -> str:
        """One-line ``<source> <ref>`` summary used in tree dumps."""
        return f"{self.source} {self.ref}"


@dataclass
class Manifest:
    """A package-list document (``packages.json`` or ``packages.lock``).

    Attributes:
        packages: Mapping of package name to descriptor. The descriptor's
            ``name`` always equals its key.
        repository: Import path of the project itself inside the
            workspace. Empty when the project does not want a symlink.
    """

    packages: dict[str, PackageDescriptor] = field(default_factory=dict)
    repository: str = ""

    @property
    def has_repository(self) -> bool:
        return bool(self.repository)

    def sorted_packages(self) -> Iterator[PackageDescriptor]:
        """Yield descriptors ordered by package name.

        Every traversal of a manifest goes through here so the discovery
        order of the dependency tree, and with it the canonical choice
        made by the conflict resolver, is the same on every run.
        """
        for name in sorted(self.packages):
            yield self.packages[name]

    def get(self, name: str) -> PackageDescriptor | None:
        return self.packages.get(name)

    def set(self, descriptor: PackageDescriptor) -> None:
        """Add or replace the entry for ``descriptor.name``."""
        self.packages[descriptor.name] = descriptor

    def __len__(self) -> int:
        return len(self.packages)
