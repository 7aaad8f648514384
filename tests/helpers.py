"""Shared test helpers: an in-memory git remote and a recording git client.

``FakeGit`` never runs a subprocess. It materialises working copies in a
temporary directory (a ``.git`` marker plus the ``packages.lock`` the
checked-out revision declares) so the fetcher's recursion can be
exercised end to end.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from deliver.exceptions import SourceControlError
from deliver.vcs.git import GitClient


@dataclass
class FakeRemote:
    """A remote repository.

    Attributes:
        branches: Branch name -> tip revision.
        locks: Revision -> lock document (``{"packages": {...}}``) that a
            working copy checked out at that revision contains.
    """

    branches: dict[str, str] = field(default_factory=lambda: {"master": "m1"})
    locks: dict[str, dict[str, Any]] = field(default_factory=dict)


class FakeGit(GitClient):
    """Records every git call and simulates working copies on disk."""

    def __init__(self, remotes: dict[str, FakeRemote] | None = None, lock_file: str = "packages.lock") -> None:
        self.remotes = remotes if remotes is not None else {}
        self.lock_file = lock_file
        self.runner = None
        self.executable = "git"
        self.calls: list[tuple[str, ...]] = []
        self.origins: dict[Path, str] = {}
        self.heads: dict[Path, str] = {}

    def _remote(self, url: str) -> FakeRemote:
        if url not in self.remotes:
            raise SourceControlError(["git", "clone", url], 128, "repository not found")
        return self.remotes[url]

    def _materialise(self, path: Path, revision: str) -> None:
        self.heads[path] = revision
        lock_path = path / self.lock_file
        doc = self.remotes[self.origins[path]].locks.get(revision)
        if doc is None:
            lock_path.unlink(missing_ok=True)
        else:
            lock_path.write_text(json.dumps(doc), encoding="utf-8")

    def clone(self, url: str, branch: str, dest: Path) -> None:
        self.calls.append(("clone", url, branch, str(dest)))
        remote = self._remote(url)
        if branch not in remote.branches:
            raise SourceControlError(["git", "clone", "-b", branch, url], 128, "no such branch")
        (dest / ".git").mkdir(parents=True, exist_ok=True)
        self.origins[dest] = url
        self._materialise(dest, remote.branches[branch])

    def fetch(self, path: Path) -> None:
        self.calls.append(("fetch", str(path)))

    def checkout(self, path: Path, ref: str) -> None:
        self.calls.append(("checkout", str(path), ref))
        remote = self.remotes[self.origins[path]]
        self._materialise(path, remote.branches.get(ref, ref))

    def pull(self, path: Path, branch: str) -> None:
        self.calls.append(("pull", str(path), branch))
        remote = self.remotes[self.origins[path]]
        self._materialise(path, remote.branches[branch])

    def current_revision(self, path: Path) -> str:
        self.calls.append(("rev-parse", str(path)))
        return self.heads[path]

    def calls_named(self, name: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == name]


def lock_doc(**packages: dict[str, str]) -> dict[str, Any]:
    """Build a lock document: ``lock_doc(log={"source": "u", "revision": "r"})``."""
    return {"packages": dict(packages)}


def write_manifest(path: Path, packages: dict[str, dict[str, str]], repository: str = "") -> Path:
    """Write a manifest JSON document to *path* and return it."""
    doc: dict[str, Any] = {"packages": packages}
    if repository:
        doc["repository"] = repository
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path
