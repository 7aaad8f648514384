"""Shared fixtures for deliver tests."""

from __future__ import annotations

import pathlib

import pytest

from deliver.config import DeliverConfig
from deliver.core.dependency import DependencyFetcher, DependencyTree
from deliver.vcs import CommandRunner
from deliver.workspace import Workspace
from tests.helpers import FakeGit


@pytest.fixture
def config() -> DeliverConfig:
    """Default configuration with nothing read from disk."""
    return DeliverConfig()


@pytest.fixture
def workspace(tmp_path: pathlib.Path, config: DeliverConfig) -> Workspace:
    """A workspace rooted in a temporary directory."""
    return Workspace(tmp_path / "ws", CommandRunner(config))


@pytest.fixture
def fake_git() -> FakeGit:
    """A git client with no remotes; tests register the ones they need."""
    return FakeGit()


@pytest.fixture
def tree() -> DependencyTree:
    return DependencyTree(label="example.com/app")


@pytest.fixture
def fetcher(tree: DependencyTree, fake_git: FakeGit, workspace: Workspace) -> DependencyFetcher:
    """A fetcher wired to the fake git client and temporary workspace."""
    return DependencyFetcher(tree, fake_git, workspace)
