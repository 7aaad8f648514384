"""Shared fixtures for CLI tests.

Every invocation gets a preset ``CliState`` so no user configuration file
is read, and a ``FakeGit`` so no git binary is needed. ``$GOPATH`` points
at a temporary workspace and the working directory is the project.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from deliver.cli.context import CliState
from deliver.cli.main import cli
from deliver.config import DeliverConfig
from tests.helpers import FakeGit


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def gopath(tmp_path: Path) -> Path:
    """Temporary shared workspace used as ``$GOPATH``."""
    path = tmp_path / "go"
    path.mkdir()
    return path


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Project directory, made the current working directory."""
    path = tmp_path / "project"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def state(fake_git: FakeGit) -> CliState:
    """CLI state wired to the fake git client."""
    return CliState(config=DeliverConfig(), git_factory=lambda runner: fake_git)


@pytest.fixture
def invoke(runner: CliRunner, state: CliState, gopath: Path, project_dir: Path):
    """Invoke ``deliver`` with the fixture state and ``$GOPATH``."""
    def _invoke(*args: str, env: dict[str, str] | None = None):
        environ = {"GOPATH": str(gopath)}
        environ.update(env or {})
        return runner.invoke(cli, list(args), obj=state, env=environ)

    return _invoke
