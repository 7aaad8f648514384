"""Per-invocation CLI state shared by the deliver subcommands.

The group callback stores a ``CliState`` on the click context; commands
build their collaborators from it. Tests pass their own ``CliState`` as
the context object to swap in a fake git client.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import click

from deliver.cli.output import print_conflicts, print_progress
from deliver.config import DeliverConfig
from deliver.core.workflow import Workflow
from deliver.vcs import CommandRunner, GitClient
from deliver.workspace import Workspace

GitFactory = Callable[[CommandRunner], GitClient]


@dataclass
class CliState:
    """Configuration and collaborator factories for one invocation.

    Attributes:
        config: Effective configuration after file and flag merging. None
            until the group callback has loaded it; a preset value is used
            instead of the configuration file.
        git_factory: Builds the git client from the command runner.
    """

    config: DeliverConfig | None = None
    git_factory: GitFactory = GitClient

    def runner(self) -> CommandRunner:
        return CommandRunner(self.config or DeliverConfig())

    def workspace(self, cwd: Path | None = None) -> Workspace:
        runner = self.runner()
        return Workspace.discover(runner.config, runner, cwd=cwd)

    def workflow(self, cwd: Path | None = None) -> Workflow:
        project_dir = (cwd or Path.cwd()).absolute()
        runner = self.runner()
        workspace = Workspace.discover(runner.config, runner, cwd=project_dir)
        return Workflow(
            runner.config,
            workspace,
            self.git_factory(runner),
            project_dir,
            progress=print_progress,
            on_conflicts=print_conflicts,
        )


pass_state = click.make_pass_decorator(CliState, ensure=True)
