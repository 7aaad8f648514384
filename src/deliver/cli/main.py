"""deliver CLI: a package manager that checks dependencies out with git.

Entry point for the ``deliver`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    path     Print the workspace path.
    install  Install the packages pinned in packages.lock.
    update   Update packages from packages.json and rewrite packages.lock.

Usage::

    deliver path
    deliver install                 # Everything in packages.lock
    deliver install log             # A single package
    deliver -n update               # Show the git commands without running them
    deliver --deliver-workspace --root /srv update

Exit Codes:
    0 Success.
    1 Any fatal error (git, manifest, filesystem, unknown package).
    2 Usage error.
"""

from __future__ import annotations

import logging

import click

from deliver import __version__
from deliver.cli.context import CliState
from deliver.cli.install import install_command
from deliver.cli.path_cmd import path_command
from deliver.cli.update import update_command
from deliver.config import load_config
from deliver.exceptions import DeliverError

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


class DeliverGroup(click.Group):
    """Click group mapping every fatal deliver error to exit code 1."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except (DeliverError, OSError) as exc:
            logger.debug("Run aborted", exc_info=True)
            click.echo(f"Error: {exc}", err=True)
            ctx.exit(1)


@click.group(cls=DeliverGroup)
@click.version_option(version=__version__)
@click.option(
    "-n", "--dry-run", is_flag=True, default=None,
    help="Print the commands but do not run them.",
)
@click.option(
    "-v", "--verbose", is_flag=True, default=None,
    help="Print the commands while running them.",
)
@click.option(
    "--root", "root_dir", type=click.Path(file_okay=False), default=None,
    help="Where to create the deliver workspaces directory (default: home).",
)
@click.option(
    "--deliver-workspace/--no-deliver-workspace", "use_workspace", default=None,
    help="Use the project-specific workspace instead of $GOPATH.",
)
@click.option(
    "--config", "config_path", type=click.Path(dir_okay=False), default=None,
    help="YAML configuration file (default: $DELIVER_CONFIG or "
         "~/.config/deliver/config.yaml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    dry_run: bool | None,
    verbose: bool | None,
    root_dir: str | None,
    use_workspace: bool | None,
    config_path: str | None,
) -> None:
    """deliver: fetch git dependencies and report version conflicts.

    Reads packages.json / packages.lock from the current directory and
    checks every package out into the workspace, recursing into the lock
    files of the packages themselves.
    """
    state = ctx.ensure_object(CliState)
    if config_path is not None or state.config is None:
        base = load_config(config_path)
    else:
        base = state.config
    state.config = base.merged(
        dry_run=dry_run,
        verbose=verbose,
        root_dir=root_dir,
        use_workspace=use_workspace,
    )
    _configure_logging(state.config.echo_commands)
    logger.debug("Effective configuration: %s", state.config.to_dict())


# Register all subcommands
cli.add_command(path_command)
cli.add_command(install_command)
cli.add_command(update_command)
