"""``deliver path`` - Print the workspace path.

Prints the directory deliver checks packages out into, without a trailing
newline, so it can be used as ``GOPATH=$(deliver path)``.

Exit Codes:
    0 - Path printed.
    1 - The workspace could not be determined (for example $GOPATH unset).
"""

from __future__ import annotations

import click

from deliver.cli.context import CliState, pass_state


@click.command("path")
@pass_state
def path_command(state: CliState) -> None:
    """Print the deliver workspace path."""
    workspace = state.workspace()
    click.echo(str(workspace.path), nl=False)
