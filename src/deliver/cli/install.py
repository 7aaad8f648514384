"""``deliver install [name]`` - Install the packages pinned in packages.lock.

Checks every package in the lock file out at its locked revision, recursing
into each package's own lock file. With a package name, installs only that
package and its dependencies. A full install also links the project into
the workspace when the lock file names a repository.

After fetching, conflicting requests for the same source are reported and
the shallowest request's working copy is re-pinned.

Exit Codes:
    0 - Packages installed (conflicts, if any, were reported).
    1 - Lock file missing or invalid, unknown package, or git failure.
"""

from __future__ import annotations

import click

from deliver.cli.context import CliState, pass_state
from deliver.cli.output import print_conflict_notice, print_tree


@click.command("install")
@click.argument("name", required=False)
@click.option(
    "--tree", "show_tree", is_flag=True, default=False,
    help="Print the dependency tree after fetching.",
)
@pass_state
def install_command(state: CliState, name: str | None, show_tree: bool) -> None:
    """Install all packages in packages.lock, or only NAME."""
    report = state.workflow().install(name)
    if show_tree:
        print_tree(report.tree)
    print_conflict_notice(report.resolution)
