"""``deliver update [name]`` - Update packages and rewrite packages.lock.

Fetches every package in packages.json at the tip of its branch (pinned
revisions stay put), records the resolved commits in packages.lock, and
reports conflicting requests for the same source. With a package name,
only that package is updated and only its lock entry is replaced.

Exit Codes:
    0 - Packages updated and lock file written.
    1 - Manifest missing or invalid, unknown package, or git failure.
"""

from __future__ import annotations

import click

from deliver.cli.context import CliState, pass_state
from deliver.cli.output import (
    console,
    print_conflict_notice,
    print_tree,
)


@click.command("update")
@click.argument("name", required=False)
@click.option(
    "--tree", "show_tree", is_flag=True, default=False,
    help="Print the dependency tree after fetching.",
)
@pass_state
def update_command(state: CliState, name: str | None, show_tree: bool) -> None:
    """Update all packages in packages.json, or only NAME."""
    workflow = state.workflow()
    report = workflow.update(name)
    if show_tree:
        print_tree(report.tree)
    print_conflict_notice(report.resolution)
    if report.lock_path is not None and not workflow.config.dry_run:
        console.print(f"Lock file written to: {report.lock_path}", markup=False)
