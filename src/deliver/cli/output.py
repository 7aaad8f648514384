"""Rich output helpers for the deliver CLI.

Conflict reports keep the plain-text layout of
``SourceConflict.lines()`` so they stay grep-able, with colour added for
the chosen ref. Long lines are never wrapped.
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from deliver.core.dependency import DependencyTree, Resolution

_CHOSEN_STYLE = "bold green"
_WARNING_STYLE = "bold yellow"

console = Console(highlight=False, soft_wrap=True)


def print_progress(message: str) -> None:
    """Print one progress line from the fetcher or workflow."""
    console.print(message, markup=False)


def print_tree(tree: DependencyTree) -> None:
    """Print the indented dependency tree dump, headed by the project label."""
    if tree.label:
        console.print(Text(tree.label, style="bold"))
    lines = tree.dump()
    if not lines:
        console.print("[dim]No dependencies.[/dim]")
        return
    for line in lines:
        console.print(line, markup=False)


def print_conflicts(resolution: Resolution) -> None:
    """Print one warning block per conflicting source.

    Prints nothing when the resolution found no conflicts.
    """
    for conflict in resolution.conflicts:
        for line in conflict.lines():
            if line.startswith("Warning:"):
                console.print(Text(line, style=_WARNING_STYLE))
            elif line.lstrip().startswith("(*)"):
                console.print(Text(line, style=_CHOSEN_STYLE))
            else:
                console.print(line, markup=False)


def print_conflict_notice(resolution: Resolution) -> None:
    """Tell the user that conflicts were resolved by re-pinning."""
    if not resolution.has_conflicts:
        return
    console.print(
        "Version conflicts were detected. If the build fails, "
        "you may want to see if that's a problem.",
        markup=False,
    )
