"""Source control collaborators: the command runner and the git client."""

from deliver.vcs.git import UNKNOWN_REVISION, GitClient
from deliver.vcs.runner import CommandResult, CommandRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "GitClient",
    "UNKNOWN_REVISION",
]
