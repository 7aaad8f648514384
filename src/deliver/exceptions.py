"""deliver exception hierarchy.

All public exceptions inherit from DeliverError, giving the CLI a single
base class to catch when mapping a failed run to an exit code. Every error
is fatal: nothing in the package retries or rolls back.
"""


class DeliverError(Exception):
    """Base exception for all deliver errors."""


class SourceControlError(DeliverError):
    """Raised when a git subprocess exits with a non-zero status.

    Carries the failing command, its exit code, and whatever the process
    wrote to stderr so the user can reproduce the failure by hand.
    """

    def __init__(self, command: list[str], returncode: int, stderr: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"{' '.join(self.command)} failed with exit code {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ManifestParseError(DeliverError):
    """Raised when a manifest or lock document cannot be decoded.

    Covers invalid JSON as well as documents with the wrong shape, such
    as a package entry without a ``source``.
    """


class ConfigError(DeliverError):
    """Raised when the YAML configuration file is unreadable or malformed."""


class PackageNotFoundError(DeliverError, LookupError):
    """Raised when a named package is absent from a manifest or lock file."""

    def __init__(self, name: str, manifest_file: str) -> None:
        self.name = name
        self.manifest_file = manifest_file
        super().__init__(f"Package {name} not found in {manifest_file}")


class DependencyCycleError(DeliverError):
    """Raised when a package transitively depends on its own source.

    The ``chain`` lists source identities from the outermost package being
    fetched down to the repeated one. ``root`` names the project whose
    dependencies were being fetched, when known.
    """

    def __init__(self, chain: list[str], root: str = "") -> None:
        self.chain = list(chain)
        self.root = root
        where = f" in {root}" if root else ""
        super().__init__(
            f"Circular dependency detected{where}: " + " -> ".join(self.chain)
        )


class WorkspaceError(DeliverError, OSError):
    """Raised when the workspace path cannot be determined."""
