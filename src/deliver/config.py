"""Run configuration for deliver.

A single ``DeliverConfig`` value replaces the command-line flags the tool
used to keep in module globals. It is built once by the CLI (YAML file
defaults, then flag overrides) and handed to every collaborator that needs
it: the command runner, the workspace, and the workflow.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from deliver.exceptions import ConfigError

logger = logging.getLogger(__name__)

PACKAGE_FILE = "packages.json"
LOCK_FILE = "packages.lock"
WORKSPACES_DIR = "deliver_workspaces"
DEFAULT_BRANCH = "master"

# Environment variable naming an alternative configuration file.
CONFIG_ENV_VAR = "DELIVER_CONFIG"


def default_config_path() -> Path:
    """Return the per-user configuration path (``~/.config/deliver/config.yaml``)."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "deliver" / "config.yaml"


@dataclass(frozen=True)
class DeliverConfig:
    """Settings for one deliver run.

    Attributes:
        dry_run: Print commands instead of running them.
        verbose: Print commands while running them.
        root_dir: Where to create the workspaces directory. Empty means
            the user's home directory.
        use_workspace: Use a project-specific workspace instead of
            ``$GOPATH``.
        package_file: Name of the top-level manifest.
        lock_file: Name of the lock manifest, both for the project and
            inside every fetched working copy.
        workspaces_dir: Directory (under ``root_dir``) holding per-project
            workspaces.
        default_branch: Branch used when a package does not name one.
        extra: Unrecognised keys from the configuration file.
    """

    dry_run: bool = False
    verbose: bool = False
    root_dir: str = ""
    use_workspace: bool = False
    package_file: str = PACKAGE_FILE
    lock_file: str = LOCK_FILE
    workspaces_dir: str = WORKSPACES_DIR
    default_branch: str = DEFAULT_BRANCH
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def echo_commands(self) -> bool:
        """True when commands should be printed before (or instead of) running."""
        return self.dry_run or self.verbose

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeliverConfig:
        """Build a config from a mapping, keeping unknown keys in ``extra``."""
        known = {f.name for f in fields(cls) if f.name != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(**matched, extra=extra)

    @classmethod
    def from_file(cls, path: Path) -> DeliverConfig:
        """Load a config from a YAML file. A missing file yields defaults.

        Raises:
            ConfigError: If the file is not valid YAML or is not a mapping.
        """
        if not path.is_file():
            return cls()
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Cannot read {path}: {exc}") from exc
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file {path} must contain a mapping, "
                f"got {type(data).__name__}"
            )
        logger.info("Loaded configuration from %s", path)
        config = cls.from_dict(data)
        if config.extra:
            logger.warning(
                "Ignoring unknown keys in %s: %s", path, ", ".join(sorted(config.extra))
            )
        return config

    def merged(self, **overrides: Any) -> DeliverConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(path: str | Path | None = None) -> DeliverConfig:
    """Resolve and load the configuration file.

    Lookup order: the explicit *path*, then ``$DELIVER_CONFIG``, then the
    per-user default. Only an explicitly named file must exist.
    """
    if path is not None:
        explicit = Path(path)
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        return DeliverConfig.from_file(explicit)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return DeliverConfig.from_file(Path(env_path))
    return DeliverConfig.from_file(default_config_path())
