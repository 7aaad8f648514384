"""deliver: a git-backed package manager with conflict reporting."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
