"""Dependency tree construction and conflict resolution.

- ``tree``: arena-backed ``DependencyTree`` of ``Node`` requests.
- ``fetcher``: ``DependencyFetcher`` growing the tree from manifests.
- ``resolver``: ``ConflictResolver`` reporting sources requested at
  several refs.

All public names are re-exported here, so callers can write
``from deliver.core.dependency import DependencyTree``.
"""

from deliver.core.dependency.tree import (
    ROOT_INDEX,
    DependencyTree,
    Node,
)
from deliver.core.dependency.fetcher import DependencyFetcher
from deliver.core.dependency.resolver import (
    ConflictResolver,
    Requester,
    Resolution,
    SourceConflict,
    SourceRecord,
    resolve_conflicts,
)

__all__ = [
    "ROOT_INDEX",
    "ConflictResolver",
    "DependencyFetcher",
    "DependencyTree",
    "Node",
    "Requester",
    "Resolution",
    "SourceConflict",
    "SourceRecord",
    "resolve_conflicts",
]
