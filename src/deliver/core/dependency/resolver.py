"""Conflict resolver: find sources requested at more than one ref.

Packages are grouped by *source identity* (the git URL), not by name, so
two differently named packages pointing at the same repository count as
the same code. The tree is walked breadth-first from the sentinel's
children; the first node seen for a source becomes its canonical choice
and is never replaced. Breadth-first order means a shallower request
always beats a deeper one, and among equal depths the one discovered
first wins. No attempt is made to find a ref every requester would
accept.

Every source with more than one distinct ref yields a ``SourceConflict``
describing who asked for what and through which ancestors, and its chosen
descriptor is returned so the caller can re-pin that working copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from deliver.core.dependency.tree import DependencyTree, Node
from deliver.core.manifest import PackageDescriptor

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Traversal bookkeeping
# ---------------------------------------------------------------------------


@dataclass
class SourceRecord:
    """Everything seen for one source identity during traversal.

    Attributes:
        chosen: First node discovered for the source (the canonical one).
        changesets: Ref string -> requesting nodes, in first-seen order.
    """

    chosen: Node
    changesets: dict[str, list[Node]] = field(default_factory=dict)

    @property
    def is_conflict(self) -> bool:
        return len(self.changesets) > 1


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Requester:
    """One node asking for a conflicting source.

    Attributes:
        name: Package name the requester used.
        ref: Ref it asked for.
        chosen: True for the canonical node.
        ancestry: Sources of its ancestors, nearest first, sentinel excluded.
    """

    name: str
    ref: str
    chosen: bool
    ancestry: tuple[str, ...] = ()


@dataclass(frozen=True)
class SourceConflict:
    """A source requested at two or more distinct refs.

    Attributes:
        source: The conflicting source identity.
        chosen: Descriptor selected as canonical.
        requests: Ref -> requesters, refs in first-seen order.
    """

    source: str
    chosen: PackageDescriptor
    requests: dict[str, tuple[Requester, ...]]

    @property
    def refs(self) -> list[str]:
        return list(self.requests)

    def lines(self) -> list[str]:
        """Render the plain-text warning block for this conflict.

        Example::

            Warning: conflicting versions found for git@x:log (* was chosen):
              (*) master/4f2c
                  dev/HEAD
                    ... from git@x:web
        """
        out = [f"Warning: conflicting versions found for {self.source} (* was chosen):"]
        for requesters in self.requests.values():
            for req in requesters:
                prefix = "(*) " if req.chosen else "    "
                out.append(f"  {prefix}{req.ref}")
                indent = "        "
                for ancestor in req.ancestry:
                    out.append(f"{indent}... from {ancestor}")
                    indent += "  "
        return out


@dataclass
class Resolution:
    """Result of conflict resolution.

    Attributes:
        resolved: Canonical descriptor of every conflicting source, in the
            order the sources were first discovered.
        conflicts: One diagnostic per conflicting source, parallel to
            ``resolved``.
    """

    resolved: list[PackageDescriptor] = field(default_factory=list)
    conflicts: list[SourceConflict] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


# ---------------------------------------------------------------------------
# ConflictResolver
# ---------------------------------------------------------------------------


class ConflictResolver:
    """Shallowest-wins conflict detection over a completed ``DependencyTree``."""

    def collect(self, tree: DependencyTree) -> dict[str, SourceRecord]:
        """Group every node in *tree* by source, breadth-first.

        Returns:
            Source identity -> record, in first-discovery order.
        """
        records: dict[str, SourceRecord] = {}
        for node in tree.traverse_breadth_first():
            record = records.get(node.source)
            if record is None:
                records[node.source] = SourceRecord(
                    chosen=node, changesets={node.ref: [node]}
                )
            else:
                record.changesets.setdefault(node.ref, []).append(node)
        return records

    def _describe(self, tree: DependencyTree, source: str, record: SourceRecord) -> SourceConflict:
        chosen = record.chosen.descriptor
        if chosen is None:
            raise ValueError("the sentinel root cannot be a conflict candidate")
        requests: dict[str, tuple[Requester, ...]] = {}
        for ref, nodes in record.changesets.items():
            requests[ref] = tuple(
                Requester(
                    name=node.descriptor.name if node.descriptor else "",
                    ref=ref,
                    chosen=node.index == record.chosen.index,
                    ancestry=tuple(a.source for a in tree.ancestors(node)),
                )
                for node in nodes
            )
        return SourceConflict(
            source=source, chosen=chosen, requests=requests
        )

    def resolve(self, tree: DependencyTree) -> Resolution:
        """Detect conflicts in *tree* and pick a canonical descriptor for each.

        Each conflict is also logged at DEBUG level, one record per row of
        ``SourceConflict.lines()``; the CLI renders the same rows to the
        user.
        """
        resolution = Resolution()
        for source, record in self.collect(tree).items():
            if not record.is_conflict:
                continue
            conflict = self._describe(tree, source, record)
            resolution.resolved.append(conflict.chosen)
            resolution.conflicts.append(conflict)
            for line in conflict.lines():
                logger.debug("%s", line)
        return resolution


def resolve_conflicts(tree: DependencyTree) -> list[PackageDescriptor]:
    """Return the canonical descriptor for every conflicting source in *tree*."""
    return ConflictResolver().resolve(tree).resolved
