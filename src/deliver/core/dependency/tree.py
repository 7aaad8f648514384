"""Dependency tree: an arena of nodes with parent indices.

The tree records *who asked for what*. Each node wraps the
``PackageDescriptor`` requested by its parent; the same source can appear
at many places in the tree, possibly on different refs, and that is
exactly what the conflict resolver looks for.

Nodes are owned by the ``DependencyTree`` and addressed by their index in
the arena. A node stores the index of its parent rather than a reference
to it, so walking up the ancestor chain never creates ownership cycles.
Index 0 is always the sentinel root, which stands for the current project
and carries no descriptor.

The tree is built strictly top-down by the fetcher and is never pruned.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterator

from deliver.core.manifest.models import PackageDescriptor

ROOT_INDEX = 0


@dataclass
class Node:
    """One request for a package in the dependency tree.

    Attributes:
        index: Position of the node in its tree's arena.
        descriptor: The requested package. None only for the sentinel root.
        parent: Index of the parent node. None only for the sentinel root.
        children: Indices of child nodes, in the order they were added.
    """

    index: int
    descriptor: PackageDescriptor | None
    parent: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.descriptor is None

    @property
    def source(self) -> str:
        return self.descriptor.source if self.descriptor else ""

    @property
    def ref(self) -> str:
        return self.descriptor.ref if self.descriptor else ""


class DependencyTree:
    """Arena-backed dependency tree rooted at a sentinel node.

    Args:
        label: Human-readable name for the sentinel (normally the
            project's own package path). Never treated as a dependency.

    Thread safety: This class is NOT thread-safe. deliver builds and reads
    trees from a single thread.
    """

    def __init__(self, label: str = "") -> None:
        self.label = label
        self._nodes: list[Node] = [Node(index=ROOT_INDEX, descriptor=None)]

    @property
    def root(self) -> Node:
        return self._nodes[ROOT_INDEX]

    def __len__(self) -> int:
        """Number of real (non-sentinel) nodes."""
        return len(self._nodes) - 1

    def node(self, index: int) -> Node:
        return self._nodes[index]

    def add_child(self, parent: Node, descriptor: PackageDescriptor) -> Node:
        """Create a node for *descriptor* and append it to *parent*'s children.

        Returns:
            The new node, already linked to its parent.
        """
        child = Node(index=len(self._nodes), descriptor=descriptor, parent=parent.index)
        self._nodes.append(child)
        parent.children.append(child.index)
        return child

    def parent(self, node: Node) -> Node | None:
        if node.parent is None:
            return None
        return self._nodes[node.parent]

    def children(self, node: Node) -> list[Node]:
        return [self._nodes[i] for i in node.children]

    def ancestors(self, node: Node) -> list[Node]:
        """Return the real ancestors of *node*, nearest first.

        The sentinel root is never included, so a top-level package has
        no ancestors.
        """
        chain: list[Node] = []
        current = self.parent(node)
        while current is not None and not current.is_root:
            chain.append(current)
            current = self.parent(current)
        return chain

    def depth(self, node: Node) -> int:
        """Distance from the sentinel. Top-level packages have depth 1."""
        if node.is_root:
            return 0
        return len(self.ancestors(node)) + 1

    def traverse_breadth_first(self, start: Node | None = None) -> Iterator[Node]:
        """Lazily yield nodes level by level below *start*.

        The FIFO queue is seeded with *start*'s children (the sentinel's
        by default) and each dequeued node's children are appended as it
        is visited. *start* itself is never yielded.
        """
        start = self.root if start is None else start
        queue: deque[int] = deque(start.children)
        while queue:
            current = self._nodes[queue.popleft()]
            yield current
            queue.extend(current.children)

    def _dump_node(self, node: Node, indent: int, lines: list[str]) -> None:
        if node.descriptor is not None:
            lines.append(" " * indent + node.descriptor.describe())
        for child in self.children(node):
            self._dump_node(child, indent + 2, lines)

    def dump(self) -> list[str]:
        """Render the tree as indented ``<source> <ref>`` lines.

        Depth-first, two spaces per level, sentinel skipped. Read-only.
        """
        lines: list[str] = []
        for child in self.children(self.root):
            self._dump_node(child, 0, lines)
        return lines
