"""Tests for shallowest-wins conflict detection."""

from __future__ import annotations

import logging

import pytest

from deliver.core.dependency import (
    ConflictResolver,
    DependencyTree,
    SourceRecord,
    resolve_conflicts,
)
from deliver.core.manifest import PackageDescriptor


def _pkg(name: str, source: str, branch: str = "", revision: str = "") -> PackageDescriptor:
    return PackageDescriptor(name=name, source=source, branch=branch, revision=revision)


class TestNoConflicts:
    """Trees where every source is requested at a single ref."""

    def test_empty_tree(self) -> None:
        resolution = ConflictResolver().resolve(DependencyTree())
        assert resolution.resolved == []
        assert resolution.conflicts == []
        assert not resolution.has_conflicts

    def test_single_dependency_has_no_diagnostics(self, caplog) -> None:
        t = DependencyTree()
        t.add_child(t.root, _pkg("log", "git://log", branch="dev"))
        with caplog.at_level(logging.DEBUG, logger="deliver.core.dependency.resolver"):
            resolution = ConflictResolver().resolve(t)
        assert resolution.resolved == []
        assert caplog.records == []

    def test_same_source_same_ref_is_not_a_conflict(self) -> None:
        t = DependencyTree()
        a = t.add_child(t.root, _pkg("a", "git://a"))
        t.add_child(t.root, _pkg("log", "git://log", revision="r1"))
        t.add_child(a, _pkg("log", "git://log", revision="r1"))
        assert resolve_conflicts(t) == []

    def test_distinct_sources_never_conflict(self) -> None:
        t = DependencyTree()
        t.add_child(t.root, _pkg("a", "git://a", branch="dev"))
        t.add_child(t.root, _pkg("b", "git://b", branch="main"))
        assert resolve_conflicts(t) == []


class TestConflictDetection:
    """A source requested at two or more refs is reported exactly once."""

    def test_two_names_one_source_different_branches(self) -> None:
        t = DependencyTree()
        t.add_child(t.root, _pkg("pkgA", "urlX", branch="dev"))
        t.add_child(t.root, _pkg("pkgB", "urlX", branch="main"))

        resolution = ConflictResolver().resolve(t)

        assert len(resolution.conflicts) == 1
        conflict = resolution.conflicts[0]
        assert conflict.source == "urlX"
        assert conflict.refs == ["dev/HEAD", "main/HEAD"]
        assert conflict.chosen.name == "pkgA"
        assert resolution.resolved == [conflict.chosen]

    def test_shallowest_request_wins(self) -> None:
        t = DependencyTree()
        a = t.add_child(t.root, _pkg("a", "git://a"))
        # Deeper request is added first but still loses.
        t.add_child(a, _pkg("log", "git://log", revision="deep"))
        t.add_child(t.root, _pkg("log", "git://log", revision="shallow"))

        [chosen] = resolve_conflicts(t)
        assert chosen.revision == "shallow"

    def test_first_discovered_wins_at_equal_depth(self) -> None:
        t = DependencyTree()
        a = t.add_child(t.root, _pkg("a", "git://a"))
        b = t.add_child(t.root, _pkg("b", "git://b"))
        t.add_child(a, _pkg("log", "git://log", branch="v1"))
        t.add_child(b, _pkg("log", "git://log", branch="v2"))

        [chosen] = resolve_conflicts(t)
        assert chosen.branch == "v1"

    def test_chosen_is_the_node_descriptor_object(self) -> None:
        t = DependencyTree()
        winner = _pkg("log", "git://log", revision="r1")
        t.add_child(t.root, winner)
        t.add_child(t.root, _pkg("log2", "git://log", revision="r2"))
        assert resolve_conflicts(t)[0] is winner

    def test_conflicts_in_first_discovery_order(self) -> None:
        t = DependencyTree()
        t.add_child(t.root, _pkg("z", "git://z", revision="1"))
        t.add_child(t.root, _pkg("a", "git://a", revision="1"))
        t.add_child(t.root, _pkg("z2", "git://z", revision="2"))
        t.add_child(t.root, _pkg("a2", "git://a", revision="2"))

        assert [c.source for c in ConflictResolver().resolve(t).conflicts] == [
            "git://z",
            "git://a",
        ]

    def test_three_refs_one_conflict(self) -> None:
        t = DependencyTree()
        for i, rev in enumerate(["r1", "r2", "r3"]):
            t.add_child(t.root, _pkg(f"log{i}", "git://log", revision=rev))
        [conflict] = ConflictResolver().resolve(t).conflicts
        assert conflict.refs == ["master/r1", "master/r2", "master/r3"]


class TestCollect:
    """Tests for the traversal bookkeeping."""

    def test_records_group_nodes_by_ref(self) -> None:
        t = DependencyTree()
        first = t.add_child(t.root, _pkg("log", "git://log", revision="r1"))
        second = t.add_child(t.root, _pkg("log", "git://log", revision="r1"))
        third = t.add_child(t.root, _pkg("log", "git://log", revision="r2"))

        records = ConflictResolver().collect(t)

        record = records["git://log"]
        assert record.chosen is first
        assert record.changesets == {"master/r1": [first, second], "master/r2": [third]}
        assert record.is_conflict


class TestDiagnostics:
    """Tests for Requester ancestry and the rendered warning lines."""

    def test_depth_two_requester_lists_only_its_parent(self) -> None:
        t = DependencyTree()
        t.add_child(t.root, _pkg("log", "git://log", revision="top"))
        web = t.add_child(t.root, _pkg("web", "git://web"))
        t.add_child(web, _pkg("log", "git://log", revision="nested"))

        [conflict] = ConflictResolver().resolve(t).conflicts

        chosen = conflict.requests["master/top"][0]
        other = conflict.requests["master/nested"][0]
        assert chosen.chosen and chosen.ancestry == ()
        assert not other.chosen and other.ancestry == ("git://web",)

    def test_lines_format(self) -> None:
        t = DependencyTree()
        t.add_child(t.root, _pkg("log", "git://log", revision="4f2c"))
        web = t.add_child(t.root, _pkg("web", "git://web"))
        api = t.add_child(web, _pkg("api", "git://api"))
        t.add_child(api, _pkg("log", "git://log", branch="dev"))

        [conflict] = ConflictResolver().resolve(t).conflicts

        assert conflict.lines() == [
            "Warning: conflicting versions found for git://log (* was chosen):",
            "  (*) master/4f2c",
            "      dev/HEAD",
            "        ... from git://api",
            "          ... from git://web",
        ]

    def test_each_line_is_logged(self, caplog) -> None:
        t = DependencyTree()
        t.add_child(t.root, _pkg("a", "git://x", branch="dev"))
        t.add_child(t.root, _pkg("b", "git://x", branch="main"))

        with caplog.at_level(logging.DEBUG, logger="deliver.core.dependency.resolver"):
            ConflictResolver().resolve(t)

        messages = [r.getMessage() for r in caplog.records]
        assert "Warning: conflicting versions found for git://x (* was chosen):" in messages
        assert "  (*) dev/HEAD" in messages
        assert all(r.levelno == logging.DEBUG for r in caplog.records)

    def test_sentinel_record_is_rejected(self) -> None:
        t = DependencyTree()
        record = SourceRecord(chosen=t.root, changesets={"": [t.root], "x": [t.root]})
        with pytest.raises(ValueError, match="sentinel"):
            ConflictResolver()._describe(t, "", record)


class TestReadOnly:
    """Resolution never changes the tree."""

    def test_resolve_leaves_tree_untouched(self) -> None:
        t = DependencyTree()
        a = t.add_child(t.root, _pkg("a", "git://a"))
        t.add_child(a, _pkg("log", "git://log", revision="r2"))
        t.add_child(t.root, _pkg("log", "git://log", revision="r1"))
        before = t.dump()

        ConflictResolver().resolve(t)

        assert t.dump() == before
        assert len(t) == 3
