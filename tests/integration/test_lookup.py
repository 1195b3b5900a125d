"""
Integration tests for end-to-end lookup.

These tests exercise the full stack (registry, translator, cache, YAML
interpreter and resolver) against the definition trees from conftest.py:
- A single config file root
- An indexed hierarchy made of one index file
- An indexed hierarchy made of one file per tool
- Two roots overriding each other per path
"""

from pathlib import Path
from typing import Callable

import pytest

from toolpath.errors import DefinitionLoadError
from toolpath.resolver import Resolver
from toolpath.schema import Collection, Tool

MakeTree = Callable[[str, dict[str, str]], Path]


# =============================================================================
# Single Config File
# =============================================================================


class TestConfigPath:
    """Lookup against a single config file root."""

    @pytest.fixture(autouse=True)
    def setup(self, resolver: Resolver, index_file_only: Path) -> None:
        resolver.prepend_config_paths(index_file_only)

    def test_finds_tool(self, resolver: Resolver) -> None:
        tool = resolver.lookup(["tool-1"])
        assert tool.short_desc == "tool-1 short description"
        assert tool.long_desc_text == "tool-1 long description"

    def test_finds_subtool(self, resolver: Resolver) -> None:
        tool = resolver.lookup(["collection-1", "tool-1-2"])
        assert tool.short_desc == "tool-1-2 short description"
        assert tool.long_desc_text == "tool-1-2 long description"
        assert tool.full_name == ("collection-1", "tool-1-2")

    def test_finds_collection(self, resolver: Resolver) -> None:
        collection = resolver.lookup(["collection-1"])
        assert isinstance(collection, Collection)
        assert collection.short_desc == "collection-1 short description"
        assert collection.full_name == ("collection-1",)

    def test_nearest_collection_for_unknown_subtool(self, resolver: Resolver) -> None:
        collection = resolver.lookup(["collection-1", "tool-blah"])
        assert collection.short_desc == "collection-1 short description"
        assert collection.full_name == ("collection-1",)

    def test_root_for_unknown_tool(self, resolver: Resolver) -> None:
        entry = resolver.lookup(["tool-blah"])
        assert entry.full_name == ()
        assert entry.simple_name is None

    def test_whole_file_loaded_once(self, resolver: Resolver) -> None:
        resolver.lookup(["tool-1"])
        assert resolver.tool_defined(["collection-1", "tool-1-2"])
        resolver.lookup(["collection-1", "tool-1-1"])
        assert resolver.cache.load_count == 1


# =============================================================================
# Indexed Hierarchy
# =============================================================================


class TestOrdinaryPathWithIndexFile:
    """Lookup against a hierarchy holding only an index file."""

    def test_finds_tool(self, resolver: Resolver, index_file_only: Path) -> None:
        resolver.prepend_paths(index_file_only)
        tool = resolver.lookup(["tool-1"])
        assert tool.short_desc == "tool-1 short description"
        assert tool.long_desc_text == "tool-1 long description"


class TestOrdinaryPathWithHierarchy:
    """Lookup against a hierarchy with one file per tool."""

    @pytest.fixture(autouse=True)
    def setup(self, resolver: Resolver, normal_file_hierarchy: Path) -> None:
        resolver.prepend_paths(normal_file_hierarchy)

    def test_finds_tool(self, resolver: Resolver) -> None:
        tool = resolver.lookup(["tool-1"])
        assert isinstance(tool, Tool)
        assert tool.short_desc == "normal tool-1 short description"
        assert tool.long_desc_text == "normal tool-1 long description"

    def test_finds_subtool(self, resolver: Resolver) -> None:
        tool = resolver.lookup(["collection-1", "tool-1-3"])
        assert tool.short_desc == "normal tool-1-3 short description"
        assert tool.long_desc_text == "normal tool-1-3 long description"
        assert tool.full_name == ("collection-1", "tool-1-3")

    def test_directory_is_a_collection(self, resolver: Resolver) -> None:
        collection = resolver.lookup(["collection-1"])
        assert isinstance(collection, Collection)
        assert collection.short_desc is None
        assert collection.full_name == ("collection-1",)

    def test_nearest_collection_for_unknown_subtool(self, resolver: Resolver) -> None:
        collection = resolver.lookup(["collection-1", "tool-blah"])
        assert collection.short_desc is None
        assert collection.full_name == ("collection-1",)

    def test_root_for_unknown_tool(self, resolver: Resolver) -> None:
        entry = resolver.lookup(["tool-blah"])
        assert entry.full_name == ()
        assert entry.simple_name is None

    def test_does_not_load_unnecessary_files(self, resolver: Resolver) -> None:
        resolver.lookup(["collection-1", "tool-1-3"])
        assert resolver.tool_defined(["collection-1", "tool-1-3"])
        assert resolver.tool_defined(["collection-1"])
        assert not resolver.tool_defined(["collection-1", "tool-1-1"])
        assert not resolver.tool_defined(["tool-1"])

        resolver.lookup(["tool-1"])
        assert resolver.tool_defined(["tool-1"])

    def test_listing_from_root_loads_all_descendants(self, resolver: Resolver) -> None:
        resolver.lookup([])
        names = {e.full_name for e in resolver.list_subtools([], recursive=True)}

        assert ("collection-1", "tool-1-3") in names
        assert resolver.tool_defined(["collection-1", "tool-1-3"])
        assert resolver.tool_defined(["tool-1"])

    def test_repeated_lookups_do_not_reload(self, resolver: Resolver) -> None:
        resolver.lookup(["collection-1", "tool-1-3"])
        count = resolver.cache.load_count
        for _ in range(3):
            resolver.lookup(["collection-1", "tool-1-3"])
            resolver.lookup(["collection-1"])
        assert resolver.cache.load_count == count


# =============================================================================
# Priorities
# =============================================================================


class TestPriorities:
    """Per-path overlay between a config file root and a hierarchy root."""

    def test_tool_from_config_file_wins(self, resolver: Resolver, index_file_only: Path, normal_file_hierarchy: Path) -> None:
        resolver.prepend_paths(normal_file_hierarchy)
        resolver.prepend_config_paths(index_file_only)
        tool = resolver.lookup(["tool-1"])
        assert tool.short_desc == "tool-1 short description"
        assert tool.long_desc_text == "tool-1 long description"

    def test_tool_from_hierarchy_wins(self, resolver: Resolver, index_file_only: Path, normal_file_hierarchy: Path) -> None:
        resolver.prepend_config_paths(index_file_only)
        resolver.prepend_paths(normal_file_hierarchy)
        tool = resolver.lookup(["tool-1"])
        assert tool.short_desc == "normal tool-1 short description"
        assert tool.long_desc_text == "normal tool-1 long description"

    def test_subtool_from_config_file_wins(self, resolver: Resolver, index_file_only: Path, normal_file_hierarchy: Path) -> None:
        resolver.prepend_paths(normal_file_hierarchy)
        resolver.prepend_config_paths(index_file_only)
        tool = resolver.lookup(["collection-1", "tool-1-1"])
        assert tool.short_desc == "tool-1-1 short description"
        assert tool.long_desc_text == "tool-1-1 long description"

    def test_subtool_from_hierarchy_wins(self, resolver: Resolver, index_file_only: Path, normal_file_hierarchy: Path) -> None:
        resolver.prepend_config_paths(index_file_only)
        resolver.prepend_paths(normal_file_hierarchy)
        tool = resolver.lookup(["collection-1", "tool-1-1"])
        assert tool.short_desc == "normal tool-1-1 short description"
        assert tool.long_desc_text == "normal tool-1-1 long description"

    def test_tool_only_in_lower_root(self, resolver: Resolver, index_file_only: Path, normal_file_hierarchy: Path) -> None:
        resolver.prepend_paths(normal_file_hierarchy)
        resolver.prepend_config_paths(index_file_only)
        tool = resolver.lookup(["tool-3"])
        assert tool.short_desc == "normal tool-3 short description"
        assert tool.long_desc_text == "normal tool-3 long description"

    def test_subtool_only_in_lower_root_under_shared_parent(
        self, resolver: Resolver, index_file_only: Path, normal_file_hierarchy: Path
    ) -> None:
        resolver.prepend_paths(normal_file_hierarchy)
        resolver.prepend_config_paths(index_file_only)
        tool = resolver.lookup(["collection-1", "tool-1-3"])
        assert tool.short_desc == "normal tool-1-3 short description"
        assert tool.long_desc_text == "normal tool-1-3 long description"

    def test_listing_merges_roots(self, resolver: Resolver, index_file_only: Path, normal_file_hierarchy: Path) -> None:
        resolver.prepend_paths(normal_file_hierarchy)
        resolver.prepend_config_paths(index_file_only)
        entries = {e.full_name: e for e in resolver.list_subtools(["collection-1"])}

        assert sorted(entries) == [
            ("collection-1", "tool-1-1"),
            ("collection-1", "tool-1-2"),
            ("collection-1", "tool-1-3"),
        ]
        assert entries[("collection-1", "tool-1-1")].short_desc == "tool-1-1 short description"
        assert entries[("collection-1", "tool-1-3")].short_desc == "normal tool-1-3 short description"


# =============================================================================
# Failure Modes
# =============================================================================


class TestFailureModes:
    """Missing roots and broken definition files."""

    def test_missing_root_falls_through(self, resolver: Resolver, temp_dir: Path, normal_file_hierarchy: Path) -> None:
        resolver.prepend_paths(normal_file_hierarchy)
        resolver.prepend_paths(temp_dir / "missing")
        resolver.prepend_config_paths(temp_dir / "missing.yaml")
        assert resolver.lookup(["tool-1"]).short_desc == "normal tool-1 short description"

    def test_broken_file_does_not_fall_through(
        self, resolver: Resolver, make_tree: MakeTree, normal_file_hierarchy: Path
    ) -> None:
        broken = make_tree("broken", {"tool-1.yaml": "desc: [unclosed\n"})
        resolver.prepend_paths(normal_file_hierarchy)
        resolver.prepend_paths(broken)

        with pytest.raises(DefinitionLoadError) as exc_info:
            resolver.lookup(["tool-1"])
        assert exc_info.value.source_path == str((broken / "tool-1.yaml").resolve())

    def test_broken_sibling_is_not_read(
        self, resolver: Resolver, make_tree: MakeTree, normal_file_hierarchy: Path
    ) -> None:
        broken = make_tree("broken-sibling", {"other.yaml": "desc: [unclosed\n"})
        resolver.prepend_paths(normal_file_hierarchy)
        resolver.prepend_paths(broken)
        assert resolver.lookup(["tool-1"]).short_desc == "normal tool-1 short description"
