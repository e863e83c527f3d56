#!/usr/bin/env python3
"""Tests for virtual filesystem matching."""

import pytest

from resourceglob.resources.handles import VirtualResource
from resourceglob.rules.patterns import GlobMatcher
from resourceglob.strategies.virtual import (
    InMemoryVirtualFilesystem,
    VirtualFilesystem,
    VirtualFsStrategy,
    VirtualFsVisitor,
)


@pytest.fixture
def vfs():
    return InMemoryVirtualFilesystem(
        {
            "/conf/app.yaml": b"app: true",
            "/conf/db/main.yaml": b"db: main",
            "/conf/db/notes.txt": b"notes",
            "/lib/core.yaml": b"core: 1",
        }
    )


class TestInMemoryVirtualFilesystem:
    """Tests for the dict-backed virtual filesystem."""

    def test_satisfies_protocol(self, vfs):
        assert isinstance(vfs, VirtualFilesystem)

    def test_lookup_normalizes(self, vfs):
        assert vfs.lookup("conf//db/../app.yaml") == "/conf/app.yaml"
        assert vfs.lookup("/") == "/"

    def test_exists(self, vfs):
        assert vfs.exists("/")
        assert vfs.exists("/conf")
        assert vfs.exists("/conf/db/main.yaml")
        assert not vfs.exists("/con")
        assert not vfs.exists("/missing.yaml")

    def test_directories_are_implied(self, vfs):
        assert vfs.is_directory("/conf/db")
        assert not vfs.is_directory("/conf/app.yaml")

    def test_open(self, vfs):
        assert vfs.open("/lib/core.yaml").read() == b"core: 1"
        with pytest.raises(FileNotFoundError):
            vfs.open("/conf")

    def test_add_and_remove(self, vfs):
        vfs.add_file("new/file.txt", b"new")
        assert vfs.exists("/new/file.txt")

        vfs.remove_file("/new/file.txt")
        assert not vfs.exists("/new")

    def test_visit_order(self, vfs):
        visited = []

        class Collector:
            def visit(self, node):
                visited.append(node)

        vfs.visit("/conf", Collector())

        assert visited == ["/conf/app.yaml", "/conf/db", "/conf/db/main.yaml", "/conf/db/notes.txt"]


class TestVirtualFsStrategy:
    """Tests for sub-pattern expansion over virtual nodes."""

    def test_find(self, vfs):
        strategy = VirtualFsStrategy(vfs, GlobMatcher())
        root = VirtualResource(vfs.lookup("/conf"), vfs)

        result = strategy.find(root, "**/*.yaml")

        assert result.locations() == ["vfs:/conf/app.yaml", "vfs:/conf/db/main.yaml"]

    def test_find_single_level(self, vfs):
        strategy = VirtualFsStrategy(vfs, GlobMatcher())
        result = strategy.find(VirtualResource(vfs.lookup("/conf"), vfs), "*")
        assert result.locations() == ["vfs:/conf/app.yaml", "vfs:/conf/db"]

    def test_find_from_filesystem_root(self, vfs):
        strategy = VirtualFsStrategy(vfs, GlobMatcher())
        result = strategy.find(VirtualResource(vfs.lookup("/"), vfs), "*/*.yaml")
        assert result.locations() == ["vfs:/conf/app.yaml", "vfs:/lib/core.yaml"]

    def test_visitor_ignores_nodes_outside_root(self, vfs):
        visitor = VirtualFsVisitor("/conf", "**", GlobMatcher(), vfs)

        visitor.visit("/lib/core.yaml")
        visitor.visit("/conf/app.yaml")

        assert visitor.root_path == "/conf/"
        assert visitor.resources.locations() == ["vfs:/conf/app.yaml"]
        assert "sub-pattern: **" in repr(visitor)
