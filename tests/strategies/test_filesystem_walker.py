#!/usr/bin/env python3
"""Tests for FilesystemWalker."""

import os
from unittest.mock import patch

import pytest

from resourceglob.resources.handles import FileResource
from resourceglob.rules.patterns import GlobMatcher
from resourceglob.strategies.filesystem import FilesystemWalker


@pytest.fixture
def walker():
    return FilesystemWalker(GlobMatcher())


def _messages(records, level):
    return [r.getMessage() for r in records if r.levelname == level]


class TestFilesystemWalker:
    """Tests for pattern walks over directory trees."""

    def test_recursive_files(self, walker, source_tree):
        result = walker.walk(source_tree, "**/*.txt")

        assert result.to_list() == [
            FileResource(source_tree / "a" / "file1.txt"),
            FileResource(source_tree / "b" / "file2.txt"),
            FileResource(source_tree / "c" / "sub" / "file3.txt"),
        ]

    def test_single_level(self, walker, source_tree):
        result = walker.walk(source_tree, "c/*")

        assert result.to_list() == [
            FileResource(source_tree / "c" / "notes.md"),
            FileResource(source_tree / "c" / "sub"),
        ]

    def test_directories_match_directory_patterns(self, walker, source_tree):
        result = walker.walk(source_tree, "*")
        assert [handle.filename for handle in result] == ["a", "b", "c"]

    def test_leading_separator_in_sub_pattern(self, walker, source_tree):
        result = walker.walk(str(source_tree), "/a/*.txt")
        assert result.to_list() == [FileResource(source_tree / "a" / "file1.txt")]

    def test_backslash_sub_pattern(self, walker, source_tree):
        result = walker.walk(source_tree, "c\\**\\*.txt")
        assert result.to_list() == [FileResource(source_tree / "c" / "sub" / "file3.txt")]

    def test_pruned_subtrees_not_listed(self, walker, source_tree):
        listed = []
        real_scandir = os.scandir

        def tracking_scandir(path):
            listed.append(os.path.basename(path))
            return real_scandir(path)

        with patch("resourceglob.strategies.filesystem.os.scandir", side_effect=tracking_scandir):
            walker.walk(source_tree, "a/*.txt")

        assert listed == ["root", "a"]

    def test_case_insensitive_walk(self, source_tree):
        walker = FilesystemWalker(GlobMatcher(case_sensitive=False))
        result = walker.walk(source_tree, "A/*.TXT")
        assert len(result) == 1

    def test_missing_root(self, walker, temp_dir, log_records):
        result = walker.walk(temp_dir / "missing", "**/*.txt")

        assert len(result) == 0
        assert any("does not exist" in m for m in _messages(log_records, "TRACE"))
        assert _messages(log_records, "WARNING") == []

    def test_file_root(self, walker, source_tree, log_records):
        result = walker.walk(source_tree / "c" / "notes.md", "*")

        assert len(result) == 0
        assert any("does not denote a directory" in m for m in _messages(log_records, "WARNING"))

    def test_unreadable_root(self, walker, source_tree, log_records):
        with patch(
            "resourceglob.strategies.filesystem.is_readable_directory", return_value=False
        ):
            result = walker.walk(source_tree, "**/*.txt")

        assert len(result) == 0
        assert any("not readable" in m for m in _messages(log_records, "WARNING"))

    def test_unreadable_subdirectory_skipped(self, walker, source_tree, log_records):
        def readable(path):
            return os.path.basename(str(path)) != "b"

        with patch("resourceglob.strategies.filesystem.is_readable_directory", side_effect=readable):
            result = walker.walk(source_tree, "**/*.txt")

        assert [handle.filename for handle in result] == ["file1.txt", "file3.txt"]
        assert any("Skipping subdirectory" in m for m in _messages(log_records, "WARNING"))

    def test_listing_failure_skipped(self, walker, source_tree, log_records):
        real_scandir = os.scandir

        def failing_scandir(path):
            if os.path.basename(path) == "c":
                raise PermissionError("denied")
            return real_scandir(path)

        with patch("resourceglob.strategies.filesystem.os.scandir", side_effect=failing_scandir):
            result = walker.walk(source_tree, "**/*.txt")

        assert [handle.filename for handle in result] == ["file1.txt", "file2.txt"]
        assert any("Could not retrieve contents" in m for m in _messages(log_records, "WARNING"))


class TestSymlinks:
    """Tests for symlinked directories."""

    def test_cycle_visited_once(self, walker, source_tree, log_records):
        os.symlink(source_tree, source_tree / "c" / "loop")

        result = walker.walk(source_tree, "**/*.txt")

        assert len(result) == 3
        assert any("already visited" in m for m in _messages(log_records, "WARNING"))

    def test_symlinks_not_followed(self, source_tree):
        outside = source_tree.parent / "outside"
        outside.mkdir()
        (outside / "extra.txt").write_text("extra")
        os.symlink(outside, source_tree / "linked")

        following = FilesystemWalker(GlobMatcher()).walk(source_tree, "**/*.txt")
        not_following = FilesystemWalker(GlobMatcher(), follow_symlinks=False).walk(
            source_tree, "**/*.txt"
        )

        assert "extra.txt" in [handle.filename for handle in following]
        assert "extra.txt" not in [handle.filename for handle in not_following]
        assert len(not_following) == 3
