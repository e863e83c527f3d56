#!/usr/bin/env python3
"""Tests for ResultSet."""

from resourceglob.resources.handles import FileResource
from resourceglob.resources.result_set import ResultSet


class TestResultSet:
    """Tests for ordering and deduplication."""

    def test_empty(self):
        result = ResultSet()

        assert len(result) == 0
        assert not result
        assert result.first() is None
        assert result.to_list() == []

    def test_insertion_order(self, temp_dir):
        handles = [FileResource(temp_dir / name) for name in ("c", "a", "b")]
        result = ResultSet(handles)

        assert result.to_list() == handles
        assert result.first() == handles[0]
        assert result.locations() == [h.location for h in handles]

    def test_duplicates_ignored(self, temp_dir):
        result = ResultSet()

        assert result.add(FileResource(temp_dir / "a")) is True
        assert result.add(FileResource(str(temp_dir / "a"))) is False
        assert len(result) == 1

    def test_first_seen_wins(self, temp_dir):
        first = FileResource(temp_dir / "a")
        result = ResultSet([first, FileResource(temp_dir / "b"), FileResource(temp_dir / "a")])

        assert result.to_list()[0] is first
        assert len(result) == 2

    def test_contains_handle_or_location(self, temp_dir):
        handle = FileResource(temp_dir / "a")
        result = ResultSet([handle])

        assert handle in result
        assert handle.location in result
        assert FileResource(temp_dir / "b") not in result

    def test_iteration_is_safe_during_mutation(self, temp_dir):
        result = ResultSet([FileResource(temp_dir / "a")])

        for _ in result:
            result.add(FileResource(temp_dir / "b"))

        assert len(result) == 2

    def test_equality_compares_ordered_locations(self, temp_dir):
        a = FileResource(temp_dir / "a")
        b = FileResource(temp_dir / "b")

        assert ResultSet([a, b]) == ResultSet([a, b])
        assert ResultSet([a, b]) != ResultSet([b, a])
