#!/usr/bin/env python3
"""Tests for resource handles."""

import zipfile

import pytest

from resourceglob.core.constants import ResourceKind
from resourceglob.core.errors import InvalidLocationError
from resourceglob.resources.handles import (
    ArchiveResource,
    FileResource,
    ProviderResource,
    VirtualResource,
    apply_relative_path,
)
from resourceglob.resources.providers import SearchPathProvider
from resourceglob.strategies.virtual import InMemoryVirtualFilesystem


class TestApplyRelativePath:
    """Tests for URL-style relative path application."""

    def test_directory_base(self):
        assert apply_relative_path("/conf/", "db.yaml") == "/conf/db.yaml"

    def test_file_base_replaces_last_segment(self):
        assert apply_relative_path("/conf/app.yaml", "db.yaml") == "/conf/db.yaml"

    def test_no_separator(self):
        assert apply_relative_path("app.yaml", "db.yaml") == "db.yaml"

    def test_relative_leading_separator_stripped(self):
        assert apply_relative_path("/conf/", "/db.yaml") == "/conf/db.yaml"


class TestFileResource:
    """Tests for FileResource."""

    def test_location_and_kind(self, source_tree):
        handle = FileResource(source_tree / "a" / "file1.txt")

        assert handle.kind == ResourceKind.FILESYSTEM
        assert handle.location == "file:" + (source_tree / "a" / "file1.txt").as_posix()
        assert handle.filename == "file1.txt"
        assert str(handle) == handle.location

    def test_exists_and_read(self, source_tree):
        handle = FileResource(source_tree / "a" / "file1.txt")

        assert handle.exists()
        assert handle.read_bytes() == b"one"
        assert not handle.is_directory()

    def test_missing_file(self, temp_dir):
        handle = FileResource(temp_dir / "missing.txt")

        assert not handle.exists()
        with pytest.raises(FileNotFoundError):
            handle.open()

    def test_equality_by_location(self, source_tree):
        first = FileResource(source_tree / "a" / "file1.txt")
        second = FileResource(str(source_tree / "a" / "." / "file1.txt"))

        assert first == second
        assert hash(first) == hash(second)
        assert first != FileResource(source_tree / "b" / "file2.txt")

    def test_create_relative_from_directory(self, source_tree):
        directory = FileResource(source_tree / "c")
        relative = directory.create_relative("sub/file3.txt")

        assert isinstance(relative, FileResource)
        assert relative.exists()
        assert relative.read_bytes() == b"three"

    def test_create_relative_from_file(self, source_tree):
        handle = FileResource(source_tree / "c" / "notes.md")
        sibling = handle.create_relative("sub/file3.txt")

        assert sibling == FileResource(source_tree / "c" / "sub" / "file3.txt")


class TestArchiveResource:
    """Tests for ArchiveResource."""

    def test_location_format(self, properties_zip):
        handle = ArchiveResource(properties_zip, "a/x.properties")

        assert handle.kind == ResourceKind.ARCHIVE
        assert handle.location == f"archive:{properties_zip.as_posix()}!/a/x.properties"
        assert handle.filename == "x.properties"
        assert handle.entry == "a/x.properties"
        assert handle.archive_path == properties_zip.as_posix()

    def test_root_filename_is_archive_name(self, properties_zip):
        assert ArchiveResource(properties_zip).filename == "props.zip"

    def test_exists(self, properties_zip):
        assert ArchiveResource(properties_zip).exists()
        assert ArchiveResource(properties_zip, "a/x.properties").exists()
        assert ArchiveResource(properties_zip, "a/b/").exists()
        assert ArchiveResource(properties_zip, "a/b").exists()
        assert not ArchiveResource(properties_zip, "a/missing.txt").exists()

    def test_missing_archive(self, temp_dir):
        handle = ArchiveResource(temp_dir / "missing.zip", "a.txt")
        assert not handle.exists()

    def test_not_a_zip(self, temp_dir):
        bogus = temp_dir / "bogus.zip"
        bogus.write_text("not a zip")

        assert not ArchiveResource(bogus).exists()
        assert not ArchiveResource(bogus, "a.txt").exists()

    def test_read_entry(self, properties_zip):
        handle = ArchiveResource(properties_zip, "a/x.properties")
        assert handle.read_bytes() == b"x=1"

    def test_open_directory_rejected(self, properties_zip):
        with pytest.raises(IsADirectoryError):
            ArchiveResource(properties_zip, "a/").open()
        with pytest.raises(IsADirectoryError):
            ArchiveResource(properties_zip).open()

    def test_open_missing_entry(self, properties_zip):
        with pytest.raises(FileNotFoundError):
            ArchiveResource(properties_zip, "a/missing.txt").open()

    def test_cached_archive_is_used_and_left_open(self, properties_zip):
        with zipfile.ZipFile(properties_zip) as archive:
            handle = ArchiveResource(properties_zip, "a/z.txt", archive=archive)

            assert handle.archive is archive
            assert handle.exists()
            assert handle.read_bytes() == b"z"
            assert archive.fp is not None

    def test_from_url(self, properties_zip):
        url = f"archive:{properties_zip.as_posix()}!/a/b/"
        handle = ArchiveResource.from_url(url)

        assert handle.location == url
        assert handle.entry == "a/b/"

    def test_from_url_without_entry(self, properties_zip):
        handle = ArchiveResource.from_url(f"archive:{properties_zip.as_posix()}")
        assert handle.entry == ""
        assert handle.location.endswith("props.zip!/")

    def test_from_url_nested_file_scheme(self, properties_zip):
        handle = ArchiveResource.from_url(f"archive:file:{properties_zip.as_posix()}!/a/x.properties")
        assert handle == ArchiveResource(properties_zip, "a/x.properties")

    def test_from_url_bare_path(self, properties_zip):
        """References without a scheme fall back to manual parsing."""
        handle = ArchiveResource.from_url(f"{properties_zip.as_posix()}!/a/z.txt")
        assert handle == ArchiveResource(properties_zip, "a/z.txt")

    def test_from_url_fragment_falls_back(self, temp_dir):
        """Characters that are special in URLs stay part of the path."""
        handle = ArchiveResource.from_url(f"archive:{temp_dir.as_posix()}/odd#name.zip!/x.txt")
        assert handle.archive_path == f"{temp_dir.as_posix()}/odd#name.zip"
        assert handle.entry == "x.txt"

    @pytest.mark.parametrize("url", ["archive:", "archive:!/x.txt", ""])
    def test_from_url_without_archive_path(self, url):
        with pytest.raises(InvalidLocationError):
            ArchiveResource.from_url(url)

    def test_create_relative(self, properties_zip):
        directory = ArchiveResource(properties_zip, "a/")
        relative = directory.create_relative("b/y.properties")

        assert relative == ArchiveResource(properties_zip, "a/b/y.properties")
        assert relative.read_bytes() == b"y=1"

    def test_create_relative_from_entry(self, properties_zip):
        entry = ArchiveResource(properties_zip, "a/z.txt")
        assert entry.create_relative("x.properties").entry == "a/x.properties"

    def test_create_relative_from_root(self, properties_zip):
        root = ArchiveResource(properties_zip)
        assert root.create_relative("a/z.txt").entry == "a/z.txt"

    def test_with_entry(self, properties_zip):
        root = ArchiveResource(properties_zip)
        assert root.with_entry("a/").location == f"archive:{properties_zip.as_posix()}!/a/"


class TestProviderResource:
    """Tests for ProviderResource."""

    def test_missing_name(self, temp_dir):
        provider = SearchPathProvider([str(temp_dir)])
        handle = ProviderResource("conf/missing.yaml", provider)

        assert handle.kind == ResourceKind.PROVIDER
        assert handle.location == "classpath:conf/missing.yaml"
        assert handle.filename == "missing.yaml"
        assert handle.provider is provider
        assert not handle.exists()
        with pytest.raises(FileNotFoundError):
            handle.open()

    def test_existence_rechecked(self, temp_dir):
        provider = SearchPathProvider([str(temp_dir)])
        handle = ProviderResource("late.txt", provider)
        assert not handle.exists()

        (temp_dir / "late.txt").write_text("late")

        assert handle.exists()
        assert handle.locate() == FileResource(temp_dir / "late.txt")
        assert handle.read_bytes() == b"late"

    def test_scheme_name_kept_verbatim(self, temp_dir):
        provider = SearchPathProvider([str(temp_dir)])
        assert ProviderResource("custom:thing", provider).location == "custom:thing"

    def test_create_relative(self, temp_dir):
        provider = SearchPathProvider([str(temp_dir)])
        handle = ProviderResource("conf/app.yaml", provider)

        relative = handle.create_relative("db.yaml")

        assert isinstance(relative, ProviderResource)
        assert relative.name == "conf/db.yaml"


class TestVirtualResource:
    """Tests for VirtualResource."""

    def test_node_handle(self):
        filesystem = InMemoryVirtualFilesystem({"/conf/app.yaml": b"a: 1"})
        handle = VirtualResource(filesystem.lookup("/conf/app.yaml"), filesystem)

        assert handle.kind == ResourceKind.VIRTUAL
        assert handle.location == "vfs:/conf/app.yaml"
        assert handle.path == "/conf/app.yaml"
        assert handle.filesystem is filesystem
        assert handle.exists()
        assert handle.read_bytes() == b"a: 1"

    def test_create_relative(self):
        filesystem = InMemoryVirtualFilesystem({"/conf/app.yaml": b"a", "/conf/db.yaml": b"b"})
        directory = VirtualResource(filesystem.lookup("/conf"), filesystem)

        relative = directory.create_relative("db.yaml")

        assert relative.location == "vfs:/conf/db.yaml"
        assert relative.read_bytes() == b"b"
