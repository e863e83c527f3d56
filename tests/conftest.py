"""Shared pytest fixtures for resourceglob tests."""
import logging
import zipfile
from pathlib import Path
from typing import Callable, Dict, Generator, List, Sequence

import pytest
import yaml

from resourceglob.infrastructure.logger import LogLevel, get_logger


class RecordingHandler(logging.Handler):
    """Handler keeping every record it receives."""

    def __init__(self):
        super().__init__(level=1)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Temporary directory for a test."""
    return tmp_path


@pytest.fixture
def source_tree(temp_dir: Path) -> Path:
    """Directory tree root/{a/file1.txt, b/file2.txt, c/sub/file3.txt}."""
    root = temp_dir / "root"
    (root / "a").mkdir(parents=True)
    (root / "b").mkdir()
    (root / "c" / "sub").mkdir(parents=True)

    (root / "a" / "file1.txt").write_text("one")
    (root / "b" / "file2.txt").write_text("two")
    (root / "c" / "sub" / "file3.txt").write_text("three")
    (root / "c" / "notes.md").write_text("# notes")

    return root


@pytest.fixture
def make_zip(temp_dir: Path) -> Callable[..., Path]:
    """Factory building zip archives from a name -> content mapping."""

    def _make_zip(name: str, entries: Dict[str, str], directories: Sequence[str] = ()) -> Path:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as archive:
            for directory in directories:
                archive.writestr(directory.rstrip("/") + "/", "")
            for entry, content in entries.items():
                archive.writestr(entry, content)
        return path

    return _make_zip


@pytest.fixture
def properties_zip(make_zip) -> Path:
    """Archive with a/x.properties, a/b/y.properties and a/z.txt."""
    return make_zip(
        "props.zip",
        {
            "a/z.txt": "z",
            "a/b/y.properties": "y=1",
            "a/x.properties": "x=1",
        },
        directories=["a/", "a/b/"],
    )


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """Configuration file with a search path and resolver options."""
    config_path = temp_dir / "resourceglob.yaml"
    conf_dir = temp_dir / "conf"
    conf_dir.mkdir(exist_ok=True)
    with open(config_path, "w") as f:
        yaml.dump(
            {
                "resourceglob": {
                    "search_path": [str(conf_dir)],
                    "resolver": {"case_sensitive": False, "follow_symlinks": True},
                    "logging": {"level": "WARNING"},
                }
            },
            f,
        )
    return config_path


@pytest.fixture
def log_records() -> Generator[List[logging.LogRecord], None, None]:
    """Capture every record emitted below the resourceglob root logger."""
    root = get_logger("resourceglob")
    handler = RecordingHandler()
    previous_level = root.logger.level
    root.add_handler(handler)
    root.set_level(LogLevel.TRACE)
    yield handler.records
    root.remove_handler(handler)
    root.logger.setLevel(previous_level)
