"""Pytest configuration and shared fixtures."""

import logging
import sys
import tempfile
from pathlib import Path

import pytest

# Prefer the local source tree over an installed copy
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep RAPIDDELETE_* variables from the developer shell out of tests."""
    for name in (
        "RAPIDDELETE_FILE_CHUNK_SIZE",
        "RAPIDDELETE_FOLDER_CHUNK_SIZE",
        "RAPIDDELETE_MAX_WORKERS",
        "RAPIDDELETE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_logger_level():
    """Undo level changes tests make to the shared library logger."""
    logger = logging.getLogger("rapiddelete")
    level = logger.level
    yield
    logger.setLevel(level)


def make_tree(root: Path, dirs: int, files_per_dir: int, depth: int = 1) -> tuple[int, int]:
    """
    Populate root with a regular tree.

    Returns:
        (number of files, number of directories) created below root
    """
    file_count = 0
    dir_count = 0
    for i in range(files_per_dir):
        (root / f"file{i}.txt").write_text(f"content{i}")
        file_count += 1
    if depth == 0:
        return file_count, dir_count
    for d in range(dirs):
        subdir = root / f"dir{d}"
        subdir.mkdir()
        dir_count += 1
        sub_files, sub_dirs = make_tree(subdir, dirs, files_per_dir, depth - 1)
        file_count += sub_files
        dir_count += sub_dirs
    return file_count, dir_count
