"""Defaults, environment overrides and parameter validation."""

import os
from pathlib import Path

DEFAULT_FILE_CHUNK_SIZE = 350
DEFAULT_FOLDER_CHUNK_SIZE = 25

ENV_FILE_CHUNK_SIZE = "RAPIDDELETE_FILE_CHUNK_SIZE"
ENV_FOLDER_CHUNK_SIZE = "RAPIDDELETE_FOLDER_CHUNK_SIZE"
ENV_MAX_WORKERS = "RAPIDDELETE_MAX_WORKERS"
ENV_LOG_LEVEL = "RAPIDDELETE_LOG_LEVEL"

# Roots that are never handed to a recursive delete, nor anything below them
PROTECTED_PATHS = frozenset(
    {
        "/proc",
        "/sys",
        "/dev",
        "/run",
        "/var/run",
        "/boot",
        "/bin",
        "/sbin",
        "/lib",
        "/lib64",
        "/usr/bin",
        "/usr/sbin",
        "/usr/lib",
        "/etc",
    }
)


def _env_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def default_file_chunk_size() -> int:
    """Files per task when the caller does not pass one."""
    value = _env_int(ENV_FILE_CHUNK_SIZE)
    return DEFAULT_FILE_CHUNK_SIZE if value is None else value


def default_folder_chunk_size() -> int:
    """Directories per task when the caller does not pass one."""
    value = _env_int(ENV_FOLDER_CHUNK_SIZE)
    return DEFAULT_FOLDER_CHUNK_SIZE if value is None else value


def default_max_workers() -> int | None:
    """Concurrent task cap, or None for one running task per chunk."""
    return _env_int(ENV_MAX_WORKERS)


def default_log_level() -> str | None:
    """Level from the environment, or None to leave the logger's level alone."""
    return os.getenv(ENV_LOG_LEVEL, "").strip() or None


def validate_chunk_size(name: str, value: int) -> int:
    """
    Check a chunk size.

    Args:
        name: Parameter name used in the error message
        value: Chunk size to check

    Returns:
        The value, unchanged

    Raises:
        ValueError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def _check_not_protected(candidate: Path, requested: Path) -> None:
    candidate_str = str(candidate)
    if candidate == Path(candidate.anchor):
        raise ValueError(f"Refusing to delete filesystem root: {requested}")

    for protected in PROTECTED_PATHS:
        if candidate_str == protected or candidate_str.startswith(protected + "/"):
            raise ValueError(
                f"Refusing to delete system directory: {requested}. "
                f"This path is inside '{protected}' which contains critical system files."
            )


def ensure_deletable_root(root: str | os.PathLike) -> Path:
    """
    Normalize root to an absolute path and refuse protected locations.

    Both the lexically normalized path (``..`` collapsed) and the fully
    resolved path (symlinks followed) are checked, so neither ``/tmp/..``
    nor a link pointing into ``/etc`` gets through.

    Args:
        root: Directory the caller wants removed

    Returns:
        Absolute, normalized path of root. Symlinks are not resolved in the
        returned path.

    Raises:
        ValueError: If root is the filesystem root or inside a system directory
    """
    requested = Path(root)
    root_path = Path(os.path.normpath(requested.absolute()))

    _check_not_protected(root_path, requested)
    _check_not_protected(root_path.resolve(), requested)

    return root_path
