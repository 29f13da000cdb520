"""rapiddelete - Fast file and directory deletion with sync, async and parallel APIs."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("rapiddelete")
except PackageNotFoundError:
    # Package not installed, fallback to reading from pyproject.toml
    try:
        import tomllib
        from pathlib import Path

        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                pyproject = tomllib.load(f)
                __version__ = pyproject["project"]["version"]
        else:
            __version__ = "unknown"
    except Exception:
        __version__ = "unknown"

from .deleter import ErrorPolicy, RapidDeleter, chunked, rapid_delete, rapid_delete_dir_all  # noqa: E402
from .ops import (  # noqa: E402
    delete_dir,
    delete_dir_all,
    delete_dir_all_async,
    delete_dir_async,
    delete_file,
    delete_file_async,
    delete_folder,
    delete_folder_all,
    delete_folder_all_async,
    delete_folder_async,
)
from .walker import WalkResult, async_walk_tree, walk_tree  # noqa: E402

__all__ = [
    "__version__",
    "ErrorPolicy",
    "RapidDeleter",
    "WalkResult",
    "async_walk_tree",
    "chunked",
    "delete_dir",
    "delete_dir_all",
    "delete_dir_all_async",
    "delete_dir_async",
    "delete_file",
    "delete_file_async",
    "delete_folder",
    "delete_folder_all",
    "delete_folder_all_async",
    "delete_folder_async",
    "rapid_delete",
    "rapid_delete_dir_all",
    "walk_tree",
]
