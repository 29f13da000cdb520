"""Tree walker that classifies every entry under a root as file or directory."""

import asyncio
import os
from collections import deque
from dataclasses import dataclass, field


@dataclass
class WalkResult:
    """
    Entries found under a root, in traversal order.

    ``directories`` never contains the root itself and only holds real
    directories. Everything else (regular files, symlinks, sockets, FIFOs,
    device nodes) lands in ``files``, since it is removed with a single
    unlink rather than a recursive delete.
    """

    files: list[str] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.files) + len(self.directories)


def walk_tree(root: str | os.PathLike) -> WalkResult:
    """
    Walk root recursively without following symlinks.

    Traversal is breadth-first by directory listing, but callers should not
    rely on any particular order.

    Args:
        root: Directory to walk

    Returns:
        WalkResult with every descendant of root

    Raises:
        OSError: If root or any directory below it cannot be listed. The walk
            stops at the first failure; a partial listing is never returned.
    """
    result = WalkResult()
    pending = deque([os.fspath(root)])

    while pending:
        directory = pending.popleft()
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    result.directories.append(entry.path)
                    pending.append(entry.path)
                else:
                    result.files.append(entry.path)

    return result


async def async_walk_tree(root: str | os.PathLike) -> WalkResult:
    """Run walk_tree in the default executor so the event loop stays responsive."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, walk_tree, root)
