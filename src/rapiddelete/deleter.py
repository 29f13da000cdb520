"""Parallel recursive delete: walk once, then delete in chunked concurrent waves."""

import asyncio
import os
import shutil
import time
from collections.abc import Awaitable, Callable, Iterator, Sequence
from enum import Enum
from pathlib import Path

import aiofiles.os

from . import __version__
from .config import (
    default_file_chunk_size,
    default_folder_chunk_size,
    default_log_level,
    default_max_workers,
    ensure_deletable_root,
    validate_chunk_size,
)
from .logging import log_with_context, setup_logging
from .ops import deprecated_alias
from .walker import WalkResult, async_walk_tree


class ErrorPolicy(str, Enum):
    """What a wave does when one entry cannot be deleted."""

    ABORT = "abort"
    SKIP_AND_COLLECT = "skip_and_collect"
    IGNORE = "ignore"


def chunked(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    """
    Split items into consecutive slices of at most size entries.

    Args:
        items: Paths to split, order is preserved
        size: Maximum entries per slice

    Yields:
        Slices of items; only the last one may be shorter than size

    Raises:
        ValueError: If size is not a positive integer
    """
    validate_chunk_size("size", size)
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _ignore_missing(function, path, exc) -> None:
    # Overlapping directory chunks race on the same subtrees
    if isinstance(exc, FileNotFoundError):
        return
    raise exc


def _remove_tree(path: str) -> bool:
    """Recursively remove path; False if it was already gone."""
    if not os.path.lexists(path):
        return False
    shutil.rmtree(path, onexc=_ignore_missing)
    return True


class RapidDeleter:
    """
    Recursive delete that parallelizes over chunks of the tree.

    The tree is walked once. Files are then deleted by one task per file
    chunk; once every file task has finished, directories are removed
    recursively by one task per directory chunk; finally the root itself is
    removed. Each deleter is good for a single run and shares no state with
    other instances.
    """

    def __init__(
        self,
        root_path: str | os.PathLike,
        folder_chunk_size: int | None = None,
        file_chunk_size: int | None = None,
        file_error_policy: ErrorPolicy | str = ErrorPolicy.ABORT,
        dir_error_policy: ErrorPolicy | str = ErrorPolicy.IGNORE,
        max_workers: int | None = None,
        log_level: str | None = None,
    ):
        """
        Initialize the deleter.

        Args:
            root_path: Directory to delete, together with everything under it
            folder_chunk_size: Directories per directory-wave task (default: 25)
            file_chunk_size: Files per file-wave task (default: 350)
            file_error_policy: Reaction to a failed file delete (default: abort)
            dir_error_policy: Reaction to a failed directory delete (default: ignore)
            max_workers: Maximum chunk tasks running at once (default: unbounded)
            log_level: Logging level (default: leave the logger level unchanged)

        Raises:
            ValueError: If invalid parameters are provided
        """
        if folder_chunk_size is None:
            folder_chunk_size = default_folder_chunk_size()
        if file_chunk_size is None:
            file_chunk_size = default_file_chunk_size()
        if max_workers is None:
            max_workers = default_max_workers()
        if log_level is None:
            log_level = default_log_level()

        validate_chunk_size("folder_chunk_size", folder_chunk_size)
        validate_chunk_size("file_chunk_size", file_chunk_size)

        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.root_path: Path = ensure_deletable_root(root_path)
        self.folder_chunk_size = folder_chunk_size
        self.file_chunk_size = file_chunk_size
        self.file_error_policy = ErrorPolicy(file_error_policy)
        self.dir_error_policy = ErrorPolicy(dir_error_policy)
        self.max_workers = max_workers

        self.stats = {
            "files_found": 0,
            "dirs_found": 0,
            "file_tasks": 0,
            "dir_tasks": 0,
            "files_deleted": 0,
            "dirs_removed": 0,
            "errors": 0,
        }
        self.failed_paths: list[dict] = []
        self.stats_lock = asyncio.Lock()

        # None keeps every chunk of a wave running at once
        self.worker_semaphore = asyncio.Semaphore(max_workers) if max_workers is not None else None

        self.logger = setup_logging("rapiddelete", log_level)

    async def update_stats(self, **kwargs) -> None:
        """Lock-protected update of statistics."""
        async with self.stats_lock:
            for key, value in kwargs.items():
                if key in self.stats:
                    self.stats[key] += value

    async def _handle_error(self, policy: ErrorPolicy, kind: str, path: str, error: OSError) -> None:
        """Apply policy to a failed delete; re-raises under ABORT."""
        if policy is ErrorPolicy.ABORT:
            log_with_context(
                self.logger,
                "error",
                f"Failed to delete {kind}, aborting",
                {"path": path, "error": str(error), "error_type": type(error).__name__},
            )
            raise error

        if policy is ErrorPolicy.SKIP_AND_COLLECT:
            async with self.stats_lock:
                self.stats["errors"] += 1
                self.failed_paths.append(
                    {"path": path, "error": str(error), "error_type": type(error).__name__}
                )
            log_with_context(
                self.logger,
                "warning",
                f"Failed to delete {kind}, skipping",
                {"path": path, "error": str(error), "error_type": type(error).__name__},
            )
        else:
            self.logger.debug(f"Ignoring failed {kind} delete: {path} ({error})")

    async def _delete_file_chunk(self, chunk: Sequence[str]) -> None:
        """Delete the files of one chunk, one at a time, in chunk order."""
        deleted = 0
        try:
            for path in chunk:
                try:
                    await aiofiles.os.remove(path)
                except OSError as e:
                    await self._handle_error(self.file_error_policy, "file", path, e)
                else:
                    deleted += 1
                    self.logger.debug(f"Deleted file: {path}")
        finally:
            await self.update_stats(files_deleted=deleted)

    async def _delete_directory_chunk(self, chunk: Sequence[str]) -> None:
        """
        Recursively remove the directories of one chunk, in chunk order.

        Only directories still present when the task reaches them count
        towards ``dirs_removed``; those already taken out together with a
        parent, in this chunk or another, are skipped.
        """
        loop = asyncio.get_running_loop()
        removed = 0
        try:
            for path in chunk:
                try:
                    existed = await loop.run_in_executor(None, _remove_tree, path)
                except OSError as e:
                    await self._handle_error(self.dir_error_policy, "directory", path, e)
                else:
                    if existed:
                        removed += 1
                        self.logger.debug(f"Removed directory: {path}")
                    else:
                        self.logger.debug(f"Directory already gone: {path}")
        finally:
            await self.update_stats(dirs_removed=removed)

    async def _run_bounded(self, worker: Callable[[Sequence[str]], Awaitable[None]], chunk: Sequence[str]) -> None:
        if self.worker_semaphore is None:
            await worker(chunk)
            return
        async with self.worker_semaphore:
            await worker(chunk)

    async def _run_wave(
        self,
        name: str,
        paths: Sequence[str],
        chunk_size: int,
        worker: Callable[[Sequence[str]], Awaitable[None]],
    ) -> int:
        """
        Launch one task per chunk of paths and wait for all of them.

        Tasks complete in any order. If a task fails, the tasks still running
        are cancelled and the first failure is raised.

        Returns:
            Number of tasks launched
        """
        tasks = [asyncio.create_task(self._run_bounded(worker, chunk)) for chunk in chunked(paths, chunk_size)]
        if not tasks:
            return 0

        log_with_context(
            self.logger,
            "info",
            f"Starting {name} wave",
            {"entries": len(paths), "tasks": len(tasks), "chunk_size": chunk_size},
        )
        wave_start = time.time()

        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            # Also reached when the caller is cancelled mid-wave
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        failures = [task.exception() for task in done if not task.cancelled() and task.exception() is not None]
        if failures:
            log_with_context(
                self.logger,
                "error",
                f"{name.capitalize()} wave aborted",
                {"failed_tasks": len(failures), "tasks": len(tasks)},
            )
            raise failures[0]

        log_with_context(
            self.logger,
            "info",
            f"{name.capitalize()} wave completed",
            {"tasks": len(tasks), "duration_seconds": round(time.time() - wave_start, 3)},
        )
        return len(tasks)

    async def walk(self) -> WalkResult:
        """
        Walk the root and record what was found.

        Raises:
            OSError: If any directory of the tree cannot be listed
        """
        try:
            result = await async_walk_tree(self.root_path)
        except OSError as e:
            log_with_context(
                self.logger,
                "error",
                "Walk failed",
                {"root_path": str(self.root_path), "error": str(e), "error_type": type(e).__name__},
            )
            raise

        await self.update_stats(files_found=len(result.files), dirs_found=len(result.directories))
        self.logger.debug(f"Walked {self.root_path}: {len(result.files)} files, {len(result.directories)} directories")
        return result

    async def delete_files(self, files: Sequence[str]) -> int:
        """Run the file wave. Returns the number of tasks launched."""
        count = await self._run_wave("file", files, self.file_chunk_size, self._delete_file_chunk)
        await self.update_stats(file_tasks=count)
        return count

    async def delete_directories(self, directories: Sequence[str]) -> int:
        """Run the directory wave. Returns the number of tasks launched."""
        count = await self._run_wave("directory", directories, self.folder_chunk_size, self._delete_directory_chunk)
        await self.update_stats(dir_tasks=count)
        return count

    async def remove_root(self) -> bool:
        """
        Recursively remove the root, ignoring any error.

        Returns:
            True if the root no longer exists afterwards
        """
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, shutil.rmtree, self.root_path)
        except OSError as e:
            self.logger.debug(f"Ignoring failed root removal: {self.root_path} ({e})")

        return not await aiofiles.os.path.exists(self.root_path)

    async def run(self) -> dict:
        """
        Delete the root and everything under it.

        Returns:
            Dictionary with operation statistics

        Raises:
            OSError: If the walk fails, or a file delete fails under ErrorPolicy.ABORT
        """
        start_time = time.time()

        log_with_context(
            self.logger,
            "info",
            "Starting rapid delete",
            {
                "version": __version__,
                "root_path": str(self.root_path),
                "folder_chunk_size": self.folder_chunk_size,
                "file_chunk_size": self.file_chunk_size,
                "file_error_policy": self.file_error_policy.value,
                "dir_error_policy": self.dir_error_policy.value,
                "max_workers": self.max_workers,
            },
        )

        result = await self.walk()
        await self.delete_files(result.files)
        await self.delete_directories(result.directories)
        root_removed = await self.remove_root()

        async with self.stats_lock:
            report = dict(self.stats)
            report["failed_paths"] = list(self.failed_paths)
        report["root_removed"] = root_removed
        report["duration_seconds"] = round(time.time() - start_time, 3)

        log_with_context(self.logger, "info", "Rapid delete completed", report)
        return report


async def rapid_delete(
    root: str | os.PathLike,
    folder_chunk_size: int | None = None,
    file_chunk_size: int | None = None,
    *,
    file_error_policy: ErrorPolicy | str = ErrorPolicy.ABORT,
    dir_error_policy: ErrorPolicy | str = ErrorPolicy.IGNORE,
    max_workers: int | None = None,
    log_level: str | None = None,
) -> dict:
    """
    Delete root and everything under it using concurrent chunked tasks.

    Args:
        root: Directory to delete
        folder_chunk_size: Directories per task; lower means more tasks (default: 25)
        file_chunk_size: Files per task; lower means more tasks (default: 350)
        file_error_policy: Reaction to a failed file delete (default: abort)
        dir_error_policy: Reaction to a failed directory delete (default: ignore)
        max_workers: Maximum chunk tasks running at once (default: unbounded)
        log_level: Logging level (default: leave the logger level unchanged)

    Returns:
        Operation statistics

    Raises:
        OSError: If the walk fails, or a file delete fails under ErrorPolicy.ABORT
        ValueError: If invalid parameters are provided
    """
    deleter = RapidDeleter(
        root_path=root,
        folder_chunk_size=folder_chunk_size,
        file_chunk_size=file_chunk_size,
        file_error_policy=file_error_policy,
        dir_error_policy=dir_error_policy,
        max_workers=max_workers,
        log_level=log_level,
    )

    return await deleter.run()


rapid_delete_dir_all = deprecated_alias(rapid_delete, "rapid_delete_dir_all")
