"""Tests for wave ordering and task concurrency.

These tests verify that:
1. Every chunk of a wave runs as its own concurrent task
2. max_workers caps how many chunk tasks run at once
3. No directory task starts before every file task has finished
4. A failing task cancels its still-running siblings
"""

import asyncio
from collections.abc import Sequence

import pytest

from rapiddelete.deleter import ErrorPolicy, RapidDeleter


class TrackingDeleter(RapidDeleter):
    """RapidDeleter that records chunk task activity."""

    def __init__(self, *args, delay: float = 0.01, **kwargs):
        super().__init__(*args, **kwargs)
        self.delay = delay
        self.active = 0
        self.peak_active = 0
        self.events: list[tuple[str, str]] = []

    async def _track(self, kind: str, worker, chunk: Sequence[str]) -> None:
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)
        self.events.append((kind, "start"))
        try:
            await asyncio.sleep(self.delay)
            await worker(chunk)
        finally:
            self.active -= 1
            self.events.append((kind, "end"))

    async def _delete_file_chunk(self, chunk: Sequence[str]) -> None:
        await self._track("file", super()._delete_file_chunk, chunk)

    async def _delete_directory_chunk(self, chunk: Sequence[str]) -> None:
        await self._track("dir", super()._delete_directory_chunk, chunk)


def _populate(root, files: int, dirs: int) -> None:
    root.mkdir()
    for i in range(files):
        (root / f"file{i}.txt").write_text(str(i))
    for d in range(dirs):
        (root / f"dir{d}").mkdir()


@pytest.mark.asyncio
async def test_all_chunks_run_concurrently_when_unbounded(temp_dir):
    root = temp_dir / "root"
    _populate(root, files=10, dirs=0)

    deleter = TrackingDeleter(root_path=root, file_chunk_size=1)
    await deleter.run()

    assert deleter.stats["file_tasks"] == 10
    assert deleter.peak_active == 10
    assert not root.exists()


@pytest.mark.asyncio
async def test_max_workers_bounds_running_tasks(temp_dir):
    root = temp_dir / "root"
    _populate(root, files=12, dirs=6)

    deleter = TrackingDeleter(root_path=root, file_chunk_size=1, folder_chunk_size=1, max_workers=3)
    stats = await deleter.run()

    assert stats["file_tasks"] == 12
    assert stats["dir_tasks"] == 6
    assert deleter.peak_active == 3
    assert not root.exists()


@pytest.mark.asyncio
async def test_directory_wave_starts_after_file_wave(temp_dir):
    root = temp_dir / "root"
    _populate(root, files=8, dirs=4)

    deleter = TrackingDeleter(root_path=root, file_chunk_size=1, folder_chunk_size=1)
    await deleter.run()

    first_dir_start = deleter.events.index(("dir", "start"))
    file_ends = [i for i, event in enumerate(deleter.events) if event == ("file", "end")]

    assert len(file_ends) == 8
    assert max(file_ends) < first_dir_start


@pytest.mark.asyncio
async def test_failing_task_cancels_siblings(temp_dir):
    root = temp_dir / "root"
    _populate(root, files=0, dirs=0)

    deleter = RapidDeleter(root_path=root, file_chunk_size=1, file_error_policy=ErrorPolicy.ABORT)

    cancelled = []

    async def worker(chunk):
        if chunk[0] == "bad":
            raise PermissionError(13, "Permission denied", "bad")
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(chunk[0])
            raise

    with pytest.raises(PermissionError):
        await deleter._run_wave("file", ["slow1", "bad", "slow2"], 1, worker)

    assert sorted(cancelled) == ["slow1", "slow2"]


@pytest.mark.asyncio
async def test_caller_cancellation_cancels_wave(temp_dir):
    root = temp_dir / "root"
    _populate(root, files=0, dirs=0)

    deleter = RapidDeleter(root_path=root)
    started = asyncio.Event()
    cancelled = []

    async def worker(chunk):
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(chunk[0])
            raise

    wave = asyncio.create_task(deleter._run_wave("file", ["a", "b"], 1, worker))
    await started.wait()
    wave.cancel()

    with pytest.raises(asyncio.CancelledError):
        await wave

    assert sorted(cancelled) == ["a", "b"]


@pytest.mark.asyncio
async def test_empty_wave_launches_nothing(temp_dir):
    deleter = RapidDeleter(root_path=temp_dir)

    async def worker(chunk):
        raise AssertionError("should not run")

    assert await deleter._run_wave("file", [], 5, worker) == 0
