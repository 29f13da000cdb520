"""Single-call delete operations, blocking and async.

Each function calls straight through to the platform primitive and lets its
OSError propagate untranslated.
"""

import asyncio
import functools
import inspect
import os
import shutil
import warnings

import aiofiles.os


def delete_file(path: str | os.PathLike) -> None:
    """Delete a file (or symlink)."""
    os.remove(path)


async def delete_file_async(path: str | os.PathLike) -> None:
    """Delete a file (or symlink) without blocking the event loop."""
    await aiofiles.os.remove(path)


def delete_dir(path: str | os.PathLike) -> None:
    """Delete an empty directory. Fails if it still has entries."""
    os.rmdir(path)


async def delete_dir_async(path: str | os.PathLike) -> None:
    """Delete an empty directory without blocking the event loop."""
    await aiofiles.os.rmdir(path)


def delete_dir_all(path: str | os.PathLike) -> None:
    """Delete a directory and everything under it."""
    shutil.rmtree(path)


async def delete_dir_all_async(path: str | os.PathLike) -> None:
    """Delete a directory and everything under it in the default executor."""
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, shutil.rmtree, path)


def deprecated_alias(func, old_name: str):
    """Wrap func under its legacy name, warning on every call."""
    message = f"{old_name}() is deprecated, use {func.__name__}() instead"

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            warnings.warn(message, DeprecationWarning, stacklevel=2)
            return await func(*args, **kwargs)

        wrapper = async_wrapper
    else:

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            warnings.warn(message, DeprecationWarning, stacklevel=2)
            return func(*args, **kwargs)

        wrapper = sync_wrapper

    wrapper.__name__ = old_name
    wrapper.__qualname__ = old_name
    return wrapper


delete_folder = deprecated_alias(delete_dir, "delete_folder")
delete_folder_async = deprecated_alias(delete_dir_async, "delete_folder_async")
delete_folder_all = deprecated_alias(delete_dir_all, "delete_folder_all")
delete_folder_all_async = deprecated_alias(delete_dir_all_async, "delete_folder_all_async")
