"""Recursive package directory copy.

Nested node_modules directories are never copied here; every dependency
copy is made explicitly by the hoister.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from contextlib import nullcontext
from pathlib import Path
from typing import Optional

from hoist_cli.core.constants import DEPENDENCY_DIR


async def _run_io(semaphore: Optional[asyncio.Semaphore], func, *args):
    async with semaphore if semaphore is not None else nullcontext():
        return await asyncio.to_thread(func, *args)


def _list_entries(directory: Path) -> list[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)


async def copy_directory(
    src_dir: Path,
    dest_dir: Path,
    semaphore: Optional[asyncio.Semaphore] = None,
) -> int:
    """Copy ``src_dir`` into ``dest_dir``, skipping any node_modules entry.

    Symlinks are followed so the destination holds real files. Sibling
    entries are copied concurrently.

    Args:
        src_dir: Package directory to copy
        dest_dir: Destination directory (created if missing)
        semaphore: Optional bound on simultaneous file operations

    Returns:
        Number of files copied
    """
    await _run_io(semaphore, _ensure_dir, dest_dir)
    entries = await _run_io(semaphore, _list_entries, src_dir)

    tasks = []
    for entry in entries:
        if entry.name == DEPENDENCY_DIR:
            continue
        src_path = src_dir / entry.name
        dest_path = dest_dir / entry.name
        if entry.is_dir():
            tasks.append(copy_directory(src_path, dest_path, semaphore))
        else:
            tasks.append(_copy_file(src_path, dest_path, semaphore))

    counts = await asyncio.gather(*tasks)
    return sum(counts)


async def _copy_file(src_path: Path, dest_path: Path, semaphore: Optional[asyncio.Semaphore]) -> int:
    await _run_io(semaphore, shutil.copy2, src_path, dest_path)
    return 1


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


__all__ = ["copy_directory"]
