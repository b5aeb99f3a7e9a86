"""Shared package store discovery and indexing.

A pnpm-style store lives at ``node_modules/.pnpm`` in the project or one of
its ancestors. Each store entry (``<name>@<version>``) exposes its own
node_modules holding the package itself plus its dependencies; only the
packages found inside those directories are indexed.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Optional

from hoist_cli.core.constants import DEPENDENCY_DIR, STORE_DIR
from hoist_cli.hoist.models import ModuleRecord, StoreIndex
from hoist_cli.hoist.tree import DependencyTreeBuilder

logger = logging.getLogger(__name__)


def find_store_dir(source_dir: Path) -> Optional[Path]:
    """Ascend from ``source_dir`` looking for ``node_modules/.pnpm``.

    Returns:
        Path to the first store found, or None once the filesystem root
        has been checked without a match
    """
    current = source_dir.resolve()
    while True:
        candidate = current / DEPENDENCY_DIR / STORE_DIR
        if candidate.is_dir():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _list_store_entries(store_dir: Path) -> list[Path]:
    with os.scandir(store_dir) as it:
        entries = [Path(entry.path) for entry in it if entry.is_dir() and not entry.name.startswith(".")]
    return sorted(entries)


def merge_into_index(index: StoreIndex, records: Iterable[ModuleRecord]) -> None:
    """Add ``records`` and all their nested installed records to ``index``.

    The first record seen for a name@version wins.
    """
    for record in records:
        for nested in record.iter_records():
            versions = index.setdefault(nested.name, {})
            versions.setdefault(nested.version, nested)


def count_store_packages(index: StoreIndex) -> int:
    return sum(len(versions) for versions in index.values())


async def build_store_index(source_dir: Path, builder: DependencyTreeBuilder) -> StoreIndex:
    """Index every package found in the store's entries.

    Args:
        source_dir: Project directory to start the upward store search from
        builder: Tree builder used to scan each entry's node_modules

    Returns:
        Mapping name -> version -> ModuleRecord; empty if no store exists
    """
    store_dir = await asyncio.to_thread(find_store_dir, source_dir)
    if store_dir is None:
        logger.info("No package store found above %s", source_dir)
        return {}

    logger.info("Indexing package store %s", store_dir)
    entries = await asyncio.to_thread(_list_store_entries, store_dir)

    async def scan_entry(entry: Path) -> Dict[str, ModuleRecord]:
        dep_dir = entry / DEPENDENCY_DIR
        if not await asyncio.to_thread(dep_dir.is_dir):
            logger.debug("Store entry %s has no %s", entry.name, DEPENDENCY_DIR)
            return {}
        return await builder.scan_dependency_dir(dep_dir)

    scanned = await asyncio.gather(*(scan_entry(entry) for entry in entries))

    index: StoreIndex = {}
    for installed in scanned:
        merge_into_index(index, installed.values())

    logger.info(
        "Indexed %d package versions from %d store entries",
        count_store_packages(index),
        len(entries),
    )
    return index


__all__ = [
    "find_store_dir",
    "merge_into_index",
    "count_store_packages",
    "build_store_index",
]
