"""Dependency tree construction from an installed node_modules layout.

DependencyTreeBuilder walks a package directory and its node_modules,
producing a ModuleRecord per installed package with that package's own
installed dependencies attached.

Key concepts:
- A directory entry with a package.json is a package; one without is a
  namespace directory (``@scope``) scanned one level deeper
- Dot-prefixed entries (``.bin``, ``.pnpm``, ``.modules.yaml``) are skipped
- Sibling entries are scanned concurrently; blocking filesystem calls run
  in worker threads bounded by a semaphore
- Each branch remembers the real paths it has visited, so a symlink back
  into an ancestor is skipped instead of recursing forever
- A corrupt manifest raises ManifestParseError and aborts the build
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

from hoist_cli.core.config import DEFAULT_MAX_CONCURRENCY
from hoist_cli.core.constants import DEPENDENCY_DIR
from hoist_cli.hoist.manifest import has_manifest, load_manifest
from hoist_cli.hoist.models import ModuleRecord

logger = logging.getLogger(__name__)


def _list_package_dirs(directory: Path) -> List[str]:
    """Return sorted names of non-hidden subdirectories (symlinks followed)."""
    names = []
    with os.scandir(directory) as it:
        for entry in it:
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                names.append(entry.name)
    return sorted(names)


class DependencyTreeBuilder:
    """Builds ModuleRecord trees from installed package directories.

    Attributes:
        include_dev: Merge devDependencies into wanted ranges
        max_concurrency: Bound on simultaneous filesystem operations
    """

    def __init__(self, include_dev: bool = False, max_concurrency: int = DEFAULT_MAX_CONCURRENCY):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive; got {max_concurrency}")
        self.include_dev = include_dev
        self.max_concurrency = max_concurrency
        self._semaphore: Optional[asyncio.Semaphore] = None

    @property
    def semaphore(self) -> asyncio.Semaphore:
        # Created lazily so the semaphore binds to the running event loop.
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
        return self._semaphore

    async def _io(self, func, *args):
        async with self.semaphore:
            return await asyncio.to_thread(func, *args)

    async def build(self, package_dir: Path) -> ModuleRecord:
        """Build the record for ``package_dir`` and everything installed beneath it.

        Raises:
            ManifestParseError: If any manifest in the tree is corrupt
        """
        real_path = await self._io(os.path.realpath, package_dir)
        return await self._build_package(package_dir, None, frozenset({real_path}))

    async def scan_dependency_dir(self, dep_dir: Path) -> Dict[str, ModuleRecord]:
        """Scan a node_modules directory, returning records keyed by package name."""
        real_path = await self._io(os.path.realpath, dep_dir)
        return await self._scan(dep_dir, "", frozenset({real_path}))

    async def _build_package(
        self,
        package_dir: Path,
        fallback_name: Optional[str],
        visited: FrozenSet[str],
    ) -> ModuleRecord:
        manifest = await self._io(load_manifest, package_dir)

        installed: Dict[str, ModuleRecord] = {}
        dep_dir = package_dir / DEPENDENCY_DIR
        if await self._io(dep_dir.is_dir):
            installed = await self._scan(dep_dir, "", visited)

        return ModuleRecord(
            name=manifest.name or fallback_name or package_dir.name,
            version=manifest.version,
            source_directory=package_dir,
            want_dependencies=manifest.wanted_dependencies(self.include_dev),
            installed_dependencies=installed,
        )

    async def _scan(
        self,
        directory: Path,
        namespace: str,
        visited: FrozenSet[str],
    ) -> Dict[str, ModuleRecord]:
        names = await self._io(_list_package_dirs, directory)
        results = await asyncio.gather(
            *(self._scan_entry(directory / name, namespace, visited) for name in names)
        )

        installed: Dict[str, ModuleRecord] = {}
        for records in results:
            for record in records:
                if record.name in installed:
                    logger.warning(
                        "Duplicate package %s in %s (%s and %s), keeping the first",
                        record.name,
                        directory,
                        installed[record.name].source_directory,
                        record.source_directory,
                    )
                    continue
                installed[record.name] = record
        return installed

    async def _scan_entry(
        self,
        entry_path: Path,
        namespace: str,
        visited: FrozenSet[str],
    ) -> List[ModuleRecord]:
        real_path = await self._io(os.path.realpath, entry_path)
        if real_path in visited:
            logger.warning(f"Skipping {entry_path}: links back into its own dependency chain")
            return []
        branch = visited | {real_path}

        if await self._io(has_manifest, entry_path):
            record = await self._build_package(entry_path, f"{namespace}{entry_path.name}", branch)
            return [record]

        if namespace:
            logger.debug("Ignoring %s: no package.json inside namespace %s", entry_path, namespace)
            return []

        scoped = await self._scan(entry_path, f"{entry_path.name}/", branch)
        return list(scoped.values())


__all__ = ["DependencyTreeBuilder"]
