"""Depth-first hoisting of a dependency tree into a flat target directory.

For every wanted dependency of every placed package, the hoister picks a
source record (the requirer's own installed copy first, then the package
store), and then either:

- copies it to ``<target>/<name>`` when no copy of that name exists yet,
- reuses the existing root copy when its version satisfies the range, or
- copies it privately to ``<requirer target>/node_modules/<name>`` when the
  root copy is an incompatible version.

Dependencies of one package are processed one at a time: each decision
reads and then updates ``copy_map``, and the sequential loop is what keeps
two requirers from both claiming the root slot for the same name.
Unresolvable dependencies are logged with their requirer chain, recorded,
and skipped; the rest of the tree is still hoisted.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from hoist_cli.core.config import DEFAULT_MAX_CONCURRENCY
from hoist_cli.core.constants import DEPENDENCY_DIR
from hoist_cli.hoist.copier import copy_directory
from hoist_cli.hoist.errors import StoreEntryAbsentError, UnresolvedDependencyError
from hoist_cli.hoist.models import CopyMap, ModuleRecord, StoreIndex, UnresolvedDependency
from hoist_cli.hoist.versions import resolve_version, satisfies

logger = logging.getLogger(__name__)

RequirerChain = Tuple[ModuleRecord, ...]


def format_chain(chain: RequirerChain) -> str:
    """Render a requirer chain as ``root:1.0.0 -> a:2.1.0``."""
    return " -> ".join(record.label for record in chain) or "<root>"


class DependencyHoister:
    """Hoists one dependency tree into ``target_root``.

    A hoister carries the state of a single run and must not be reused.

    Attributes:
        target_root: Flat output directory
        store_index: Fallback package versions from the package store
        ordering: Version ordering used when choosing from the store
        copy_map: Package name -> record copied to the target root
        placements: Every record copied, root and nested, in copy order
        unresolved: Dependencies that could not be satisfied
    """

    def __init__(
        self,
        target_root: Path,
        store_index: StoreIndex,
        ordering: str = "legacy",
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        self.target_root = target_root
        self.store_index = store_index
        self.ordering = ordering
        self.max_concurrency = max_concurrency
        self.copy_map: CopyMap = {}
        self.placements: List[ModuleRecord] = []
        self.unresolved: List[UnresolvedDependency] = []
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._started = False

    @property
    def hoisted_count(self) -> int:
        return len(self.copy_map)

    @property
    def nested_count(self) -> int:
        return len(self.placements) - len(self.copy_map)

    async def hoist(self, root: ModuleRecord) -> int:
        """Hoist everything ``root`` needs; return the number of copies made."""
        if self._started:
            raise RuntimeError("DependencyHoister instances are single-use")
        self._started = True
        self._semaphore = asyncio.Semaphore(self.max_concurrency)

        copied = await self._hoist_dependencies(root, (root,))
        logger.info(
            "Copied %d packages (%d hoisted, %d nested, %d unresolved)",
            copied,
            self.hoisted_count,
            self.nested_count,
            len(self.unresolved),
        )
        return copied

    def resolve_source(self, requirer: ModuleRecord, name: str, wanted: str, chain: RequirerChain) -> ModuleRecord:
        """Choose the on-disk record that should satisfy ``name@wanted``.

        Raises:
            StoreEntryAbsentError: Not installed locally and not in the store
            UnresolvedDependencyError: No store version satisfies ``wanted``, or
                the store versions cannot be ordered
        """
        local = requirer.installed_dependencies.get(name)
        if local is not None:
            return local

        versions = self.store_index.get(name)
        if not versions:
            raise StoreEntryAbsentError(name, wanted, format_chain(chain))

        try:
            chosen = resolve_version(wanted, versions.keys(), self.ordering)
        except ValueError as exc:
            logger.debug("Cannot order store versions of %s: %s", name, exc)
            raise UnresolvedDependencyError(name, wanted, format_chain(chain)) from exc
        if chosen is None:
            raise UnresolvedDependencyError(name, wanted, format_chain(chain))
        return versions[chosen]

    async def _hoist_dependencies(self, requirer: ModuleRecord, chain: RequirerChain) -> int:
        copied = 0
        for name, wanted in requirer.want_dependencies.items():
            copied += await self._hoist_one(requirer, name, wanted, chain)
        return copied

    async def _hoist_one(self, requirer: ModuleRecord, name: str, wanted: str, chain: RequirerChain) -> int:
        try:
            source = self.resolve_source(requirer, name, wanted, chain)
        except UnresolvedDependencyError as exc:
            logger.warning(str(exc))
            self.unresolved.append(
                UnresolvedDependency(
                    name=name,
                    wanted=wanted,
                    reason=exc.reason,
                    chain=[record.label for record in chain],
                )
            )
            return 0

        if any(ancestor.name == source.name and ancestor.version == source.version for ancestor in chain):
            logger.debug("%s is already being hoisted higher up %s", source.label, format_chain(chain))
            return 0

        existing = self.copy_map.get(name)
        if existing is None:
            placed = source.place(self.target_root / name)
            self.copy_map[name] = placed
        elif satisfies(existing.version, wanted):
            logger.debug("Reusing %s for %s@%s", existing.label, name, wanted)
            return 0
        else:
            requirer_dir = requirer.target_directory or self.target_root
            placed = source.place(requirer_dir / DEPENDENCY_DIR / name)
            logger.debug(
                "Nesting %s under %s: hoisted %s does not satisfy %s",
                source.label,
                requirer.label,
                existing.label,
                wanted,
            )

        await copy_directory(source.source_directory, placed.target_directory, self._semaphore)
        self.placements.append(placed)

        return 1 + await self._hoist_dependencies(placed, chain + (placed,))


__all__ = ["DependencyHoister", "RequirerChain", "format_chain"]
