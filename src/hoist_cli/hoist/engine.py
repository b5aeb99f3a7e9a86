"""Top-level hoist run: preconditions, scanning, hoisting, reporting."""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from pathlib import Path
from typing import Callable, Optional

from hoist_cli.core.config import HoistConfig
from hoist_cli.core.constants import DEPENDENCY_DIR
from hoist_cli.hoist.errors import PreconditionError
from hoist_cli.hoist.hoister import DependencyHoister
from hoist_cli.hoist.manifest import has_manifest
from hoist_cli.hoist.models import HoistReport
from hoist_cli.hoist.store import build_store_index, count_store_packages
from hoist_cli.hoist.tree import DependencyTreeBuilder

logger = logging.getLogger(__name__)

# on_step(key, status, detail); status is one of running, done, skipped.
StepCallback = Callable[[str, str, str], None]


def _notify(on_step: Optional[StepCallback], key: str, status: str, detail: str = "") -> None:
    if on_step is not None:
        on_step(key, status, detail)


def check_preconditions(source_dir: Path, target_dir: Path, force: bool) -> None:
    """Fail before touching any file if the run cannot proceed.

    Raises:
        PreconditionError: Source has no package.json, target exists and
            ``force`` was not given, target exists but is not a directory,
            or target would overwrite part of the source
    """
    if not source_dir.is_dir() or not has_manifest(source_dir):
        raise PreconditionError(f"Source directory {source_dir} does not contain a package.json")
    if target_dir.exists() and not force:
        raise PreconditionError(
            f"Target directory {target_dir} already exists. Use --force to overwrite."
        )

    source = source_dir.resolve()
    target = target_dir.resolve()
    if target == source:
        raise PreconditionError("Target directory must differ from the source directory")
    if source.is_relative_to(target):
        raise PreconditionError(
            f"Target directory {target_dir} contains the source directory {source_dir}"
        )
    if target.is_relative_to(source / DEPENDENCY_DIR):
        raise PreconditionError(
            f"Target directory {target_dir} is inside the source's {DEPENDENCY_DIR}"
        )
    if target_dir.exists() and not target_dir.is_dir():
        raise PreconditionError(f"Target {target_dir} exists and is not a directory")


async def hoist_tree(
    source_dir: Path,
    target_dir: Path,
    *,
    force: bool = False,
    config: Optional[HoistConfig] = None,
    on_step: Optional[StepCallback] = None,
) -> HoistReport:
    """Build the dependency tree of ``source_dir`` and hoist it into ``target_dir``.

    Args:
        source_dir: Root package directory (contains package.json and node_modules)
        target_dir: Output directory, must not exist unless ``force``
        force: Remove a pre-existing target directory
        config: Hoist configuration (defaults when omitted)
        on_step: Progress callback for the ``tree``, ``store`` and ``hoist`` phases

    Returns:
        HoistReport with counts and unresolved dependencies

    Raises:
        PreconditionError: See :func:`check_preconditions`
        ManifestParseError: A manifest in the tree or store is corrupt
    """
    config = config or HoistConfig()
    started = time.monotonic()

    check_preconditions(source_dir, target_dir, force)
    logger.info("Hoisting modules from %s to %s", source_dir, target_dir)

    builder = DependencyTreeBuilder(
        include_dev=config.include_dev,
        max_concurrency=config.max_concurrency,
    )

    _notify(on_step, "tree", "running")
    _notify(on_step, "store", "running")
    tree, store_index = await asyncio.gather(
        builder.build(source_dir),
        build_store_index(source_dir, builder),
    )
    packages_found = sum(1 for _ in tree.iter_records()) - 1
    store_packages = count_store_packages(store_index)
    _notify(on_step, "tree", "done", f"{packages_found} installed packages")
    if store_index:
        _notify(on_step, "store", "done", f"{store_packages} package versions")
    else:
        _notify(on_step, "store", "skipped", "no package store found")

    if target_dir.exists():
        logger.info("Removing existing target directory %s", target_dir)
        await asyncio.to_thread(shutil.rmtree, target_dir)
    target_dir.mkdir(parents=True)

    _notify(on_step, "hoist", "running")
    hoister = DependencyHoister(
        target_dir,
        store_index,
        ordering=config.version_order,
        max_concurrency=config.max_concurrency,
    )
    copied = await hoister.hoist(tree)
    detail = f"{hoister.hoisted_count} hoisted, {hoister.nested_count} nested"
    if hoister.unresolved:
        detail += f", {len(hoister.unresolved)} unresolved"
    _notify(on_step, "hoist", "done", detail)

    logger.info("Original modules: %d", packages_found)
    logger.info("Hoisted modules: %d", hoister.hoisted_count)

    return HoistReport(
        source=str(source_dir),
        target=str(target_dir),
        packages_found=packages_found,
        store_packages=store_packages,
        copied=copied,
        hoisted=hoister.hoisted_count,
        nested=hoister.nested_count,
        unresolved=list(hoister.unresolved),
        elapsed_seconds=round(time.monotonic() - started, 3),
    )


def run_hoist(
    source_dir: Path,
    target_dir: Path,
    *,
    force: bool = False,
    config: Optional[HoistConfig] = None,
    on_step: Optional[StepCallback] = None,
) -> HoistReport:
    """Synchronous wrapper around :func:`hoist_tree`."""
    return asyncio.run(
        hoist_tree(source_dir, target_dir, force=force, config=config, on_step=on_step)
    )


__all__ = ["StepCallback", "check_preconditions", "hoist_tree", "run_hoist"]
