"""Dependency tree discovery, version resolution, and hoisting."""

from .copier import copy_directory
from .engine import check_preconditions, hoist_tree, run_hoist
from .errors import (
    HoistError,
    ManifestParseError,
    PreconditionError,
    StoreEntryAbsentError,
    UnresolvedDependencyError,
)
from .hoister import DependencyHoister, format_chain
from .manifest import has_manifest, load_manifest
from .models import (
    CopyMap,
    HoistReport,
    ModuleRecord,
    PackageManifest,
    StoreIndex,
    UnresolvedDependency,
)
from .store import build_store_index, count_store_packages, find_store_dir
from .tree import DependencyTreeBuilder
from .versions import (
    compare_versions_descending,
    resolve_version,
    satisfies,
    sort_semver_descending,
    sort_versions_descending,
)

__all__ = [
    "copy_directory",
    "check_preconditions",
    "hoist_tree",
    "run_hoist",
    "HoistError",
    "ManifestParseError",
    "PreconditionError",
    "StoreEntryAbsentError",
    "UnresolvedDependencyError",
    "DependencyHoister",
    "format_chain",
    "has_manifest",
    "load_manifest",
    "CopyMap",
    "HoistReport",
    "ModuleRecord",
    "PackageManifest",
    "StoreIndex",
    "UnresolvedDependency",
    "build_store_index",
    "count_store_packages",
    "find_store_dir",
    "DependencyTreeBuilder",
    "compare_versions_descending",
    "resolve_version",
    "satisfies",
    "sort_semver_descending",
    "sort_versions_descending",
]
