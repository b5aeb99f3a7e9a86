"""Data models for dependency trees, store indexes, and hoist reports.

ModuleRecord is a frozen dataclass: records are built once during tree and
store scanning and never mutated. Placing a record in the target tree
produces a new record carrying its target directory.

Manifest and report models use pydantic so manifests are validated on load
and reports serialize straight to JSON for the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PackageManifest(BaseModel):
    """Fields consumed from a package.json manifest.

    Dependency mappings default to empty when absent; every other manifest
    field is ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: Optional[str] = Field(None, description="Package identifier, may include a @scope/ segment")
    version: str = Field("0.0.0", description="Dotted version string as declared")
    dependencies: Dict[str, str] = Field(default_factory=dict)
    dev_dependencies: Dict[str, str] = Field(default_factory=dict, alias="devDependencies")

    @field_validator("dependencies", "dev_dependencies", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        """Treat an explicit null dependency section as empty."""
        return {} if v is None else v

    def wanted_dependencies(self, include_dev: bool = False) -> Dict[str, str]:
        """Return declared ranges, merged with dev ranges when requested.

        Dev ranges override declared ranges on name collision.
        """
        wanted = dict(self.dependencies)
        if include_dev:
            wanted.update(self.dev_dependencies)
        return wanted


@dataclass(frozen=True)
class ModuleRecord:
    """One installed package on disk.

    Attributes:
        name: Package identifier (e.g. ``lodash`` or ``@babel/core``)
        version: Version read from the manifest
        source_directory: Where the package lives in the source tree
        want_dependencies: Dependency name -> required range
        installed_dependencies: Records found in this package's own node_modules
        target_directory: Set only on records returned by :meth:`place`
    """

    name: str
    version: str
    source_directory: Path
    want_dependencies: Dict[str, str] = field(default_factory=dict)
    installed_dependencies: Dict[str, "ModuleRecord"] = field(default_factory=dict)
    target_directory: Optional[Path] = None

    @property
    def label(self) -> str:
        return f"{self.name}:{self.version}"

    @property
    def is_placed(self) -> bool:
        return self.target_directory is not None

    def place(self, target_directory: Path) -> "ModuleRecord":
        """Return this record placed at ``target_directory``."""
        if self.target_directory is not None:
            raise ValueError(f"{self.label} is already placed at {self.target_directory}")
        return replace(self, target_directory=target_directory)

    def iter_records(self) -> Iterator["ModuleRecord"]:
        """Yield this record and every nested installed record, depth-first."""
        yield self
        for dependency in self.installed_dependencies.values():
            yield from dependency.iter_records()


StoreIndex = Dict[str, Dict[str, ModuleRecord]]
CopyMap = Dict[str, ModuleRecord]


class UnresolvedDependency(BaseModel):
    """A wanted dependency that could not be satisfied."""

    name: str = Field(..., min_length=1)
    wanted: str
    reason: str = Field(..., description="'store_entry_absent' | 'no_matching_version'")
    chain: List[str] = Field(default_factory=list, description="name:version labels from the root")

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        if v not in {"store_entry_absent", "no_matching_version"}:
            raise ValueError(f"Invalid reason: {v}")
        return v

    def describe_chain(self) -> str:
        return " -> ".join([*self.chain, self.name])


class HoistReport(BaseModel):
    """Outcome of a single hoist run."""

    source: str
    target: str
    packages_found: int = Field(0, ge=0, description="Records in the installed dependency tree")
    store_packages: int = Field(0, ge=0, description="name@version pairs in the store index")
    copied: int = Field(0, ge=0, description="Copies made, root and nested")
    hoisted: int = Field(0, ge=0, description="Copies placed at the target root")
    nested: int = Field(0, ge=0, description="Copies isolated under a requiring package")
    unresolved: List[UnresolvedDependency] = Field(default_factory=list)
    elapsed_seconds: float = Field(0.0, ge=0)

    @property
    def ok(self) -> bool:
        return not self.unresolved


__all__ = [
    "PackageManifest",
    "ModuleRecord",
    "StoreIndex",
    "CopyMap",
    "UnresolvedDependency",
    "HoistReport",
]
