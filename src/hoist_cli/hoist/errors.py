"""Exceptions raised while building, resolving, and hoisting dependency trees."""

from __future__ import annotations

from pathlib import Path


class HoistError(Exception):
    """Base exception for hoist errors."""

    pass


class PreconditionError(HoistError):
    """Raised when a run cannot start (existing target, missing source manifest)."""

    pass


class ManifestParseError(HoistError):
    """Raised when a package.json exists but is not a valid manifest.

    Fatal: a corrupt manifest aborts the whole tree build.
    """

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest {path}: {reason}")


class UnresolvedDependencyError(HoistError):
    """Raised when no local install or store version satisfies a wanted range."""

    reason = "no_matching_version"

    def __init__(self, name: str, wanted: str, chain: str):
        self.name = name
        self.wanted = wanted
        self.chain = chain
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f"No version of {self.name} satisfies {self.wanted} (required by {self.chain})"


class StoreEntryAbsentError(UnresolvedDependencyError):
    """Raised when a wanted package is neither installed locally nor in the store."""

    reason = "store_entry_absent"

    def _describe(self) -> str:
        return f"Package {self.name}@{self.wanted} not found in package store (required by {self.chain})"


__all__ = [
    "HoistError",
    "PreconditionError",
    "ManifestParseError",
    "UnresolvedDependencyError",
    "StoreEntryAbsentError",
]
