"""Shared path constants for node_modules-style package layouts."""

from __future__ import annotations

MANIFEST_FILE = "package.json"
DEPENDENCY_DIR = "node_modules"
STORE_DIR = ".pnpm"
CONFIG_FILE = ".hoist.yaml"

__all__ = ["MANIFEST_FILE", "DEPENDENCY_DIR", "STORE_DIR", "CONFIG_FILE"]
