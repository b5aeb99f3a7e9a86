"""CLI command modules for hoist."""

from .run_cmd import run
from .tree_cmd import tree

__all__ = ["run", "tree"]
