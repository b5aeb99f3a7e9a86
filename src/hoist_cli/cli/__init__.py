"""CLI helpers exposed for other modules."""

from .ui import StepTracker, render_dependency_tree, render_store_index, render_summary, render_unresolved

__all__ = [
    "StepTracker",
    "render_dependency_tree",
    "render_store_index",
    "render_summary",
    "render_unresolved",
]
