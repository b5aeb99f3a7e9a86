"""Reusable UI helpers for hoist CLI output."""

from __future__ import annotations

from typing import Dict, List

from rich.table import Table
from rich.tree import Tree

from hoist_cli.hoist.models import HoistReport, ModuleRecord, StoreIndex

_STATUS_SYMBOLS = {
    "pending": "[green dim]○[/green dim]",
    "running": "[cyan]○[/cyan]",
    "done": "[green]●[/green]",
    "error": "[red]●[/red]",
    "skipped": "[yellow]○[/yellow]",
}


class StepTracker:
    """Track hoist phases and render them as a Rich tree."""

    def __init__(self, title: str):
        self.title = title
        self.steps: List[Dict[str, str]] = []

    def add(self, key: str, label: str) -> None:
        if key not in [s["key"] for s in self.steps]:
            self.steps.append({"key": key, "label": label, "status": "pending", "detail": ""})

    def update(self, key: str, status: str, detail: str = "") -> None:
        for step in self.steps:
            if step["key"] == key:
                step["status"] = status
                if detail:
                    step["detail"] = detail
                return
        self.steps.append({"key": key, "label": key, "status": status, "detail": detail})

    def fail_running(self, detail: str) -> None:
        """Mark whatever is still running as failed."""
        for step in self.steps:
            if step["status"] == "running":
                step["status"] = "error"
                step["detail"] = detail

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        for step in self.steps:
            symbol = _STATUS_SYMBOLS.get(step["status"], " ")
            detail = step["detail"].strip()
            if step["status"] == "pending":
                line = f"{symbol} [bright_black]{step['label']}[/bright_black]"
            elif detail:
                line = f"{symbol} [white]{step['label']}[/white] [bright_black]({detail})[/bright_black]"
            else:
                line = f"{symbol} [white]{step['label']}[/white]"
            tree.add(line)
        return tree


def render_summary(report: HoistReport) -> Table:
    table = Table(title="Hoist Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Installed packages", str(report.packages_found))
    table.add_row("Store package versions", str(report.store_packages))
    table.add_row("Copied", str(report.copied))
    table.add_row("Hoisted to root", str(report.hoisted))
    table.add_row("Nested (version conflicts)", str(report.nested))
    unresolved_style = "red" if report.unresolved else "green"
    table.add_row("Unresolved", f"[{unresolved_style}]{len(report.unresolved)}[/{unresolved_style}]")
    table.add_row("Elapsed", f"{report.elapsed_seconds:.2f}s")
    return table


def render_unresolved(report: HoistReport) -> Table:
    table = Table(title="Unresolved Dependencies", show_lines=True)
    table.add_column("Package", style="bold")
    table.add_column("Wanted", style="magenta")
    table.add_column("Reason", style="yellow")
    table.add_column("Required by")
    for item in report.unresolved:
        table.add_row(item.name, item.wanted, item.reason.replace("_", " "), item.describe_chain())
    return table


def render_dependency_tree(record: ModuleRecord, max_depth: int | None = None) -> Tree:
    """Render installed dependencies of ``record`` as a Rich tree."""
    root = Tree(f"[bold]{record.name}[/bold] [dim]{record.version}[/dim]", guide_style="grey50")
    _add_children(root, record, 1, max_depth)
    return root


def _add_children(node: Tree, record: ModuleRecord, depth: int, max_depth: int | None) -> None:
    if max_depth is not None and depth > max_depth:
        if record.installed_dependencies:
            node.add(f"[dim]… {len(record.installed_dependencies)} more[/dim]")
        return
    for name in sorted(record.installed_dependencies):
        child = record.installed_dependencies[name]
        wanted = record.want_dependencies.get(name)
        suffix = f" [bright_black](wants {wanted})[/bright_black]" if wanted else ""
        branch = node.add(f"{child.name} [cyan]{child.version}[/cyan]{suffix}")
        _add_children(branch, child, depth + 1, max_depth)


def render_store_index(index: StoreIndex) -> Table:
    table = Table(title="Package Store Index")
    table.add_column("Package", style="bold")
    table.add_column("Versions", style="cyan")
    for name in sorted(index):
        table.add_row(name, ", ".join(sorted(index[name])))
    return table


__all__ = [
    "StepTracker",
    "render_summary",
    "render_unresolved",
    "render_dependency_tree",
    "render_store_index",
]
