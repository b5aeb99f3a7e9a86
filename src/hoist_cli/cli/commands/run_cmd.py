"""``hoist run`` command: flatten a node_modules tree into a target directory."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console

from hoist_cli.cli.ui import StepTracker, render_summary, render_unresolved
from hoist_cli.core.config import HoistConfigError, load_hoist_config
from hoist_cli.hoist.engine import run_hoist
from hoist_cli.hoist.errors import HoistError

console = Console()

EXIT_UNRESOLVED = 2


def run(
    source: Path = typer.Argument(..., help="Root package directory (contains package.json and node_modules)"),
    target: Path = typer.Argument(..., help="Directory to write the flattened tree to"),
    force: bool = typer.Option(False, "--force", help="Remove an existing target directory first"),
    dev: bool = typer.Option(False, "--dev", help="Also resolve devDependencies"),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file to use instead of <source>/.hoist.yaml",
    ),
    max_concurrency: Optional[int] = typer.Option(
        None,
        "--max-concurrency",
        min=1,
        help="Maximum simultaneous filesystem operations",
    ),
    version_order: Optional[str] = typer.Option(
        None,
        "--version-order",
        help="Version ordering for store candidates (semver changes which version wins)",
        click_type=click.Choice(["legacy", "semver"]),
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with status 2 when any dependency could not be resolved",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output the report as JSON"),
) -> None:
    """Copy SOURCE's dependency tree into TARGET as real files, deduplicated.

    \b
    EXAMPLES:
      hoist run ./app ./dist/node_modules
      hoist run ./app ./dist/node_modules --force --dev
    """
    source = source.resolve()
    target = target.resolve()

    try:
        config = load_hoist_config(source, config_path)
    except HoistConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if dev:
        config.include_dev = True
    if max_concurrency is not None:
        config.max_concurrency = max_concurrency
    if version_order is not None:
        config.version_order = version_order
    if strict:
        config.fail_on_unresolved = True

    tracker = StepTracker("Hoist Dependencies")
    tracker.add("tree", "Scan installed dependency tree")
    tracker.add("store", "Index package store")
    tracker.add("hoist", "Hoist and copy packages")

    if not json_output:
        console.print(f"[cyan]Hoisting modules from[/cyan] {source} [cyan]to[/cyan] {target}")

    try:
        report = run_hoist(source, target, force=force, config=config, on_step=tracker.update)
    except HoistError as e:
        tracker.fail_running("failed")
        if not json_output:
            console.print(tracker.render())
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(report.model_dump_json(indent=2))
    else:
        console.print(tracker.render())
        console.print()
        console.print(render_summary(report))
        if report.unresolved:
            console.print()
            console.print(render_unresolved(report))
            console.print(
                "\n[yellow]Warning:[/yellow] some dependencies could not be resolved; "
                "their subtrees were skipped."
            )
        else:
            console.print("\n[green]Done.[/green]")

    if report.unresolved and config.fail_on_unresolved:
        raise typer.Exit(EXIT_UNRESOLVED)


__all__ = ["run"]
