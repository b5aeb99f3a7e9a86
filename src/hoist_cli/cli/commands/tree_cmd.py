"""``hoist tree`` command: show what is installed before hoisting."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from hoist_cli.cli.ui import render_dependency_tree, render_store_index
from hoist_cli.hoist.errors import ManifestParseError
from hoist_cli.hoist.manifest import has_manifest
from hoist_cli.hoist.models import ModuleRecord, StoreIndex
from hoist_cli.hoist.store import build_store_index
from hoist_cli.hoist.tree import DependencyTreeBuilder

console = Console()


async def _scan(source: Path, include_dev: bool, with_store: bool) -> tuple[ModuleRecord, StoreIndex]:
    builder = DependencyTreeBuilder(include_dev=include_dev)
    if not with_store:
        return await builder.build(source), {}
    tree, index = await asyncio.gather(builder.build(source), build_store_index(source, builder))
    return tree, index


def tree(
    source: Path = typer.Argument(Path("."), help="Root package directory"),
    dev: bool = typer.Option(False, "--dev", help="Include devDependencies in wanted ranges"),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", min=1, help="Limit nesting depth"),
    store: bool = typer.Option(False, "--store", help="Also list the package store index"),
) -> None:
    """Display the installed dependency tree of SOURCE."""
    source = source.resolve()
    if not has_manifest(source):
        console.print(f"[red]Error:[/red] {source} does not contain a package.json")
        raise typer.Exit(1)

    try:
        record, index = asyncio.run(_scan(source, dev, store))
    except ManifestParseError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(render_dependency_tree(record, max_depth=depth))

    if store:
        console.print()
        if index:
            console.print(render_store_index(index))
        else:
            console.print("[dim]No package store found.[/dim]")


__all__ = ["tree"]
