"""
hoist - flatten and deduplicate installed node_modules trees.

Usage:
    hoist run <source> <target> [--force] [--dev]
    hoist tree <source> [--store]
"""

import typer

from hoist_cli.cli.commands import run, tree

__version__ = "0.1.0"

app = typer.Typer(
    name="hoist",
    help="Copy a package's installed dependency tree as real, deduplicated files",
    add_completion=False,
    no_args_is_help=True,
)

app.command("run")(run)
app.command("tree")(tree)


def main():
    app()


if __name__ == "__main__":
    main()
