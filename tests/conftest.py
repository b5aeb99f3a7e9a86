from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

PackageFactory = Callable[..., Path]


def write_package(
    package_dir: Path,
    name: str,
    version: str = "1.0.0",
    dependencies: dict[str, str] | None = None,
    dev_dependencies: dict[str, str] | None = None,
    files: dict[str, str] | None = None,
) -> Path:
    """Create a package directory with a package.json and optional extra files."""
    package_dir.mkdir(parents=True, exist_ok=True)
    manifest: dict[str, object] = {"name": name, "version": version}
    if dependencies is not None:
        manifest["dependencies"] = dependencies
    if dev_dependencies is not None:
        manifest["devDependencies"] = dev_dependencies
    (package_dir / "package.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    for relative, content in (files or {}).items():
        path = package_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return package_dir


def read_version(package_dir: Path) -> str:
    return json.loads((package_dir / "package.json").read_text(encoding="utf-8"))["version"]


def snapshot_tree(root: Path) -> dict[str, bytes]:
    """Map every file under ``root`` (relative path) to its bytes."""
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture()
def make_package() -> PackageFactory:
    return write_package


@pytest.fixture()
def app_dir(tmp_path: Path) -> Path:
    """A root package with a lodash dependency installed locally."""
    app = write_package(
        tmp_path / "app",
        "app",
        dependencies={"lodash": "^4.17.0"},
        files={"index.js": "module.exports = {};\n"},
    )
    write_package(
        app / "node_modules" / "lodash",
        "lodash",
        "4.17.21",
        files={"lodash.js": "// lodash\n"},
    )
    return app


@pytest.fixture()
def conflict_app(tmp_path: Path) -> Path:
    """A needs foo ^1.0.0 and B needs foo ^2.0.0, each with its own copy installed."""
    app = write_package(tmp_path / "app", "app", dependencies={"A": "^1.0.0", "B": "^1.0.0"})
    modules = app / "node_modules"
    a = write_package(modules / "A", "A", "1.0.0", dependencies={"foo": "^1.0.0"})
    write_package(a / "node_modules" / "foo", "foo", "1.2.0", files={"index.js": "v1\n"})
    b = write_package(modules / "B", "B", "1.0.0", dependencies={"foo": "^2.0.0"})
    write_package(b / "node_modules" / "foo", "foo", "2.0.0", files={"index.js": "v2\n"})
    return app


@pytest.fixture()
def pnpm_app(tmp_path: Path) -> Path:
    """A root package whose dependencies are only reachable through a .pnpm store."""
    app = write_package(tmp_path / "app", "app", dependencies={"left": "^1.0.0"})
    store = app / "node_modules" / ".pnpm"
    entry = store / "left@1.0.0" / "node_modules"
    write_package(entry / "left", "left", "1.0.0", dependencies={"pad": "^1.0.0"})
    write_package(entry / "pad", "pad", "1.4.0")
    write_package(store / "pad@1.1.0" / "node_modules" / "pad", "pad", "1.1.0")
    write_package(store / "pad@2.0.0" / "node_modules" / "pad", "pad", "2.0.0")
    return app


@pytest.fixture()
def version_of() -> Callable[[Path], str]:
    return read_version


@pytest.fixture()
def tree_snapshot() -> Callable[[Path], dict[str, bytes]]:
    return snapshot_tree
