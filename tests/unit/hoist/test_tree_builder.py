"""Tests for DependencyTreeBuilder."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from hoist_cli.hoist.errors import ManifestParseError
from hoist_cli.hoist.tree import DependencyTreeBuilder


@pytest.mark.asyncio
async def test_builds_root_record_with_installed_dependencies(app_dir: Path) -> None:
    tree = await DependencyTreeBuilder().build(app_dir)

    assert tree.name == "app"
    assert tree.want_dependencies == {"lodash": "^4.17.0"}
    assert list(tree.installed_dependencies) == ["lodash"]
    lodash = tree.installed_dependencies["lodash"]
    assert lodash.version == "4.17.21"
    assert lodash.source_directory == app_dir / "node_modules" / "lodash"
    assert lodash.target_directory is None


@pytest.mark.asyncio
async def test_nested_dependencies_attach_to_their_package(conflict_app: Path) -> None:
    tree = await DependencyTreeBuilder().build(conflict_app)

    a = tree.installed_dependencies["A"]
    b = tree.installed_dependencies["B"]
    assert a.installed_dependencies["foo"].version == "1.2.0"
    assert b.installed_dependencies["foo"].version == "2.0.0"
    assert "foo" not in tree.installed_dependencies
    assert sum(1 for _ in tree.iter_records()) == 5


@pytest.mark.asyncio
async def test_scoped_packages_are_named_with_their_namespace(tmp_path: Path, make_package) -> None:
    app = make_package(tmp_path / "app", "app")
    make_package(app / "node_modules" / "@babel" / "core", "@babel/core", "7.24.0")
    unnamed = app / "node_modules" / "@types" / "node"
    unnamed.mkdir(parents=True)
    (unnamed / "package.json").write_text('{"version": "20.1.0"}', encoding="utf-8")

    tree = await DependencyTreeBuilder().build(app)

    assert sorted(tree.installed_dependencies) == ["@babel/core", "@types/node"]
    assert tree.installed_dependencies["@types/node"].version == "20.1.0"


@pytest.mark.asyncio
async def test_skips_bin_dot_entries_and_plain_files(tmp_path: Path, make_package) -> None:
    app = make_package(tmp_path / "app", "app")
    modules = app / "node_modules"
    make_package(modules / "real", "real")
    make_package(modules / ".bin" / "fake", "fake")
    (modules / ".modules.yaml").parent.mkdir(parents=True, exist_ok=True)
    (modules / ".modules.yaml").write_text("layoutVersion: 5\n", encoding="utf-8")
    (modules / "README.md").write_text("not a package\n", encoding="utf-8")

    tree = await DependencyTreeBuilder().build(app)

    assert list(tree.installed_dependencies) == ["real"]


@pytest.mark.asyncio
async def test_namespace_is_only_one_level_deep(tmp_path: Path, make_package) -> None:
    app = make_package(tmp_path / "app", "app")
    make_package(app / "node_modules" / "@scope" / "deeper" / "pkg", "pkg")

    tree = await DependencyTreeBuilder().build(app)

    assert tree.installed_dependencies == {}


@pytest.mark.asyncio
async def test_dev_dependencies_merged_on_request(tmp_path: Path, make_package) -> None:
    app = make_package(
        tmp_path / "app",
        "app",
        dependencies={"a": "^1.0.0"},
        dev_dependencies={"jest": "^29.0.0"},
    )

    plain = await DependencyTreeBuilder().build(app)
    with_dev = await DependencyTreeBuilder(include_dev=True).build(app)

    assert plain.want_dependencies == {"a": "^1.0.0"}
    assert with_dev.want_dependencies == {"a": "^1.0.0", "jest": "^29.0.0"}


@pytest.mark.asyncio
async def test_corrupt_manifest_aborts_build(app_dir: Path, make_package) -> None:
    broken = make_package(app_dir / "node_modules" / "broken", "broken")
    (broken / "package.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(ManifestParseError):
        await DependencyTreeBuilder().build(app_dir)


@pytest.mark.asyncio
async def test_symlink_back_into_chain_is_skipped(app_dir: Path) -> None:
    lodash = app_dir / "node_modules" / "lodash"
    (lodash / "node_modules").mkdir()
    os.symlink(lodash, lodash / "node_modules" / "loop", target_is_directory=True)

    tree = await DependencyTreeBuilder(max_concurrency=2).build(app_dir)

    assert tree.installed_dependencies["lodash"].installed_dependencies == {}


@pytest.mark.asyncio
async def test_symlinked_package_outside_chain_is_followed(tmp_path: Path, app_dir: Path, make_package) -> None:
    shared = make_package(tmp_path / "shared" / "left-pad", "left-pad", "1.3.0")
    os.symlink(shared, app_dir / "node_modules" / "left-pad", target_is_directory=True)

    tree = await DependencyTreeBuilder().build(app_dir)

    assert tree.installed_dependencies["left-pad"].version == "1.3.0"


def test_rejects_non_positive_concurrency() -> None:
    with pytest.raises(ValueError):
        DependencyTreeBuilder(max_concurrency=0)
