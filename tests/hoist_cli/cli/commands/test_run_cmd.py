"""CLI tests for ``hoist run``."""
from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from hoist_cli import app
from hoist_cli.hoist.models import HoistReport

runner = CliRunner()


def _flat(output: str) -> str:
    """Collapse Rich line wrapping so assertions don't depend on terminal width."""
    return " ".join(output.split())


class TestRunCommand:
    def test_successful_run_prints_summary(self, app_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "out"

        result = runner.invoke(app, ["run", str(app_dir), str(target)])

        assert result.exit_code == 0, result.output
        assert "Hoist Summary" in result.output
        assert "Done." in result.output
        assert (target / "lodash" / "lodash.js").is_file()

    def test_existing_target_refused(self, app_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "out"
        target.mkdir()
        (target / "marker").write_text("keep", encoding="utf-8")

        result = runner.invoke(app, ["run", str(app_dir), str(target)])

        assert result.exit_code == 1
        assert "already exists" in _flat(result.output)
        assert (target / "marker").read_text(encoding="utf-8") == "keep"

    def test_force_overwrites(self, app_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "out"
        target.mkdir()
        (target / "marker").write_text("stale", encoding="utf-8")

        result = runner.invoke(app, ["run", str(app_dir), str(target), "--force"])

        assert result.exit_code == 0, result.output
        assert not (target / "marker").exists()

    def test_json_report(self, conflict_app: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", str(conflict_app), str(tmp_path / "out"), "--json"])

        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["copied"] == 4
        assert report["hoisted"] == 3
        assert report["nested"] == 1
        assert report["unresolved"] == []

    def test_unresolved_warns_but_succeeds(self, app_dir: Path, tmp_path: Path, make_package) -> None:
        make_package(app_dir, "app", dependencies={"lodash": "^4.17.0", "ghost": "^1.0.0"})

        result = runner.invoke(app, ["run", str(app_dir), str(tmp_path / "out")])

        assert result.exit_code == 0, result.output
        assert "Unresolved Dependencies" in result.output
        assert "ghost" in result.output

    def test_strict_exits_two_on_unresolved(self, app_dir: Path, tmp_path: Path, make_package) -> None:
        make_package(app_dir, "app", dependencies={"lodash": "^4.17.0", "ghost": "^1.0.0"})

        result = runner.invoke(app, ["run", str(app_dir), str(tmp_path / "out"), "--strict"])

        assert result.exit_code == 2
        assert (tmp_path / "out" / "lodash").is_dir()

    def test_strict_from_config_file(self, app_dir: Path, tmp_path: Path, make_package) -> None:
        make_package(app_dir, "app", dependencies={"ghost": "^1.0.0"})
        (app_dir / ".hoist.yaml").write_text("hoist:\n  fail_on_unresolved: true\n", encoding="utf-8")

        result = runner.invoke(app, ["run", str(app_dir), str(tmp_path / "out")])

        assert result.exit_code == 2

    def test_invalid_config_exits_one(self, app_dir: Path, tmp_path: Path) -> None:
        (app_dir / ".hoist.yaml").write_text("hoist:\n  version_order: newest\n", encoding="utf-8")

        result = runner.invoke(app, ["run", str(app_dir), str(tmp_path / "out")])

        assert result.exit_code == 1
        assert "Valid orders" in _flat(result.output)
        assert not (tmp_path / "out").exists()

    def test_missing_manifest_exits_one(self, tmp_path: Path) -> None:
        source = tmp_path / "empty"
        source.mkdir()

        result = runner.invoke(app, ["run", str(source), str(tmp_path / "out")])

        assert result.exit_code == 1
        assert "package.json" in _flat(result.output)

    def test_flags_override_config_file(self, app_dir: Path, tmp_path: Path) -> None:
        (app_dir / ".hoist.yaml").write_text(
            "hoist:\n  include_dev: false\n  max_concurrency: 8\n", encoding="utf-8"
        )
        report = HoistReport(source=str(app_dir), target=str(tmp_path / "out"))

        with patch("hoist_cli.cli.commands.run_cmd.run_hoist", return_value=report) as mock_run:
            result = runner.invoke(
                app,
                ["run", str(app_dir), str(tmp_path / "out"), "--dev", "--version-order", "semver"],
            )

        assert result.exit_code == 0, result.output
        config = mock_run.call_args.kwargs["config"]
        assert config.include_dev is True
        assert config.max_concurrency == 8
        assert config.version_order == "semver"

    def test_version_order_flag_rejects_unknown_value(self, app_dir: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", str(app_dir), str(tmp_path / "out"), "--version-order", "newest"])

        assert result.exit_code != 0
        assert not (tmp_path / "out").exists()

    def test_force_on_source_parent_exits_one_and_keeps_source(self, app_dir: Path) -> None:
        result = runner.invoke(app, ["run", str(app_dir), str(app_dir.parent), "--force"])

        assert result.exit_code == 1
        assert "contains the source" in _flat(result.output)
        assert (app_dir / "package.json").is_file()
