"""Hoist configuration helpers.

This module loads the optional per-project `.hoist.yaml` file. Only the
`hoist` section is read; anything else in the file is ignored so the file
can be shared with other tooling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ruamel.yaml import YAML

from hoist_cli.core.constants import CONFIG_FILE

logger = logging.getLogger(__name__)

VERSION_ORDERS = ("legacy", "semver")
DEFAULT_MAX_CONCURRENCY = 32


class HoistConfigError(RuntimeError):
    """Raised when .hoist.yaml cannot be parsed or validated."""


@dataclass
class HoistConfig:
    """Full hoist configuration.

    Attributes:
        include_dev: Merge devDependencies into every package's wanted ranges.
        max_concurrency: Upper bound on simultaneous filesystem operations.
        version_order: ``legacy`` numeric ordering or ``semver`` ordering.
        fail_on_unresolved: Treat unresolved dependencies as a failed run.
    """

    include_dev: bool = False
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    version_order: str = "legacy"
    fail_on_unresolved: bool = False


def _expect_bool(data: dict, key: str, default: bool, config_file: Path) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise HoistConfigError(f"Invalid hoist.{key} in {config_file}: expected true or false")
    return value


def load_hoist_config(source_dir: Path, config_path: Path | None = None) -> HoistConfig:
    """Load hoist configuration from ``config_path`` or ``<source_dir>/.hoist.yaml``.

    An explicitly requested file must exist; the implicit one is optional.
    """
    config_file = config_path or (source_dir / CONFIG_FILE)

    if not config_file.exists():
        if config_path is not None:
            raise HoistConfigError(f"Config file not found: {config_file}")
        logger.debug("No config file at %s, using defaults", config_file)
        return HoistConfig()

    yaml = YAML(typ="safe")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.load(f) or {}
    except Exception as exc:
        logger.error("Failed to load config: %s", exc)
        raise HoistConfigError(f"Invalid YAML in {config_file}: {exc}") from exc

    if not isinstance(data, dict):
        raise HoistConfigError(f"Invalid {config_file}: expected a mapping at the top level")

    section = data.get("hoist") or {}
    if not isinstance(section, dict):
        raise HoistConfigError(f"Invalid hoist section in {config_file}: expected a mapping")

    max_concurrency = section.get("max_concurrency", DEFAULT_MAX_CONCURRENCY)
    if isinstance(max_concurrency, bool) or not isinstance(max_concurrency, int) or max_concurrency < 1:
        raise HoistConfigError(
            f"Invalid hoist.max_concurrency in {config_file}: expected a positive integer"
        )

    version_order = section.get("version_order", "legacy")
    if version_order not in VERSION_ORDERS:
        raise HoistConfigError(
            f"Unknown hoist.version_order in {config_file}: {version_order}. "
            f"Valid orders: {', '.join(VERSION_ORDERS)}"
        )

    return HoistConfig(
        include_dev=_expect_bool(section, "include_dev", False, config_file),
        max_concurrency=max_concurrency,
        version_order=version_order,
        fail_on_unresolved=_expect_bool(section, "fail_on_unresolved", False, config_file),
    )


__all__ = [
    "DEFAULT_MAX_CONCURRENCY",
    "VERSION_ORDERS",
    "HoistConfig",
    "HoistConfigError",
    "load_hoist_config",
]
