"""package.json loading and validation."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from hoist_cli.core.constants import MANIFEST_FILE
from hoist_cli.hoist.errors import ManifestParseError
from hoist_cli.hoist.models import PackageManifest

logger = logging.getLogger(__name__)


def has_manifest(package_dir: Path) -> bool:
    """Return True if ``package_dir`` directly contains a package.json."""
    return (package_dir / MANIFEST_FILE).is_file()


def load_manifest(package_dir: Path) -> PackageManifest:
    """Read and validate ``<package_dir>/package.json``.

    Args:
        package_dir: Package directory containing the manifest

    Returns:
        Validated PackageManifest

    Raises:
        ManifestParseError: If the manifest is not valid JSON or has
            malformed fields (e.g. ``dependencies`` is not a mapping)
        FileNotFoundError: If there is no manifest at all
    """
    manifest_path = package_dir / MANIFEST_FILE
    with open(manifest_path, "r", encoding="utf-8") as f:
        text = f.read()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(manifest_path, f"invalid JSON ({exc})") from exc

    if not isinstance(data, dict):
        raise ManifestParseError(manifest_path, "expected a JSON object")

    try:
        return PackageManifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestParseError(manifest_path, str(exc)) from exc


__all__ = ["has_manifest", "load_manifest"]
